"""
EIS CLI entrypoint.

This module provides the console_script entrypoint for the eis package.
"""


def main():
    """EIS CLI entrypoint."""
    from eis.commands import eis_app

    eis_app()


if __name__ == "__main__":
    main()
