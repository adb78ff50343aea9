"""
EIS CLI commands.

Commands:
  eis version          - Show version and configuration
  eis ctid new         - Issue one or more CTIDs
  eis ctid validate    - Format-check a CTID
  eis consent check    - Check a single consent transition
  eis consent table    - Show the consent transition table
  eis integrity        - Integrity, system state and coupling for a saturation
  eis tolerance        - Check a value against a tolerance window
  eis trust            - Trust delta between baseline and current
  eis trace validate   - Check ordering of a JSONL audit trace
  eis demo             - Run a sample client session and show its trail

Exit codes: 0 ok, 1 rejected, 2 failed trace check, 3 bad input.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

console = Console()

eis_app = typer.Typer(
    name="eis",
    help="Consent lifecycle, integrity scoring and audit trails",
    no_args_is_help=True,
)

ctid_app = typer.Typer(help="Issue and validate Consent Transaction IDs", no_args_is_help=True)
consent_app = typer.Typer(help="Consent lifecycle transitions", no_args_is_help=True)
trace_app = typer.Typer(help="Audit trace checks", no_args_is_help=True)

eis_app.add_typer(ctid_app, name="ctid")
eis_app.add_typer(consent_app, name="consent")
eis_app.add_typer(trace_app, name="trace")

_STATE_COLORS = {
    "fractured": "red",
    "critical": "yellow",
    "narrowed": "cyan",
    "stable": "green",
}


def _output_json(data: Dict[str, Any], exit_code: Optional[int] = None) -> None:
    """Print structured JSON to stdout and exit.

    Exit codes:
    - 0: success (status == "ok")
    - 1: rejected (status == "rejected")
    - 2: trace check failed (status == "failed")
    - 3: bad input (status == "error")
    """
    print(json.dumps(data, indent=2, default=str))
    if exit_code is not None:
        raise typer.Exit(exit_code)
    status = data.get("status", "ok")
    if status == "ok":
        raise typer.Exit(0)
    elif status == "failed":
        raise typer.Exit(2)
    elif status == "error":
        raise typer.Exit(3)
    else:
        raise typer.Exit(1)


def _load_config():
    from eis.config import EISConfig

    try:
        return EISConfig.from_env()
    except ValueError as exc:
        console.print(f"[red]Error:[/] {exc}")
        raise typer.Exit(3)


@eis_app.command("version")
def show_version(
    output_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Show EIS version and configuration."""
    from eis import __version__

    cfg = _load_config()

    if output_json:
        _output_json({
            "command": "version",
            "status": "ok",
            "version": __version__,
            "config": {
                "coupling_threshold": cfg.coupling_threshold,
                "ctid_prefix": cfg.ctid_prefix,
                "transition_history": cfg.transition_history,
            },
        })

    console.print(f"[bold]EIS {__version__}[/]")
    console.print("Consent lifecycle, integrity scoring and audit trails")
    console.print()
    console.print(f"Coupling threshold: {cfg.coupling_threshold:g}")
    console.print(f"CTID prefix: {cfg.ctid_prefix}")
    console.print(f"Transition history: {cfg.transition_history}")


# ---------------------------------------------------------------------------
# ctid
# ---------------------------------------------------------------------------

@ctid_app.command("new")
def ctid_new_cmd(
    count: int = typer.Option(1, "--count", "-n", min=1, help="Number of CTIDs to issue"),
    output_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Issue CTIDs (format-checkable, not cryptographically unique)."""
    from eis.ctid import CTIDIssuer

    cfg = _load_config()
    issuer = CTIDIssuer(prefix=cfg.ctid_prefix)
    ctids = [issuer.issue() for _ in range(count)]

    if output_json:
        _output_json({"command": "ctid new", "status": "ok", "ctids": ctids})

    for ctid in ctids:
        console.print(ctid)


@ctid_app.command("validate")
def ctid_validate_cmd(
    token: str = typer.Argument(..., help="CTID to check"),
    output_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Format-check a CTID.

    Only the prefix is checked; this does not prove the token was issued.

    Examples:
        eis ctid validate ctid-1718000000000-k3j9x0a1b
    """
    from eis.ctid import CTIDIssuer

    cfg = _load_config()
    valid = CTIDIssuer(prefix=cfg.ctid_prefix).validate(token)

    if output_json:
        _output_json({
            "command": "ctid validate",
            "status": "ok" if valid else "rejected",
            "ctid": token,
            "valid": valid,
        })

    if valid:
        console.print(f"[green]+[/] {token}: valid format")
    else:
        console.print(f"[red]-[/] {token}: invalid format (expected prefix '{cfg.ctid_prefix}')")
        raise typer.Exit(1)


# ---------------------------------------------------------------------------
# consent
# ---------------------------------------------------------------------------

@consent_app.command("check")
def consent_check_cmd(
    from_state: str = typer.Argument(..., help="Current state (pending, granted, revoked, expired)"),
    to_state: str = typer.Argument(..., help="Requested state"),
    output_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Check whether a consent transition is allowed.

    Examples:
        eis consent check pending granted
        eis consent check revoked granted   # terminal state, rejected
    """
    from eis.consent import coerce_state, is_valid_transition

    try:
        src = coerce_state(from_state)
        dst = coerce_state(to_state)
    except ValueError as exc:
        if output_json:
            _output_json({"command": "consent check", "status": "error", "error": str(exc)})
        console.print(f"[red]Error:[/] {exc}")
        raise typer.Exit(3)

    allowed = is_valid_transition(src, dst)

    if output_json:
        _output_json({
            "command": "consent check",
            "status": "ok" if allowed else "rejected",
            "from_state": src.value,
            "to_state": dst.value,
            "allowed": allowed,
        })

    if allowed:
        console.print(f"[green]+[/] {src.value} -> {dst.value}: ALLOWED")
    else:
        console.print(f"[red]-[/] {src.value} -> {dst.value}: REJECTED")
        raise typer.Exit(1)


@consent_app.command("table")
def consent_table_cmd(
    output_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Show the consent transition table."""
    from eis.consent import TERMINAL_STATES, VALID_TRANSITIONS

    rows = {
        state.value: sorted(t.value for t in targets)
        for state, targets in VALID_TRANSITIONS.items()
    }

    if output_json:
        _output_json({
            "command": "consent table",
            "status": "ok",
            "transitions": rows,
            "terminal": sorted(s.value for s in TERMINAL_STATES),
        })

    table = Table(title="Consent transitions")
    table.add_column("From", style="bold")
    table.add_column("Allowed to")
    for state, targets in rows.items():
        table.add_row(state, ", ".join(targets) if targets else "[dim](terminal)[/]")
    console.print(table)


# ---------------------------------------------------------------------------
# integrity / tolerance / trust
# ---------------------------------------------------------------------------

@eis_app.command("integrity", context_settings={"ignore_unknown_options": True})
def integrity_cmd(
    saturation: float = typer.Argument(..., help="Saturation (0-100, clamped)"),
    threshold: Optional[float] = typer.Option(None, "--threshold", "-t", help="Coupling threshold"),
    output_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Derive integrity, system state and coupling from a saturation value.

    Examples:
        eis integrity 50
        eis integrity 90 --threshold 10
        eis integrity -10               # clamped to 0
    """
    from eis.stability import check_stability, format_stability_status

    cfg = _load_config()
    if threshold is None:
        threshold = cfg.coupling_threshold

    status = check_stability(saturation, coupling_threshold=threshold)
    clamped = status.saturation != saturation

    if output_json:
        result = {
            "command": "integrity",
            "status": "ok",
            "saturation": status.saturation,
            "integrity": {
                "custody": status.integrity.custody,
                "regulation": status.integrity.regulation,
            },
            "state": status.state.value,
            "coupled": status.coupled,
            "threshold": threshold,
        }
        if clamped:
            result["warning"] = f"saturation {saturation:g} clamped to {status.saturation:g}"
        _output_json(result)

    if clamped:
        console.print(f"[yellow]Warning: saturation={saturation:g} clamped to {status.saturation:g}[/]")

    color = _STATE_COLORS[status.state.value]
    console.print(Panel(
        format_stability_status(status),
        title=f"[{color} bold]{status.state.value.upper()}[/]",
        border_style=color,
    ))
    console.print(f"\n[dim]Bands: <20 fractured, <40 critical, <80 narrowed, else stable; coupling >= {threshold:g}[/]")


@eis_app.command("tolerance")
def tolerance_cmd(
    value: float = typer.Argument(..., help="Value to check"),
    baseline: float = typer.Option(..., "--baseline", "-b", help="Window baseline"),
    variance: float = typer.Option(..., "--variance", "-v", help="Window half-width"),
    output_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Check whether a value lies inside baseline +/- variance (inclusive)."""
    import warnings

    from eis.tolerance import create_tolerance_window, is_within_tolerance

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        window = create_tolerance_window(baseline, variance)
    inside = is_within_tolerance(value, window)
    lower, upper = window.bounds

    if output_json:
        result: Dict[str, Any] = {
            "command": "tolerance",
            "status": "ok",
            "value": value,
            "baseline": baseline,
            "variance": variance,
            "bounds": [lower, upper],
            "within": inside,
        }
        if caught:
            result["warning"] = str(caught[0].message)
        _output_json(result)

    for w in caught:
        console.print(f"[yellow]Warning: {w.message}[/]")

    mark = "[green]+[/]" if inside else "[red]-[/]"
    verdict = "WITHIN TOLERANCE" if inside else "OUTSIDE TOLERANCE"
    console.print(f"{mark} {value:g} in [{lower:g}, {upper:g}]: {verdict}")


@eis_app.command("trust", context_settings={"ignore_unknown_options": True})
def trust_cmd(
    baseline: float = typer.Argument(..., help="Baseline trust"),
    current: float = typer.Argument(..., help="Current trust"),
    output_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Signed trust delta (current - baseline)."""
    from eis.trust import calculate_trust_delta

    metrics = calculate_trust_delta(baseline, current)

    if output_json:
        _output_json({"command": "trust", "status": "ok", **metrics.to_dict()})

    color = "green" if metrics.delta > 0 else "red" if metrics.delta < 0 else "dim"
    console.print(f"Baseline: {metrics.baseline:g}")
    console.print(f"Current:  {metrics.current:g}")
    console.print(f"Delta:    [{color}]{metrics.delta:+.4f}[/]")


# ---------------------------------------------------------------------------
# trace
# ---------------------------------------------------------------------------

@trace_app.command("validate")
def trace_validate_cmd(
    path: Path = typer.Argument(..., help="JSONL file of audit events"),
    output_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Check that an audit trace's timestamps never decrease.

    Each line must be an event object with timestamp, event_type,
    subject_id and payload.
    """
    from eis.audit import E_EVENT_INVALID, check_trace, load_events

    if not path.is_file():
        if output_json:
            _output_json({"command": "trace validate", "status": "error", "error": f"file not found: {path}"})
        console.print(f"[red]Error:[/] file not found: {path}")
        raise typer.Exit(3)

    try:
        events = load_events(path.read_text(encoding="utf-8").splitlines())
    except ValueError as exc:
        if output_json:
            _output_json({
                "command": "trace validate",
                "status": "error",
                "errors": [{"code": E_EVENT_INVALID, "message": str(exc)}],
            })
        console.print(f"[red]{E_EVENT_INVALID}:[/] {exc}")
        raise typer.Exit(3)

    result = check_trace(events)

    if output_json:
        _output_json({
            "command": "trace validate",
            "status": "ok" if result.passed else "failed",
            "path": str(path),
            **result.to_dict(),
        })

    if result.passed:
        console.print(f"[green]+[/] {result.event_count} events, ordering intact")
        return

    for err in result.errors:
        console.print(f"[red]-[/] {err.code}: {err.message}")
    raise typer.Exit(2)


# ---------------------------------------------------------------------------
# demo
# ---------------------------------------------------------------------------

@eis_app.command("demo")
def demo_cmd(
    subject: str = typer.Option("user-123", "--subject", "-s", help="Subject ID for the session"),
    output_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Run a sample session: grant consent, sweep saturation, compute a trust
    delta, revoke, then attempt an illegal re-expiry.
    """
    from eis.client import EISClient

    client = EISClient(config=_load_config())

    ctid = client.grant_consent(subject, scope="emotional-analysis")
    for saturation in (20, 50, 85, 95):
        client.record_saturation(subject, saturation)
    client.calculate_trust_delta(subject, baseline=0.8, current=0.6)
    client.revoke_consent(subject, ctid)
    client.expire_consent(subject, ctid)

    events = client.events()
    trace = client.validate()

    if output_json:
        _output_json({
            "command": "demo",
            "status": "ok" if trace.passed else "failed",
            "ctid": ctid,
            "consent_state": client.consent_state(ctid).value,
            "events": [e.to_dict() for e in events],
            "trace": trace.to_dict(),
        })

    console.print(f"[dim]CTID: {ctid}[/]\n")

    table = Table(title="Audit trail")
    table.add_column("#", justify="right")
    table.add_column("Event", style="bold")
    table.add_column("Subject")
    table.add_column("Payload")
    for i, event in enumerate(events):
        table.add_row(str(i), event.event_type, event.subject_id, json.dumps(event.payload, sort_keys=True))
    console.print(table)

    console.print(f"\nConsent state: {client.consent_state(ctid).value}")
    if trace.passed:
        console.print(f"[green]+[/] Trace ordering intact ({trace.event_count} events)")
    else:
        console.print("[red]-[/] Trace ordering broken")
        raise typer.Exit(2)
