"""Tests for the eis CLI."""
from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from eis.commands import eis_app

runner = CliRunner()


def _write_trace(path: Path, stamps) -> Path:
    lines = [
        json.dumps({"timestamp": ts, "event_type": "tick", "subject_id": "u", "payload": {"i": i}})
        for i, ts in enumerate(stamps)
    ]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


class TestVersion:
    def test_version_json(self, monkeypatch):
        monkeypatch.delenv("EIS_COUPLING_THRESHOLD", raising=False)
        from eis import __version__

        result = runner.invoke(eis_app, ["version", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["version"] == __version__
        assert data["config"]["coupling_threshold"] == 20.0

    def test_bad_env_is_bad_input(self, monkeypatch):
        monkeypatch.setenv("EIS_COUPLING_THRESHOLD", "nope")
        result = runner.invoke(eis_app, ["version"])
        assert result.exit_code == 3


class TestCtidCommands:
    def test_new(self):
        result = runner.invoke(eis_app, ["ctid", "new", "--count", "3", "--json"])
        assert result.exit_code == 0
        ctids = json.loads(result.output)["ctids"]
        assert len(ctids) == 3
        assert all(c.startswith("ctid-") for c in ctids)

    def test_validate_ok(self):
        result = runner.invoke(eis_app, ["ctid", "validate", "ctid-1-abc"])
        assert result.exit_code == 0
        assert "valid format" in result.output

    def test_validate_rejected(self):
        result = runner.invoke(eis_app, ["ctid", "validate", "bogus", "--json"])
        assert result.exit_code == 1
        assert json.loads(result.output)["valid"] is False


class TestConsentCommands:
    def test_allowed(self):
        result = runner.invoke(eis_app, ["consent", "check", "pending", "granted"])
        assert result.exit_code == 0
        assert "ALLOWED" in result.output

    def test_rejected(self):
        result = runner.invoke(eis_app, ["consent", "check", "revoked", "granted", "--json"])
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["allowed"] is False
        assert data["status"] == "rejected"

    def test_unknown_state(self):
        result = runner.invoke(eis_app, ["consent", "check", "pending", "approved"])
        assert result.exit_code == 3

    def test_table(self):
        result = runner.invoke(eis_app, ["consent", "table", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["transitions"]["pending"] == ["granted", "revoked"]
        assert data["terminal"] == ["expired", "revoked"]


class TestIntegrityCommand:
    def test_json(self, monkeypatch):
        monkeypatch.delenv("EIS_COUPLING_THRESHOLD", raising=False)
        result = runner.invoke(eis_app, ["integrity", "20", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["integrity"] == {"custody": 80.0, "regulation": 20.0}
        assert data["state"] == "critical"
        assert data["coupled"] is True

    def test_clamped_warning(self):
        result = runner.invoke(eis_app, ["integrity", "150", "--json"])
        data = json.loads(result.output)
        assert data["saturation"] == 100.0
        assert data["state"] == "fractured"
        assert "clamped" in data["warning"]

    def test_negative_saturation_is_clamped(self):
        result = runner.invoke(eis_app, ["integrity", "-10", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["saturation"] == 0.0
        assert data["integrity"] == {"custody": 100.0, "regulation": 0.0}
        assert "clamped" in data["warning"]

    def test_console(self):
        result = runner.invoke(eis_app, ["integrity", "50"])
        assert result.exit_code == 0
        assert "NARROWED" in result.output


class TestToleranceAndTrust:
    def test_within(self):
        result = runner.invoke(eis_app, ["tolerance", "55", "--baseline", "50", "--variance", "5", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["within"] is True
        assert data["bounds"] == [45.0, 55.0]

    def test_negative_variance_warns(self):
        result = runner.invoke(eis_app, ["tolerance", "50", "--baseline", "50", "--variance", "-1", "--json"])
        data = json.loads(result.output)
        assert data["within"] is False
        assert "negative tolerance variance" in data["warning"]

    def test_trust(self):
        result = runner.invoke(eis_app, ["trust", "0.8", "0.6", "--json"])
        assert result.exit_code == 0
        assert abs(json.loads(result.output)["delta"] + 0.2) < 1e-9

    def test_trust_negative_values_pass_through(self):
        result = runner.invoke(eis_app, ["trust", "-0.5", "0.3", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["baseline"] == -0.5
        assert data["current"] == 0.3
        assert abs(data["delta"] - 0.8) < 1e-9


class TestTraceCommand:
    def test_ordered(self, tmp_path):
        path = _write_trace(tmp_path / "trace.jsonl", [100, 100, 200])
        result = runner.invoke(eis_app, ["trace", "validate", str(path), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["passed"] is True
        assert data["event_count"] == 3

    def test_inversion(self, tmp_path):
        path = _write_trace(tmp_path / "trace.jsonl", [200, 100])
        result = runner.invoke(eis_app, ["trace", "validate", str(path)])
        assert result.exit_code == 2
        assert "E_ORDER_INVERSION" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(eis_app, ["trace", "validate", str(tmp_path / "nope.jsonl")])
        assert result.exit_code == 3

    def test_malformed(self, tmp_path):
        path = tmp_path / "bad.jsonl"
        path.write_text("{oops\n", encoding="utf-8")
        result = runner.invoke(eis_app, ["trace", "validate", str(path), "--json"])
        assert result.exit_code == 3
        assert json.loads(result.output)["errors"][0]["code"] == "E_EVENT_INVALID"


class TestDemo:
    def test_demo_json(self):
        result = runner.invoke(eis_app, ["demo", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["consent_state"] == "revoked"
        assert data["trace"]["passed"] is True
        types = [e["event_type"] for e in data["events"]]
        assert types[0] == "consent-granted"
        assert "state-transition" in types
        assert types[-1] == "consent-transition-rejected"

    def test_demo_console(self):
        result = runner.invoke(eis_app, ["demo"])
        assert result.exit_code == 0
        assert "Audit trail" in result.output
