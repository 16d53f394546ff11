# tests/test_main_cli.py
import json

import main
from tests.utils import FakeGateway, make_portfolio


def _write_config(tmp_path, **extra):
    p = tmp_path / "config.json"
    p.write_text(json.dumps({"investor": {"investor_id": 42, "api_key": "k"}, **extra}), encoding="utf-8")
    return p


def test_cli_dry_run_writes_report(tmp_path, monkeypatch, capsys):
    gateway = FakeGateway(make_portfolio())
    monkeypatch.setattr(main, "build_gateway", lambda cfg: gateway)
    cfg = _write_config(tmp_path)
    out = tmp_path / "report.md"

    code = main.main(["--config", str(cfg), "--dry-run", "--report", str(out), "--as-of", "2024-06-15"])

    assert code == 0
    assert gateway.sales == []
    printed = capsys.readouterr().out
    assert "(dry run)" in printed
    assert "cohort 0 (>= 8 months): 1 priced, 0 skipped, 1 requests built" in printed
    assert out.exists()


def test_cli_fetch_failure_exits_nonzero(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(main, "build_gateway", lambda cfg: FakeGateway(fail_fetch=True))
    code = main.main(["--config", str(_write_config(tmp_path))])
    assert code == 1
    assert "Could not fetch the note portfolio" in capsys.readouterr().out
