import json
from pathlib import Path

import pytest

from app import cli

SAAS = Path(__file__).parent / "data" / "saas.fm"


def test_store_as_csv(tmp_path):
    out = tmp_path / "store.csv"
    assert cli.main([str(SAAS), "--months", "6", "--format", "csv", "--out", str(out)]) == 0
    lines = out.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "key,2025-01,2025-02,2025-03,2025-04,2025-05,2025-06"
    assert any(line.startswith("subs.rev,50.0,100.0") for line in lines)


def test_annual_statements_as_json(tmp_path):
    out = tmp_path / "annual.json"
    rc = cli.main([str(SAAS), "--months", "24", "--statements", "--annual", "--format", "json", "--out", str(out)])
    assert rc == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["pnl.opex.ga"]["Y1"] == 240
    assert data["pnl.opex.ga"]["label"] == "General & Administrative"


def test_text_to_stdout(capsys):
    assert cli.main([str(SAAS), "--months", "3"]) == 0
    assert "leads.val" in capsys.readouterr().out


def test_overrides_file(tmp_path):
    overrides = tmp_path / "overrides.json"
    overrides.write_text(json.dumps({"leads": {"val": {"0": 0}}}), encoding="utf-8")
    out = tmp_path / "store.csv"
    assert cli.main([str(SAAS), "--months", "2", "--overrides", str(overrides), "--format", "csv", "--out", str(out)]) == 0
    assert "leads.val,0.0,10.0" in out.read_text(encoding="utf-8")


def test_model_error_exit_code(tmp_path, capsys):
    bad = tmp_path / "bad.fm"
    bad.write_text("S:\n  A = Sum(B.val)\n  B = Sum(A.val)\n", encoding="utf-8")
    assert cli.main([str(bad)]) == 1
    assert "ERROR: Dependency cycle" in capsys.readouterr().err


def test_missing_file_exit_code(tmp_path):
    assert cli.main([str(tmp_path / "nope.fm")]) == 1


def test_annual_requires_statements():
    with pytest.raises(SystemExit) as ei:
        cli.main([str(SAAS), "--annual"])
    assert ei.value.code == 2


def test_bad_months():
    with pytest.raises(SystemExit) as ei:
        cli.main([str(SAAS), "--months", "0"])
    assert ei.value.code == 2
