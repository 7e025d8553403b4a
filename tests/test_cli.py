import json

from finance_tracker.cli import main


def test_init_db_and_report(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'cli.db'}")
    assert main(["init-db"]) == 0
    assert "Database initialized." in capsys.readouterr().out

    out_path = tmp_path / "out" / "summary.json"
    assert main(["report", "--user-id", "nobody", "--json", str(out_path)]) == 0
    output = capsys.readouterr().out
    assert "=== Finance Tracker Summary ===" in output
    assert "Portfolio value: $0.00" in output
    saved = json.loads(out_path.read_text())
    assert saved["goalSummary"] == []


def test_refresh_command(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'cli.db'}")
    assert main(["refresh", "--user-id", "nobody"]) == 0
    assert "Portfolio value on" in capsys.readouterr().out
