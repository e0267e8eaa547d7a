"""CLI harness against a migrated temp database."""
import pytest

from credit_pipeline.queue.cli import main


@pytest.fixture
def cli_env(monkeypatch, temp_db_url):
    monkeypatch.setenv("DB_URL", temp_db_url)
    return temp_db_url


def _field(out: str, name: str) -> str:
    for line in out.splitlines():
        if line.startswith(f"{name}="):
            return line.split("=", 1)[1]
    raise AssertionError(f"{name} not printed")


def test_init_db_submit_inspect_stats(cli_env, tmp_path, capsys):
    report = tmp_path / "report.txt"
    report.write_text("Equifax report. Payment history 98% on time.", encoding="utf-8")

    assert main(["init-db"]) == 0
    assert main(["submit", "--owner", "user-1", "--file", str(report), "--priority", "3"]) == 0
    job_id = _field(capsys.readouterr().out, "job_id")

    assert main(["inspect", "--job", job_id]) == 0
    out = capsys.readouterr().out
    assert "status=queued" in out
    assert "priority=3" in out
    assert "attempts=0/3" in out

    assert main(["stats"]) == 0
    out = capsys.readouterr().out
    assert "queued: 1" in out
    assert "total: 1" in out


def test_submit_missing_file_fails(cli_env, tmp_path, capsys):
    assert main(["init-db"]) == 0
    assert main(["submit", "--owner", "user-1", "--file", str(tmp_path / "missing.txt")]) == 1
    assert "file not found" in capsys.readouterr().err


def test_inspect_unknown_job_fails(cli_env, capsys):
    assert main(["init-db"]) == 0
    assert main(["inspect", "--job", "nope"]) == 1
