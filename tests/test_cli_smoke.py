import os
import subprocess
import sys
from pathlib import Path

SRC = Path(__file__).resolve().parent.parent / "src"


def _run(*args, tmp_path):
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(
        [str(SRC), *filter(None, [env.get("PYTHONPATH")])]
    )
    env["LOGKEEP_LOGS_DIR"] = str(tmp_path / "logs")
    return subprocess.run(
        [sys.executable, "-m", "logkeep", *args],
        capture_output=True,
        text=True,
        env=env,
    )


def test_logs_help_runs(tmp_path):
    result = _run("logs", "--help", tmp_path=tmp_path)
    assert result.returncode == 0
    assert "prune" in result.stdout


def test_help_command_runs(tmp_path):
    result = _run("help", "logs", tmp_path=tmp_path)
    assert result.returncode == 0


def test_env_dump_runs(tmp_path):
    result = _run("-q", "env", "dump", tmp_path=tmp_path)
    assert result.returncode == 0
    assert "max_backup_index" in result.stdout
