import logging
import os

import pytest


@pytest.fixture(autouse=True)
def clean_env_and_logging(monkeypatch, tmp_path):
    """
    Ensure tests don't leak env, logger state, or cached environment views.
    """

    for k in list(os.environ):
        if k.startswith("LOGKEEP_"):
            monkeypatch.delenv(k, raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    # Never write into the project's own logs/ directory
    monkeypatch.setenv("LOGKEEP_LOGS_DIR", str(tmp_path / "logs"))

    from env import reset_env_caches
    import logkeep.state

    reset_env_caches()
    logkeep.state.reset()

    yield

    from rich.logging import RichHandler
    from logkeep.handler import RetainingTimedRotatingFileHandler

    root = logging.getLogger()
    for h in list(root.handlers):
        if isinstance(h, (RetainingTimedRotatingFileHandler, RichHandler)):
            root.removeHandler(h)
            h.close()
    logkeep.state.reset()
    reset_env_caches()


@pytest.fixture
def make_log(tmp_path):
    """Create a file under tmp_path/logs with a fixed mtime."""
    log_dir = tmp_path / "logs"
    log_dir.mkdir(exist_ok=True)

    def _make(name: str, mtime: float, text: str = "x"):
        path = log_dir / name
        path.write_text(text)
        os.utime(path, (mtime, mtime))
        return path

    return _make


@pytest.fixture
def diag_logger():
    """A propagating diagnostics logger, so caplog sees its records."""
    log = logging.getLogger("tests.diagnostics")
    log.setLevel(logging.DEBUG)
    return log
