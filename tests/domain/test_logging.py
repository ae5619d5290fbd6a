import sys

import structlog
from grocery.utils.logging import get_log_level, setup_structlog


def test_console_renderer_formats_tracebacks():
    setup_structlog()
    renderer = structlog.get_config()["processors"][-1]

    try:
        raise ValueError("stock went negative")
    except ValueError:
        line = renderer(None, "error", {"event": "checkout failed", "exc_info": sys.exc_info()})

    assert "checkout failed" in line
    assert "stock went negative" in line


def test_level_follows_environment(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.setenv("PROTEAN_ENV", "test")
    assert get_log_level() == "WARNING"

    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert get_log_level() == "DEBUG"
