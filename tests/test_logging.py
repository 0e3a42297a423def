"""Tests for logging setup and secret redaction."""

from __future__ import annotations

import io
import logging

import pytest

from mcp_chatwoot.display import logging_config
from mcp_chatwoot.display.logging_config import SecretRedactionFilter, setup_logging


def _record(msg: str, *args) -> logging.LogRecord:
    return logging.LogRecord("t", logging.INFO, __file__, 1, msg, args, None)


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    saved_root = (list(root.handlers), root.level)
    yield
    for name in logging_config._APP_LOGGERS + ("uvicorn.access",):
        lg = logging.getLogger(name)
        for handler in list(lg.handlers):
            lg.removeHandler(handler)
        lg.propagate = True
        lg.setLevel(logging.NOTSET)
    for handler in list(root.handlers):
        if handler not in saved_root[0]:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(saved_root[1])


class TestSecretRedactionFilter:
    def test_redacts_message_and_args(self) -> None:
        flt = SecretRedactionFilter()
        flt.register("tok-123456")
        record = _record("token=tok-123456 user=%s", "tok-123456")
        assert flt.filter(record)
        assert record.getMessage() == "token=***REDACTED*** user=***REDACTED***"

    def test_short_values_ignored(self) -> None:
        flt = SecretRedactionFilter()
        flt.register("abc")
        flt.register(None)
        assert flt.redact("abc") == "abc"

    def test_overlapping_secrets(self) -> None:
        flt = SecretRedactionFilter()
        flt.register("secret")
        flt.register("secret-extended")
        assert flt.redact("x secret-extended y") == "x ***REDACTED*** y"


class TestSetupLogging:
    def test_file_and_stream(self, tmp_path, restore_logging) -> None:
        stream = io.StringIO()
        log_path, level = setup_logging("debug", stream=stream, log_dir=str(tmp_path))
        assert level == "DEBUG"
        assert log_path.startswith(str(tmp_path))

        logging_config.secret_redaction_filter.register("stream-secret-999")
        logging.getLogger("mcp_chatwoot.test").info("using %s", "stream-secret-999")
        assert "using ***REDACTED***" in stream.getvalue()
        assert "stream-secret-999" not in stream.getvalue()

    def test_invalid_level_falls_back(self, tmp_path, restore_logging, capsys) -> None:
        _, level = setup_logging("loud", log_dir=str(tmp_path))
        assert level == "INFO"
        assert "invalid log level" in capsys.readouterr().err
