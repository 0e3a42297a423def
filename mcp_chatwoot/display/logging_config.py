"""Logging configuration setup."""

import copy
import logging
import logging.config
import os
import re
import sys
from datetime import datetime
from typing import Any, Optional, Set, TextIO, Tuple  # noqa: UP035

from mcp_chatwoot.constants import LOG_DIR

# ── Secret redaction filter ──────────────────────────────────────────────

_REDACTED = "***REDACTED***"
_MIN_SECRET_LEN = 4
_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class SecretRedactionFilter(logging.Filter):
    """Mask Chatwoot tokens in log records before any handler formats them.

    The user and platform API tokens and the HTTP bearer secret are
    registered once the configuration is loaded. Masking covers the
    format string and string arguments, which is where httpx errors and
    exception messages end up.
    """

    def __init__(self) -> None:
        super().__init__()
        self._secrets: Set[str] = set()
        self._pattern: Optional[re.Pattern[str]] = None

    def register(self, value: Optional[str]) -> None:
        if not value or len(value) < _MIN_SECRET_LEN or value in self._secrets:
            return
        self._secrets.add(value)
        # longest first: a token that contains another must be masked whole
        alternatives = sorted(self._secrets, key=len, reverse=True)
        self._pattern = re.compile("|".join(map(re.escape, alternatives)))

    def redact(self, text: str) -> str:
        if self._pattern is None:
            return text
        return self._pattern.sub(_REDACTED, text)

    def _scrub(self, value: Any) -> Any:
        return self.redact(value) if isinstance(value, str) else value

    def filter(self, record: logging.LogRecord) -> bool:
        if self._pattern is None:
            return True
        record.msg = self._scrub(record.msg)
        if isinstance(record.args, dict):
            record.args = {key: self._scrub(val) for key, val in record.args.items()}
        elif isinstance(record.args, tuple):
            record.args = tuple(self._scrub(arg) for arg in record.args)
        return True


secret_redaction_filter = SecretRedactionFilter()

_APP_LOGGERS = (
    "mcp_chatwoot",
    "mcp_chatwoot.server",
    "mcp_chatwoot.bridge",
    "mcp_chatwoot.backend",
    "mcp_chatwoot.tools",
    "mcp_chatwoot.config",
    "mcp",
    "uvicorn",
    "uvicorn.error",
    "starlette",
    "httpx",
)

BASE_LOG_CFG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple_file": {
            "format": ("%(asctime)s - %(name)25s:%(lineno)-4d - " "%(levelname)-7s - %(message)s"),
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
        "stream": {
            "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            "datefmt": "%H:%M:%S",
        },
    },
    "handlers": {
        "file_handler": {
            "class": "logging.FileHandler",
            "level": "DEBUG",
            "formatter": "simple_file",
            "filename": "temp_log_name.log",
            "encoding": "utf-8",
        },
    },
    "loggers": {
        "uvicorn.access": {
            "handlers": ["file_handler"],
            "propagate": False,
            "level": "WARNING",
        },
        "httpx": {
            "handlers": ["file_handler"],
            "propagate": False,
            "level": "WARNING",
        },
    },
    "root": {
        "handlers": ["file_handler"],
        "level": "WARNING",
    },
}


def setup_logging(
    log_lvl_str: str,
    *,
    stream: Optional[TextIO] = None,
    log_dir: str = LOG_DIR,
) -> Tuple[str, str]:
    """Route gateway, SDK and server logs to a per-run file under *log_dir*.

    With *stream* set, the same records are mirrored there at the chosen
    level. In stdio mode that must be ``sys.stderr``: stdout carries the
    JSON-RPC frames.

    Returns the log file path and the level actually applied; an unknown
    level name falls back to INFO.
    """
    log_lvl_valid = log_lvl_str.upper()
    if log_lvl_valid not in _LEVELS:
        print(f"Warning: invalid log level '{log_lvl_str}'. Using 'INFO'.", file=sys.stderr)
        log_lvl_valid = "INFO"

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    os.makedirs(log_dir, exist_ok=True)
    log_fpath = os.path.join(log_dir, f"chatwoot_{ts}_{log_lvl_valid}.log")

    log_cfg: dict = copy.deepcopy(BASE_LOG_CFG)
    log_cfg["handlers"]["file_handler"]["filename"] = log_fpath
    handler_names = ["file_handler"]
    if stream is not None:
        log_cfg["handlers"]["stream_handler"] = {
            "class": "logging.StreamHandler",
            "level": log_lvl_valid,
            "formatter": "stream",
            "stream": stream,
        }
        handler_names.append("stream_handler")

    for name in _APP_LOGGERS:
        entry = log_cfg["loggers"].setdefault(name, {"propagate": False})
        entry["handlers"] = list(handler_names)
        if name != "httpx":
            entry["level"] = log_lvl_valid

    log_cfg["loggers"]["uvicorn.access"]["handlers"] = list(handler_names)
    log_cfg["loggers"]["uvicorn.access"]["level"] = (
        "INFO" if log_lvl_valid == "DEBUG" else "WARNING"
    )
    log_cfg["root"]["handlers"] = list(handler_names)
    log_cfg["root"]["level"] = log_lvl_valid if log_lvl_valid == "DEBUG" else "WARNING"

    try:
        logging.config.dictConfig(log_cfg)
        # Attach secret redaction filter to every handler we installed
        for handler in logging.root.handlers:
            handler.addFilter(secret_redaction_filter)
    except (ValueError, TypeError, AttributeError, ImportError) as e_log_cfg:
        print(
            f"Error applying logging configuration: {e_log_cfg}",
            file=sys.stderr,
        )

    return log_fpath, log_lvl_valid
