"""Tests for the command-line entry point."""

from __future__ import annotations

import argparse
import os
from unittest.mock import patch

import pytest

from mcp_chatwoot import cli

ENV = {
    "CHATWOOT_BASE_URL": "https://chat.test",
    "CHATWOOT_API_TOKEN": "cli-token-1234",
    "CHATWOOT_ACCOUNT_ID": "1",
}


def _close_coroutine(coro):
    name = coro.cr_code.co_name
    coro.close()
    return name


class TestEffectiveEnviron:
    def test_flags_override_environment(self) -> None:
        args = argparse.Namespace(mode="http", host=None, port=9000, log_level="debug")
        merged = cli._effective_environ(args, {"PORT": "3000", "HOST": "127.0.0.1"})
        assert merged["MCP_MODE"] == "http"
        assert merged["PORT"] == "9000"
        assert merged["HOST"] == "127.0.0.1"
        assert merged["LOG_LEVEL"] == "debug"

    def test_no_flags_keeps_environment(self) -> None:
        args = cli._build_parser().parse_args([])
        assert cli._effective_environ(args, {"PORT": "1"}) == {"PORT": "1"}


class TestMain:
    def test_configuration_error_exits_1(self, capsys) -> None:
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(SystemExit) as exc_info:
                cli.main([])
        assert exc_info.value.code == 1
        assert "CHATWOOT_BASE_URL" in capsys.readouterr().err

    def test_invalid_mode_rejected_by_parser(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--mode", "websocket"])
        assert exc_info.value.code == 2

    def test_stdio_is_default(self) -> None:
        names = []

        def _record(coro):
            names.append(_close_coroutine(coro))

        with patch.dict(os.environ, ENV, clear=True), patch.object(
            cli, "setup_logging", return_value=("test.log", "INFO")
        ) as setup, patch.object(cli.asyncio, "run", side_effect=_record):
            cli.main([])
        assert names == ["_run_stdio"]
        setup.assert_called_once()
        assert setup.call_args.kwargs["stream"] is not None

    def test_http_mode_from_flag(self) -> None:
        names = []

        def _record(coro):
            names.append(_close_coroutine(coro))

        with patch.dict(os.environ, ENV, clear=True), patch.object(
            cli, "setup_logging", return_value=("test.log", "INFO")
        ), patch.object(cli, "_install_signal_handlers") as install, patch.object(
            cli.asyncio, "run", side_effect=_record
        ):
            cli.main(["--mode", "http", "--port", "8123"])
        assert names == ["_run_http"]
        install.assert_called_once()

    def test_stdio_runs_stdio_front(self) -> None:
        names = []

        def _record(coro):
            names.append(_close_coroutine(coro))

        with patch.dict(os.environ, {**ENV, "MCP_MODE": "http"}, clear=True), patch.object(
            cli, "setup_logging", return_value=("test.log", "INFO")
        ), patch.object(cli.asyncio, "run", side_effect=_record):
            cli.main(["--mode", "stdio"])
        assert names == ["_run_stdio"]
