"""CLI argument parsing and main entry point.

Provides two modes of operation:

* ``mcp-chatwoot --mode stdio`` - one MCP session over stdin/stdout.
* ``mcp-chatwoot --mode http``  - the Uvicorn streamable HTTP server.

Command-line flags take precedence over environment variables, which take
precedence over the optional YAML config file.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import signal
import sys
from typing import Dict, List, Mapping, Optional

import uvicorn

from mcp_chatwoot.config.loader import load_gateway_config
from mcp_chatwoot.config.schema import GatewayConfig
from mcp_chatwoot.constants import SERVER_NAME, SERVER_VERSION
from mcp_chatwoot.display.logging_config import setup_logging
from mcp_chatwoot.errors import ConfigurationError
from mcp_chatwoot.runtime.service import GatewayService

module_logger = logging.getLogger(__name__)

uvicorn_svr_inst: Optional[uvicorn.Server] = None

# CLI flag → environment variable it overrides
_FLAG_ENV = (
    ("mode", "MCP_MODE"),
    ("host", "HOST"),
    ("port", "PORT"),
    ("log_level", "LOG_LEVEL"),
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-chatwoot",
        description=f"{SERVER_NAME} v{SERVER_VERSION}: MCP gateway for the Chatwoot REST API.",
    )
    parser.add_argument(
        "--mode",
        choices=["stdio", "http"],
        default=None,
        help="Transport front (default: MCP_MODE or stdio).",
    )
    parser.add_argument("--host", default=None, help="HTTP listen host (default: HOST or 0.0.0.0).")
    parser.add_argument("--port", type=int, default=None, help="HTTP listen port (default: PORT or 3000).")
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error", "critical"],
        default=None,
        help="Log level (default: LOG_LEVEL or info).",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional YAML config file (default: MCP_CHATWOOT_CONFIG).",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {SERVER_VERSION}")
    return parser


def _effective_environ(args: argparse.Namespace, environ: Mapping[str, str]) -> Dict[str, str]:
    """Overlay explicitly given CLI flags onto *environ*."""
    merged = dict(environ)
    for attr, env_name in _FLAG_ENV:
        value = getattr(args, attr, None)
        if value is not None:
            merged[env_name] = str(value)
    return merged


# ── HTTP mode ────────────────────────────────────────────────────────────


async def _run_http(service: GatewayService, config: GatewayConfig) -> None:
    """Async main for the streamable HTTP front."""
    global uvicorn_svr_inst

    from mcp_chatwoot.server.app import create_app

    settings = config.server
    application = create_app(service, settings)
    uvicorn_cfg = uvicorn.Config(
        app=application,
        host=settings.host,
        port=settings.port,
        log_config=None,
        log_level="debug" if settings.log_level.lower() == "debug" else "warning",
    )
    uvicorn_svr_inst = uvicorn.Server(uvicorn_cfg)

    module_logger.info("Preparing to start Uvicorn server: http://%s:%s", settings.host, settings.port)
    try:
        await uvicorn_svr_inst.serve()
    except (KeyboardInterrupt, SystemExit) as e_exit:
        module_logger.info("Server stopped due to '%s'.", type(e_exit).__name__)
    finally:
        module_logger.info("%s has shut down or is shutting down.", SERVER_NAME)


def _install_signal_handlers() -> None:
    def _shutdown_handler(sig: int, frame: object) -> None:
        module_logger.info("Signal %s received, shutting down gracefully.", sig)
        if uvicorn_svr_inst is not None:
            uvicorn_svr_inst.should_exit = True

    signal.signal(signal.SIGINT, _shutdown_handler)
    signal.signal(signal.SIGTERM, _shutdown_handler)


# ── stdio mode ───────────────────────────────────────────────────────────


async def _run_stdio(service: GatewayService) -> None:
    from mcp_chatwoot.server.stdio import run_stdio

    await run_stdio(service)


# ── Entry point ──────────────────────────────────────────────────────────


def main(argv: Optional[List[str]] = None) -> None:
    """Program entry point: parse arguments, load config and run a front."""
    args = _build_parser().parse_args(argv)
    environ = _effective_environ(args, os.environ)

    try:
        config = load_gateway_config(args.config, environ)
    except ConfigurationError as e_cfg:
        print(f"Error: {e_cfg}", file=sys.stderr)
        sys.exit(1)

    # stdout is the protocol channel in stdio mode; mirror logs to stderr
    log_fpath, log_lvl = setup_logging(config.server.log_level, stream=sys.stderr)
    module_logger.info(
        "---- %s v%s starting in %s mode (log file: %s, level: %s) ----",
        SERVER_NAME,
        SERVER_VERSION,
        config.server.mode,
        log_fpath,
        log_lvl,
    )

    service = GatewayService(config)
    try:
        if config.server.mode == "http":
            _install_signal_handlers()
            asyncio.run(_run_http(service, config))
        else:
            asyncio.run(_run_stdio(service))
    except KeyboardInterrupt:
        module_logger.info("%s interrupted by KeyboardInterrupt.", SERVER_NAME)
    except Exception as e_fatal:
        module_logger.exception("%s encountered an uncaught fatal error: %s", SERVER_NAME, e_fatal)
        sys.exit(1)
    finally:
        module_logger.info("%s application finished.", SERVER_NAME)


if __name__ == "__main__":
    main()
