#!/usr/bin/env python3
"""
r2mcp MCP Wrapper
-----------------
Exposes a radare2 session to one MCP client over stdin/stdout.

stdout carries protocol lines only; diagnostics go to stderr or to
R2MCP_LOG_FILE.
"""

import sys
import signal
import logging
import argparse
from typing import Callable, List, Optional

from r2mcp.core.config import R2McpConfig
from r2mcp.engine import AnalysisEngine, EngineBinding, EngineError
from r2mcp.mcp.server import McpServer
from r2mcp.mcp.state import SessionContext
from r2mcp.version import __version__

logger = logging.getLogger("R2MCP")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_SHUTDOWN_SIGNALS = ("SIGINT", "SIGTERM", "SIGHUP")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="r2-mcp",
        description="radare2 connector for the Model Context Protocol (stdio).",
    )
    parser.add_argument("--log-level", help="Override R2MCP_LOG_LEVEL (DEBUG, INFO, WARNING, ...)")
    parser.add_argument("--log-file", help="Override R2MCP_LOG_FILE; default logs to stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def configure_logging(config: R2McpConfig) -> None:
    level = getattr(logging, config.logging.level.upper(), logging.INFO)
    if config.logging.file:
        logging.basicConfig(level=level, format=LOG_FORMAT, filename=config.logging.file, filemode="a")
    else:
        logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def default_engine_factory(config: R2McpConfig) -> Callable[[], AnalysisEngine]:
    def _factory() -> AnalysisEngine:
        from r2mcp.engine.r2 import R2Engine
        return R2Engine(radare2home=config.engine.radare2home)
    return _factory


def install_signal_handlers(server: McpServer) -> None:
    def _handler(signum, frame):
        logger.warning("Interrupt received, shutting down...")
        server.request_shutdown()
        # A second signal falls through to the default action.
        signal.signal(signum, signal.SIG_DFL)

    for name in _SHUTDOWN_SIGNALS:
        signum = getattr(signal, name, None)
        if signum is not None:
            signal.signal(signum, _handler)
    if hasattr(signal, "SIGPIPE"):
        signal.signal(signal.SIGPIPE, signal.SIG_IGN)


def main(
    argv: Optional[List[str]] = None,
    engine_factory: Optional[Callable[[], AnalysisEngine]] = None,
) -> int:
    args = build_parser().parse_args(argv)
    config = R2McpConfig.from_env()
    if args.log_level:
        config.logging.level = args.log_level.upper()
    if args.log_file:
        config.logging.file = args.log_file
    configure_logging(config)

    binding = EngineBinding(engine_factory or default_engine_factory(config))
    try:
        binding.engine()
    except EngineError as exc:
        logger.error("Failed to initialize radare2: %s", exc)
        return 1

    try:
        if sys.stdin.isatty():
            logger.info("stdin is a terminal; nothing to serve")
            return 0

        server = McpServer(SessionContext(binding=binding, config=config))
        install_signal_handlers(server)
        logger.info("r2mcp %s started", __version__)
        server.serve()
        logger.info("MCP direct mode terminated gracefully")
        return 0
    finally:
        binding.teardown()


if __name__ == "__main__":
    sys.exit(main())
