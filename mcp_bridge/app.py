"""Startup wiring and command line entrypoint."""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Iterable, List, Optional

from .base import BaseTool
from .config import Settings, get_settings
from .connection import ConnectionManager
from .dispatcher import ProtocolDispatcher
from .errors import BridgeConnectionError, ConfigurationError
from .registry import ToolCatalog, ToolRegistry, load_tool_modules
from ._logging import get_logger, setup_logging

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_CONNECTION = 1
EXIT_CONFIGURATION = 2


def build_catalog(settings: Settings, extra_tools: Iterable[BaseTool] = ()) -> ToolCatalog:
    """Register configured tool modules plus any explicit tools, then freeze."""
    registry = ToolRegistry()
    load_tool_modules(registry, settings.tool_modules)
    registry.register_all(extra_tools)
    return registry.freeze()


def create_bridge(settings: Settings, catalog: ToolCatalog) -> ConnectionManager:
    dispatcher = ProtocolDispatcher.from_settings(catalog, settings)
    return ConnectionManager.from_settings(settings, dispatcher)


async def run_bridge(settings: Settings, extra_tools: Iterable[BaseTool] = ()) -> None:
    settings.require_endpoint()
    catalog = build_catalog(settings, extra_tools)
    bridge = create_bridge(settings, catalog)
    logger.info("MCP Client init ...", endpoint=bridge.endpoint, tools=len(catalog))
    await bridge.run()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mcp-bridge",
        description="Expose registered tools to a remote MCP peer over WebSocket.",
    )
    parser.add_argument("--endpoint", help="WebSocket URL of the MCP peer (overrides MCP_ENDPOINT)")
    parser.add_argument("--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    overrides = {}
    if args.endpoint:
        overrides["endpoint"] = args.endpoint
    if args.log_level:
        overrides["log_level"] = args.log_level
    if overrides:
        settings = settings.model_copy(update=overrides)

    setup_logging(settings.log_level, json_output=settings.log_json)

    try:
        asyncio.run(run_bridge(settings))
    except ConfigurationError as exc:
        logger.error("Invalid configuration", error=str(exc))
        return EXIT_CONFIGURATION
    except BridgeConnectionError as exc:
        logger.error("MCP connection failed", error=str(exc))
        return EXIT_CONNECTION
    except KeyboardInterrupt:
        logger.info("MCP bridge interrupted")
        return EXIT_OK
    except Exception as exc:
        logger.error("MCP bridge stopped unexpectedly", error=str(exc), exc_info=True)
        return EXIT_CONNECTION

    logger.warning("MCP connection closed, bridge stopping")
    return EXIT_CONNECTION


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
