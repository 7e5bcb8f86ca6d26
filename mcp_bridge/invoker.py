"""Tool lookup and invocation."""

from __future__ import annotations

import json
import time
from typing import Any, Dict

from pydantic import BaseModel
from pydantic_core import to_jsonable_python

from .errors import ToolNotFoundError
from .protocol import CallOutcome, CallToolResult, TextContent
from .registry import ToolCatalog
from ._logging import get_logger

logger = get_logger(__name__)


class ToolInvoker:
    """Calls catalog tools synchronously and wraps their results."""

    def __init__(self, catalog: ToolCatalog) -> None:
        self._catalog = catalog

    def invoke(self, name: str, arguments: Dict[str, Any]) -> CallOutcome:
        started = time.perf_counter()
        try:
            tool = self._resolve(name)
        except ToolNotFoundError as exc:
            logger.warning("Requested MCP tool not found", tool=name)
            return CallOutcome(tool=name, ok=False, error=str(exc))

        encoded_arguments = json.dumps(arguments, ensure_ascii=False, separators=(",", ":"))
        try:
            output = tool.call(encoded_arguments)
            text = stringify(output)
        except Exception as exc:
            logger.error(
                "Tool invocation failed",
                tool=name,
                error=str(exc),
                exc_info=True,
            )
            return CallOutcome(
                tool=name,
                ok=False,
                error=f"Error executing tool: {exc}",
                latency_ms=_elapsed_ms(started),
            )

        latency_ms = _elapsed_ms(started)
        logger.info("Tool invocation succeeded", tool=name, latency_ms=latency_ms, output=text)
        return CallOutcome(
            tool=name,
            ok=True,
            result=CallToolResult(content=[TextContent(text=text)], is_error=False),
            latency_ms=latency_ms,
        )

    def _resolve(self, name: str):
        tool = self._catalog.get(name)
        if tool is None:
            raise ToolNotFoundError(f"Tool not found: {name}")
        return tool


def stringify(value: Any) -> str:
    """Render a tool return value as the text payload sent to the peer."""
    if isinstance(value, str):
        return value
    if isinstance(value, BaseModel):
        return value.model_dump_json()
    return json.dumps(value, ensure_ascii=False, default=_jsonable)


def _jsonable(value: Any) -> Any:
    return to_jsonable_python(value, fallback=str)


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
