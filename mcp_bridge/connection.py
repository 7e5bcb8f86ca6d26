"""
WebSocket connection to the remote MCP peer.

Owns exactly one client connection: opens it, feeds inbound messages to the
dispatcher one at a time, writes replies back, and watches for the link
going away. There is no reconnection; once the peer is gone ``run`` returns
and the hosting process is expected to exit.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from .config import Settings
from .dispatcher import ProtocolDispatcher
from .errors import BridgeConnectionError, ConfigurationError
from ._logging import get_logger

logger = get_logger("mcp_bridge.pipe")


class ConnectionManager:
    """Single persistent connection between the dispatcher and the peer."""

    def __init__(
        self,
        endpoint: Optional[str],
        dispatcher: ProtocolDispatcher,
        *,
        open_timeout: float = 10.0,
        ping_interval: Optional[float] = 20.0,
        ping_timeout: Optional[float] = 20.0,
        max_message_bytes: int = 1 << 20,
    ) -> None:
        if not endpoint:
            raise ConfigurationError("MCP client endpoint is required")
        self.endpoint = endpoint
        self._dispatcher = dispatcher
        self._open_timeout = open_timeout
        self._ping_interval = ping_interval
        self._ping_timeout = ping_timeout
        self._max_message_bytes = max_message_bytes
        self._ws: Optional[Any] = None
        self._send_lock = asyncio.Lock()
        self._reader_error: Optional[BaseException] = None

    @classmethod
    def from_settings(cls, settings: Settings, dispatcher: ProtocolDispatcher) -> "ConnectionManager":
        return cls(
            settings.require_endpoint(),
            dispatcher,
            open_timeout=settings.open_timeout_s,
            ping_interval=settings.ping_interval_s,
            ping_timeout=settings.ping_timeout_s,
            max_message_bytes=settings.max_message_bytes,
        )

    @property
    def is_open(self) -> bool:
        return self._ws is not None and self._ws.close_code is None

    async def connect(self) -> None:
        """Open the connection, waiting for the handshake to complete."""
        if self._ws is not None:
            raise BridgeConnectionError("Connection already opened")

        logger.info("Connecting to MCP peer", endpoint=self.endpoint)
        try:
            self._ws = await websockets.connect(
                self.endpoint,
                open_timeout=self._open_timeout,
                ping_interval=self._ping_interval,
                ping_timeout=self._ping_timeout,
                max_size=self._max_message_bytes,
            )
        except (OSError, asyncio.TimeoutError, TimeoutError, WebSocketException) as exc:
            logger.error("Failed to connect to MCP peer", endpoint=self.endpoint, error=str(exc))
            raise BridgeConnectionError(f"Cannot connect to {self.endpoint}: {exc}") from exc
        logger.info("WebSocket connection established", endpoint=self.endpoint)

    async def serve(self) -> None:
        """Handle inbound messages sequentially until the connection closes."""
        ws = self._require_connection()
        try:
            async for message in ws:
                # Awaited before the next read: at most one message in flight.
                try:
                    reply = await asyncio.to_thread(self._dispatcher.handle, message)
                except Exception as exc:
                    logger.error("Unhandled error processing MCP message", exc_info=True)
                    reply = self._dispatcher.error_reply(f"Error processing message: {exc}")
                if reply is not None:
                    await self.send(reply)
        except ConnectionClosed as exc:
            logger.warning("WebSocket connection lost", code=exc.rcvd.code if exc.rcvd else None)
        except Exception as exc:
            # Recorded before the close below wakes the liveness observer.
            self._reader_error = exc
            raise
        finally:
            await ws.close()

    async def send(self, message: str) -> None:
        ws = self._require_connection()
        async with self._send_lock:
            await ws.send(message)

    async def wait_closed(self) -> None:
        """Block until the connection is closed; the liveness observer."""
        ws = self._require_connection()
        await ws.wait_closed()
        logger.info(
            "WebSocket connection closed",
            endpoint=self.endpoint,
            code=ws.close_code,
            reason=ws.close_reason,
        )

    async def close(self) -> None:
        if self._ws is not None:
            await self._ws.close()

    async def run(self) -> None:
        """
        Connect, then serve until the peer goes away.

        Raises BridgeConnectionError when the reader stops on an error
        instead of an ordinary close.
        """
        await self.connect()
        reader = asyncio.create_task(self.serve(), name="mcp-bridge-reader")
        try:
            await self.wait_closed()
        finally:
            if not reader.done():
                reader.cancel()
            await asyncio.wait([reader])
            if not reader.cancelled():
                reader.exception()  # retrieved; surfaced via _reader_error

        if self._reader_error is not None:
            exc = self._reader_error
            logger.error("MCP reader stopped on error", error=str(exc))
            raise BridgeConnectionError(f"Reader stopped: {exc}") from exc

    def _require_connection(self) -> Any:
        if self._ws is None:
            raise BridgeConnectionError("Connection is not open")
        return self._ws
