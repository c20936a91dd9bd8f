"""Reconnecting WebSocket session for the group chat client."""
from __future__ import annotations

import asyncio
import logging
import random
from contextlib import suppress
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from ..shared.protocol import DEFAULT_PORT, decode_frame, encode_frame, message_frame, set_name_frame, typing_frame
from .state import ChatState

logger = logging.getLogger("group_chat_client")

MAX_PLACEHOLDER_SUFFIX = 2000


class ConnectionStatus(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    OPEN = "open"


@dataclass
class ReconnectPolicy:
    max_retries: int = 10
    min_delay: float = 1.0
    max_delay: float = 10.0
    grow_factor: float = 2.0

    def delay(self, attempt: int) -> float:
        """Seconds to wait before reconnect ``attempt`` (1-based)."""
        return min(self.min_delay * self.grow_factor ** max(attempt - 1, 0), self.max_delay)


def build_url(host_descriptor: str, port: int = DEFAULT_PORT) -> str:
    """Turn ``"192 168 1 17"`` into ``ws://192.168.1.17:8080``."""
    tokens = host_descriptor.split()
    if not tokens:
        raise ValueError("Host descriptor is empty")
    return f"ws://{'.'.join(tokens)}:{port}"


def placeholder_name() -> str:
    return f"user_{random.randrange(MAX_PLACEHOLDER_SUFFIX)}"


class TransportSession:
    """Owns one reconnecting connection and mirrors server events into ``state``."""

    def __init__(
        self,
        state: Optional[ChatState] = None,
        policy: Optional[ReconnectPolicy] = None,
        connector: Callable[[str], Awaitable[Any]] = websockets.connect,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        name_factory: Callable[[], str] = placeholder_name,
        port: int = DEFAULT_PORT,
    ):
        self.state = state or ChatState()
        self.policy = policy or ReconnectPolicy()
        self.port = port
        self.url: Optional[str] = None
        self.status = ConnectionStatus.DISCONNECTED
        self.retries = 0
        self.exhausted = False
        self.on_event: Optional[Callable[[Dict[str, Any]], None]] = None
        self.on_status: Optional[Callable[[ConnectionStatus], None]] = None
        self._connector = connector
        self._sleep = sleep
        self._name_factory = name_factory
        self._ws: Any = None
        self._task: Optional[asyncio.Task] = None
        self._closing = False

    @property
    def connected(self) -> bool:
        return self.status is ConnectionStatus.OPEN

    async def connect(self, host_descriptor: str) -> asyncio.Task:
        """Point the session at a new host and start the reconnect loop."""
        url = build_url(host_descriptor, self.port)
        await self.close()
        self.url = url
        self._task = asyncio.create_task(self.run())
        return self._task

    async def close(self) -> None:
        self._closing = True
        if self._ws is not None:
            with suppress(WebSocketException, OSError):
                await self._ws.close()
        if self._task is not None and not self._task.done():
            self._task.cancel()
            with suppress(asyncio.CancelledError):
                await self._task
        self._task = None
        self._set_status(ConnectionStatus.DISCONNECTED)

    async def run(self) -> None:
        if self.url is None:
            raise RuntimeError("No server URL; call connect() first")
        self._closing = False
        self.retries = 0
        self.exhausted = False
        while not self._closing:
            self._set_status(ConnectionStatus.CONNECTING)
            try:
                self._ws = await self._connector(self.url)
            except (OSError, WebSocketException, asyncio.TimeoutError) as exc:
                logger.warning("CONNECT_FAIL url=%s attempt=%s error=%s", self.url, self.retries + 1, exc)
            else:
                try:
                    await self._on_open()
                    await self._pump()
                finally:
                    self._ws = None
                    self._set_status(ConnectionStatus.DISCONNECTED)
            self._set_status(ConnectionStatus.DISCONNECTED)
            if self._closing:
                break
            self.retries += 1
            if self.retries > self.policy.max_retries:
                logger.warning("RECONNECT_EXHAUSTED url=%s retries=%s", self.url, self.policy.max_retries)
                self.exhausted = True
                break
            await self._sleep(self.policy.delay(self.retries))

    async def _on_open(self) -> None:
        self.retries = 0
        self.state.reset_presence()
        self._set_status(ConnectionStatus.OPEN)
        logger.info("CONNECTED url=%s", self.url)
        await self.set_name(self._name_factory())

    async def _pump(self) -> None:
        ws = self._ws
        try:
            async for raw in ws:
                self.handle_frame(raw)
        except ConnectionClosed as exc:
            logger.info("DISCONNECTED url=%s reason=%s", self.url, exc)
        finally:
            self._ws = None

    def handle_frame(self, raw: str | bytes) -> None:
        event = decode_frame(raw)
        if event is None:
            logger.warning("INVALID_FRAME raw=%.200r", raw)
            return
        try:
            handled = self.state.apply(event)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("INVALID_EVENT type=%r error=%s", event.get("type"), exc)
            return
        if handled and self.on_event is not None:
            self.on_event(event)

    async def send_message(self, text: str) -> bool:
        return await self._send(message_frame(text))

    async def set_typing(self, typing: bool) -> bool:
        return await self._send(typing_frame(typing))

    async def set_name(self, name: str) -> bool:
        return await self._send(set_name_frame(name))

    async def _send(self, frame: Dict[str, Any]) -> bool:
        if not self.connected or self._ws is None:
            return False
        try:
            await self._ws.send(encode_frame(frame))
        except ConnectionClosed:
            return False
        return True

    def _set_status(self, status: ConnectionStatus) -> None:
        if status is self.status:
            return
        self.status = status
        self.state.connected = status is ConnectionStatus.OPEN
        if self.on_status is not None:
            self.on_status(status)
