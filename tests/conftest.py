import asyncio
import os
import tempfile
from pathlib import Path

os.environ.setdefault("GROUP_CHAT_LOG_FILE", str(Path(tempfile.gettempdir()) / "group_chat_test.log"))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from fastapi.websockets import WebSocketState  # noqa: E402

from group_chat.server.main import create_app  # noqa: E402
from group_chat.server.registry import ConnectionRegistry  # noqa: E402


class FakeConnection:
    """Stands in for a server-side WebSocket."""

    def __init__(self, fail: bool = False, stall: bool = False):
        self.sent = []
        self.fail = fail
        self.stall = stall
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED

    async def send_text(self, data: str) -> None:
        # Yield like a real socket write so concurrent handlers can interleave.
        await asyncio.sleep(0)
        if self.stall:
            await asyncio.Event().wait()
        if self.fail:
            raise RuntimeError("socket is gone")
        self.sent.append(data)

    def drop(self) -> None:
        self.client_state = WebSocketState.DISCONNECTED


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def make_connection():
    return FakeConnection


@pytest.fixture
def client():
    with TestClient(create_app()) as test_client:
        yield test_client
