"""Connection registry: the single source of truth for who is online."""
import asyncio
import uuid
from typing import Any, Dict, List, Optional

from fastapi.websockets import WebSocketState

from ..shared.protocol import encode_frame
from .logging_config import configure_logging
from .models import User

logger = configure_logging()


def default_name(user_id: str) -> str:
    return f"User-{user_id[:4]}"


class ConnectionRegistry:
    """Tracks connected users and their outbound WebSocket.

    Mutations are plain method calls and never await, so each one completes
    without yielding to another connection. Callers that need a mutation and
    the broadcast that follows it to stay together hold ``lock`` around both.
    """

    def __init__(self) -> None:
        self._users: Dict[str, User] = {}
        self.lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._users)

    def __contains__(self, user: User) -> bool:
        return self._users.get(user.id) is user

    def register(self, connection: Any) -> User:
        user_id = str(uuid.uuid4())
        while user_id in self._users:
            user_id = str(uuid.uuid4())
        user = User(id=user_id, name=default_name(user_id), connection=connection)
        self._users[user.id] = user
        return user

    def unregister(self, user: User) -> bool:
        if self._users.get(user.id) is not user:
            return False
        del self._users[user.id]
        return True

    def get(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    def snapshot(self) -> List[Dict[str, str]]:
        """Return the roster in connection order."""
        return [user.public() for user in self._users.values()]

    def rename(self, user: User, new_name: str) -> str:
        old_name = user.name
        user.name = new_name
        return old_name

    def set_typing(self, user: User, typing: bool) -> None:
        user.typing = typing

    @staticmethod
    def is_open(connection: Any) -> bool:
        return (
            connection.client_state == WebSocketState.CONNECTED
            and connection.application_state == WebSocketState.CONNECTED
        )

    async def send(self, user: User, payload: Dict[str, Any]) -> bool:
        """Send one frame to ``user`` if its connection is still open."""
        return await self._deliver(user, encode_frame(payload))

    async def broadcast(self, payload: Dict[str, Any], exclude: Optional[str] = None) -> int:
        """Send ``payload`` to every open connection except the user id ``exclude``."""
        data = encode_frame(payload)
        sent = 0
        for user in list(self._users.values()):
            if user.id == exclude:
                continue
            if await self._deliver(user, data):
                sent += 1
        return sent

    async def _deliver(self, user: User, data: str) -> bool:
        if not self.is_open(user.connection):
            return False
        try:
            await user.connection.send_text(data)
        except Exception as exc:  # noqa: BLE001
            # The connection's own close handler removes it from the roster.
            logger.warning("SEND_FAILED user_id=%s error=%s", user.id, exc)
            return False
        return True
