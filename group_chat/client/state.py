"""Client-side projection of the server's roster, typing set and message log."""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ..shared.protocol import ServerEventType
from .models import ChatMessage, User, parse_date


@dataclass
class ChatState:
    users: List[User] = field(default_factory=list)
    typing_users: List[User] = field(default_factory=list)
    messages: List[ChatMessage] = field(default_factory=list)
    me: Optional[User] = None
    connected: bool = False

    @property
    def username(self) -> Optional[str]:
        return self.me.name if self.me else None

    def reset_presence(self) -> None:
        """Forget the roster; the server sends a full snapshot on every new connection."""
        self.users = []
        self.typing_users = []

    def apply(self, event: Dict[str, Any]) -> bool:
        """Apply one server event. Returns False for event types this client does not know."""
        handler = self._dispatch().get(event.get("type"))
        if handler is None:
            return False
        handler(event)
        return True

    def _dispatch(self) -> Dict[str, Callable[[Dict[str, Any]], None]]:
        return {
            ServerEventType.MESSAGE.value: self._on_message,
            ServerEventType.USERS.value: self._on_users,
            ServerEventType.INFO.value: self._on_info,
            ServerEventType.JOINED.value: self._on_joined,
            ServerEventType.LEFT.value: self._on_left,
            ServerEventType.TYPING.value: self._on_typing,
            ServerEventType.RENAME.value: self._on_rename,
        }

    def _on_message(self, event: Dict[str, Any]) -> None:
        self.messages.append(
            ChatMessage(
                user=User.from_payload(event["user"]),
                message=str(event["message"]),
                date=parse_date(event.get("date")),
            )
        )

    def _on_users(self, event: Dict[str, Any]) -> None:
        self.users = [User.from_payload(u) for u in event["users"]]

    def _on_info(self, event: Dict[str, Any]) -> None:
        self.me = User.from_payload(event["user"])

    def _on_joined(self, event: Dict[str, Any]) -> None:
        user = User.from_payload(event["user"])
        self.users = [u for u in self.users if u.id != user.id] + [user]

    def _on_left(self, event: Dict[str, Any]) -> None:
        user_id = str(event["user"]["id"])
        self.users = [u for u in self.users if u.id != user_id]
        self.typing_users = [u for u in self.typing_users if u.id != user_id]

    def _on_typing(self, event: Dict[str, Any]) -> None:
        user = User.from_payload(event["user"])
        others = [u for u in self.typing_users if u.id != user.id]
        self.typing_users = others + [user] if event["typing"] else others

    def _on_rename(self, event: Dict[str, Any]) -> None:
        payload = event["user"]
        user_id = str(payload["id"])
        if "oldName" not in payload:
            raise KeyError("oldName")
        new_name = str(payload["newName"])
        for user in self.users + self.typing_users:
            if user.id == user_id:
                user.name = new_name
        if self.me and self.me.id == user_id:
            self.me.name = new_name
