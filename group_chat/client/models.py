"""Client-side models for roster and message display."""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class User:
    id: str
    name: str

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "User":
        return cls(id=str(payload["id"]), name=str(payload["name"]))


@dataclass
class ChatMessage:
    user: User
    message: str
    date: Optional[datetime]


def parse_date(value: Any) -> Optional[datetime]:
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
