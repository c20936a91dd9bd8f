"""Wire protocol shared by the chat server and client."""
import json
from enum import Enum
from typing import Any, Dict, Optional

DEFAULT_PORT = 8080


class ClientFrameType(str, Enum):
    MESSAGE = "message"
    TYPING = "typing"
    SET_NAME = "setName"


class ServerEventType(str, Enum):
    USERS = "users"
    INFO = "info"
    JOINED = "user:joined"
    LEFT = "user:left"
    TYPING = "typing"
    MESSAGE = "message"
    RENAME = "user:rename"


def encode_frame(payload: Dict[str, Any]) -> str:
    """Serialize one frame; each WebSocket message carries exactly one JSON object."""
    return json.dumps(payload)


def decode_frame(raw: str | bytes) -> Optional[Dict[str, Any]]:
    """Parse a received frame, returning None when it is not a JSON object."""
    try:
        frame = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    if not isinstance(frame, dict):
        return None
    return frame


def message_frame(text: str) -> Dict[str, Any]:
    return {"type": ClientFrameType.MESSAGE.value, "message": text}


def typing_frame(typing: bool) -> Dict[str, Any]:
    return {"type": ClientFrameType.TYPING.value, "typing": typing}


def set_name_frame(name: str) -> Dict[str, Any]:
    return {"type": ClientFrameType.SET_NAME.value, "name": name}
