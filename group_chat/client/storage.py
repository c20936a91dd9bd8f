"""Local client storage for the last used server host."""
import json
from pathlib import Path
from typing import Any, Dict, Optional


STORAGE_FILE = Path.home() / ".group_chat_client.json"


def load_state() -> Dict[str, Any]:
    if STORAGE_FILE.exists():
        with STORAGE_FILE.open("r", encoding="utf-8") as f:
            return json.load(f)
    return {}


def save_state(data: Dict[str, Any]) -> None:
    STORAGE_FILE.parent.mkdir(parents=True, exist_ok=True)
    with STORAGE_FILE.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def store_host(host_descriptor: str) -> None:
    state = load_state()
    state["host"] = host_descriptor
    save_state(state)


def get_host() -> Optional[str]:
    return load_state().get("host")
