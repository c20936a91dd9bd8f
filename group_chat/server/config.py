"""Server configuration values."""
import os
from pathlib import Path

from ..shared.protocol import DEFAULT_PORT

BASE_DIR = Path(__file__).resolve().parent
HOST = os.getenv("GROUP_CHAT_HOST", "0.0.0.0")
PORT = int(os.getenv("GROUP_CHAT_PORT", str(DEFAULT_PORT)))
LOG_FILE = Path(os.getenv("GROUP_CHAT_LOG_FILE", str(BASE_DIR / "server.log")))
LOG_LEVEL = os.getenv("GROUP_CHAT_LOG_LEVEL", "INFO").upper()
