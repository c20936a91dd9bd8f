"""FastAPI application entrypoint for the group chat server."""
from typing import Optional

import uvicorn
from fastapi import FastAPI, WebSocket

from . import users
from .config import HOST, PORT
from .logging_config import configure_logging
from .registry import ConnectionRegistry
from .router import EventRouter, serve_connection

logger = configure_logging()


async def _receive_text(websocket: WebSocket) -> Optional[str]:
    message = await websocket.receive()
    if message["type"] == "websocket.disconnect":
        return None
    if message.get("text") is not None:
        return message["text"]
    return (message.get("bytes") or b"").decode("utf-8", errors="replace")


def create_app(registry: Optional[ConnectionRegistry] = None) -> FastAPI:
    app = FastAPI(title="Group Chat Server", version="1.0.0")
    app.state.registry = registry if registry is not None else ConnectionRegistry()
    app.state.router = EventRouter(app.state.registry)
    app.include_router(users.router)

    @app.get("/")
    def root():
        return {"status": "ok", "online": len(app.state.registry)}

    @app.websocket("/")
    async def chat_socket(websocket: WebSocket):
        await websocket.accept()
        await serve_connection(app.state.router, websocket, lambda: _receive_text(websocket))

    return app


app = create_app()


def main() -> None:
    logger.info("Group chat server running on ws://%s:%s", HOST, PORT)
    uvicorn.run("group_chat.server.main:app", host=HOST, port=PORT, reload=False)


if __name__ == "__main__":
    main()
