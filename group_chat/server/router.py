"""Event router: decodes client frames, updates the registry and fans out events."""
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

from pydantic import BaseModel, ValidationError

from . import schemas
from ..shared.protocol import ClientFrameType, decode_frame
from .logging_config import configure_logging
from .models import User
from .registry import ConnectionRegistry

logger = configure_logging()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _dump(event: BaseModel) -> Dict[str, Any]:
    return event.model_dump(mode="json", by_alias=True)


class EventRouter:
    def __init__(self, registry: ConnectionRegistry, clock: Callable[[], datetime] = _utcnow):
        self.registry = registry
        self.clock = clock
        self._handlers: Dict[str, Callable[[User, Dict[str, Any]], Awaitable[None]]] = {
            ClientFrameType.MESSAGE.value: self._handle_message,
            ClientFrameType.TYPING.value: self._handle_typing,
            ClientFrameType.SET_NAME.value: self._handle_set_name,
        }
        self._frame_schemas = {
            ClientFrameType.MESSAGE.value: schemas.MessageFrame,
            ClientFrameType.TYPING.value: schemas.TypingFrame,
            ClientFrameType.SET_NAME.value: schemas.SetNameFrame,
        }

    async def on_open(self, connection: Any) -> User:
        """Register a freshly accepted connection and announce it."""
        async with self.registry.lock:
            user = self.registry.register(connection)
            logger.info("USER_CONNECTED user_id=%s name=%s online=%s", user.id, user.name, len(self.registry))
            try:
                await self.registry.send(user, _dump(schemas.UsersEvent(users=self.registry.snapshot())))
                await self.registry.send(user, _dump(schemas.InfoEvent(user=user.public())))
                await self.registry.broadcast(_dump(schemas.UserJoinedEvent(user=user.public())), exclude=user.id)
            except BaseException:
                # Interrupted before the caller could take ownership of the user.
                await self._drop(user)
                raise
        return user

    async def on_frame(self, user: User, raw: str | bytes) -> None:
        frame = decode_frame(raw)
        if frame is None:
            logger.warning("INVALID_FRAME user_id=%s reason=not_json_object raw=%.200r", user.id, raw)
            return

        frame_type = frame.get("type")
        handler = self._handlers.get(frame_type) if isinstance(frame_type, str) else None
        if handler is None:
            logger.debug("UNKNOWN_FRAME user_id=%s type=%r", user.id, frame_type)
            return

        try:
            payload = self._frame_schemas[frame_type].model_validate(frame)
        except ValidationError as exc:
            logger.warning(
                "INVALID_FRAME user_id=%s type=%s errors=%s", user.id, frame_type, exc.error_count()
            )
            return
        await handler(user, payload.model_dump())

    async def on_close(self, user: User) -> None:
        async with self.registry.lock:
            await self._drop(user)

    async def _drop(self, user: User) -> None:
        if not self.registry.unregister(user):
            return
        logger.info("USER_DISCONNECTED user_id=%s name=%s online=%s", user.id, user.name, len(self.registry))
        await self.registry.broadcast(_dump(schemas.UserLeftEvent(user=user.public())))

    async def _handle_message(self, user: User, data: Dict[str, Any]) -> None:
        async with self.registry.lock:
            event = schemas.MessageEvent(user=user.public(), message=data["message"], date=self.clock())
            delivered = await self.registry.broadcast(_dump(event), exclude=user.id)
        logger.info("MESSAGE_BROADCAST user_id=%s recipients=%s", user.id, delivered)

    async def _handle_typing(self, user: User, data: Dict[str, Any]) -> None:
        async with self.registry.lock:
            self.registry.set_typing(user, data["typing"])
            event = schemas.TypingEvent(user=user.public(), typing=user.typing)
            await self.registry.broadcast(_dump(event), exclude=user.id)

    async def _handle_set_name(self, user: User, data: Dict[str, Any]) -> None:
        async with self.registry.lock:
            old_name = self.registry.rename(user, data["name"])
            event = schemas.UserRenameEvent(
                user=schemas.RenamedUserOut(id=user.id, old_name=old_name, new_name=user.name)
            )
            await self.registry.broadcast(_dump(event))
        logger.info("USER_RENAMED user_id=%s old=%s new=%s", user.id, old_name, user.name)


async def serve_connection(
    router: EventRouter,
    connection: Any,
    receive: Callable[[], Awaitable[Optional[str]]],
) -> None:
    """Drive one connection from OPEN to CLOSED.

    ``receive`` returns the next frame text, or None once the peer has gone.
    Every way out of the loop ends in the same close handling.
    """
    user = await router.on_open(connection)
    try:
        while True:
            raw = await receive()
            if raw is None:
                break
            await router.on_frame(user, raw)
    finally:
        await router.on_close(user)
