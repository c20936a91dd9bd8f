"""Console client for the group chat."""
import asyncio
import logging
from typing import Any, Dict

from .session import ConnectionStatus, TransportSession
from .storage import get_host, store_host


class ConsoleChat:
    """Prints chat events and forwards typed lines to the session."""

    def __init__(self, session: TransportSession):
        self.session = session
        session.on_event = self.render_event
        session.on_status = self.render_status

    def render_status(self, status: ConnectionStatus) -> None:
        if status is ConnectionStatus.OPEN:
            print("* connected")
        elif status is ConnectionStatus.DISCONNECTED:
            print("* disconnected")

    def render_event(self, event: Dict[str, Any]) -> None:
        kind = event["type"]
        if kind == "message":
            stamp = self.session.state.messages[-1].date
            prefix = f"[{stamp:%H:%M}] " if stamp else ""
            print(f"{prefix}{event['user']['name']}: {event['message']}")
        elif kind == "info":
            print(f"* you are {event['user']['name']}")
        elif kind == "user:joined":
            print(f"* {event['user']['name']} joined")
        elif kind == "user:left":
            print(f"* {event['user']['name']} left")
        elif kind == "user:rename":
            print(f"* {event['user']['oldName']} is now {event['user']['newName']}")
        elif kind == "typing" and event["typing"]:
            print(f"* {event['user']['name']} is typing...")

    def print_users(self) -> None:
        state = self.session.state
        for user in state.users:
            marker = " (you)" if state.me and user.id == state.me.id else ""
            print(f"- {user.name}{marker}")

    async def handle_line(self, line: str) -> bool:
        """Process one input line. Returns False when the user wants to quit."""
        text = line.strip()
        if not text:
            return True
        if text == "/quit":
            return False
        if text == "/users":
            self.print_users()
            return True
        if text.startswith("/name "):
            await self.session.set_name(text[len("/name "):].strip())
            return True
        if not await self.session.send_message(text):
            print("* not connected, message dropped")
        await self.session.set_typing(False)
        return True


async def run_console(host_descriptor: str) -> None:
    session = TransportSession()
    console = ConsoleChat(session)
    await session.connect(host_descriptor)
    print("Commands: /name NEW, /users, /quit")
    try:
        while True:
            line = await asyncio.to_thread(input, "")
            if not await console.handle_line(line):
                break
    except (EOFError, KeyboardInterrupt):
        pass
    finally:
        await session.close()


def main():
    logging.basicConfig(level=logging.WARNING, format="%(asctime)s [%(levelname)s] %(name)s - %(message)s")
    print("Group Chat Client")
    saved = get_host() or "127 0 0 1"
    host = input(f"Server host, space separated [{saved}]: ").strip() or saved
    store_host(host)
    asyncio.run(run_console(host))


if __name__ == "__main__":
    main()
