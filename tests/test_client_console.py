import asyncio

from group_chat.client.main import ConsoleChat
from group_chat.client.state import ChatState


class RecordingSession:
    def __init__(self, connected=True):
        self.state = ChatState()
        self.calls = []
        self.connected = connected
        self.on_event = None
        self.on_status = None

    async def send_message(self, text):
        self.calls.append(("message", text))
        return self.connected

    async def set_typing(self, typing):
        self.calls.append(("typing", typing))
        return self.connected

    async def set_name(self, name):
        self.calls.append(("setName", name))
        return self.connected


def test_plain_line_sends_message_then_clears_typing():
    session = RecordingSession()
    console = ConsoleChat(session)
    assert asyncio.run(console.handle_line("hello there")) is True
    assert session.calls == [("message", "hello there"), ("typing", False)]


def test_name_command_renames():
    session = RecordingSession()
    console = ConsoleChat(session)
    asyncio.run(console.handle_line("/name  Yara "))
    assert session.calls == [("setName", "Yara")]


def test_quit_and_blank_lines():
    session = RecordingSession()
    console = ConsoleChat(session)
    assert asyncio.run(console.handle_line("/quit")) is False
    assert asyncio.run(console.handle_line("   ")) is True
    assert session.calls == []


def test_dropped_message_is_reported(capsys):
    session = RecordingSession(connected=False)
    console = ConsoleChat(session)
    asyncio.run(console.handle_line("anyone?"))
    assert "message dropped" in capsys.readouterr().out


def test_render_message_uses_server_time(capsys):
    session = RecordingSession()
    console = ConsoleChat(session)
    event = {"type": "message", "user": {"id": "a", "name": "Ann"}, "message": "hi", "date": "2024-05-01T12:30:00Z"}
    session.state.apply(event)
    console.render_event(event)
    assert capsys.readouterr().out.strip() == "[12:30] Ann: hi"
