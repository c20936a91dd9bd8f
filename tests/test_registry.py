import asyncio
import json

from group_chat.server.registry import ConnectionRegistry


def _frames(connection):
    return [json.loads(data) for data in connection.sent]


def test_register_assigns_id_and_default_name(registry, make_connection):
    user = registry.register(make_connection())
    assert user.name == f"User-{user.id[:4]}"
    assert user.typing is False
    assert user in registry
    assert registry.get(user.id) is user


def test_ids_are_unique(registry, make_connection):
    ids = {registry.register(make_connection()).id for _ in range(50)}
    assert len(ids) == 50


def test_snapshot_keeps_connection_order(registry, make_connection):
    first = registry.register(make_connection())
    second = registry.register(make_connection())
    third = registry.register(make_connection())
    registry.unregister(second)
    assert registry.snapshot() == [first.public(), third.public()]


def test_snapshot_reflects_renames(registry, make_connection):
    user = registry.register(make_connection())
    old = registry.rename(user, "Yara")
    assert old.startswith("User-")
    assert registry.snapshot() == [{"id": user.id, "name": "Yara"}]


def test_rename_leaves_id_and_typing_alone(registry, make_connection):
    user = registry.register(make_connection())
    registry.set_typing(user, True)
    user_id = user.id
    registry.rename(user, "Bob")
    assert user.id == user_id
    assert user.typing is True


def test_register_does_not_touch_other_users(registry, make_connection):
    existing = registry.register(make_connection())
    registry.rename(existing, "Ann")
    registry.set_typing(existing, True)
    registry.register(make_connection())
    assert (existing.name, existing.typing) == ("Ann", True)


def test_unregister_twice_is_noop(registry, make_connection):
    user = registry.register(make_connection())
    assert registry.unregister(user) is True
    assert registry.unregister(user) is False
    assert len(registry) == 0


def test_names_need_not_be_unique(registry, make_connection):
    a = registry.register(make_connection())
    b = registry.register(make_connection())
    registry.rename(a, "Sam")
    registry.rename(b, "Sam")
    assert [u["name"] for u in registry.snapshot()] == ["Sam", "Sam"]


def test_broadcast_excludes_given_user(registry, make_connection):
    a = registry.register(make_connection())
    b = registry.register(make_connection())
    c = registry.register(make_connection())

    sent = asyncio.run(registry.broadcast({"type": "ping"}, exclude=a.id))

    assert sent == 2
    assert a.connection.sent == []
    assert _frames(b.connection) == [{"type": "ping"}]
    assert _frames(c.connection) == [{"type": "ping"}]


def test_broadcast_skips_closed_connections(registry, make_connection):
    alive = registry.register(make_connection())
    dead = registry.register(make_connection())
    dead.connection.drop()

    sent = asyncio.run(registry.broadcast({"type": "ping"}))

    assert sent == 1
    assert dead.connection.sent == []
    assert len(alive.connection.sent) == 1


def test_broadcast_survives_failing_send(registry, make_connection):
    broken = registry.register(make_connection(fail=True))
    healthy = registry.register(make_connection())

    sent = asyncio.run(registry.broadcast({"type": "ping"}))

    assert sent == 1
    assert broken in registry
    assert len(healthy.connection.sent) == 1


def test_send_to_closed_connection_returns_false(registry, make_connection):
    user = registry.register(make_connection())
    user.connection.drop()
    assert asyncio.run(registry.send(user, {"type": "ping"})) is False


def test_is_open_requires_both_sides(make_connection):
    connection = make_connection()
    assert ConnectionRegistry.is_open(connection)
    connection.drop()
    assert not ConnectionRegistry.is_open(connection)
