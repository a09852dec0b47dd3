"""
Unit tests for the manager's inbox and consumer loop.

These run the real consumer task on an event loop and feed it through
``submit()`` so commands are processed the same way the websocket endpoint
delivers them.
"""

import asyncio

from aeroplane.connections import ConnectionRegistry
from aeroplane.matchmaking import RoomManager


class RecordingSocket:
    def __init__(self):
        self.sent = []

    async def send_json(self, payload):
        self.sent.append(payload)


class StalledSocket:
    """A client that never finishes reading."""

    def __init__(self):
        self.attempts = 0

    async def send_json(self, payload):
        self.attempts += 1
        await asyncio.sleep(3600)


async def wait_until(predicate, timeout=2.0):
    async def _poll():
        while not predicate():
            await asyncio.sleep(0.01)

    await asyncio.wait_for(_poll(), timeout=timeout)


def test_stalled_client_does_not_hold_up_other_rooms():
    async def scenario():
        registry = ConnectionRegistry()
        manager = RoomManager(registry)
        manager.start()

        stalled_socket, fast_socket = StalledSocket(), RecordingSocket()
        stalled = registry.register(stalled_socket)
        fast = registry.register(fast_socket)
        writers = [asyncio.create_task(stalled.pump()), asyncio.create_task(fast.pump())]

        manager.submit(stalled, {"type": "create_room", "roomId": "SLOW01", "playerId": "p1"})
        manager.submit(stalled, {"type": "start_game", "roomId": "SLOW01"})
        manager.submit(fast, {"type": "create_room", "roomId": "FAST01", "playerId": "p2"})
        manager.submit(fast, {"type": "start_game", "roomId": "FAST01"})

        try:
            await wait_until(lambda: len(fast_socket.sent) == 2)
        finally:
            for writer in writers:
                writer.cancel()
            await asyncio.gather(*writers, return_exceptions=True)
            await manager.stop()

        return stalled_socket, fast_socket, manager

    stalled_socket, fast_socket, manager = asyncio.run(scenario())

    assert [m["type"] for m in fast_socket.sent] == ["room_created", "game_started"]
    assert stalled_socket.attempts == 1
    assert manager.snapshot("SLOW01").status == "playing"


def test_handler_error_does_not_stop_consumer(monkeypatch):
    async def scenario():
        registry = ConnectionRegistry()
        manager = RoomManager(registry)
        original = manager.create_room
        failures = []

        def fail_first(connection, message):
            if not failures:
                failures.append(message.room_id)
                raise RuntimeError("handler blew up")
            return original(connection, message)

        monkeypatch.setattr(manager, "create_room", fail_first)
        manager.start()

        first = registry.register(RecordingSocket())
        second = registry.register(RecordingSocket())
        manager.submit(first, {"type": "create_room", "roomId": "AAAAAA", "playerId": "p1"})
        manager.submit(second, {"type": "create_room", "roomId": "BBBBBB", "playerId": "p2"})

        try:
            await wait_until(lambda: "BBBBBB" in manager)
        finally:
            await manager.stop()

        return manager, failures

    manager, failures = asyncio.run(scenario())

    assert failures == ["AAAAAA"]
    assert "AAAAAA" not in manager
    assert "BBBBBB" in manager


def test_garbage_in_inbox_is_skipped():
    async def scenario():
        registry = ConnectionRegistry()
        manager = RoomManager(registry)
        manager.start()

        conn = registry.register(RecordingSocket())
        manager.submit(conn, "boom")
        manager.submit(conn, {"type": "create_room", "roomId": "GOOD01", "playerId": "p1"})

        try:
            await wait_until(lambda: "GOOD01" in manager)
        finally:
            await manager.stop()

        return conn

    conn = asyncio.run(scenario())

    assert conn.outbox.get_nowait() == {"type": "room_created", "success": True, "roomId": "GOOD01"}
