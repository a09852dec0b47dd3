"""
Pytest configuration and fixtures for the matchmaking tests.

Unit tests drive ``RoomManager`` synchronously with real ``Connection``
objects and read what was queued for each client from its outbox.
Integration tests go through the FastAPI app with ``TestClient``.
"""

import asyncio
from typing import Callable, List

import pytest
from fastapi.testclient import TestClient

from aeroplane.app import app
from aeroplane.connections import Connection, ConnectionRegistry
from aeroplane.matchmaking import RoomManager


class StubSocket:
    """Placeholder transport; unit tests never start the writer."""


@pytest.fixture()
def registry() -> ConnectionRegistry:
    return ConnectionRegistry()


@pytest.fixture()
def manager(registry) -> RoomManager:
    return RoomManager(registry)


@pytest.fixture()
def connect(registry) -> Callable[[], Connection]:
    def _connect() -> Connection:
        return registry.register(StubSocket())

    return _connect


@pytest.fixture()
def drain() -> Callable[[Connection], List[dict]]:
    """Return a helper that pops every queued outbound payload."""

    def _drain(connection: Connection) -> List[dict]:
        sent = []
        while True:
            try:
                sent.append(connection.outbox.get_nowait())
            except asyncio.QueueEmpty:
                return sent

    return _drain


@pytest.fixture()
def client():
    with TestClient(app) as test_client:
        yield test_client
