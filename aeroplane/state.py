"""Centralised in-memory runtime state.

Process-wide singletons shared by the routers and the application lifespan.
Nothing here is persisted; a restart starts with no rooms.
"""
from __future__ import annotations

from .connections import ConnectionRegistry
from .matchmaking import RoomManager

registry = ConnectionRegistry()
manager = RoomManager(registry)

__all__ = ["registry", "manager"]
