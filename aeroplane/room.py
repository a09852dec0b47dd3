from __future__ import annotations

import time
from enum import Enum
from typing import List

from .connections import Connection
from .constants import MAX_PLAYERS, PALETTE
from .schemas import PlayerSummary, RoomSummary

# NOTE: rooms are only ever mutated by ``RoomManager`` from its consumer loop.


class RoomStatus(str, Enum):
    WAITING = "waiting"
    PLAYING = "playing"


class Player:
    """A seat in a room, bound to the connection that claimed it."""

    def __init__(self, player_id: str, connection: Connection, is_owner: bool, color: str):
        self.player_id = player_id
        self.connection = connection
        self.is_owner = is_owner
        self.color = color

    def summary(self) -> PlayerSummary:
        return PlayerSummary(id=self.player_id, is_owner=self.is_owner, color=self.color)


class Room:
    """Runtime state of one matchmaking session."""

    def __init__(self, room_id: str, owner: Player, max_players: int = MAX_PLAYERS):
        self.room_id = room_id
        self.owner_id = owner.player_id
        self.players: List[Player] = [owner]
        self.status = RoomStatus.WAITING
        self.max_players = max_players
        self.created_at = time.monotonic()
        self.last_activity = self.created_at

    # -------------------- Player management -------------------- #

    @property
    def is_full(self) -> bool:
        return len(self.players) >= self.max_players

    def has_player(self, player_id: str) -> bool:
        return any(p.player_id == player_id for p in self.players)

    def next_color(self) -> str:
        """Colours are handed out by seat index and never reused."""
        return PALETTE[len(self.players) % len(PALETTE)]

    def add_player(self, player_id: str, connection: Connection) -> Player:
        if self.is_full:
            raise ValueError(f"room {self.room_id} is full")
        player = Player(player_id, connection, is_owner=False, color=self.next_color())
        self.players.append(player)
        return player

    def seats_of(self, connection: Connection) -> List[Player]:
        return [p for p in self.players if p.connection is connection]

    def touch(self) -> None:
        self.last_activity = time.monotonic()

    # -------------------- Views -------------------- #

    def player_summaries(self) -> List[PlayerSummary]:
        return [p.summary() for p in self.players]

    def summary(self) -> RoomSummary:
        return RoomSummary(
            room_id=self.room_id,
            status=self.status.value,
            max_players=self.max_players,
            players=self.player_summaries(),
        )

    def __repr__(self) -> str:
        return f"<Room {self.room_id} {self.status.value} {len(self.players)}/{self.max_players}>"


__all__ = ["RoomStatus", "Player", "Room"]
