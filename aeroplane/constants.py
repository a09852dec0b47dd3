ROOM_CODE_LENGTH = 6
MAX_PLAYERS = 2

# Seat colours in assignment order. The owner always takes the first entry.
PALETTE: list[str] = ["red", "blue", "yellow", "green"]

# Reason strings are shown to players verbatim by the client.
REASON_ROOM_NOT_FOUND = "room does not exist"
REASON_ROOM_FULL = "room is full"
REASON_ROOM_EXISTS = "room already exists"
REASON_GAME_STARTED = "game already started"
REASON_ALREADY_SEATED = "already in a room"
REASON_DUPLICATE_PLAYER = "player id already in room"
REASON_BAD_ROOM_CODE = "room code must be 6 characters"

__all__ = [
    "ROOM_CODE_LENGTH",
    "MAX_PLAYERS",
    "PALETTE",
    "REASON_ROOM_NOT_FOUND",
    "REASON_ROOM_FULL",
    "REASON_ROOM_EXISTS",
    "REASON_GAME_STARTED",
    "REASON_ALREADY_SEATED",
    "REASON_DUPLICATE_PLAYER",
    "REASON_BAD_ROOM_CODE",
]
