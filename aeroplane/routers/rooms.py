from __future__ import annotations

from fastapi import APIRouter, HTTPException

from ..schemas import RoomSummary
from ..state import manager

router = APIRouter(prefix="", tags=["rooms"])


@router.get("/rooms/{room_id}", response_model=RoomSummary)
async def get_room(room_id: str):
    summary = manager.snapshot(room_id)
    if summary is None:
        raise HTTPException(status_code=404, detail="Room not found")
    return summary
