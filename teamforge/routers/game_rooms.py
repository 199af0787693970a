"""Game rooms router — shared live sessions for a team on one challenge."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from teamforge.database import get_db
from teamforge.schemas.game_room import GameRoomCreate, GameRoomOut, GameRoomUpdate
from teamforge.services.storage import Storage

router = APIRouter(prefix="/api/game-rooms", tags=["game-rooms"])


@router.post("", response_model=GameRoomOut, status_code=status.HTTP_201_CREATED)
async def create_game_room(payload: GameRoomCreate, db: AsyncSession = Depends(get_db)):
    storage = Storage(db)
    if not await storage.get_challenge(payload.challenge_id):
        raise HTTPException(status_code=404, detail="Challenge not found")
    if not await storage.get_team(payload.team_id):
        raise HTTPException(status_code=404, detail="Team not found")
    return await storage.create_game_room(**payload.model_dump())


@router.get("", response_model=List[GameRoomOut])
async def list_active_game_rooms(db: AsyncSession = Depends(get_db)):
    """Rooms that are waiting for players or in play."""
    return await Storage(db).get_active_game_rooms()


@router.get("/{room_id}", response_model=GameRoomOut)
async def get_game_room(room_id: int, db: AsyncSession = Depends(get_db)):
    room = await Storage(db).get_game_room(room_id)
    if not room:
        raise HTTPException(status_code=404, detail="Game room not found")
    return room


@router.patch("/{room_id}", response_model=GameRoomOut)
async def update_game_room(room_id: int, payload: GameRoomUpdate, db: AsyncSession = Depends(get_db)):
    changes = {name: value for name, value in payload.model_dump(exclude_unset=True).items() if value is not None}
    room = await Storage(db).update_game_room(room_id, **changes)
    if not room:
        raise HTTPException(status_code=404, detail="Game room not found")
    return room
