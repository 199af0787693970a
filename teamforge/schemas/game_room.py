"""Game room Pydantic schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from teamforge.models.game_room import RoomStatus


class GameRoomCreate(BaseModel):
    challenge_id: int
    team_id: int
    status: RoomStatus = RoomStatus.waiting
    participants: List[int] = []
    game_state: Dict[str, Any] = {}


class GameRoomUpdate(BaseModel):
    status: Optional[RoomStatus] = None
    participants: Optional[List[int]] = None
    game_state: Optional[Dict[str, Any]] = None


class GameRoomOut(BaseModel):
    id: int
    challenge_id: int
    team_id: int
    status: RoomStatus
    participants: List[int] = []
    game_state: Dict[str, Any] = {}
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
