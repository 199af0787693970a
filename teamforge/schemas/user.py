"""User Pydantic schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    """Fields submitted on registration."""
    username: str = Field(min_length=1, max_length=100)
    email: EmailStr
    avatar: Optional[str] = None


class UserOut(BaseModel):
    """Public user representation returned by the API."""
    id: int
    username: str
    email: str
    total_points: int = 0
    avatar: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UserStatsOut(BaseModel):
    total_score: int
    challenges_completed: int
    average_score: int
    streak_days: int
    rank: int
    total_time: int = 0
    total_time_display: str = "0s"
    level: str
    next_level_points: Optional[int] = None
