"""Challenge and attempt Pydantic schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from teamforge.models.challenge import ChallengeType, Difficulty
from teamforge.models.challenge_attempt import AttemptStatus


class ChallengeCreate(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    description: str
    type: ChallengeType
    difficulty: Difficulty
    points: int = Field(ge=0)
    time_limit: Optional[int] = Field(default=None, gt=0)
    content: Dict[str, Any] = {}


class ChallengeUpdate(BaseModel):
    is_active: bool


class ChallengeOut(BaseModel):
    id: int
    title: str
    description: str
    type: ChallengeType
    difficulty: Difficulty
    points: int
    weighted_points: int = 0
    time_limit: Optional[int] = None
    content: Dict[str, Any] = {}
    is_active: bool = True
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AttemptCreate(BaseModel):
    team_id: int
    user_id: int
    solution: Optional[Any] = None


class AttemptUpdate(BaseModel):
    status: Optional[AttemptStatus] = None
    score: Optional[int] = Field(default=None, ge=0, le=100)
    time_spent: Optional[int] = Field(default=None, ge=0)
    solution: Optional[Any] = None


class AttemptOut(BaseModel):
    id: int
    challenge_id: int
    team_id: int
    user_id: int
    status: AttemptStatus
    score: int = 0
    time_spent: Optional[int] = None
    time_spent_display: Optional[str] = None
    solution: Optional[Any] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ChallengeWithAttempts(ChallengeOut):
    attempts: List[AttemptOut] = []
    active_participants: int = 0


class SubmissionCreate(BaseModel):
    solution: Any
    time_spent: Optional[int] = Field(default=None, ge=0)


class SubmissionOut(BaseModel):
    attempt: AttemptOut
    score: int
    feedback: List[str]
    time_bonus: int = 0
