"""Team Pydantic schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from teamforge.models.team_membership import Role
from teamforge.schemas.user import UserOut


class TeamCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    leader_id: int


class TeamOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    leader_id: int
    compatibility_score: int = 0
    total_score: int = 0
    challenges_won: int = 0
    streak: int = 0
    rank: int = 0
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TeamMemberCreate(BaseModel):
    user_id: int
    specialty: Optional[str] = "general"


class TeamMemberOut(BaseModel):
    id: int
    team_id: int
    user_id: int
    role: Role
    specialty: Optional[str] = None
    joined_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TeamMemberWithUser(TeamMemberOut):
    user: UserOut


class TeamWithMembers(TeamOut):
    members: List[TeamMemberWithUser] = []
    leader: Optional[UserOut] = None


class CompatibilityOut(BaseModel):
    team_id: int
    compatibility_score: int


class InsightsOut(BaseModel):
    code_accuracy: float
    design_quality: float
    algorithm_efficiency: float
    collaboration_score: int
    streak_bonus: int
