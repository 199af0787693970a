"""Users router — registration, profile, team, attempts and stats."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from teamforge.database import get_db
from teamforge.routers.teams import team_with_members
from teamforge.schemas.challenge import AttemptOut
from teamforge.schemas.team import TeamWithMembers
from teamforge.schemas.user import UserCreate, UserOut, UserStatsOut
from teamforge.services.progression import game_stats, skill_level
from teamforge.services.storage import Storage

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def register_user(payload: UserCreate, db: AsyncSession = Depends(get_db)):
    """Register a new player."""
    storage = Storage(db)
    if await storage.get_user_by_email(payload.email):
        raise HTTPException(status_code=400, detail="User already exists")
    if await storage.get_user_by_username(payload.username):
        raise HTTPException(status_code=400, detail="Username already taken")

    return await storage.create_user(payload.username, payload.email, payload.avatar)


@router.get("/{user_id}", response_model=UserOut)
async def get_user(user_id: int, db: AsyncSession = Depends(get_db)):
    user = await Storage(db).get_user(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/{user_id}/team", response_model=Optional[TeamWithMembers])
async def get_user_team(user_id: int, db: AsyncSession = Depends(get_db)):
    """The first team the user belongs to, or null."""
    storage = Storage(db)
    team = await storage.get_user_team(user_id)
    if not team:
        return None
    return await team_with_members(storage, team)


@router.get("/{user_id}/attempts", response_model=List[AttemptOut])
async def get_user_attempts(user_id: int, db: AsyncSession = Depends(get_db)):
    return await Storage(db).get_user_attempts(user_id)


@router.get("/{user_id}/stats", response_model=UserStatsOut)
async def get_user_stats(user_id: int, db: AsyncSession = Depends(get_db)):
    """Headline stats and skill level; rank is the rank of the user's team."""
    storage = Storage(db)
    user = await storage.get_user(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    team = await storage.get_user_team(user_id)
    attempts = await storage.get_user_attempts(user_id)
    stats = game_stats(attempts, rank=team.rank if team else 0)
    return UserStatsOut(**stats, **skill_level(user.total_points or 0))
