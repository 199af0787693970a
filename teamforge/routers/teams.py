"""Teams router — creation, roster management, compatibility and insights."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from teamforge.database import get_db
from teamforge.exceptions import ConflictError, NotFoundError
from teamforge.models.team import Team
from teamforge.schemas.challenge import AttemptOut
from teamforge.schemas.team import (
    CompatibilityOut,
    InsightsOut,
    TeamCreate,
    TeamMemberCreate,
    TeamMemberOut,
    TeamMemberWithUser,
    TeamOut,
    TeamWithMembers,
)
from teamforge.schemas.user import UserOut
from teamforge.services import engine
from teamforge.services.progression import calculate_streak_bonus, performance_insights
from teamforge.services.realtime import TEAM_MEMBER_JOINED, manager
from teamforge.services.storage import Storage

router = APIRouter(prefix="/api/teams", tags=["teams"])


async def team_with_members(storage: Storage, team: Team) -> TeamWithMembers:
    rows = await storage.get_team_members_with_users(team.id)
    members = [
        TeamMemberWithUser(
            **TeamMemberOut.model_validate(membership).model_dump(),
            user=UserOut.model_validate(user),
        )
        for membership, user in rows
    ]
    leader = await storage.get_user(team.leader_id)
    return TeamWithMembers(
        **TeamOut.model_validate(team).model_dump(),
        members=members,
        leader=UserOut.model_validate(leader) if leader else None,
    )


@router.post("", response_model=TeamWithMembers, status_code=status.HTTP_201_CREATED)
async def create_team(payload: TeamCreate, db: AsyncSession = Depends(get_db)):
    """Create a team; the leader joins it in the same transaction."""
    storage = Storage(db)
    try:
        team = await engine.create_team(storage, payload.name, payload.leader_id, payload.description)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return await team_with_members(storage, team)


@router.get("/{team_id}", response_model=TeamWithMembers)
async def get_team(team_id: int, db: AsyncSession = Depends(get_db)):
    storage = Storage(db)
    team = await storage.get_team(team_id)
    if not team:
        raise HTTPException(status_code=404, detail="Team not found")
    return await team_with_members(storage, team)


@router.post("/{team_id}/members", response_model=TeamMemberOut, status_code=status.HTTP_201_CREATED)
async def add_member(team_id: int, payload: TeamMemberCreate, db: AsyncSession = Depends(get_db)):
    """Add a user to the roster and refresh the team's compatibility."""
    storage = Storage(db)
    try:
        membership = await engine.add_member(
            storage, team_id, payload.user_id, specialty=payload.specialty
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))

    out = TeamMemberOut.model_validate(membership)
    await db.commit()

    await manager.publish(TEAM_MEMBER_JOINED, out.model_dump(mode="json"), user_id=payload.user_id)
    return out


@router.delete("/{team_id}/members/{user_id}")
async def remove_member(team_id: int, user_id: int, db: AsyncSession = Depends(get_db)):
    try:
        removed = await engine.remove_member(Storage(db), team_id, user_id)
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))

    if not removed:
        raise HTTPException(status_code=404, detail="Team member not found")
    return {"success": True}


@router.get("/{team_id}/attempts", response_model=List[AttemptOut])
async def get_team_attempts(team_id: int, db: AsyncSession = Depends(get_db)):
    return await Storage(db).get_team_attempts(team_id)


@router.get("/{team_id}/compatibility", response_model=CompatibilityOut)
async def get_compatibility(team_id: int, db: AsyncSession = Depends(get_db)):
    """Recompute (and persist) the team's compatibility score."""
    score = await engine.compute_compatibility(Storage(db), team_id)
    if score is None:
        raise HTTPException(status_code=404, detail="Team not found")
    return CompatibilityOut(team_id=team_id, compatibility_score=score)


@router.get("/{team_id}/insights", response_model=InsightsOut)
async def get_insights(team_id: int, db: AsyncSession = Depends(get_db)):
    storage = Storage(db)
    team = await storage.get_team(team_id)
    if not team:
        raise HTTPException(status_code=404, detail="Team not found")

    insights = performance_insights(await storage.get_team_attempts_with_types(team_id))
    return InsightsOut(**insights, streak_bonus=calculate_streak_bonus(team.streak or 0))
