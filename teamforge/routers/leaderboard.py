"""Leaderboard router."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from teamforge.database import get_db
from teamforge.schemas.team import TeamOut
from teamforge.services.storage import Storage

router = APIRouter(prefix="/api/leaderboard", tags=["leaderboard"])


@router.get("", response_model=List[TeamOut])
async def get_leaderboard(db: AsyncSession = Depends(get_db)):
    """All teams by total score, with ranks recomputed on the way out."""
    return await Storage(db).get_leaderboard()
