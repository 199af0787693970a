"""Challenges router — catalog browsing and starting attempts."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from teamforge.database import get_db
from teamforge.exceptions import ConflictError, NotFoundError
from teamforge.models.challenge import Challenge, ChallengeType
from teamforge.models.challenge_attempt import AttemptStatus
from teamforge.schemas.challenge import (
    AttemptCreate,
    AttemptOut,
    ChallengeCreate,
    ChallengeOut,
    ChallengeUpdate,
    ChallengeWithAttempts,
)
from teamforge.services import engine
from teamforge.services.storage import Storage

router = APIRouter(prefix="/api/challenges", tags=["challenges"])


async def challenge_with_attempts(storage: Storage, challenge: Challenge) -> ChallengeWithAttempts:
    attempts = await storage.get_challenge_attempts(challenge.id)
    return ChallengeWithAttempts(
        **ChallengeOut.model_validate(challenge).model_dump(),
        attempts=[AttemptOut.model_validate(a) for a in attempts],
        active_participants=sum(1 for a in attempts if a.status == AttemptStatus.in_progress),
    )


@router.get("", response_model=List[ChallengeWithAttempts])
async def list_challenges(type: Optional[ChallengeType] = None, db: AsyncSession = Depends(get_db)):
    """Active challenges, optionally filtered by type."""
    storage = Storage(db)
    if type:
        challenges = await storage.get_challenges_by_type(type)
    else:
        challenges = await storage.get_active_challenges()
    return [await challenge_with_attempts(storage, c) for c in challenges]


@router.post("", response_model=ChallengeOut, status_code=status.HTTP_201_CREATED)
async def create_challenge(payload: ChallengeCreate, db: AsyncSession = Depends(get_db)):
    return await Storage(db).create_challenge(**payload.model_dump())


@router.get("/{challenge_id}", response_model=ChallengeWithAttempts)
async def get_challenge(challenge_id: int, db: AsyncSession = Depends(get_db)):
    storage = Storage(db)
    challenge = await storage.get_challenge(challenge_id)
    if not challenge:
        raise HTTPException(status_code=404, detail="Challenge not found")
    return await challenge_with_attempts(storage, challenge)


@router.patch("/{challenge_id}", response_model=ChallengeOut)
async def toggle_challenge(challenge_id: int, payload: ChallengeUpdate, db: AsyncSession = Depends(get_db)):
    """Challenges are immutable apart from being switched on or off."""
    challenge = await Storage(db).set_challenge_active(challenge_id, payload.is_active)
    if not challenge:
        raise HTTPException(status_code=404, detail="Challenge not found")
    return challenge


@router.post("/{challenge_id}/attempts", response_model=AttemptOut, status_code=status.HTTP_201_CREATED)
async def start_attempt(challenge_id: int, payload: AttemptCreate, db: AsyncSession = Depends(get_db)):
    """Start a challenge. A user may only have one attempt in progress per challenge."""
    try:
        attempt = await engine.start_attempt(
            Storage(db), challenge_id, payload.team_id, payload.user_id, solution=payload.solution
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return attempt
