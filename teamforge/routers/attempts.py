"""Attempts router — status updates and solution submission."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from teamforge.database import get_db
from teamforge.exceptions import InvalidTransitionError
from teamforge.schemas.challenge import AttemptOut, AttemptUpdate, SubmissionCreate, SubmissionOut
from teamforge.services import engine
from teamforge.services.realtime import (
    ATTEMPT_UPDATED,
    CHALLENGE_COMPLETED,
    LEADERBOARD_UPDATE,
    manager,
)
from teamforge.services.storage import Storage

router = APIRouter(prefix="/api/attempts", tags=["attempts"])


async def _announce(update: engine.AttemptUpdate, attempt_out: AttemptOut) -> None:
    """Broadcast after commit; delivery failures never affect the stored result."""
    if not update.changed:
        return
    data = attempt_out.model_dump(mode="json")
    await manager.publish(ATTEMPT_UPDATED, data, user_id=attempt_out.user_id)
    if update.completed:
        await manager.publish(CHALLENGE_COMPLETED, data, user_id=attempt_out.user_id)
        await manager.publish(
            LEADERBOARD_UPDATE, {"team_id": attempt_out.team_id, **(update.stats or {})}
        )


@router.patch("/{attempt_id}", response_model=AttemptOut)
async def update_attempt(attempt_id: int, payload: AttemptUpdate, db: AsyncSession = Depends(get_db)):
    """Update status / score / solution. Terminal attempts are read-only."""
    changes = {
        name: value
        for name, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or name == "solution"
    }

    try:
        update = await engine.update_attempt(Storage(db), attempt_id, changes)
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))

    if not update:
        raise HTTPException(status_code=404, detail="Attempt not found")

    out = AttemptOut.model_validate(update.attempt)
    await db.commit()
    await _announce(update, out)
    return out


@router.post("/{attempt_id}/submit", response_model=SubmissionOut)
async def submit_attempt(attempt_id: int, payload: SubmissionCreate, db: AsyncSession = Depends(get_db)):
    """Score a solution and complete the attempt with the result."""
    try:
        submission = await engine.submit_attempt(
            Storage(db), attempt_id, payload.solution, time_spent=payload.time_spent
        )
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))

    if not submission:
        raise HTTPException(status_code=404, detail="Attempt not found")

    out = AttemptOut.model_validate(submission.update.attempt)
    await db.commit()
    await _announce(submission.update, out)
    return SubmissionOut(
        attempt=out,
        score=submission.score,
        feedback=submission.feedback,
        time_bonus=submission.time_bonus,
    )
