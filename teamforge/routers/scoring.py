"""Stateless scoring endpoint; grades a solution without touching any attempt."""

from fastapi import APIRouter

from teamforge.schemas.scoring import ScoreRequest, ScoreResult
from teamforge.services import engine

router = APIRouter(prefix="/api", tags=["scoring"])


@router.post("/score-solution", response_model=ScoreResult)
async def score_solution(payload: ScoreRequest):
    return engine.score_solution(payload.challenge_type, payload.solution, payload.challenge_content)
