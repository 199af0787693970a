"""Pick the scorer for a challenge type and enforce the 0-100 integer contract."""

import logging
from typing import Any, Callable, Dict, Optional

from teamforge.models.challenge import ChallengeType
from teamforge.services.scorers import (
    DEFAULT_FALLBACK_SCORE,
    score_algorithm,
    score_api,
    score_code,
    score_database,
    score_default,
    score_test,
    score_wireframe,
)
from teamforge.services.similarity import clamp, round_half_up

logger = logging.getLogger(__name__)

Scorer = Callable[[Any, Any], Dict[str, Any]]

SCORERS: Dict[ChallengeType, Scorer] = {
    ChallengeType.code: score_code,
    ChallengeType.wireframe: score_wireframe,
    ChallengeType.algorithm: score_algorithm,
    ChallengeType.api: score_api,
    ChallengeType.database: score_database,
    ChallengeType.test: score_test,
}


def resolve_challenge_type(challenge_type: Any) -> Optional[ChallengeType]:
    """Map a raw type tag onto ``ChallengeType``; unknown tags give ``None``."""
    if isinstance(challenge_type, ChallengeType):
        return challenge_type
    if not isinstance(challenge_type, str):
        return None
    try:
        return ChallengeType(challenge_type)
    except ValueError:
        return None


def score_solution(
    challenge_type: Any,
    solution: Any,
    challenge_content: Any,
    fallback_score: int = DEFAULT_FALLBACK_SCORE,
) -> Dict[str, Any]:
    """
    Grade ``solution`` with the scorer registered for ``challenge_type``.

    Unrecognised types get the fixed ``fallback_score``. A scorer blowing up
    on an unexpected payload is logged and reported as a zero score so that
    one bad submission never interrupts scoring for anyone else.
    """
    kind = resolve_challenge_type(challenge_type)

    try:
        if kind is None:
            result = score_default(solution, challenge_content, fallback_score=fallback_score)
        else:
            result = SCORERS[kind](solution, challenge_content)
    except Exception:
        logger.exception(f"Scorer for challenge type {challenge_type!r} failed")
        return {"score": 0, "feedback": ["Solution could not be evaluated."]}

    return {
        "score": round_half_up(clamp(result["score"])),
        "feedback": list(result["feedback"]),
    }
