"""
Orchestration of the scoring engine over the storage collaborator.

The pure pieces (scorers, compatibility, stats, lifecycle rules) know nothing
about persistence; this module loads what they need, applies their results
through ``Storage`` and reports what changed so the HTTP layer can commit and
broadcast.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from teamforge.config import settings
from teamforge.exceptions import NotFoundError
from teamforge.models.challenge_attempt import AttemptStatus, ChallengeAttempt
from teamforge.models.team import Team
from teamforge.models.team_membership import Role, TeamMembership
from teamforge.services import scoring
from teamforge.services.compatibility import FORMULAS
from teamforge.services.lifecycle import plan_attempt_update, stamp_completion
from teamforge.services.progression import calculate_time_bonus
from teamforge.services.storage import Storage
from teamforge.services.team_stats import recompute_team_stats

logger = logging.getLogger(__name__)


@dataclass
class AttemptUpdate:
    attempt: ChallengeAttempt
    changed: bool = False
    completed: bool = False
    stats: Optional[Dict[str, int]] = None


@dataclass
class Submission:
    update: AttemptUpdate
    score: int
    feedback: List[str] = field(default_factory=list)
    time_bonus: int = 0


# ━━━ Scoring ━━━

def score_solution(challenge_type: Any, solution: Any, challenge_content: Any) -> Dict[str, Any]:
    """Score a submission with the configured fallback for unknown types."""
    return scoring.score_solution(
        challenge_type,
        solution,
        challenge_content,
        fallback_score=settings.FALLBACK_SCORE,
    )


# ━━━ Team-level derived data ━━━

async def compute_compatibility(storage: Storage, team_id: int) -> Optional[int]:
    """Recompute and persist a team's compatibility score. ``None`` if the team is unknown."""
    team = await storage.get_team(team_id)
    if not team:
        return None

    members = await storage.get_team_members(team_id)
    attempts = await storage.get_team_attempts(team_id)
    formula = FORMULAS[settings.COMPATIBILITY_FORMULA]
    score = formula(members, attempts)

    await storage.update_team(team_id, compatibility_score=score)
    logger.info(f"Team {team_id} compatibility is now {score} ({len(members)} members)")
    return score


async def recompute_stats(
    storage: Storage, team_id: int, today: Optional[date] = None
) -> Optional[Dict[str, int]]:
    """Recompute total score, wins and streak for a team and persist them."""
    team = await storage.get_team(team_id)
    if not team:
        return None

    attempts = await storage.get_team_attempts(team_id)
    stats = recompute_team_stats(
        attempts, today=today, win_threshold=settings.WIN_SCORE_THRESHOLD
    )
    await storage.update_team(team_id, **stats)
    logger.info(f"Team {team_id} stats recomputed: {stats}")
    return stats


async def recompute_user_points(storage: Storage, user_id: int) -> Optional[int]:
    """A player's lifetime points: the sum of their completed attempt scores."""
    user = await storage.get_user(user_id)
    if not user:
        return None
    attempts = await storage.get_user_attempts(user_id)
    user.total_points = sum(a.score or 0 for a in attempts if a.status == AttemptStatus.completed)
    await storage.db.flush()
    return user.total_points


# ━━━ Teams & members ━━━

async def create_team(
    storage: Storage, name: str, leader_id: int, description: Optional[str] = None
) -> Team:
    if not await storage.get_user(leader_id):
        raise NotFoundError(f"User {leader_id} not found")

    team = await storage.create_team(name=name, leader_id=leader_id, description=description)
    await compute_compatibility(storage, team.id)
    logger.info(f"Team {team.id} '{name}' created with leader {leader_id}")
    return team


async def add_member(
    storage: Storage,
    team_id: int,
    user_id: int,
    role: Role = Role.member,
    specialty: Optional[str] = "general",
) -> TeamMembership:
    if not await storage.get_team(team_id):
        raise NotFoundError(f"Team {team_id} not found")
    if not await storage.get_user(user_id):
        raise NotFoundError(f"User {user_id} not found")

    membership = await storage.add_team_member(team_id, user_id, role=role, specialty=specialty)
    await compute_compatibility(storage, team_id)
    return membership


async def remove_member(storage: Storage, team_id: int, user_id: int) -> bool:
    removed = await storage.remove_team_member(team_id, user_id)
    if removed:
        await compute_compatibility(storage, team_id)
    return removed


# ━━━ Attempts ━━━

async def start_attempt(
    storage: Storage,
    challenge_id: int,
    team_id: int,
    user_id: int,
    solution: Any = None,
) -> ChallengeAttempt:
    """Open an attempt; one active attempt per (user, challenge)."""
    challenge = await storage.get_challenge(challenge_id)
    if not challenge or not challenge.is_active:
        raise NotFoundError(f"Challenge {challenge_id} not found")
    if not await storage.get_team(team_id):
        raise NotFoundError(f"Team {team_id} not found")
    if not await storage.get_user(user_id):
        raise NotFoundError(f"User {user_id} not found")

    attempt = await storage.create_challenge_attempt(
        challenge_id=challenge_id, team_id=team_id, user_id=user_id, solution=solution
    )
    logger.info(f"User {user_id} started challenge {challenge_id} for team {team_id} (attempt {attempt.id})")
    return attempt


async def update_attempt(
    storage: Storage,
    attempt_id: int,
    changes: Dict[str, Any],
    now: Optional[datetime] = None,
) -> Optional[AttemptUpdate]:
    """
    Apply an attempt update under the lifecycle rules.

    Returns ``None`` for an unknown attempt. Raises ``InvalidTransitionError``
    when the attempt is already terminal. Entering ``completed`` stamps
    ``completed_at`` once and recomputes the team's stats, its compatibility
    and the player's points.
    """
    attempt = await storage.get_attempt(attempt_id)
    if not attempt:
        return None

    effective, completing = plan_attempt_update(attempt, changes)
    if not effective:
        return AttemptUpdate(attempt=attempt)

    await storage.update_challenge_attempt(attempt_id, **effective)
    update = AttemptUpdate(attempt=attempt, changed=True)

    if completing:
        if stamp_completion(attempt, now):
            await storage.update_challenge_attempt(attempt_id, completed_at=attempt.completed_at)
        update.completed = True
        update.stats = await recompute_stats(storage, attempt.team_id)
        await compute_compatibility(storage, attempt.team_id)
        await recompute_user_points(storage, attempt.user_id)

    logger.info(f"Attempt {attempt_id} updated: {sorted(effective)} -> status {attempt.status.value}")
    return update


async def submit_attempt(
    storage: Storage,
    attempt_id: int,
    solution: Any,
    time_spent: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Optional[Submission]:
    """Score a solution for an in-progress attempt and complete it with that score."""
    attempt = await storage.get_attempt(attempt_id)
    if not attempt:
        return None

    challenge = await storage.get_challenge(attempt.challenge_id)
    if not challenge:
        return None

    result = score_solution(challenge.type, solution, challenge.content)

    changes: Dict[str, Any] = {
        "solution": solution,
        "score": result["score"],
        "status": AttemptStatus.completed,
    }
    if time_spent is not None:
        changes["time_spent"] = time_spent

    update = await update_attempt(storage, attempt_id, changes, now=now)
    return Submission(
        update=update,
        score=result["score"],
        feedback=result["feedback"],
        time_bonus=calculate_time_bonus(time_spent, challenge.time_limit),
    )
