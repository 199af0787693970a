"""
Attempt lifecycle.

    in_progress ──► completed
        │ ├──────► failed
        │ └──────► abandoned

``in_progress`` is the only non-terminal status. Once an attempt leaves it,
nothing about the attempt may change any more.
"""

from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from teamforge.database import utc_now
from teamforge.exceptions import InvalidTransitionError
from teamforge.models.challenge_attempt import AttemptStatus

TERMINAL_STATUSES = frozenset(
    {AttemptStatus.completed, AttemptStatus.failed, AttemptStatus.abandoned}
)

ALLOWED_TRANSITIONS = {
    AttemptStatus.in_progress: frozenset(AttemptStatus),
    AttemptStatus.completed: frozenset(),
    AttemptStatus.failed: frozenset(),
    AttemptStatus.abandoned: frozenset(),
}

MUTABLE_FIELDS = ("status", "score", "time_spent", "solution")


def is_terminal(status: AttemptStatus) -> bool:
    return AttemptStatus(status) in TERMINAL_STATUSES


def validate_transition(current: AttemptStatus, target: AttemptStatus) -> None:
    """Raise ``InvalidTransitionError`` unless ``current -> target`` is allowed."""
    current, target = AttemptStatus(current), AttemptStatus(target)
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransitionError(current.value, target.value)


def stamp_completion(attempt: Any, now: Optional[datetime] = None) -> bool:
    """Set ``completed_at`` the first time only. Returns True when it was set."""
    if attempt.completed_at is not None:
        return False
    attempt.completed_at = now or utc_now()
    return True


def plan_attempt_update(attempt: Any, changes: Dict[str, Any]) -> Tuple[Dict[str, Any], bool]:
    """
    Work out which fields an update really changes and whether it completes the attempt.

    Returns ``(effective_changes, entering_completed)``. Updates on a terminal
    attempt are rejected, except a repeat of its own status with nothing
    else changing, which is treated as a harmless re-delivery.
    """
    current = AttemptStatus(attempt.status)
    effective = {
        name: value
        for name, value in changes.items()
        if name in MUTABLE_FIELDS and getattr(attempt, name) != value
    }

    target = AttemptStatus(changes.get("status", current))
    if "status" in effective:
        effective["status"] = target

    if current in TERMINAL_STATUSES:
        if effective:
            raise InvalidTransitionError(current.value, target.value)
        return {}, False

    validate_transition(current, target)
    return effective, target == AttemptStatus.completed
