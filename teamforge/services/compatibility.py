"""Team compatibility: how well a roster complements itself, blended with how it performs."""

from typing import Any, Iterable, List, Optional

from teamforge.services.similarity import clamp, round_half_up

NEUTRAL_SCORE = 50  # fewer than two members: nothing to compare
NEUTRAL_SUCCESS_RATE = 50.0  # no completed attempts yet

# Weights of the richer formula: diversity / success rate / participation
WEIGHTED_FORMULA = (0.3, 0.4, 0.3)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def read_field(item: Any, name: str, default: Any = None) -> Any:
    """Read ``name`` from an ORM object, or from a mapping in snake_case or camelCase."""
    if isinstance(item, dict):
        if name in item:
            return item[name]
        return item.get(_camel(name), default)
    return getattr(item, name, default)


def status_of(attempt: Any) -> Optional[str]:
    status = read_field(attempt, "status")
    return getattr(status, "value", status)


def diversity_score(members: List[Any]) -> float:
    """Distinct specialties as a percentage of the roster size."""
    if not members:
        return 0.0
    specialties = {read_field(member, "specialty") for member in members}
    return len(specialties) / len(members) * 100


def success_rate(attempts: Iterable[Any]) -> float:
    """Mean score over completed attempts, 50 when nothing is completed."""
    scores = [read_field(a, "score") or 0 for a in attempts if status_of(a) == "completed"]
    if not scores:
        return NEUTRAL_SUCCESS_RATE
    return sum(scores) / len(scores)


def participation_rate(members: List[Any], attempts: Iterable[Any]) -> float:
    """Distinct attempting users as a percentage of the roster size."""
    if not members:
        return 0.0
    active_users = {read_field(a, "user_id") for a in attempts}
    return len(active_users) / len(members) * 100


def calculate_compatibility(members: List[Any], recent_attempts: List[Any]) -> int:
    """
    Canonical team compatibility (0-100): the average of specialty diversity
    and recent success rate. This is the value persisted on the team.
    """
    members = list(members)
    if len(members) < 2:
        return NEUTRAL_SCORE

    diversity = diversity_score(members)
    success = success_rate(recent_attempts)
    return round_half_up(clamp((diversity + success) / 2))


def calculate_weighted_compatibility(members: List[Any], recent_attempts: List[Any]) -> int:
    """
    Richer compatibility variant that also rewards participation:
    30% diversity, 40% success rate, 30% participation.
    """
    members = list(members)
    recent_attempts = list(recent_attempts)
    if len(members) < 2:
        return NEUTRAL_SCORE

    w_diversity, w_success, w_participation = WEIGHTED_FORMULA
    blended = (
        diversity_score(members) * w_diversity
        + success_rate(recent_attempts) * w_success
        + participation_rate(members, recent_attempts) * w_participation
    )
    return round_half_up(clamp(blended))


FORMULAS = {
    "average": calculate_compatibility,
    "weighted": calculate_weighted_compatibility,
}
