"""Game math around scores: time bonuses, difficulty, streak bonuses, levels and insights."""

from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Tuple

from teamforge.services.compatibility import read_field, status_of
from teamforge.services.similarity import round_half_up
from teamforge.services.team_stats import calculate_streak, local_date

DIFFICULTY_MULTIPLIERS = {
    "easy": 1.0,
    "medium": 1.5,
    "hard": 2.0,
}

# (minimum streak days, bonus points), highest first
STREAK_BONUSES = [(30, 100), (14, 50), (7, 25), (3, 10)]

# (minimum points, level, next level threshold)
SKILL_LEVELS = [
    (0, "Beginner", 1000),
    (1000, "Developer", 3000),
    (3000, "Expert", 7000),
    (7000, "Master", 15000),
    (15000, "Legend", None),
]


def calculate_time_bonus(time_spent: Optional[int], time_limit: Optional[int]) -> int:
    """Bonus for finishing early: 20 in the first half, 10 by 3/4, 5 within the limit."""
    if not time_limit or time_spent is None:
        return 0

    ratio = time_spent / time_limit
    if ratio <= 0.5:
        return 20
    if ratio <= 0.75:
        return 10
    if ratio <= 1.0:
        return 5
    return 0


def difficulty_multiplier(difficulty: Any) -> float:
    value = getattr(difficulty, "value", difficulty)
    if not isinstance(value, str):
        return 1.0
    return DIFFICULTY_MULTIPLIERS.get(value.lower(), 1.0)


def calculate_streak_bonus(streak_days: int) -> int:
    for minimum, bonus in STREAK_BONUSES:
        if streak_days >= minimum:
            return bonus
    return 0


def skill_level(total_points: int) -> Dict[str, Any]:
    current = SKILL_LEVELS[0]
    for level in SKILL_LEVELS:
        if total_points >= level[0]:
            current = level
    _, name, next_points = current
    return {"level": name, "next_level_points": next_points}


def format_duration(seconds: int) -> str:
    hours, remainder = divmod(int(seconds), 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def _average(scores: List[int]) -> float:
    return sum(scores) / len(scores) if scores else 0.0


def performance_insights(attempts_with_types: Iterable[Tuple[Any, Any]]) -> Dict[str, float]:
    """
    Per-discipline averages for a team.

    ``attempts_with_types`` yields ``(attempt, challenge_type)`` pairs; only
    completed attempts count.
    """
    by_type: Dict[str, List[int]] = {}
    completed_count = 0
    for attempt, challenge_type in attempts_with_types:
        if status_of(attempt) != "completed":
            continue
        completed_count += 1
        kind = getattr(challenge_type, "value", challenge_type)
        by_type.setdefault(kind, []).append(read_field(attempt, "score") or 0)

    return {
        "code_accuracy": _average(by_type.get("code", [])),
        "design_quality": _average(by_type.get("wireframe", [])),
        "algorithm_efficiency": _average(by_type.get("algorithm", [])),
        "collaboration_score": min(100, completed_count * 5),
    }


def game_stats(attempts: Iterable[Any], rank: int = 0, today: Optional[date] = None) -> Dict[str, Any]:
    """Headline numbers for a player or team profile."""
    completed = [a for a in attempts if status_of(a) == "completed"]
    scores = [read_field(a, "score") or 0 for a in completed]
    total_time = sum(read_field(a, "time_spent") or 0 for a in completed)
    dates = [
        local_date(read_field(a, "completed_at"))
        for a in completed
        if read_field(a, "completed_at") is not None
    ]
    return {
        "total_score": sum(scores),
        "challenges_completed": len(completed),
        "average_score": round_half_up(_average(scores)),
        "streak_days": calculate_streak(dates, today),
        "rank": rank,
        "total_time": total_time,
        "total_time_display": format_duration(total_time),
    }
