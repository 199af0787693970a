"""Team aggregates derived from completed attempts: total score, wins, day streak, rank."""

from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from teamforge.services.compatibility import read_field, status_of

WIN_THRESHOLD = 80


def local_date(moment: datetime) -> date:
    """Calendar date in server local time; naive timestamps are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone().date()


def calculate_streak(completed_dates: Iterable[date], today: Optional[date] = None) -> int:
    """
    Consecutive calendar days, ending today, that hold at least one completion.

    Walks back one day at a time from ``today`` and stops at the first day
    without a completion, so a team that has not finished anything today has
    a streak of 0.
    """
    days = set(completed_dates)
    cursor = today or date.today()
    streak = 0
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def recompute_team_stats(
    attempts: Iterable[Any],
    today: Optional[date] = None,
    win_threshold: int = WIN_THRESHOLD,
) -> Dict[str, int]:
    """Return ``total_score``, ``challenges_won`` and ``streak`` for a team's attempts."""
    completed = [a for a in attempts if status_of(a) == "completed"]
    scores = [read_field(a, "score") or 0 for a in completed]

    completed_dates = []
    for attempt in completed:
        completed_at = read_field(attempt, "completed_at")
        if completed_at is not None:
            completed_dates.append(local_date(completed_at))

    return {
        "total_score": sum(scores),
        "challenges_won": sum(1 for score in scores if score >= win_threshold),
        "streak": calculate_streak(completed_dates, today),
    }


def rank_teams(teams: Sequence[Any]) -> List[Tuple[Any, int]]:
    """
    Leaderboard order with ranks.

    Teams are listed by ``total_score`` descending (ties keep their incoming
    order); rank is 1 + the number of teams with a strictly higher score, so
    tied teams share a rank.
    """
    ordered = sorted(teams, key=lambda team: read_field(team, "total_score") or 0, reverse=True)

    ranked = []
    higher = 0
    previous = None
    for position, team in enumerate(ordered):
        score = read_field(team, "total_score") or 0
        if score != previous:
            higher = position
            previous = score
        ranked.append((team, higher + 1))
    return ranked
