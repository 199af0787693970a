"""Tests for bonuses, levels and profile statistics."""

from datetime import date, datetime
from types import SimpleNamespace

from teamforge.models.challenge import Challenge, ChallengeType, Difficulty
from teamforge.models.challenge_attempt import AttemptStatus, ChallengeAttempt
from teamforge.services.progression import (
    calculate_streak_bonus,
    calculate_time_bonus,
    difficulty_multiplier,
    format_duration,
    game_stats,
    performance_insights,
    skill_level,
)


def test_time_bonus():
    assert calculate_time_bonus(100, 300) == 20
    assert calculate_time_bonus(200, 300) == 10
    assert calculate_time_bonus(300, 300) == 5
    assert calculate_time_bonus(400, 300) == 0
    assert calculate_time_bonus(None, 300) == 0
    assert calculate_time_bonus(100, None) == 0


def test_difficulty_multiplier():
    assert difficulty_multiplier(Difficulty.hard) == 2.0
    assert difficulty_multiplier("Medium") == 1.5
    assert difficulty_multiplier("legendary") == 1.0
    assert difficulty_multiplier(None) == 1.0


def test_streak_bonus():
    assert calculate_streak_bonus(0) == 0
    assert calculate_streak_bonus(3) == 10
    assert calculate_streak_bonus(7) == 25
    assert calculate_streak_bonus(20) == 50
    assert calculate_streak_bonus(45) == 100


def test_skill_level():
    assert skill_level(0) == {"level": "Beginner", "next_level_points": 1000}
    assert skill_level(3500) == {"level": "Expert", "next_level_points": 7000}
    assert skill_level(20000) == {"level": "Legend", "next_level_points": None}


def test_format_duration():
    assert format_duration(3723) == "1h 2m 3s"
    assert format_duration(125) == "2m 5s"
    assert format_duration(7) == "7s"


def test_performance_insights():
    def done(score):
        return SimpleNamespace(status=AttemptStatus.completed, score=score)

    pairs = [
        (done(80), ChallengeType.code),
        (done(100), ChallengeType.code),
        (done(70), ChallengeType.wireframe),
        (SimpleNamespace(status=AttemptStatus.failed, score=30), ChallengeType.algorithm),
    ]
    insights = performance_insights(pairs)

    assert insights == {
        "code_accuracy": 90.0,
        "design_quality": 70.0,
        "algorithm_efficiency": 0.0,
        "collaboration_score": 15,
    }


def test_game_stats():
    today = date(2026, 10, 18)
    attempts = [
        SimpleNamespace(
            status=AttemptStatus.completed,
            score=90,
            time_spent=3600,
            completed_at=datetime(2026, 10, 18, 9).astimezone(),
        ),
        SimpleNamespace(
            status=AttemptStatus.completed,
            score=75,
            time_spent=125,
            completed_at=datetime(2026, 10, 17, 9).astimezone(),
        ),
        SimpleNamespace(status=AttemptStatus.in_progress, score=0, time_spent=50, completed_at=None),
    ]

    assert game_stats(attempts, rank=3, today=today) == {
        "total_score": 165,
        "challenges_completed": 2,
        "average_score": 83,
        "streak_days": 2,
        "rank": 3,
        "total_time": 3725,
        "total_time_display": "1h 2m 5s",
    }


def test_attempt_and_challenge_display_values():
    assert ChallengeAttempt(time_spent=125).time_spent_display == "2m 5s"
    assert ChallengeAttempt(time_spent=None).time_spent_display is None
    assert Challenge(points=150, difficulty=Difficulty.medium).weighted_points == 225
    assert Challenge(points=100, difficulty=Difficulty.hard).weighted_points == 200
