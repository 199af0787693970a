"""Tests for team compatibility scoring."""

from types import SimpleNamespace

from teamforge.models.challenge_attempt import AttemptStatus
from teamforge.services.compatibility import (
    FORMULAS,
    calculate_compatibility,
    calculate_weighted_compatibility,
    diversity_score,
    participation_rate,
    success_rate,
)


def member(user_id, specialty):
    return SimpleNamespace(user_id=user_id, specialty=specialty)


def attempt(user_id, score, status=AttemptStatus.completed):
    return SimpleNamespace(user_id=user_id, score=score, status=status)


def test_single_member_is_neutral():
    assert calculate_compatibility([member(1, "frontend")], []) == 50
    assert calculate_compatibility([], []) == 50


def test_diverse_pair_without_attempts():
    # diversity 100, success rate defaults to 50
    members = [member(1, "frontend"), member(2, "backend")]
    assert calculate_compatibility(members, []) == 75


def test_same_specialty_with_completed_attempts():
    members = [member(1, "design"), member(2, "design")]
    attempts = [attempt(1, 90), attempt(2, 70)]
    # diversity 50, success 80
    assert calculate_compatibility(members, attempts) == 65


def test_success_rate_ignores_unfinished_attempts():
    attempts = [attempt(1, 90, AttemptStatus.failed), attempt(2, 0, AttemptStatus.in_progress)]
    assert success_rate(attempts) == 50.0
    assert success_rate([{"status": "completed", "score": 40}]) == 40.0


def test_component_rates():
    members = [member(1, "a"), member(2, "b"), member(3, "a")]
    assert diversity_score(members) == 2 / 3 * 100
    assert participation_rate(members, [attempt(1, 10), attempt(1, 20)]) == 1 / 3 * 100
    assert diversity_score([]) == 0.0


def test_weighted_formula():
    members = [member(1, "a"), member(2, "b"), member(3, "c")]
    attempts = [attempt(1, 80), attempt(2, 60)]
    # 100 * 0.3 + 70 * 0.4 + 66.7 * 0.3
    assert calculate_weighted_compatibility(members, attempts) == 78
    assert calculate_weighted_compatibility([member(1, "a")], attempts) == 50


def test_formula_registry():
    assert FORMULAS["average"] is calculate_compatibility
    assert FORMULAS["weighted"] is calculate_weighted_compatibility


def test_camel_case_attempt_payloads():
    members = [member(1, "a"), member(2, "b")]
    attempts = [
        {"status": "completed", "score": 80, "userId": 1},
        {"status": "completed", "score": 60, "userId": 2},
    ]

    assert participation_rate(members, attempts) == 100.0
    # 100 * 0.3 + 70 * 0.4 + 100 * 0.3
    assert calculate_weighted_compatibility(members, attempts) == 88
