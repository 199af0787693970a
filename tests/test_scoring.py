"""Tests for scorer dispatch by challenge type."""

from teamforge.models.challenge import ChallengeType
from teamforge.services import scoring
from teamforge.services.scorers import score_code


def test_dispatch_matches_direct_scorer(code_content, buggy_code):
    solution = {"code": buggy_code}
    assert scoring.score_solution("code", solution, code_content) == score_code(solution, code_content)


def test_dispatch_accepts_enum_members():
    result = scoring.score_solution(ChallengeType.api, {"endpoints": {"GET": "/api/users"}}, {})
    assert result["score"] == 60


def test_resolve_challenge_type():
    assert scoring.resolve_challenge_type("wireframe") is ChallengeType.wireframe
    assert scoring.resolve_challenge_type("quiz") is None
    assert scoring.resolve_challenge_type(42) is None
    assert scoring.resolve_challenge_type(None) is None


def test_unknown_types_get_fallback_score():
    for challenge_type in ("quiz", None, 42, ["code"]):
        assert scoring.score_solution(challenge_type, {"anything": 1}, None) == {
            "score": 85,
            "feedback": ["Solution evaluated with general criteria."],
        }


def test_custom_fallback_score_is_clamped():
    assert scoring.score_solution("quiz", None, None, fallback_score=70)["score"] == 70
    assert scoring.score_solution("quiz", None, None, fallback_score=150)["score"] == 100


def test_failing_scorer_reports_zero(monkeypatch):
    def boom(solution, content):
        raise RuntimeError("unexpected payload")

    monkeypatch.setitem(scoring.SCORERS, ChallengeType.code, boom)

    assert scoring.score_solution("code", {"code": "x"}, {}) == {
        "score": 0,
        "feedback": ["Solution could not be evaluated."],
    }


def test_end_to_end_code_submission(correct_code):
    result = scoring.score_solution("code", {"code": correct_code}, {"correctCode": correct_code})

    assert result["score"] == 100
    assert "Excellent! Code matches expected solution." in result["feedback"]
    assert "All semicolons correctly placed." in result["feedback"]
    assert "Function includes return statement." in result["feedback"]
