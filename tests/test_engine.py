"""Tests for the engine over a real (temporary) SQLite database."""

from datetime import datetime, timezone

import pytest

from teamforge.exceptions import ConflictError, InvalidTransitionError, NotFoundError
from teamforge.models.challenge import ChallengeType, Difficulty
from teamforge.models.challenge_attempt import AttemptStatus
from teamforge.models.team_membership import Role
from teamforge.services import engine


async def seed(storage, correct_code):
    """Two users, a team led by the first, and one code challenge."""
    ada = await storage.create_user("ada", "ada@example.com")
    lin = await storage.create_user("lin", "lin@example.com")
    team = await engine.create_team(storage, "Forge", ada.id)
    challenge = await storage.create_challenge(
        title="Fix the total",
        description="Find the bugs",
        type=ChallengeType.code,
        difficulty=Difficulty.easy,
        points=100,
        time_limit=600,
        content={"correctCode": correct_code},
    )
    return ada, lin, team, challenge


def test_create_team_adds_leader_membership(run_with_storage, correct_code):
    async def scenario(storage):
        ada, _, team, _ = await seed(storage, correct_code)
        members = await storage.get_team_members(team.id)
        return ada.id, team.compatibility_score, [(m.user_id, m.role, m.specialty) for m in members]

    ada_id, compatibility, members = run_with_storage(scenario)

    assert compatibility == 50
    assert members == [(ada_id, Role.leader, "management")]


def test_create_team_requires_known_leader(run_with_storage):
    async def scenario(storage):
        with pytest.raises(NotFoundError):
            await engine.create_team(storage, "Ghosts", 999)

    run_with_storage(scenario)


def test_roster_changes_refresh_compatibility(run_with_storage, correct_code):
    async def scenario(storage):
        ada, lin, team, _ = await seed(storage, correct_code)
        scores = []

        await engine.add_member(storage, team.id, lin.id, specialty="frontend")
        scores.append((await storage.get_team(team.id)).compatibility_score)

        with pytest.raises(ConflictError):
            await engine.add_member(storage, team.id, lin.id)

        with pytest.raises(ConflictError):
            await engine.remove_member(storage, team.id, ada.id)

        assert await engine.remove_member(storage, team.id, lin.id) is True
        assert await engine.remove_member(storage, team.id, lin.id) is False
        scores.append((await storage.get_team(team.id)).compatibility_score)
        return scores

    assert run_with_storage(scenario) == [75, 50]


def test_one_active_attempt_per_user_and_challenge(run_with_storage, correct_code):
    async def scenario(storage):
        ada, _, team, challenge = await seed(storage, correct_code)
        first = await engine.start_attempt(storage, challenge.id, team.id, ada.id)
        with pytest.raises(ConflictError):
            await engine.start_attempt(storage, challenge.id, team.id, ada.id)

        # once the first attempt is over a new one may start
        await engine.update_attempt(storage, first.id, {"status": AttemptStatus.abandoned})
        second = await engine.start_attempt(storage, challenge.id, team.id, ada.id)
        return first.id, second.id, second.status

    first_id, second_id, status = run_with_storage(scenario)

    assert second_id != first_id
    assert status == AttemptStatus.in_progress


def test_start_attempt_on_inactive_challenge(run_with_storage, correct_code):
    async def scenario(storage):
        ada, _, team, challenge = await seed(storage, correct_code)
        await storage.set_challenge_active(challenge.id, False)
        with pytest.raises(NotFoundError):
            await engine.start_attempt(storage, challenge.id, team.id, ada.id)

    run_with_storage(scenario)


def test_submission_completes_attempt_and_updates_team(run_with_storage, correct_code):
    finished = datetime.now(timezone.utc)

    async def scenario(storage):
        ada, _, team, challenge = await seed(storage, correct_code)
        attempt = await engine.start_attempt(storage, challenge.id, team.id, ada.id)

        submission = await engine.submit_attempt(
            storage, attempt.id, {"code": correct_code}, time_spent=120, now=finished
        )
        team = await storage.get_team(team.id)
        user = await storage.get_user(ada.id)
        return submission, (team.total_score, team.challenges_won, team.streak), user.total_points

    submission, team_stats, points = run_with_storage(scenario)

    assert submission.score == 100
    assert submission.time_bonus == 20
    assert submission.update.completed is True
    assert submission.update.attempt.status == AttemptStatus.completed
    assert submission.update.attempt.completed_at == finished
    assert team_stats == (100, 1, 1)
    assert points == 100


def test_terminal_attempts_are_read_only(run_with_storage, correct_code):
    async def scenario(storage):
        ada, _, team, challenge = await seed(storage, correct_code)
        attempt = await engine.start_attempt(storage, challenge.id, team.id, ada.id)
        first = datetime(2026, 10, 18, 10, 0, tzinfo=timezone.utc)
        await engine.update_attempt(storage, attempt.id, {"status": "completed", "score": 90}, now=first)

        with pytest.raises(InvalidTransitionError):
            await engine.update_attempt(storage, attempt.id, {"score": 10})

        repeat = await engine.update_attempt(
            storage, attempt.id, {"status": "completed"}, now=datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)
        )
        return repeat.changed, repeat.attempt.completed_at == first, repeat.attempt.score

    assert run_with_storage(scenario) == (False, True, 90)


def test_failed_attempt_does_not_touch_team_totals(run_with_storage, correct_code):
    async def scenario(storage):
        ada, _, team, challenge = await seed(storage, correct_code)
        attempt = await engine.start_attempt(storage, challenge.id, team.id, ada.id)
        update = await engine.update_attempt(storage, attempt.id, {"status": "failed", "score": 90})
        team = await storage.get_team(team.id)
        return update.completed, update.attempt.completed_at, team.total_score

    assert run_with_storage(scenario) == (False, None, 0)


def test_unknown_ids(run_with_storage):
    async def scenario(storage):
        return (
            await engine.update_attempt(storage, 41, {"score": 1}),
            await engine.submit_attempt(storage, 41, {"code": "x"}),
            await engine.compute_compatibility(storage, 41),
            await engine.recompute_stats(storage, 41),
            await engine.recompute_user_points(storage, 41),
        )

    assert run_with_storage(scenario) == (None, None, None, None, None)


def test_negative_ids_are_rejected(run_with_storage):
    async def scenario(storage):
        with pytest.raises(ValueError):
            await storage.get_team(-1)

    run_with_storage(scenario)


def test_leaderboard_ranks(run_with_storage):
    async def scenario(storage):
        ada = await storage.create_user("ada", "ada@example.com")
        for name, score in (("low", 10), ("high", 300), ("mid", 120), ("mid2", 120)):
            team = await storage.create_team(name=name, leader_id=ada.id)
            await storage.update_team(team.id, total_score=score)
        return [(team.name, team.rank) for team in await storage.get_leaderboard()]

    assert run_with_storage(scenario) == [("high", 1), ("mid", 2), ("mid2", 2), ("low", 4)]


def test_game_rooms(run_with_storage, correct_code):
    async def scenario(storage):
        ada, lin, team, challenge = await seed(storage, correct_code)
        room = await storage.create_game_room(challenge.id, team.id, participants=[ada.id])
        await storage.update_game_room(room.id, participants=[ada.id, lin.id], game_state={"round": 2})
        active = await storage.get_active_game_rooms()
        room = await storage.get_game_room(room.id)
        return [r.id for r in active], room.participants, room.game_state

    room_ids, participants, state = run_with_storage(scenario)

    assert len(room_ids) == 1
    assert participants == [1, 2]
    assert state == {"round": 2}


def test_team_keeps_a_single_leader(run_with_storage, correct_code):
    async def scenario(storage):
        _, lin, team, _ = await seed(storage, correct_code)
        with pytest.raises(ConflictError):
            await engine.add_member(storage, team.id, lin.id, role=Role.leader)
        members = await storage.get_team_members(team.id)
        return [m.role for m in members]

    assert run_with_storage(scenario) == [Role.leader]


def test_attempt_timestamps_share_one_clock(run_with_storage, correct_code, pacific_time):
    async def scenario(storage):
        ada, _, team, challenge = await seed(storage, correct_code)
        attempt = await engine.start_attempt(storage, challenge.id, team.id, ada.id)
        await engine.submit_attempt(storage, attempt.id, {"code": correct_code}, time_spent=30)
        await storage.db.commit()
        storage.db.expire_all()
        attempt = await storage.get_attempt(attempt.id)
        team = await storage.get_team(team.id)
        return attempt.started_at, attempt.completed_at, team.streak

    started, completed, streak = run_with_storage(scenario)

    assert started.tzinfo is not None and completed.tzinfo is not None
    assert started <= completed
    assert streak == 1
