"""
Storage collaborator: every read and write the engine and routers need,
expressed over one async SQLAlchemy session.

Methods return ``None`` / ``False`` for unknown ids instead of raising, so the
caller decides what a missing record means. Writes are flushed, not
committed; the request's ``get_db`` dependency (or the caller) commits.
"""

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from teamforge.exceptions import ConflictError
from teamforge.models.challenge import Challenge, ChallengeType
from teamforge.models.challenge_attempt import AttemptStatus, ChallengeAttempt
from teamforge.models.game_room import GameRoom, RoomStatus
from teamforge.models.team import Team
from teamforge.models.team_membership import Role, TeamMembership
from teamforge.models.user import User
from teamforge.services.team_stats import rank_teams

TEAM_FIELDS = {"name", "description", "compatibility_score", "total_score", "challenges_won", "streak", "rank"}
ATTEMPT_FIELDS = {"status", "score", "time_spent", "solution", "completed_at"}
ROOM_FIELDS = {"status", "participants", "game_state"}


def _check_id(value: int, what: str) -> None:
    if value is None or value < 0:
        raise ValueError(f"{what} must be a non-negative integer, got {value!r}")


class Storage:
    def __init__(self, db: AsyncSession):
        self.db = db

    # ── Users ──

    async def get_user(self, user_id: int) -> Optional[User]:
        _check_id(user_id, "user_id")
        return await self.db.get(User, user_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_user_by_username(self, username: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def create_user(self, username: str, email: str, avatar: Optional[str] = None) -> User:
        user = User(username=username, email=email, avatar=avatar, total_points=0)
        self.db.add(user)
        await self.db.flush()
        await self.db.refresh(user)
        return user

    # ── Teams ──

    async def get_team(self, team_id: int) -> Optional[Team]:
        _check_id(team_id, "team_id")
        return await self.db.get(Team, team_id)

    async def create_team(
        self,
        name: str,
        leader_id: int,
        description: Optional[str] = None,
        leader_specialty: str = "management",
    ) -> Team:
        """Create a team together with its leader membership."""
        team = Team(
            name=name,
            description=description,
            leader_id=leader_id,
            compatibility_score=0,
            total_score=0,
            challenges_won=0,
            streak=0,
            rank=0,
        )
        self.db.add(team)
        await self.db.flush()  # to get team.id

        self.db.add(
            TeamMembership(
                team_id=team.id,
                user_id=leader_id,
                role=Role.leader,
                specialty=leader_specialty,
            )
        )
        await self.db.flush()
        await self.db.refresh(team)
        return team

    async def update_team(self, team_id: int, **fields: Any) -> Optional[Team]:
        team = await self.get_team(team_id)
        if not team:
            return None
        for name, value in fields.items():
            if name not in TEAM_FIELDS:
                raise ValueError(f"Team field '{name}' cannot be updated")
            setattr(team, name, value)
        await self.db.flush()
        return team

    async def get_teams_by_user(self, user_id: int) -> List[Team]:
        result = await self.db.execute(
            select(Team)
            .join(TeamMembership, Team.id == TeamMembership.team_id)
            .where(TeamMembership.user_id == user_id)
            .order_by(Team.id)
        )
        return list(result.scalars().all())

    async def get_user_team(self, user_id: int) -> Optional[Team]:
        teams = await self.get_teams_by_user(user_id)
        return teams[0] if teams else None

    async def get_leaderboard(self) -> List[Team]:
        """All teams in leaderboard order, with ``rank`` recomputed and saved."""
        result = await self.db.execute(select(Team).order_by(Team.id))
        teams = list(result.scalars().all())

        ordered = []
        for team, rank in rank_teams(teams):
            team.rank = rank
            ordered.append(team)
        await self.db.flush()
        return ordered

    # ── Team members ──

    async def get_membership(self, team_id: int, user_id: int) -> Optional[TeamMembership]:
        result = await self.db.execute(
            select(TeamMembership).where(
                TeamMembership.team_id == team_id,
                TeamMembership.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_team_members(self, team_id: int) -> List[TeamMembership]:
        _check_id(team_id, "team_id")
        result = await self.db.execute(
            select(TeamMembership)
            .where(TeamMembership.team_id == team_id)
            .order_by(TeamMembership.id)
        )
        return list(result.scalars().all())

    async def get_team_members_with_users(self, team_id: int) -> List[Tuple[TeamMembership, User]]:
        result = await self.db.execute(
            select(TeamMembership, User)
            .join(User, TeamMembership.user_id == User.id)
            .where(TeamMembership.team_id == team_id)
            .order_by(TeamMembership.id)
        )
        return [(membership, user) for membership, user in result.all()]

    async def add_team_member(
        self,
        team_id: int,
        user_id: int,
        role: Role = Role.member,
        specialty: Optional[str] = "general",
    ) -> TeamMembership:
        if Role(role) == Role.leader:
            raise ConflictError(f"Team {team_id} already has a leader; only team creation assigns one")
        if await self.get_membership(team_id, user_id):
            raise ConflictError(f"User {user_id} is already a member of team {team_id}")

        membership = TeamMembership(team_id=team_id, user_id=user_id, role=role, specialty=specialty)
        self.db.add(membership)
        await self.db.flush()
        await self.db.refresh(membership)
        return membership

    async def remove_team_member(self, team_id: int, user_id: int) -> bool:
        membership = await self.get_membership(team_id, user_id)
        if not membership:
            return False
        if membership.role == Role.leader:
            raise ConflictError("The team leader cannot be removed from the team")

        await self.db.delete(membership)
        await self.db.flush()
        return True

    # ── Challenges ──

    async def get_challenge(self, challenge_id: int) -> Optional[Challenge]:
        _check_id(challenge_id, "challenge_id")
        return await self.db.get(Challenge, challenge_id)

    async def create_challenge(self, **fields: Any) -> Challenge:
        content = fields.pop("content", None)
        challenge = Challenge(**fields)
        challenge.content = content
        self.db.add(challenge)
        await self.db.flush()
        await self.db.refresh(challenge)
        return challenge

    async def set_challenge_active(self, challenge_id: int, is_active: bool) -> Optional[Challenge]:
        challenge = await self.get_challenge(challenge_id)
        if not challenge:
            return None
        challenge.is_active = is_active
        await self.db.flush()
        return challenge

    async def get_active_challenges(self) -> List[Challenge]:
        result = await self.db.execute(
            select(Challenge).where(Challenge.is_active.is_(True)).order_by(Challenge.id)
        )
        return list(result.scalars().all())

    async def get_challenges_by_type(self, challenge_type: ChallengeType) -> List[Challenge]:
        result = await self.db.execute(
            select(Challenge)
            .where(Challenge.type == challenge_type, Challenge.is_active.is_(True))
            .order_by(Challenge.id)
        )
        return list(result.scalars().all())

    async def get_challenge_attempts(self, challenge_id: int) -> List[ChallengeAttempt]:
        result = await self.db.execute(
            select(ChallengeAttempt)
            .where(ChallengeAttempt.challenge_id == challenge_id)
            .order_by(ChallengeAttempt.id)
        )
        return list(result.scalars().all())

    # ── Challenge attempts ──

    async def get_attempt(self, attempt_id: int) -> Optional[ChallengeAttempt]:
        _check_id(attempt_id, "attempt_id")
        return await self.db.get(ChallengeAttempt, attempt_id)

    async def get_active_attempt(self, challenge_id: int, user_id: int) -> Optional[ChallengeAttempt]:
        result = await self.db.execute(
            select(ChallengeAttempt).where(
                ChallengeAttempt.challenge_id == challenge_id,
                ChallengeAttempt.user_id == user_id,
                ChallengeAttempt.status == AttemptStatus.in_progress,
            )
        )
        return result.scalar_one_or_none()

    async def create_challenge_attempt(
        self,
        challenge_id: int,
        team_id: int,
        user_id: int,
        solution: Any = None,
        time_spent: Optional[int] = None,
    ) -> ChallengeAttempt:
        if await self.get_active_attempt(challenge_id, user_id):
            raise ConflictError(
                f"User {user_id} already has an attempt in progress for challenge {challenge_id}"
            )

        attempt = ChallengeAttempt(
            challenge_id=challenge_id,
            team_id=team_id,
            user_id=user_id,
            status=AttemptStatus.in_progress,
            score=0,
            time_spent=time_spent,
            completed_at=None,
        )
        attempt.solution = solution
        self.db.add(attempt)
        try:
            await self.db.flush()
        except IntegrityError as exc:
            # lost a race against a concurrent start; the session must be rolled back
            raise ConflictError(
                f"User {user_id} already has an attempt in progress for challenge {challenge_id}"
            ) from exc
        await self.db.refresh(attempt)
        return attempt

    async def update_challenge_attempt(self, attempt_id: int, **fields: Any) -> Optional[ChallengeAttempt]:
        """Raw write of attempt fields; lifecycle rules live in the engine."""
        attempt = await self.get_attempt(attempt_id)
        if not attempt:
            return None
        for name, value in fields.items():
            if name not in ATTEMPT_FIELDS:
                raise ValueError(f"Attempt field '{name}' cannot be updated")
            setattr(attempt, name, value)
        await self.db.flush()
        return attempt

    async def get_user_attempts(self, user_id: int) -> List[ChallengeAttempt]:
        result = await self.db.execute(
            select(ChallengeAttempt)
            .where(ChallengeAttempt.user_id == user_id)
            .order_by(ChallengeAttempt.id)
        )
        return list(result.scalars().all())

    async def get_team_attempts(self, team_id: int) -> List[ChallengeAttempt]:
        _check_id(team_id, "team_id")
        result = await self.db.execute(
            select(ChallengeAttempt)
            .where(ChallengeAttempt.team_id == team_id)
            .order_by(ChallengeAttempt.id)
        )
        return list(result.scalars().all())

    async def get_team_attempts_with_types(self, team_id: int) -> List[Tuple[ChallengeAttempt, ChallengeType]]:
        result = await self.db.execute(
            select(ChallengeAttempt, Challenge.type)
            .join(Challenge, ChallengeAttempt.challenge_id == Challenge.id)
            .where(ChallengeAttempt.team_id == team_id)
            .order_by(ChallengeAttempt.id)
        )
        return [(attempt, challenge_type) for attempt, challenge_type in result.all()]

    # ── Game rooms ──

    async def create_game_room(
        self,
        challenge_id: int,
        team_id: int,
        status: RoomStatus = RoomStatus.waiting,
        participants: Optional[List[int]] = None,
        game_state: Optional[Dict[str, Any]] = None,
    ) -> GameRoom:
        room = GameRoom(challenge_id=challenge_id, team_id=team_id, status=status)
        room.participants = participants
        room.game_state = game_state
        self.db.add(room)
        await self.db.flush()
        await self.db.refresh(room)
        return room

    async def get_game_room(self, room_id: int) -> Optional[GameRoom]:
        _check_id(room_id, "room_id")
        return await self.db.get(GameRoom, room_id)

    async def update_game_room(self, room_id: int, **fields: Any) -> Optional[GameRoom]:
        room = await self.get_game_room(room_id)
        if not room:
            return None
        for name, value in fields.items():
            if name not in ROOM_FIELDS:
                raise ValueError(f"Game room field '{name}' cannot be updated")
            setattr(room, name, value)
        await self.db.flush()
        return room

    async def get_active_game_rooms(self) -> List[GameRoom]:
        result = await self.db.execute(
            select(GameRoom)
            .where(GameRoom.status.in_([RoomStatus.waiting, RoomStatus.active]))
            .order_by(GameRoom.id)
        )
        return list(result.scalars().all())
