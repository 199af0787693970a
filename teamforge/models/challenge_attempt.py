"""Challenge attempt model — one user's try at a challenge on behalf of a team."""

import enum
import json
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import Enum, ForeignKey, Index, Integer, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column

from teamforge.database import Base, UTCDateTime, utc_now
from teamforge.services.progression import format_duration


class AttemptStatus(str, enum.Enum):
    in_progress = "in_progress"
    completed = "completed"
    failed = "failed"
    abandoned = "abandoned"


class ChallengeAttempt(Base):
    __tablename__ = "challenge_attempts"
    __table_args__ = (
        # At most one active attempt per (challenge, user)
        Index(
            "uq_active_attempt",
            "challenge_id",
            "user_id",
            unique=True,
            sqlite_where=text("status = 'in_progress'"),
            postgresql_where=text("status = 'in_progress'"),
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    challenge_id: Mapped[int] = mapped_column(
        ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False, index=True
    )
    team_id: Mapped[int] = mapped_column(
        ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    status: Mapped[AttemptStatus] = mapped_column(
        Enum(AttemptStatus), default=AttemptStatus.in_progress
    )
    score: Mapped[int] = mapped_column(Integer, default=0)
    time_spent: Mapped[Optional[int]] = mapped_column(Integer)  # seconds

    solution_json: Mapped[Optional[str]] = mapped_column(Text)

    started_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), default=utc_now, server_default=func.now()
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime())

    # ── JSON helpers ──
    @property
    def solution(self) -> Any:
        if not self.solution_json:
            return None
        try:
            return json.loads(self.solution_json)
        except (json.JSONDecodeError, TypeError):
            return None

    @solution.setter
    def solution(self, value: Any) -> None:
        self.solution_json = None if value is None else json.dumps(value)

    @property
    def time_spent_display(self) -> Optional[str]:
        if self.time_spent is None:
            return None
        return format_duration(self.time_spent)
