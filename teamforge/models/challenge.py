"""Challenge model — a timed task with type-specific scoring content."""

import enum
import json
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import Boolean, Enum, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from teamforge.database import Base, UTCDateTime
from teamforge.services.progression import difficulty_multiplier
from teamforge.services.similarity import round_half_up


class ChallengeType(str, enum.Enum):
    code = "code"
    wireframe = "wireframe"
    algorithm = "algorithm"
    api = "api"
    database = "database"
    test = "test"


class Difficulty(str, enum.Enum):
    easy = "easy"
    medium = "medium"
    hard = "hard"


class Challenge(Base):
    __tablename__ = "challenges"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    type: Mapped[ChallengeType] = mapped_column(Enum(ChallengeType), nullable=False, index=True)
    difficulty: Mapped[Difficulty] = mapped_column(Enum(Difficulty), nullable=False)
    points: Mapped[int] = mapped_column(Integer, nullable=False)
    time_limit: Mapped[Optional[int]] = mapped_column(Integer)  # seconds

    # ── JSON payload (stored as Text for SQLite compat) ──
    content_json: Mapped[Optional[str]] = mapped_column(Text, default="{}")

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), server_default=func.now()
    )

    # ── JSON helpers ──
    @property
    def content(self) -> Dict[str, Any]:
        try:
            value = json.loads(self.content_json or "{}")
        except (json.JSONDecodeError, TypeError):
            return {}
        return value if isinstance(value, dict) else {}

    @content.setter
    def content(self, value: Optional[Dict[str, Any]]) -> None:
        self.content_json = json.dumps(value or {})

    @property
    def weighted_points(self) -> int:
        """Points scaled by difficulty (easy x1, medium x1.5, hard x2)."""
        return round_half_up((self.points or 0) * difficulty_multiplier(self.difficulty))
