"""Game room model — a shared live session for a team working on one challenge."""

import enum
import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import Enum, ForeignKey, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from teamforge.database import Base, UTCDateTime


class RoomStatus(str, enum.Enum):
    waiting = "waiting"
    active = "active"
    completed = "completed"


class GameRoom(Base):
    __tablename__ = "game_rooms"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    challenge_id: Mapped[int] = mapped_column(
        ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False
    )
    team_id: Mapped[int] = mapped_column(
        ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[RoomStatus] = mapped_column(Enum(RoomStatus), default=RoomStatus.waiting)

    # ── JSON payloads (stored as Text for SQLite compat) ──
    participants_json: Mapped[Optional[str]] = mapped_column(Text, default="[]")
    game_state_json: Mapped[Optional[str]] = mapped_column(Text, default="{}")

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), server_default=func.now()
    )

    # ── JSON helpers ──
    @property
    def participants(self) -> List[int]:
        try:
            value = json.loads(self.participants_json or "[]")
        except (json.JSONDecodeError, TypeError):
            return []
        return value if isinstance(value, list) else []

    @participants.setter
    def participants(self, value: Optional[List[int]]) -> None:
        self.participants_json = json.dumps(value or [])

    @property
    def game_state(self) -> Dict[str, Any]:
        try:
            value = json.loads(self.game_state_json or "{}")
        except (json.JSONDecodeError, TypeError):
            return {}
        return value if isinstance(value, dict) else {}

    @game_state.setter
    def game_state(self, value: Optional[Dict[str, Any]]) -> None:
        self.game_state_json = json.dumps(value or {})
