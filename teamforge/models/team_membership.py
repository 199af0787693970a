"""Team Membership model."""

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import Enum, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from teamforge.database import Base, UTCDateTime


class Role(str, enum.Enum):
    leader = "leader"
    member = "member"


class TeamMembership(Base):
    __tablename__ = "team_members"
    __table_args__ = (UniqueConstraint("team_id", "user_id", name="uq_team_member"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    team_id: Mapped[int] = mapped_column(
        ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    role: Mapped[Role] = mapped_column(Enum(Role), default=Role.member)
    specialty: Mapped[Optional[str]] = mapped_column(String(100))

    joined_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), server_default=func.now()
    )
