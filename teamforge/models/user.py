"""User model."""

from datetime import datetime
from typing import Optional

from sqlalchemy import Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from teamforge.database import Base, UTCDateTime


class User(Base):
    __tablename__ = "users"

    # ── Identity ──
    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    username: Mapped[str] = mapped_column(
        String(100), unique=True, index=True, nullable=False
    )
    email: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False
    )

    # ── Profile ──
    total_points: Mapped[int] = mapped_column(Integer, default=0)
    avatar: Mapped[Optional[str]] = mapped_column(String(500))

    # ── Timestamps ──
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), server_default=func.now()
    )
