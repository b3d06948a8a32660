"""RegistrationCode ORM — single-use invite codes gating account creation.

Invariants:
    - code is unique and non-nullable
    - is_used flips false -> true exactly once, in the registering transaction
    - rows are never deleted

Design Decisions:
    - Created out-of-band (seed CLI), never through the HTTP surface
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from enrollment.db.base import Base


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RegistrationCode(Base):
    __tablename__ = "registration_codes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    is_used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utc_now, onupdate=_utc_now,
    )
