"""Parent ORM — the account holder created by a registration.

Invariants:
    - email and document_number are unique across all parents; email ignoring case
    - password_hash is a bcrypt hash, never plaintext
    - is_email_verified flips false -> true once and never reverts

Design Decisions:
    - Parent owns the one-to-many relationship to Child (cascade on the ORM side)
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from enrollment.db.base import Base


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Parent(Base):
    __tablename__ = "parents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    document_number: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True,
    )
    phone_number: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_email_verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utc_now, onupdate=_utc_now,
    )

    children: Mapped[list["Child"]] = relationship(
        "Child", back_populates="parent",
        cascade="all, delete-orphan", lazy="selectin",
    )


Index("uq_parents_email_lower", func.lower(Parent.email), unique=True)
