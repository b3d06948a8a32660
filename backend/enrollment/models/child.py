"""Child ORM — a minor enrolled under exactly one Parent.

Invariants:
    - Always belongs to a Parent (parent_id FK, non-nullable)
    - age within 0..18 inclusive (CHECK constraint backs the schema validation)
    - document_number unique across all children
"""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from enrollment.db.base import Base

MIN_AGE = 0
MAX_AGE = 18


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Child(Base):
    __tablename__ = "children"
    __table_args__ = (
        CheckConstraint(
            f"age >= {MIN_AGE} AND age <= {MAX_AGE}", name="ck_children_age_range",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    document_number: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True,
    )
    parent_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("parents.id"), nullable=False, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utc_now, onupdate=_utc_now,
    )

    parent: Mapped["Parent"] = relationship("Parent", back_populates="children")
