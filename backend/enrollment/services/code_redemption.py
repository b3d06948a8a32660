"""Code Redemption — the one store operation behind invite-code checks and registration.

Invariants:
    - A code is available iff a row exists with code == input AND is_used == false
    - redeem_code is a conditional UPDATE: at most one transaction ever sees rowcount == 1
    - Neither function commits; redemption becomes durable with the caller's commit
    - Codes are flagged, never deleted

Design Decisions:
    - Read-only and mutating variants share one predicate (no duplicated query logic)
    - Conditional UPDATE over SELECT-then-UPDATE: the row lock taken by the UPDATE
      is held until commit, so a concurrent redeemer re-evaluates is_used == false
      after the winner commits and matches zero rows
"""

from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from enrollment.models.registration_code import RegistrationCode


def _unused_code(code: str):
    return (
        RegistrationCode.code == code,
        RegistrationCode.is_used.is_(False),
    )


async def is_code_available(db: AsyncSession, code: str) -> bool:
    """Pre-flight check. No side effects; never the sole gate for registration."""
    if not code:
        return False
    result = await db.execute(
        select(RegistrationCode.id).where(*_unused_code(code)),
    )
    return result.scalar_one_or_none() is not None


async def redeem_code(db: AsyncSession, code: str) -> bool:
    """Flip is_used for an unused code. Returns False if absent or already used."""
    if not code:
        return False
    result = await db.execute(
        update(RegistrationCode)
        .where(*_unused_code(code))
        .values(is_used=True, updated_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False),
    )
    return result.rowcount == 1
