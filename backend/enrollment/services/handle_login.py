"""Login Handler — exchanges document number + password for a session token.

Invariants:
    - Unknown document and wrong password raise the same InvalidCredentialsError
    - Password is checked before verification status (no hint about unverified
      accounts without the right password)
    - Issued token carries only {userId} and the short login expiry
"""

import logging

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from enrollment.config import Settings
from enrollment.core import security
from enrollment.core.errors import EmailNotVerifiedError, InvalidCredentialsError
from enrollment.models.parent import Parent

logger = logging.getLogger(__name__)


async def login(
    db: AsyncSession, document_number: str, password: str, settings: Settings,
) -> str:
    result = await db.execute(
        select(Parent).where(Parent.document_number == document_number.strip()),
    )
    parent = result.scalar_one_or_none()
    if parent is None:
        raise InvalidCredentialsError()

    matches = await run_in_threadpool(
        security.verify_password, password, parent.password_hash,
    )
    if not matches:
        raise InvalidCredentialsError()

    if not parent.is_email_verified:
        raise EmailNotVerifiedError()

    logger.info("Parent logged in", extra={"parent_id": parent.id})
    return security.build_login_token(parent.id, settings)
