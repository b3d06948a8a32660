"""Email Verification Handler — marks the parent named by a verification token as verified.

Invariants:
    - Token must authenticate (signature, expiry, verification purpose) or InvalidTokenError
    - Token email must belong to a parent or UnknownParentError
    - Idempotent: verifying an already-verified parent succeeds without writing
    - is_email_verified never reverts to false
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from enrollment.config import Settings
from enrollment.core import security
from enrollment.core.errors import UnknownParentError
from enrollment.models.parent import Parent

logger = logging.getLogger(__name__)

VERIFIED_MESSAGE = "Correo electrónico verificado exitosamente"


async def verify_email(db: AsyncSession, token: str, settings: Settings) -> Parent:
    email = security.decode_verification_token(token, settings)
    result = await db.execute(select(Parent).where(Parent.email == email))
    parent = result.scalar_one_or_none()
    if parent is None:
        raise UnknownParentError(email)
    if not parent.is_email_verified:
        parent.is_email_verified = True
        await db.commit()
        logger.info("Parent email verified", extra={"parent_id": parent.id})
    return parent
