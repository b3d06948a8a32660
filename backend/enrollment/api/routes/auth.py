"""Auth Routes — password login and email verification links.

Invariants:
    - Login failures never distinguish unknown document from wrong password
    - /verify-email/{token} is idempotent for a valid token
    - Unexpected verification failures answer a generic 500 message
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from enrollment.config import Settings, get_settings
from enrollment.core.errors import (
    InvalidTokenError,
    MSG_VERIFICATION_FAILED,
    ServerError,
    UnknownParentError,
)
from enrollment.infrastructure.database import get_db
from enrollment.schemas.registration import LoginRequest, LoginResponse, MessageResponse
from enrollment.services.handle_email_verification import VERIFIED_MESSAGE, verify_email
from enrollment.services.handle_login import login as login_parent

logger = logging.getLogger(__name__)
router = APIRouter(tags=["auth"])


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Exchange document number and password for a session token."""
    token = await login_parent(db, body.document_number, body.password, settings)
    return LoginResponse(token=token)


@router.get("/verify-email/{token}", response_model=MessageResponse)
async def verify_email_link(
    token: str,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Target of the link mailed at registration."""
    try:
        await verify_email(db, token, settings)
    except (InvalidTokenError, UnknownParentError):
        raise
    except Exception as e:
        raise ServerError(MSG_VERIFICATION_FAILED, "VERIFICATION_FAILED") from e
    return MessageResponse(message=VERIFIED_MESSAGE)
