"""Registration Routes — invite-code pre-flight check and parent/child registration.

Invariants:
    - /verify-code is read-only and always answers {success, message}
    - /register re-checks the code inside its own transaction (the pre-flight
      check is advisory only)
    - The verification email is scheduled only after the registration committed;
      its failure never changes the 201 response
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from enrollment.config import Settings, get_settings
from enrollment.core.errors import MSG_INVALID_CODE, MSG_SERVER_ERROR, MSG_VALID_CODE
from enrollment.infrastructure.database import get_db
from enrollment.infrastructure.mailer import Mailer, get_mailer, send_verification_email
from enrollment.schemas.registration import (
    RegisterRequest,
    RegisterResponse,
    UserSummary,
    VerifyCodeRequest,
    VerifyCodeResponse,
)
from enrollment.services.code_redemption import is_code_available
from enrollment.services.handle_registration import (
    REGISTRATION_SUCCESS_MESSAGE,
    register_parent,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["registration"])


@router.post("/verify-code", response_model=VerifyCodeResponse)
async def verify_code(
    body: VerifyCodeRequest, db: AsyncSession = Depends(get_db),
):
    """Check whether a registration code exists and is unused."""
    try:
        available = await is_code_available(db, body.code)
    except Exception as e:
        logger.error(f"Failed to check registration code: {e}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": MSG_SERVER_ERROR},
        )
    if not available:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "message": MSG_INVALID_CODE},
        )
    return VerifyCodeResponse(success=True, message=MSG_VALID_CODE)


@router.post(
    "/register", response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    body: RegisterRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
):
    """Redeem a code and create the parent and child. Mails the verification link."""
    result = await register_parent(db, body, settings)
    parent = result.parent
    background_tasks.add_task(
        send_verification_email,
        mailer,
        parent.email,
        settings.verification_url(result.verification_token),
    )
    return RegisterResponse(
        message=REGISTRATION_SUCCESS_MESSAGE,
        token=result.session_token,
        user=UserSummary(
            id=parent.id,
            email=parent.email,
            first_name=parent.first_name,
            last_name=parent.last_name,
        ),
    )
