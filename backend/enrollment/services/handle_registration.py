"""Registration Handler — invite-code gated creation of a parent and their first child.

Invariants:
    - All-or-nothing: code redemption, parent row and child row commit together
      or not at all (any failure before commit rolls the transaction back)
    - Code redemption happens inside the same transaction (never check-then-act)
      and comes first: an invalid or used code wins over any field error
    - Field and uniqueness violations are collected per field and reported together
    - Email uniqueness ignores case
    - The password is hashed before it reaches the ORM; plaintext is never persisted
    - The verification email is NOT sent here (route schedules it after commit)

Design Decisions:
    - Explicit uniqueness pre-check for friendly field errors; an IntegrityError
      raised by a racing insert is still translated to the same field errors
    - bcrypt runs in the thread pool: ~100ms of CPU must not stall the event loop
"""

import logging
from dataclasses import dataclass

from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from enrollment.config import Settings
from enrollment.core import security
from enrollment.core.errors import (
    DatabaseError,
    FieldError,
    FieldValidationError,
    InvalidOrUsedCodeError,
    MSG_REQUIRED,
    MSG_DUPLICATE_DOCUMENT,
    MSG_DUPLICATE_EMAIL,
    UniqueConstraintViolation,
    build_field_errors,
)
from enrollment.models.child import Child
from enrollment.models.parent import Parent
from enrollment.schemas.registration import ChildData, ParentData, RegisterRequest
from enrollment.services.code_redemption import redeem_code

logger = logging.getLogger(__name__)

REGISTRATION_SUCCESS_MESSAGE = (
    "Registro exitoso. Por favor, verifica tu correo electrónico."
)

FIELD_PARENT_EMAIL = "parentData.email"
FIELD_PARENT_DOCUMENT = "parentData.documentNumber"
FIELD_CHILD_DOCUMENT = "childData.documentNumber"
SECTION_PARENT = "parentData"
SECTION_CHILD = "childData"

# (table.column fragments seen in driver messages, field, message)
_UNIQUE_COLUMNS = (
    (("parents.email", "parents_email"), FIELD_PARENT_EMAIL, MSG_DUPLICATE_EMAIL),
    (
        ("parents.document_number", "parents_document_number"),
        FIELD_PARENT_DOCUMENT, MSG_DUPLICATE_DOCUMENT,
    ),
    (
        ("children.document_number", "children_document_number"),
        FIELD_CHILD_DOCUMENT, MSG_DUPLICATE_DOCUMENT,
    ),
)


@dataclass
class RegistrationResult:
    parent: Parent
    session_token: str
    verification_token: str


async def _exists(db: AsyncSession, column, value: str) -> bool:
    result = await db.execute(select(column).where(column == value).limit(1))
    return result.first() is not None


async def _email_taken(db: AsyncSession, email: str) -> bool:
    result = await db.execute(
        select(Parent.id).where(func.lower(Parent.email) == email.lower()).limit(1),
    )
    return result.first() is not None


def _validate_section(model, raw, section: str):
    """Validate one request section. Returns (data or None, field errors)."""
    if raw is None:
        return None, [FieldError(section, MSG_REQUIRED)]
    try:
        return model.model_validate(raw), []
    except ValidationError as e:
        return None, build_field_errors(e.errors(), prefix=(section,))


def validate_sections(payload: RegisterRequest) -> tuple[ParentData, ChildData]:
    """Validate parentData and childData together, reporting every violation."""
    parent_data, parent_errors = _validate_section(
        ParentData, payload.parent_data, SECTION_PARENT,
    )
    child_data, child_errors = _validate_section(
        ChildData, payload.child_data, SECTION_CHILD,
    )
    if parent_errors or child_errors:
        raise FieldValidationError(parent_errors + child_errors)
    return parent_data, child_data


async def _collect_unique_violations(
    db: AsyncSession, parent_data: ParentData, child_data: ChildData,
) -> list[FieldError]:
    errors = []
    if await _email_taken(db, parent_data.email):
        errors.append(FieldError(FIELD_PARENT_EMAIL, MSG_DUPLICATE_EMAIL))
    if await _exists(db, Parent.document_number, parent_data.document_number):
        errors.append(FieldError(FIELD_PARENT_DOCUMENT, MSG_DUPLICATE_DOCUMENT))
    if await _exists(db, Child.document_number, child_data.document_number):
        errors.append(FieldError(FIELD_CHILD_DOCUMENT, MSG_DUPLICATE_DOCUMENT))
    return errors


def unique_violation_fields(error: IntegrityError) -> list[FieldError]:
    """Map a driver-level unique violation back to request fields."""
    text = str(error.orig).lower()
    return [
        FieldError(field, message)
        for fragments, field, message in _UNIQUE_COLUMNS
        if any(fragment in text for fragment in fragments)
    ]


async def register_parent(
    db: AsyncSession, payload: RegisterRequest, settings: Settings,
) -> RegistrationResult:
    """Redeem the code and create the parent/child pair in one transaction."""
    try:
        if not await redeem_code(db, payload.code):
            raise InvalidOrUsedCodeError()

        parent_data, child_data = validate_sections(payload)

        password_hash = await run_in_threadpool(
            security.hash_password, parent_data.password, settings.bcrypt_rounds,
        )

        violations = await _collect_unique_violations(db, parent_data, child_data)
        if violations:
            raise UniqueConstraintViolation(violations)

        parent = Parent(
            first_name=parent_data.first_name,
            last_name=parent_data.last_name,
            document_number=parent_data.document_number,
            phone_number=parent_data.phone_number,
            email=parent_data.email,
            password_hash=password_hash,
            is_email_verified=False,
        )
        db.add(parent)
        await db.flush()

        db.add(Child(
            first_name=child_data.first_name,
            last_name=child_data.last_name,
            age=child_data.age,
            document_number=child_data.document_number,
            parent_id=parent.id,
        ))
        await db.flush()
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        fields = unique_violation_fields(e)
        if not fields:
            raise DatabaseError(str(e.orig), "insert") from e
        raise UniqueConstraintViolation(fields) from e
    except Exception:
        await db.rollback()
        raise

    logger.info("Parent registered", extra={"parent_id": parent.id})
    return RegistrationResult(
        parent=parent,
        session_token=security.build_registration_token(
            parent.id, parent.email, settings,
        ),
        verification_token=security.build_verification_token(
            parent.email, settings,
        ),
    )
