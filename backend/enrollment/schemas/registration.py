"""Registration Schemas — Pydantic models with field-level validation for the HTTP surface.

Invariants:
    - Every violation is reported (pydantic collects all field errors per request)
    - Messages are caller-facing Spanish strings raised as PydanticCustomError
    - Names and document numbers are stripped and must be non-empty
    - Child age is an integer within 0..18 inclusive
    - Password is 6..100 characters
    - A non-text code never fails validation; it is treated as an unknown code

Design Decisions:
    - alias_generator=to_camel: JSON keeps the camelCase contract of the frontend
    - mode="before" validator for age: strings of digits accepted, bools and floats rejected
    - email-validator for shape only (no deliverability/DNS check at request time)
    - RegisterRequest keeps parentData/childData raw: the code is checked first and
      the sections are validated by the registration service (ParentData, ChildData)
"""

from typing import Any

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from enrollment.models.child import MIN_AGE, MAX_AGE

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 100

MSG_EMPTY_FIRST_NAME = "El nombre no puede estar vacío"
MSG_EMPTY_LAST_NAME = "El apellido no puede estar vacío"
MSG_EMPTY_DOCUMENT = "El número de documento no puede estar vacío"
MSG_EMPTY_PHONE = "El número de teléfono no puede estar vacío"
MSG_EMPTY_EMAIL = "El correo electrónico no puede estar vacío"
MSG_INVALID_EMAIL = "Por favor, introduce un correo electrónico válido"
MSG_PASSWORD_LENGTH = "La contraseña debe tener al menos 6 caracteres"
MSG_AGE_NOT_INT = "La edad debe ser un número entero"
MSG_AGE_NEGATIVE = "La edad no puede ser negativa"
MSG_AGE_TOO_HIGH = "La edad no puede ser mayor a 18 años"


def _require_text(value: str, message: str) -> str:
    value = value.strip()
    if not value:
        raise PydanticCustomError("not_empty", message)
    return value


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ParentData(_CamelModel):
    first_name: str
    last_name: str
    document_number: str
    phone_number: str
    email: str
    password: str

    @field_validator("first_name")
    @classmethod
    def check_first_name(cls, v: str) -> str:
        return _require_text(v, MSG_EMPTY_FIRST_NAME)

    @field_validator("last_name")
    @classmethod
    def check_last_name(cls, v: str) -> str:
        return _require_text(v, MSG_EMPTY_LAST_NAME)

    @field_validator("document_number")
    @classmethod
    def check_document_number(cls, v: str) -> str:
        return _require_text(v, MSG_EMPTY_DOCUMENT)

    @field_validator("phone_number")
    @classmethod
    def check_phone_number(cls, v: str) -> str:
        return _require_text(v, MSG_EMPTY_PHONE)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        v = _require_text(v, MSG_EMPTY_EMAIL)
        try:
            validate_email(v, check_deliverability=False)
        except EmailNotValidError:
            raise PydanticCustomError("email", MSG_INVALID_EMAIL)
        return v

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        if not MIN_PASSWORD_LENGTH <= len(v) <= MAX_PASSWORD_LENGTH:
            raise PydanticCustomError("password_length", MSG_PASSWORD_LENGTH)
        return v


class ChildData(_CamelModel):
    first_name: str
    last_name: str
    age: int
    document_number: str

    @field_validator("first_name")
    @classmethod
    def check_first_name(cls, v: str) -> str:
        return _require_text(v, MSG_EMPTY_FIRST_NAME)

    @field_validator("last_name")
    @classmethod
    def check_last_name(cls, v: str) -> str:
        return _require_text(v, MSG_EMPTY_LAST_NAME)

    @field_validator("document_number")
    @classmethod
    def check_document_number(cls, v: str) -> str:
        return _require_text(v, MSG_EMPTY_DOCUMENT)

    @field_validator("age", mode="before")
    @classmethod
    def coerce_age(cls, v: Any) -> int:
        if isinstance(v, bool):
            raise PydanticCustomError("age_int", MSG_AGE_NOT_INT)
        if isinstance(v, int):
            return v
        if isinstance(v, str):
            try:
                return int(v.strip())
            except ValueError:
                pass
        raise PydanticCustomError("age_int", MSG_AGE_NOT_INT)

    @field_validator("age")
    @classmethod
    def check_age_range(cls, v: int) -> int:
        if v < MIN_AGE:
            raise PydanticCustomError("age_min", MSG_AGE_NEGATIVE)
        if v > MAX_AGE:
            raise PydanticCustomError("age_max", MSG_AGE_TOO_HIGH)
        return v


class _CodeRequest(_CamelModel):
    code: str = ""

    @field_validator("code", mode="before")
    @classmethod
    def coerce_code(cls, v: Any) -> str:
        # A missing, null or non-text code is simply not a valid code.
        return v if isinstance(v, str) else ""


class RegisterRequest(_CodeRequest):
    """Sections stay raw here: they are validated only once the code is redeemed."""
    parent_data: Any = None
    child_data: Any = None


class VerifyCodeRequest(_CodeRequest):
    pass


class LoginRequest(_CamelModel):
    document_number: str
    password: str


# --- Responses ----------------------------------------------------------------

class UserSummary(_CamelModel):
    id: int
    email: str
    first_name: str
    last_name: str


class RegisterResponse(_CamelModel):
    message: str
    token: str
    user: UserSummary


class VerifyCodeResponse(_CamelModel):
    success: bool
    message: str


class LoginResponse(_CamelModel):
    token: str


class MessageResponse(_CamelModel):
    message: str
