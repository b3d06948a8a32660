"""Error Hierarchy — typed, categorized exceptions for all enrollment failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) carry a human-readable Spanish message for the caller
    - Infrastructure errors (500-level) never expose internal details in to_response()
    - Unknown document and wrong password share one error (no account enumeration)

Design Decisions:
    - Single hierarchy with EnrollmentError base: FastAPI global handler catches all
    - FieldValidationError carries every field violation, not just the first
"""

from dataclasses import dataclass
from enum import Enum


class ErrorSeverity(str, Enum):
    """Error severity for observability."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    AUTHENTICATION = "authentication"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"


# ─── Caller-facing messages ─────────────────────────────────────

MSG_INVALID_CODE = "Código inválido o ya utilizado"
MSG_VALID_CODE = "Código válido"
MSG_VALIDATION = "Error de validación"
MSG_INVALID_CREDENTIALS = "Credenciales inválidas"
MSG_EMAIL_NOT_VERIFIED = (
    "Por favor, verifica tu correo electrónico antes de iniciar sesión"
)
MSG_INVALID_TOKEN = "Token inválido"
MSG_SERVER_ERROR = "Error en el servidor"
MSG_VERIFICATION_FAILED = "Error en la verificación del correo electrónico"
MSG_DUPLICATE_DOCUMENT = "Este número de documento ya está registrado"
MSG_DUPLICATE_EMAIL = "Este correo electrónico ya está registrado"
MSG_REQUIRED = "Este campo es obligatorio"
MSG_BAD_FORMAT = "Formato inválido"


@dataclass(frozen=True)
class FieldError:
    """A single field-scoped validation failure."""
    field: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


# Structural pydantic error types translated for the caller; custom validator
# messages pass through untouched.
_BUILTIN_MESSAGES = {
    "missing": MSG_REQUIRED,
    "string_type": "Este campo debe ser un texto",
    "model_type": MSG_BAD_FORMAT,
    "model_attributes_type": MSG_BAD_FORMAT,
    "dict_type": MSG_BAD_FORMAT,
    "json_invalid": "JSON inválido",
}


def build_field_errors(raw_errors, prefix: tuple = ()) -> list[FieldError]:
    """Flatten pydantic error dicts into field-scoped errors.

    A leading "body" location is dropped; prefix is prepended to every path.
    """
    errors = []
    for e in raw_errors:
        loc = list(e.get("loc", ()))
        if loc and loc[0] == "body":
            loc = loc[1:]
        field = ".".join(str(part) for part in [*prefix, *loc]) or "body"
        message = _BUILTIN_MESSAGES.get(e.get("type", ""), e.get("msg", ""))
        errors.append(FieldError(field, message))
    return errors


class EnrollmentError(Exception):
    """Base exception for all enrollment errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to the REST error body."""
        return {"message": self.message}


# ─── Domain Errors (400-level) ──────────────────────────────────

class InvalidOrUsedCodeError(EnrollmentError):
    """Registration code does not exist or was already redeemed."""
    def __init__(self):
        super().__init__(
            MSG_INVALID_CODE, "INVALID_OR_USED_CODE",
            ErrorCategory.BUSINESS_RULE, ErrorSeverity.WARNING, 400,
        )


class FieldValidationError(EnrollmentError):
    """One or more request fields failed validation."""
    def __init__(self, errors: list[FieldError], code: str = "VALIDATION_ERROR"):
        super().__init__(
            MSG_VALIDATION, code, ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, 400,
        )
        self.errors = list(errors)

    def to_response(self) -> dict:
        return {
            "message": self.message,
            "errors": [e.to_dict() for e in self.errors],
        }


class UniqueConstraintViolation(FieldValidationError):
    """Email or document number already registered."""
    def __init__(self, errors: list[FieldError]):
        super().__init__(errors, code="UNIQUE_CONSTRAINT_VIOLATION")
        self.category = ErrorCategory.CONFLICT


class InvalidCredentialsError(EnrollmentError):
    """Unknown document number or wrong password."""
    def __init__(self):
        super().__init__(
            MSG_INVALID_CREDENTIALS, "INVALID_CREDENTIALS",
            ErrorCategory.AUTHENTICATION, ErrorSeverity.WARNING, 400,
        )


class EmailNotVerifiedError(EnrollmentError):
    """Correct credentials but the parent has not verified the email."""
    def __init__(self):
        super().__init__(
            MSG_EMAIL_NOT_VERIFIED, "EMAIL_NOT_VERIFIED",
            ErrorCategory.AUTHENTICATION, ErrorSeverity.WARNING, 400,
        )


class InvalidTokenError(EnrollmentError):
    """Token signature, expiry or purpose check failed."""
    def __init__(self, reason: str = ""):
        super().__init__(
            MSG_INVALID_TOKEN, "INVALID_TOKEN",
            ErrorCategory.AUTHENTICATION, ErrorSeverity.WARNING, 400,
        )
        self.reason = reason


class UnknownParentError(EnrollmentError):
    """Verification token names an email with no parent behind it."""
    def __init__(self, email: str):
        super().__init__(
            MSG_INVALID_TOKEN, "UNKNOWN_PARENT",
            ErrorCategory.BUSINESS_RULE, ErrorSeverity.WARNING, 400,
        )
        self.email = email


# ─── Infrastructure Errors (500-level) ──────────────────────────

class ServerError(EnrollmentError):
    """Unexpected failure; the caller only sees a generic message."""
    def __init__(self, message: str = MSG_SERVER_ERROR, code: str = "SERVER_ERROR"):
        super().__init__(
            message, code, ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, 500,
        )


class DatabaseError(ServerError):
    """Database operation failed."""
    def __init__(self, detail: str, operation: str):
        super().__init__(code="DATABASE_ERROR")
        self.category = ErrorCategory.DATABASE
        self.detail = f"Database {operation} failed: {detail}"
        self.operation = operation


class MailError(EnrollmentError):
    """Outbound email could not be delivered. Never surfaced to HTTP callers."""
    def __init__(self, recipient: str, detail: str):
        super().__init__(
            MSG_SERVER_ERROR, "MAIL_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, 500,
        )
        self.recipient = recipient
        self.detail = detail
