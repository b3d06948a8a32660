"""Outbound Mail — transactional email transports and the verification email.

Invariants:
    - One "to" address per message, HTML body, sent from the configured account
    - send() raises MailError on any transport failure; callers decide whether to swallow
    - send_verification_email() never raises: mail is best-effort relative to registration
    - No retries (a failed send is logged and dropped)

Design Decisions:
    - SmtpMailer over smtplib: STARTTLS + login, one connection per message
    - LogMailer when no SMTP host is configured: local dev and tests never hit the network
    - Mailer built once in the lifespan and stored on app.state; get_mailer() is the
      FastAPI dependency so tests can override it with a fake
"""

import logging
import smtplib
from email.message import EmailMessage
from typing import Protocol

from fastapi import Request

from enrollment.config import Settings
from enrollment.core.errors import MailError

logger = logging.getLogger(__name__)

VERIFICATION_SUBJECT = "Verifica tu correo electrónico"
VERIFICATION_HTML = (
    'Por favor, verifica tu correo electrónico haciendo clic '
    '<a href="{url}">aquí</a>.'
)


class Mailer(Protocol):
    def send(self, to: str, subject: str, html: str) -> None:
        ...


class SmtpMailer:
    """Sends mail through an authenticated SMTP account."""

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        sender: str,
        use_tls: bool = True,
        timeout: int = 10,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender
        self.use_tls = use_tls
        self.timeout = timeout

    def _build_message(self, to: str, subject: str, html: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content("Este mensaje requiere un cliente de correo con soporte HTML.")
        message.add_alternative(html, subtype="html")
        return message

    def send(self, to: str, subject: str, html: str) -> None:
        message = self._build_message(to, subject, html)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                if self.user:
                    server.login(self.user, self.password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise MailError(to, f"{type(e).__name__}: {e}") from e
        logger.info(f"Mail sent: {subject}", extra={"recipient": to})


class LogMailer:
    """Development transport: logs instead of sending. Keeps no state."""

    def send(self, to: str, subject: str, html: str) -> None:
        logger.info(f"Mail not sent (no SMTP host): {subject}", extra={"recipient": to})
        logger.debug(f"Unsent mail body: {html}", extra={"recipient": to})


def build_mailer(settings: Settings) -> Mailer:
    """Pick the transport from settings."""
    if not settings.smtp_host:
        logger.warning("SMTP_HOST not configured, using log-only mailer")
        return LogMailer()
    return SmtpMailer(
        host=settings.smtp_host,
        port=settings.smtp_port,
        user=settings.smtp_user,
        password=settings.smtp_password,
        sender=settings.sender_address,
        use_tls=settings.smtp_use_tls,
        timeout=settings.smtp_timeout_seconds,
    )


def get_mailer(request: Request) -> Mailer:
    """FastAPI dependency for the process-wide mailer."""
    mailer = getattr(request.app.state, "mailer", None)
    if mailer is None:
        raise RuntimeError("Mailer not initialized")
    return mailer


def send_verification_email(mailer: Mailer, to: str, verification_url: str) -> bool:
    """Best-effort verification email. Returns whether the send succeeded."""
    try:
        mailer.send(
            to, VERIFICATION_SUBJECT, VERIFICATION_HTML.format(url=verification_url),
        )
        return True
    except MailError as e:
        logger.warning(
            f"Verification email not delivered: {e.detail}",
            extra={"recipient": to, "error_code": e.code},
        )
    except Exception as e:
        logger.error(
            f"Unexpected mail failure: {e}",
            extra={"recipient": to}, exc_info=True,
        )
    return False
