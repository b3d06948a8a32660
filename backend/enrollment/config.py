"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded in production)
    - get_settings() is cached (lru_cache): single instance per process
    - Login token expiry is shorter than the registration token expiry

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Empty smtp_host selects the log-only mailer: works out-of-the-box for local dev
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://enrollment:enrollment@db:5432/enrollment"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 10
    database_max_overflow: int = 5

    # Tokens
    jwt_secret: str = "dev-change-this-secret"
    jwt_algorithm: str = "HS256"
    registration_token_expire_minutes: int = 24 * 60
    verification_token_expire_minutes: int = 12 * 60
    login_token_expire_minutes: int = 60

    # Passwords
    bcrypt_rounds: int = 10

    # Mail
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_use_tls: bool = True
    smtp_timeout_seconds: int = 10
    smtp_user: str = ""
    smtp_password: str = ""
    mail_from: str = ""
    verification_base_url: str = "http://localhost:5000"

    # API
    cors_origins: list[str] = ["http://localhost:3000"]
    port: int = 5000

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def sender_address(self) -> str:
        return self.mail_from or self.smtp_user

    def verification_url(self, token: str) -> str:
        return f"{self.verification_base_url.rstrip('/')}/verify-email/{token}"


@lru_cache
def get_settings() -> Settings:
    return Settings()
