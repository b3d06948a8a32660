"""Root conftest — shared test configuration."""

import os

# Ensure tests never touch a real database, mail server, or production secret
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SMTP_HOST", "")
os.environ.setdefault("VERIFICATION_BASE_URL", "http://test")
