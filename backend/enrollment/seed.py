"""Seed CLI — out-of-band creation of registration codes and password hashes.

Usage:
    python -m enrollment.seed codes ABC123 XYZ789
    python -m enrollment.seed hash-password 12345678

Invariants:
    - Existing codes are skipped, never reset (a used code stays used)
    - Uses the standalone session factory (db/session.py), not the FastAPI lifespan
"""

import argparse
import asyncio
import logging

from sqlalchemy import select

from enrollment.config import get_settings
from enrollment.core.security import hash_password
from enrollment.db.session import create_session_factory
from enrollment.infrastructure.observability import setup_logging
from enrollment.models.registration_code import RegistrationCode

logger = logging.getLogger(__name__)


async def seed_codes(database_url: str, codes: list[str]) -> tuple[list[str], list[str]]:
    """Insert unused codes. Returns (created, skipped)."""
    session_factory = create_session_factory(database_url)
    created, skipped = [], []
    try:
        async with session_factory() as db:
            wanted = list(dict.fromkeys(c.strip() for c in codes if c.strip()))
            result = await db.execute(
                select(RegistrationCode.code).where(RegistrationCode.code.in_(wanted)),
            )
            existing = set(result.scalars().all())
            for code in wanted:
                if code in existing:
                    skipped.append(code)
                    continue
                db.add(RegistrationCode(code=code, is_used=False))
                created.append(code)
            await db.commit()
    finally:
        await session_factory.kw["bind"].dispose()
    return created, skipped


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="enrollment.seed")
    sub = parser.add_subparsers(dest="command", required=True)

    codes = sub.add_parser("codes", help="create unused registration codes")
    codes.add_argument("codes", nargs="+")
    codes.add_argument("--database-url", default=None)

    pw = sub.add_parser("hash-password", help="print a bcrypt hash")
    pw.add_argument("password")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level, "text")

    if args.command == "hash-password":
        print(hash_password(args.password, settings.bcrypt_rounds))
        return 0

    created, skipped = asyncio.run(
        seed_codes(args.database_url or settings.database_url, args.codes),
    )
    logger.info(f"Created {len(created)} code(s): {', '.join(created) or '-'}")
    if skipped:
        logger.warning(f"Skipped existing code(s): {', '.join(skipped)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
