"""Seed CLI — out-of-band registration code creation."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine

from enrollment.db.base import Base
from enrollment.models.registration_code import RegistrationCode
from enrollment.seed import main, seed_codes
import enrollment.models  # noqa: F401


async def _prepare(url: str) -> None:
    engine = create_async_engine(url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.execute(
            RegistrationCode.__table__.insert().values(code="OLD001", is_used=True),
        )
    await engine.dispose()


async def test_seed_creates_new_codes_and_skips_existing(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'seed.db'}"
    await _prepare(url)

    created, skipped = await seed_codes(url, ["ABC123", "OLD001", "ABC123", " "])

    assert created == ["ABC123"]
    assert skipped == ["OLD001"]

    engine = create_async_engine(url)
    async with engine.connect() as conn:
        rows = (await conn.execute(
            select(RegistrationCode.code, RegistrationCode.is_used)
            .order_by(RegistrationCode.code),
        )).all()
    await engine.dispose()
    assert [tuple(r) for r in rows] == [("ABC123", False), ("OLD001", True)]


def test_hash_password_command(capsys):
    assert main(["hash-password", "12345678"]) == 0
    assert capsys.readouterr().out.strip().startswith("$2")
