"""Register — invite-code gated creation of parent + child.

Invariants:
    - Success → 201 with token and user summary echoing the input email
    - Code consumed exactly once; a used code → 400 'Código inválido o ya utilizado'
    - The code is checked before the parent/child sections: a bad code wins
    - Email uniqueness ignores case
    - Any failure leaves no parent/child rows and the code unused
    - Field errors collected together; age 0 and 18 accepted, -1 and 19 rejected
    - Verification email dispatched after commit; mail failure keeps the 201
"""

import jwt
import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from enrollment.core.security import VERIFICATION_PURPOSE, verify_password
from enrollment.models.child import Child
from enrollment.models.parent import Parent
from enrollment.models.registration_code import RegistrationCode
from tests.services.payloads import register_payload, second_family


async def _count(db, model) -> int:
    result = await db.execute(select(func.count()).select_from(model))
    return result.scalar_one()


async def _code_used(db, code: str) -> bool:
    result = await db.execute(
        select(RegistrationCode.is_used).where(RegistrationCode.code == code),
    )
    return result.scalar_one()


def _fields(res) -> set[str]:
    return {e["field"] for e in res.json()["errors"]}


# ─── success path ────────────────────────────────────────────────

async def test_register_returns_201_with_token_and_user(client, seed_code):
    res = await client.post("/register", json=register_payload())

    assert res.status_code == 201
    body = res.json()
    assert body["message"] == (
        "Registro exitoso. Por favor, verifica tu correo electrónico."
    )
    assert body["token"]
    assert body["user"]["email"] == "ana@example.com"
    assert body["user"]["firstName"] == "Ana"
    assert body["user"]["lastName"] == "García"
    assert isinstance(body["user"]["id"], int)


async def test_registration_token_carries_id_and_email(client, seed_code):
    res = await client.post("/register", json=register_payload())
    body = res.json()

    claims = jwt.decode(body["token"], "test-secret", algorithms=["HS256"])
    assert claims["id"] == body["user"]["id"]
    assert claims["email"] == "ana@example.com"
    assert "userId" not in claims


async def test_register_persists_linked_rows_and_marks_code(client, seed_code, test_db):
    await client.post("/register", json=register_payload())

    parent = (await test_db.execute(select(Parent))).scalar_one()
    child = (await test_db.execute(select(Child))).scalar_one()
    assert child.parent_id == parent.id
    assert child.age == 9
    assert parent.is_email_verified is False
    assert await _code_used(test_db, "ABC123") is True


async def test_password_stored_hashed(client, seed_code, test_db):
    await client.post("/register", json=register_payload())

    parent = (await test_db.execute(select(Parent))).scalar_one()
    assert parent.password_hash != "secreto123"
    assert verify_password("secreto123", parent.password_hash)
    assert not verify_password("otra-clave", parent.password_hash)


async def test_verification_email_sent_with_link(client, seed_code, mailer):
    await client.post("/register", json=register_payload())

    assert len(mailer.sent) == 1
    message = mailer.sent[0]
    assert message["to"] == "ana@example.com"
    assert message["subject"] == "Verifica tu correo electrónico"
    assert 'href="http://test/verify-email/' in message["html"]

    token = message["html"].split("/verify-email/")[1].split('"')[0]
    claims = jwt.decode(token, "test-secret", algorithms=["HS256"])
    assert claims["email"] == "ana@example.com"
    assert claims["purpose"] == VERIFICATION_PURPOSE


async def test_mail_failure_does_not_fail_registration(client, seed_code, mailer, test_db):
    mailer.fail = True

    res = await client.post("/register", json=register_payload())

    assert res.status_code == 201
    assert await _count(test_db, Parent) == 1
    assert await _code_used(test_db, "ABC123") is True


# ─── code redemption ─────────────────────────────────────────────

async def test_second_registration_with_same_code_rejected(client, seed_code, test_db):
    first = await client.post("/register", json=register_payload())
    second = await client.post("/register", json=second_family("ABC123"))

    assert first.status_code == 201
    assert second.status_code == 400
    assert second.json() == {"message": "Código inválido o ya utilizado"}
    assert await _count(test_db, Parent) == 1


async def test_used_code_rejected(client, used_code, test_db, mailer):
    res = await client.post("/register", json=register_payload("USED01"))

    assert res.status_code == 400
    assert res.json()["message"] == "Código inválido o ya utilizado"
    assert await _count(test_db, Parent) == 0
    assert mailer.sent == []


async def test_unknown_code_rejected(client, seed_code, test_db):
    res = await client.post("/register", json=register_payload("WRONG"))

    assert res.status_code == 400
    assert await _count(test_db, Parent) == 0
    assert await _code_used(test_db, "ABC123") is False


async def test_used_code_wins_over_invalid_fields(client, used_code, test_db):
    res = await client.post("/register", json=register_payload(
        "USED01", parent={"email": "no-es-correo"}, child={"age": 19},
    ))

    assert res.status_code == 400
    assert res.json() == {"message": "Código inválido o ya utilizado"}
    assert await _count(test_db, Parent) == 0


@pytest.mark.parametrize("code", [None, 42])
async def test_non_text_code_rejected_as_invalid(client, seed_code, test_db, code):
    res = await client.post("/register", json=register_payload(code))

    assert res.status_code == 400
    assert res.json() == {"message": "Código inválido o ya utilizado"}
    assert await _code_used(test_db, "ABC123") is False


async def test_preflight_check_does_not_reserve_code(client, seed_code, test_db):
    """Two callers both pass /verify-code; only one registration wins."""
    check_a = await client.post("/verify-code", json={"code": "ABC123"})
    check_b = await client.post("/verify-code", json={"code": "ABC123"})
    assert check_a.status_code == check_b.status_code == 200

    reg_a = await client.post("/register", json=register_payload())
    reg_b = await client.post("/register", json=second_family("ABC123"))

    assert sorted([reg_a.status_code, reg_b.status_code]) == [201, 400]
    assert await _count(test_db, Parent) == 1
    assert await _count(test_db, Child) == 1


# ─── validation ──────────────────────────────────────────────────

@pytest.mark.parametrize("age", [0, 18])
async def test_boundary_ages_accepted(client, seed_code, age):
    res = await client.post(
        "/register", json=register_payload(child={"age": age}),
    )
    assert res.status_code == 201


@pytest.mark.parametrize("age, message", [
    (-1, "La edad no puede ser negativa"),
    (19, "La edad no puede ser mayor a 18 años"),
])
async def test_out_of_range_ages_rejected(client, seed_code, test_db, age, message):
    res = await client.post(
        "/register", json=register_payload(child={"age": age}),
    )

    assert res.status_code == 400
    assert res.json()["errors"] == [{"field": "childData.age", "message": message}]
    assert await _code_used(test_db, "ABC123") is False


async def test_field_errors_collected_together(client, seed_code, test_db):
    res = await client.post("/register", json=register_payload(
        parent={"firstName": "  ", "email": "no-es-correo", "password": "123"},
        child={"age": "diez"},
    ))

    assert res.status_code == 400
    body = res.json()
    assert body["message"] == "Error de validación"
    assert _fields(res) == {
        "parentData.firstName",
        "parentData.email",
        "parentData.password",
        "childData.age",
    }
    assert await _count(test_db, Parent) == 0


async def test_missing_sections_reported(client, seed_code):
    res = await client.post("/register", json={"code": "ABC123"})

    assert res.status_code == 400
    assert _fields(res) == {"parentData", "childData"}
    assert all(e["message"] == "Este campo es obligatorio" for e in res.json()["errors"])


async def test_duplicate_email_and_documents_reported_per_field(client, test_db):
    test_db.add_all([
        RegistrationCode(code="FIRST1", is_used=False),
        RegistrationCode(code="SECOND", is_used=False),
    ])
    await test_db.commit()
    await client.post("/register", json=register_payload("FIRST1"))

    res = await client.post("/register", json=register_payload("SECOND"))

    assert res.status_code == 400
    assert res.json()["message"] == "Error de validación"
    assert res.json()["errors"] == [
        {"field": "parentData.email",
         "message": "Este correo electrónico ya está registrado"},
        {"field": "parentData.documentNumber",
         "message": "Este número de documento ya está registrado"},
        {"field": "childData.documentNumber",
         "message": "Este número de documento ya está registrado"},
    ]
    # the failed attempt rolled back its redemption
    assert await _code_used(test_db, "SECOND") is False
    assert await _count(test_db, Parent) == 1


async def test_duplicate_email_ignores_case(client, test_db):
    test_db.add_all([
        RegistrationCode(code="FIRST1", is_used=False),
        RegistrationCode(code="SECOND", is_used=False),
    ])
    await test_db.commit()
    first = await client.post("/register", json=register_payload("FIRST1"))

    res = await client.post("/register", json=register_payload(
        "SECOND",
        parent={"documentNumber": "P-1002", "email": "ANA@Example.com"},
        child={"documentNumber": "C-2002"},
    ))

    assert first.status_code == 201
    assert res.status_code == 400
    assert res.json()["errors"] == [{
        "field": "parentData.email",
        "message": "Este correo electrónico ya está registrado",
    }]
    assert await _count(test_db, Parent) == 1


async def test_case_insensitive_email_enforced_by_store(test_db):
    test_db.add(Parent(
        first_name="Ana", last_name="García", document_number="P-1",
        phone_number="1", email="ana@example.com", password_hash="x",
    ))
    await test_db.commit()

    test_db.add(Parent(
        first_name="Ana", last_name="García", document_number="P-2",
        phone_number="1", email="ANA@EXAMPLE.COM", password_hash="x",
    ))
    with pytest.raises(IntegrityError):
        await test_db.commit()
    await test_db.rollback()


async def test_insert_conflict_after_parent_flush_rolls_back(client, seed_code, test_db, monkeypatch):
    """A unique violation raised by the child insert undoes the parent and the code."""
    test_db.add(RegistrationCode(code="OTHER1", is_used=False))
    await test_db.commit()
    await client.post("/register", json=register_payload("OTHER1"))

    async def no_precheck(db, parent_data, child_data):
        return []

    monkeypatch.setattr(
        "enrollment.services.handle_registration._collect_unique_violations",
        no_precheck,
    )
    res = await client.post("/register", json=register_payload(
        parent={"documentNumber": "P-9999", "email": "nuevo@example.com"},
    ))

    assert res.status_code == 400
    assert res.json()["errors"] == [{
        "field": "childData.documentNumber",
        "message": "Este número de documento ya está registrado",
    }]
    assert await _count(test_db, Parent) == 1
    assert await _count(test_db, Child) == 1
    assert await _code_used(test_db, "ABC123") is False


async def test_unexpected_failure_returns_generic_500(client, seed_code, monkeypatch, test_db):
    def explode(*args, **kwargs):
        raise RuntimeError("hash backend down")

    monkeypatch.setattr("enrollment.core.security.hash_password", explode)

    res = await client.post("/register", json=register_payload())

    assert res.status_code == 500
    assert res.json() == {"message": "Error en el servidor"}
    assert await _code_used(test_db, "ABC123") is False
