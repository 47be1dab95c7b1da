from __future__ import annotations

import pytest

from tutorslink.auth.claims import fallback_role, resolve_role, role_for
from tutorslink.auth.models import Claims, Principal, Role

ADMIN = "admin@tutorslink.test"


@pytest.mark.parametrize(
    "claims",
    [Claims(staff=True), Claims(staff=True, tutor=True)],
)
def test_staff_claim_wins_over_everything(claims: Claims) -> None:
    assert resolve_role(claims, email="someone@example.com", admin_email=ADMIN) is Role.staff


@pytest.mark.parametrize("email", [ADMIN, "Admin@TutorsLink.TEST", "  admin@tutorslink.test "])
def test_admin_email_resolves_to_staff_without_claims(email: str) -> None:
    assert resolve_role(Claims(tutor=True), email=email, admin_email=ADMIN) is Role.staff


def test_tutor_claim_without_staff() -> None:
    assert resolve_role(Claims(tutor=True), email="t@example.com", admin_email=ADMIN) is Role.tutor


def test_no_claims_is_student() -> None:
    assert resolve_role(Claims(), email="s@example.com", admin_email=ADMIN) is Role.student


def test_admin_email_ignored_when_not_configured() -> None:
    assert resolve_role(Claims(), email=ADMIN, admin_email=None) is Role.student


def test_absent_principal_is_guest() -> None:
    assert role_for(None, Claims(staff=True), admin_email=ADMIN) is Role.guest


def test_failed_claim_fetch_never_grants_tutor() -> None:
    principal = Principal(uid="u1", email="t@example.com")
    assert role_for(principal, None, admin_email=ADMIN) is Role.student
    assert fallback_role(email=ADMIN, admin_email=ADMIN) is Role.staff


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ({"staff": True}, Claims(staff=True)),
        ({"staff": "true", "tutor": 1}, Claims()),
        ({"tutor": True, "beta": True}, Claims(tutor=True)),
        (None, Claims()),
    ],
)
def test_claims_only_accept_literal_true(raw, expected: Claims) -> None:
    assert Claims.from_mapping(raw) == expected
