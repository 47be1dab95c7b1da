"""
tutorslink.auth.models

Auth domain models.

Responsibilities:
- Define the closed claim set (`Claims`) carried by identity tokens.
- Define the authenticated identity type (`Principal`).
- Define the application `Role` values.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


class Role(enum.StrEnum):
    guest = "guest"
    student = "student"
    tutor = "tutor"
    staff = "staff"


@dataclass(frozen=True, slots=True)
class Claims:
    """
    Role-bearing claims. Only a literal boolean `true` counts as a grant.
    """

    staff: bool = False
    tutor: bool = False

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> Claims:
        if not raw:
            return cls()
        return cls(staff=raw.get("staff") is True, tutor=raw.get("tutor") is True)

    def as_dict(self) -> dict[str, bool]:
        return {"staff": self.staff, "tutor": self.tutor}


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated identity for one session or request.
    """

    uid: str
    email: str | None = None
    display_name: str | None = None
    claims: Claims = field(default_factory=Claims)

    @property
    def is_staff(self) -> bool:
        return self.claims.staff


def principal_from_token(payload: Mapping[str, Any]) -> Principal:
    # Normalize a decoded token payload into our internal type.
    email = payload.get("email")
    name = payload.get("name")
    return Principal(
        uid=str(payload.get("sub", "")),
        email=str(email) if email else None,
        display_name=str(name) if name else None,
        claims=Claims.from_mapping(payload),
    )


# --- Module Notes -----------------------------------------------------------
# Server-side accounts keep an open claims map (see `db.models.UserAccount`); only
# the staff/tutor keys cross the token boundary.
