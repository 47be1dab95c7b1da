"""
tutorslink.session.visibility

Role-gated UI affordances.

Responsibilities:
- Register affordances with an allow-list of roles (comma-separated or iterable).
- Compute which affordances are visible for a role (`*` allows every role).
"""

from __future__ import annotations

from collections.abc import Iterable

from tutorslink.auth.models import Role

WILDCARD = "*"


def parse_allow_list(allowed: str | Iterable[str]) -> frozenset[str]:
    # Accepts the markup form ("student, tutor") as well as an iterable of roles.
    items = allowed.split(",") if isinstance(allowed, str) else allowed
    return frozenset(str(r).strip() for r in items if str(r).strip())


def is_visible(allowed: frozenset[str], role: Role | None) -> bool:
    if WILDCARD in allowed:
        return True
    return role is not None and role.value in allowed


class VisibilityRegistry:
    def __init__(self) -> None:
        self._rules: dict[str, frozenset[str]] = {}
        self._visible: dict[str, bool] = {}
        self._role: Role | None = None

    def register(self, name: str, allowed: str | Iterable[str]) -> bool:
        """
        Add (or replace) an affordance; returns its visibility under the current role.
        """

        rule = parse_allow_list(allowed)
        self._rules[name] = rule
        self._visible[name] = is_visible(rule, self._role)
        return self._visible[name]

    def apply(self, role: Role) -> dict[str, bool]:
        self._role = role
        self._visible = {name: is_visible(rule, role) for name, rule in self._rules.items()}
        return dict(self._visible)

    def visible(self, name: str) -> bool:
        return self._visible.get(name, False)

    def snapshot(self) -> dict[str, bool]:
        return dict(self._visible)


def default_registry() -> VisibilityRegistry:
    # Navigation affordances every page carries.
    reg = VisibilityRegistry()
    reg.register("auth-button", "guest")
    reg.register("profile-button", "student,tutor,staff")
    reg.register("auth-status", "student,tutor,staff")
    return reg
