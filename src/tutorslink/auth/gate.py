"""
tutorslink.auth.gate

Authorization gate for privileged operations.

Responsibilities:
- Reject callers without the staff claim.
"""

from __future__ import annotations

from tutorslink.auth.models import Principal
from tutorslink.errors import PermissionDenied


def require_staff(caller: Principal | None, *, message: str = "Only staff can perform this action.") -> Principal:
    # Unauthenticated callers get the same answer as authenticated non-staff.
    if caller is None or not caller.claims.staff:
        raise PermissionDenied(message)
    return caller
