"""
tutorslink.session

Client-side role session management.

Responsibilities:
- Hold the current principal/role pair as an explicit state object.
- Drive affordance visibility and notify role-change observers.
"""

from tutorslink.session.manager import RoleSessionManager, SessionState
from tutorslink.session.visibility import WILDCARD, VisibilityRegistry

__all__ = ["RoleSessionManager", "SessionState", "VisibilityRegistry", "WILDCARD"]
