"""
tutorslink.client

Client SDK consumed by the UI layer.

Responsibilities:
- Token-based identity provider (sign in/out, auth-state events, claim refresh).
- Functions client for callables and REST routes, with a stub mode.
- Static user-facing messages for identity error codes.
"""

from tutorslink.client.functions import FunctionsClient
from tutorslink.client.identity import TokenIdentityProvider
from tutorslink.client.messages import friendly_auth_error

__all__ = ["FunctionsClient", "TokenIdentityProvider", "friendly_auth_error"]
