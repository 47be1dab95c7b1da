"""
tutorslink.auth

Authentication/authorization package.

Responsibilities:
- Identity token helpers and validation.
- Claims -> role resolution.
- The staff authorization gate and FastAPI auth dependencies.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# `models` and `claims` have no FastAPI dependency so the client SDK can reuse them.
