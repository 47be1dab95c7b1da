"""
tutorslink.services

Service-layer package.

Responsibilities:
- Own transaction boundaries and persistence decisions.
- Validate callable payloads and apply the authorization gate.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services take an AsyncSession and plain dict payloads, so they are testable
# without the HTTP layer.
