"""
tutorslink.api

HTTP API package (FastAPI).

Responsibilities:
- App factory, dependency wiring, and routers for callables, webhooks, and REST.
"""

# Package marker.
