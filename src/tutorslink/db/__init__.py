"""
tutorslink.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide ORM models, engine/session setup, and per-collection repositories.
"""

# Package marker.
