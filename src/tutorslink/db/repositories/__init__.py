"""
tutorslink.db.repositories

Repository package: one thin repository per collection.
"""

# Package marker; repositories are imported directly from submodules.


# --- Module Notes -----------------------------------------------------------
# Repositories flush but never commit; services own the transaction boundary.
