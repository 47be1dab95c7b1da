"""
tutorslink.api.routers

Router package; each module exposes a module-level `router`.
"""

# Package marker.
