"""
tutorslink.notifier

Outbound notification package.

Responsibilities:
- Deliver advisory event summaries (Discord embeds) to one configured webhook.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Notifications are never part of a write's consistency boundary; the API layer
# dispatches them as background tasks after the commit.
