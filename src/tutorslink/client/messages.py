"""
tutorslink.client.messages

User-facing strings for identity provider error codes; raw codes are never shown.
"""

from __future__ import annotations

AUTH_ERROR_MESSAGES: dict[str, str] = {
    "auth/invalid-email": "Invalid email address.",
    "auth/user-not-found": "No account found with that email.",
    "auth/wrong-password": "Incorrect password.",
    "auth/email-already-in-use": "An account with that email already exists.",
    "auth/weak-password": "Password must be at least 6 characters.",
    "auth/too-many-requests": "Too many attempts. Please try again later.",
    "auth/popup-closed-by-user": "Sign-in popup was closed.",
    "auth/network-request-failed": "Network error. Please check your connection.",
}

DEFAULT_AUTH_ERROR = "An error occurred. Please try again."


def friendly_auth_error(code: str | None) -> str:
    return AUTH_ERROR_MESSAGES.get(code or "", DEFAULT_AUTH_ERROR)
