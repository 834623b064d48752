"""API route configuration and protocol constants."""

from typing import Final

# Base prefix for all API routes
API_PREFIX = "/api"

# WebSocket endpoint (relative to API_PREFIX)
WS_ENDPOINT = "/ws"

# Router prefixes (relative to API_PREFIX)
CONTACTS_PREFIX = "/contacts"

# Signal pushed to every live-update client whenever contact data changes.
UPDATE_SIGNAL: Final[str] = "Update"

# Topic label carried in every outgoing envelope.
CONTACTS_TOPIC: Final[str] = "contacts"


def get_full_path(relative_path: str) -> str:  # noqa: D401 – tiny helper
    """Return absolute API path by joining *relative_path* onto API_PREFIX."""

    return f"{API_PREFIX}{relative_path}"


__all__ = [
    "API_PREFIX",
    "WS_ENDPOINT",
    "CONTACTS_PREFIX",
    "UPDATE_SIGNAL",
    "CONTACTS_TOPIC",
    "get_full_path",
]
