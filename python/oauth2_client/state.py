"""Per-attempt state tokens for CSRF protection on the authorization redirect."""

from __future__ import annotations

import hmac
import secrets


def generate_state() -> str:
    return secrets.token_hex(16)


def validate_state(expected: str, returned: str | None) -> bool:
    """Return True only if ``returned`` is exactly the ``expected`` state."""
    if not expected or returned is None:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), returned.encode("utf-8"))
