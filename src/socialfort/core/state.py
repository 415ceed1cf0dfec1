"""Authorization state — the CSRF token bound to a single authorization attempt."""

from __future__ import annotations

import hmac
import secrets

from socialfort.errors import StateMismatch


def generate_state() -> str:
    """New unguessable state value. Never reuse one across attempts."""
    return secrets.token_urlsafe(32)


def verify_state(received: str | None, expected: str | None) -> None:
    """Check the callback state against the issued one in constant time.

    Raises:
        StateMismatch: If either value is missing or they differ.
    """
    if not received or not expected:
        raise StateMismatch("Missing OAuth state")
    if not hmac.compare_digest(received.encode("utf-8"), expected.encode("utf-8")):
        raise StateMismatch("OAuth state mismatch")
