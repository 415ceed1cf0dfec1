"""SocialFort errors — one exception type per failure kind, all inspectable.

Every error carries a machine-readable ``code``, an HTTP-ish ``status_code``
for adapters that surface it, and the flow ``step`` it happened in (filled in
by the flow that was running when it was raised).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from socialfort.flows.base import FlowStep


class SocialAuthError(Exception):
    """Base social login error with an error code and HTTP status."""

    default_code = "social_auth_error"
    default_status_code = 400

    def __init__(
        self,
        message: str,
        code: str | None = None,
        status_code: int | None = None,
        *,
        step: FlowStep | None = None,
        **extra,
    ):
        self.message = message
        self.code = code or self.default_code
        self.status_code = status_code or self.default_status_code
        self.step = step
        self.extra = extra
        super().__init__(message)


class ConfigurationError(SocialAuthError):
    """A required credential or endpoint is missing or invalid."""

    default_code = "configuration_error"
    default_status_code = 500


class StateMismatch(SocialAuthError):
    """The callback's state (or request token) does not match what was issued."""

    default_code = "state_mismatch"


class AuthorizationDenied(SocialAuthError):
    """The provider reported that the user declined the authorization."""

    default_code = "authorization_denied"
    default_status_code = 403


class CallbackMalformed(SocialAuthError):
    """The callback query is missing fields the flow needs."""

    default_code = "callback_malformed"


class MalformedTokenResponse(SocialAuthError):
    """The token endpoint body could not be decoded or has no primary token."""

    default_code = "malformed_token_response"
    default_status_code = 502


class TransportError(SocialAuthError):
    """Network failure or non-2xx answer from a provider endpoint."""

    default_code = "transport_error"
    default_status_code = 502


class ProfileFetchError(SocialAuthError):
    """The profile endpoint answered with an error payload or an unreadable body."""

    default_code = "profile_fetch_error"
    default_status_code = 502
