"""Authorization flow base class — the interface both protocol variants implement.

A flow holds only immutable collaborators (profile, config, transport), so one
instance can drive any number of concurrent authorization attempts. Everything
that belongs to a single attempt (state, request token, code, verifier) is
passed in and returned, never stored on the flow.
"""

from __future__ import annotations

import abc
import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import httpx

from socialfort.config import ProviderConfig
from socialfort.core.tokens import AccessToken
from socialfort.core.user import NormalizedUser
from socialfort.errors import ProfileFetchError, SocialAuthError
from socialfort.providers.base import ProviderProfile
from socialfort.transport import HttpTransport

logger = logging.getLogger("socialfort.flows")


class FlowStep(str, Enum):
    """Steps of an authorization attempt. ``error.step`` names the one that failed."""

    INITIAL = "initial"
    REQUEST_TOKEN_OBTAINED = "request_token_obtained"
    REDIRECT_BUILT = "redirect_built"
    CALLBACK_RECEIVED = "callback_received"
    TOKEN_EXCHANGED = "token_exchanged"
    PROFILE_FETCHED = "profile_fetched"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class AuthorizationRequest:
    """What the caller must keep (e.g. in its session) until the callback arrives.

    OAuth2 attempts carry ``state``; OAuth1 attempts carry the request token,
    whose secret is needed to exchange the verifier.
    """

    provider: str
    url: str
    state: str | None = field(default=None, repr=False)
    request_token: AccessToken | None = field(default=None, repr=False)


class AuthorizationFlow(abc.ABC):
    """Abstract base for both flow variants.

    Subclasses must implement:
        begin()          — start an attempt, returning the redirect
        complete()       — callback -> token -> profile -> NormalizedUser
        fetch_profile()  — fetch the raw provider profile for a token
    """

    def __init__(
        self,
        profile: ProviderProfile,
        config: ProviderConfig,
        *,
        transport: HttpTransport | None = None,
    ) -> None:
        self.profile = profile
        self.config = config
        self.transport = transport or HttpTransport(timeout=config.timeout)

    @property
    def name(self) -> str:
        return self.profile.name

    @abc.abstractmethod
    def begin(self) -> AuthorizationRequest: ...

    @abc.abstractmethod
    def complete(
        self, query: Mapping[str, str], request: AuthorizationRequest | None,
    ) -> NormalizedUser: ...

    @abc.abstractmethod
    def fetch_profile(self, token: AccessToken) -> dict[str, Any]: ...

    def map_user(self, raw: Mapping[str, Any], token: AccessToken | None = None) -> NormalizedUser:
        user = self.profile.map_user(raw)
        return user.with_token(token) if token is not None else user

    def get_user(self, token: AccessToken) -> NormalizedUser:
        """Fetch and normalize the profile behind ``token``."""
        raw = self.fetch_profile(token)
        user = self.map_user(raw, token)
        logger.info("Completed %s login for user id %s", self.name, user.id or "<unknown>")
        return user

    def request_json(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Plain (unsigned) API call returning the decoded JSON body."""
        if self.profile.accept_json:
            headers = {"Accept": "application/json", **(headers or {})}
        response = self.transport.request(method, url, params=params, headers=headers)
        return self.decode_json(response)

    def decode_json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ProfileFetchError(
                f"{self.name} returned a non-JSON body from {response.request.url}",
            ) from e

    def expect_object(self, payload: Any) -> dict[str, Any]:
        if not isinstance(payload, dict):
            raise ProfileFetchError(
                f"{self.name} returned {type(payload).__name__} where a profile object was expected",
            )
        return payload

    @contextmanager
    def step(self, step: FlowStep) -> Iterator[None]:
        """Tag any SocialAuthError raised inside with the step being attempted."""
        try:
            yield
        except SocialAuthError as e:
            if e.step is None:
                e.step = step
            logger.warning(
                "%s flow failed at %s: %s (%s)", self.name, e.step.value, e.message, e.code,
            )
            raise
