"""Provider profile — the static descriptor every flow is parameterized by.

A profile is pure configuration: endpoints, default scopes and fields, the
protocol variant, and two small strategies (how to fetch the raw profile and
how to map it). Profiles are immutable and shared by all flows for a provider.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Literal

from socialfort.core.tokens import AccessToken, TokenShape
from socialfort.core.user import NormalizedUser
from socialfort.errors import ConfigurationError

if TYPE_CHECKING:
    from socialfort.flows.base import AuthorizationFlow


class Protocol(str, Enum):
    OAUTH1 = "oauth1"
    OAUTH2 = "oauth2"


ProfileFetcher = Callable[["AuthorizationFlow", AccessToken], dict[str, Any]]
UserMapper = Callable[[Mapping[str, Any]], NormalizedUser]


@dataclass(frozen=True, slots=True, kw_only=True)
class ProviderProfile:
    """Static description of one identity provider.

    ``fetch_profile`` receives the running flow (for its transport, config
    and signing helpers) and the access token; ``map_user`` turns the payload
    it returns into a NormalizedUser.
    """

    name: str
    protocol: Protocol
    authorize_url: str
    token_url: str
    fetch_profile: ProfileFetcher = field(repr=False, compare=False)
    map_user: UserMapper = field(repr=False, compare=False)
    request_token_url: str | None = None
    api_url: str = ""
    scopes: tuple[str, ...] = ()
    fields: tuple[str, ...] = ()
    api_version: str | None = None
    scope_separator: str = " "
    popup: bool = False
    stateless: bool = False
    token_method: Literal["GET", "POST"] = "POST"
    token_params_in: Literal["body", "query"] = "body"
    token_shape: TokenShape = TokenShape.JSON
    accept_json: bool = True
    authorize_params: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.name or not self.authorize_url or not self.token_url:
            raise ConfigurationError(
                f"Provider profile {self.name!r} needs a name, authorize_url and token_url",
            )
        if self.protocol is Protocol.OAUTH1 and not self.request_token_url:
            raise ConfigurationError(
                f"OAuth1 provider {self.name!r} needs a request_token_url",
            )
        if self.token_method not in ("GET", "POST"):
            raise ConfigurationError(f"Unsupported token_method {self.token_method!r}")
        object.__setattr__(self, "scopes", tuple(self.scopes))
        object.__setattr__(self, "fields", tuple(self.fields))
        object.__setattr__(
            self, "authorize_params", MappingProxyType(dict(self.authorize_params)),
        )

    @property
    def scope(self) -> str:
        """Scopes deduplicated (order-preserving) and joined per provider convention."""
        seen: set[str] = set()
        result: list[str] = []
        for s in self.scopes:
            if s not in seen:
                seen.add(s)
                result.append(s)
        return self.scope_separator.join(result)

    def customize(
        self,
        *,
        scopes: tuple[str, ...] | list[str] | None = None,
        fields: tuple[str, ...] | list[str] | None = None,
        popup: bool | None = None,
        api_version: str | None = None,
    ) -> ProviderProfile:
        """Return a copy with caller overrides applied; ``None`` keeps the default."""
        changes: dict[str, Any] = {}
        if scopes is not None:
            changes["scopes"] = tuple(scopes)
        if fields is not None:
            changes["fields"] = tuple(fields)
        if popup is not None:
            changes["popup"] = popup
        if api_version is not None:
            changes["api_version"] = api_version
        if not changes:
            return self
        return dataclasses.replace(self, **changes)


def bearer_fetcher(url: str, *, headers: Mapping[str, str] | None = None) -> ProfileFetcher:
    """Strategy for providers that take ``Authorization: Bearer <token>``."""

    def fetch(flow: AuthorizationFlow, token: AccessToken) -> dict[str, Any]:
        payload = flow.request_json(
            "GET", url, headers={**(headers or {}), "Authorization": f"Bearer {token.token}"},
        )
        return flow.expect_object(payload)

    return fetch
