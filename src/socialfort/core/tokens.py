"""Access token value object and the codec for provider token responses.

Providers answer the token endpoint either with a JSON object or with a
query-string body (OAuth1 and a few older OAuth2 APIs). Both decode into the
same immutable AccessToken.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any
from urllib.parse import parse_qsl, urlencode

from socialfort.errors import MalformedTokenResponse


class TokenShape(str, Enum):
    """How a token endpoint encodes its response body."""

    JSON = "json"
    URLENCODED = "urlencoded"


@dataclass(frozen=True, slots=True)
class AccessToken:
    """Credential returned by a provider. Never persisted by SocialFort.

    ``attributes`` holds every key of the decoded body, primary token included.
    """

    token: str = field(repr=False)
    secret: str | None = field(default=None, repr=False)
    refresh_token: str | None = field(default=None, repr=False)
    expires_in: int | None = None
    attributes: Mapping[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    def get(self, key: str, default: Any = None) -> Any:
        """Read a provider-specific attribute (``user_id``, ``email``, ...)."""
        return self.attributes.get(key, default)


def _to_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _provider_error(data: Mapping[str, Any]) -> str:
    error = data.get("error")
    if not error:
        return ""
    description = data.get("error_description") or data.get("error_msg")
    return f" (provider error: {error}{f' - {description}' if description else ''})"


def _parse_json(body: str) -> dict[str, Any]:
    try:
        data = json.loads(body)
    except ValueError as e:
        raise MalformedTokenResponse(f"Token response is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedTokenResponse("Token response is not a JSON object")
    return data


def _parse_query(body: str) -> dict[str, str]:
    try:
        return dict(parse_qsl(body.strip(), keep_blank_values=True, strict_parsing=True))
    except ValueError as e:
        raise MalformedTokenResponse(f"Token response is not a query string: {e}") from e


def decode_token(body: str | bytes, shape: TokenShape) -> AccessToken:
    """Decode a raw token endpoint body into an AccessToken.

    Raises:
        MalformedTokenResponse: If the body cannot be parsed under ``shape``
            or carries no primary token.
    """
    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedTokenResponse("Token response is not UTF-8") from e

    if shape is TokenShape.JSON:
        data: dict[str, Any] = _parse_json(body)
        token = data.get("access_token")
    else:
        data = _parse_query(body)
        # OAuth1 convention: oauth_token is the primary token
        token = data.get("oauth_token") or data.get("access_token")

    if token is None or token == "":
        raise MalformedTokenResponse(
            f"No access token in provider response{_provider_error(data)}",
        )

    secret = data.get("oauth_token_secret")
    refresh_token = data.get("refresh_token")
    return AccessToken(
        token=str(token),
        secret=str(secret) if secret is not None else None,
        refresh_token=str(refresh_token) if refresh_token is not None else None,
        expires_in=_to_int(data.get("expires_in")),
        attributes=data,
    )


def encode_token(token: AccessToken, shape: TokenShape) -> str:
    """Serialize an AccessToken back into a token endpoint style body."""
    data = dict(token.attributes)
    if shape is TokenShape.JSON:
        data.setdefault("access_token", token.token)
    elif "oauth_token" not in data and "access_token" not in data:
        data["oauth_token"] = token.token
    if token.secret is not None:
        data.setdefault("oauth_token_secret", token.secret)
    if token.refresh_token is not None:
        data.setdefault("refresh_token", token.refresh_token)
    if token.expires_in is not None:
        data.setdefault("expires_in", token.expires_in)

    if shape is TokenShape.JSON:
        return json.dumps(data)
    return urlencode({k: str(v) for k, v in data.items()})
