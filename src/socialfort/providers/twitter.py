"""Twitter OAuth 1.0a provider.

@link https://developer.twitter.com/en/docs/authentication/oauth-1-0a
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from socialfort.core.tokens import AccessToken, TokenShape
from socialfort.core.user import NormalizedUser, item
from socialfort.errors import ConfigurationError, ProfileFetchError
from socialfort.providers.base import Protocol, ProviderProfile

if TYPE_CHECKING:
    from socialfort.flows.base import AuthorizationFlow

API_URL = "https://api.twitter.com/1.1"
METHOD_VERIFY_CREDENTIALS = "/account/verify_credentials.json"


def fetch_profile(flow: AuthorizationFlow, token: AccessToken) -> dict[str, Any]:
    from socialfort.flows.oauth1 import OAuth1Flow

    if not isinstance(flow, OAuth1Flow):
        raise ConfigurationError("Twitter profiles must be fetched through an OAuth1 flow")

    payload = flow.expect_object(
        flow.signed_json(
            "GET",
            flow.profile.api_url + METHOD_VERIFY_CREDENTIALS,
            token,
            {"include_email": "true", "include_entities": "false", "skip_status": "true"},
        ),
    )
    if payload.get("errors"):
        first = payload["errors"][0] if isinstance(payload["errors"], list) else {}
        raise ProfileFetchError(
            f"Twitter API error: {first.get('message', payload['errors'])}",
            provider_error=first.get("code"),
        )
    return payload


def map_user(raw: Mapping[str, Any]) -> NormalizedUser:
    avatar = item(raw, "profile_image_url_https") or item(raw, "profile_image_url")
    return NormalizedUser(
        provider="twitter",
        id=item(raw, "id_str") or item(raw, "id"),
        nickname=item(raw, "screen_name"),
        name=item(raw, "name"),
        email=item(raw, "email"),
        avatar=avatar,
        # Drop the size suffix to get the full-resolution image
        avatar_original=avatar.replace("_normal", ""),
        raw=raw,
    )


TWITTER = ProviderProfile(
    name="twitter",
    protocol=Protocol.OAUTH1,
    request_token_url="https://api.twitter.com/oauth/request_token",
    authorize_url="https://api.twitter.com/oauth/authenticate",
    token_url="https://api.twitter.com/oauth/access_token",
    api_url=API_URL,
    stateless=True,
    token_shape=TokenShape.URLENCODED,
    fetch_profile=fetch_profile,
    map_user=map_user,
)
