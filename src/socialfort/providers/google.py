"""Google OAuth 2.0 provider."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from socialfort.core.user import NormalizedUser, item
from socialfort.providers.base import Protocol, ProviderProfile, bearer_fetcher

USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"


def map_user(raw: Mapping[str, Any]) -> NormalizedUser:
    return NormalizedUser(
        provider="google",
        id=item(raw, "id"),
        nickname=item(raw, "given_name"),
        name=item(raw, "name"),
        email=item(raw, "email"),
        avatar=item(raw, "picture"),
        avatar_original=item(raw, "picture"),
        raw=raw,
    )


# access_type=offline and prompt=consent make Google issue a refresh token.
GOOGLE = ProviderProfile(
    name="google",
    protocol=Protocol.OAUTH2,
    authorize_url="https://accounts.google.com/o/oauth2/v2/auth",
    token_url="https://oauth2.googleapis.com/token",
    api_url=USERINFO_URL,
    scopes=("openid", "email", "profile"),
    authorize_params={"access_type": "offline", "prompt": "consent"},
    fetch_profile=bearer_fetcher(USERINFO_URL),
    map_user=map_user,
)
