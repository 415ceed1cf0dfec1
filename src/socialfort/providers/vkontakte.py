"""VKontakte OAuth 2.0 provider.

@link https://dev.vk.com/ [VK API]

VK API methods take the access token and API version as query parameters and
wrap results in a ``response`` envelope (a list for batch methods such as
``users.get``). The email address and user id are only delivered with the
token, so they are copied from the token attributes into the raw profile.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from socialfort.core.tokens import AccessToken, TokenShape
from socialfort.core.user import NormalizedUser, first_record, item, join_name
from socialfort.errors import ProfileFetchError
from socialfort.providers.base import Protocol, ProviderProfile

if TYPE_CHECKING:
    from socialfort.flows.base import AuthorizationFlow

API_URL = "https://api.vk.com/method"
METHOD_GET_USERS = "users.get"
API_VERSION = "5.52"


def fetch_profile(flow: AuthorizationFlow, token: AccessToken) -> dict[str, Any]:
    profile = flow.profile
    params = {"access_token": token.token, "fields": ",".join(profile.fields)}
    if profile.api_version:
        params["v"] = profile.api_version
    user_id = token.get("user_id")
    if user_id:
        params["user_ids"] = str(user_id)

    payload = flow.expect_object(
        flow.request_json("GET", f"{profile.api_url}/{METHOD_GET_USERS}", params=params),
    )
    if "error" in payload:
        error = payload["error"]
        message = error.get("error_msg") if isinstance(error, dict) else str(error)
        raise ProfileFetchError(
            f"VK API error: {message}",
            provider_error=error.get("error_code") if isinstance(error, dict) else error,
        )

    raw = dict(payload)
    for key in ("user_id", "email"):
        if token.get(key) is not None:
            raw.setdefault(key, token.get(key))
    return raw


def map_user(raw: Mapping[str, Any]) -> NormalizedUser:
    user = first_record(raw.get("response", raw))
    return NormalizedUser(
        provider="vkontakte",
        id=item(user, "id") or item(raw, "user_id"),
        nickname=item(user, "screen_name"),
        name=join_name(item(user, "first_name"), item(user, "last_name")),
        email=item(raw, "email") or item(user, "email"),
        avatar=item(user, "photo_medium"),
        avatar_original=item(user, "photo_big") or item(user, "photo_medium"),
        raw=raw,
    )


VKONTAKTE = ProviderProfile(
    name="vkontakte",
    protocol=Protocol.OAUTH2,
    authorize_url="https://oauth.vk.com/authorize",
    token_url="https://oauth.vk.com/access_token",
    api_url=API_URL,
    scopes=("email",),
    fields=(
        "first_name", "last_name", "screen_name", "email", "sex", "verified",
        "photo_medium", "photo_big", "mobile_phone",
    ),
    api_version=API_VERSION,
    scope_separator=",",
    token_method="GET",
    token_shape=TokenShape.JSON,
    fetch_profile=fetch_profile,
    map_user=map_user,
)
