"""Odnoklassniki (OK.ru) OAuth 2.0 provider.

@link https://apiok.ru/ [OK API]

OK API calls are not bearer-authenticated: each call carries the application
public key and a keyed-MD5 ``sig`` over its parameters, with the access token
appended after signing. The profile takes two calls, one to resolve the
logged-in user id and one to read the requested fields for it.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from socialfort.config import OkConfig
from socialfort.core.signature import sign_md5
from socialfort.core.tokens import AccessToken
from socialfort.core.user import NormalizedUser, first_record, item, join_name
from socialfort.errors import ConfigurationError, ProfileFetchError
from socialfort.providers.base import Protocol, ProviderProfile

if TYPE_CHECKING:
    from socialfort.flows.base import AuthorizationFlow

API_URL = "https://api.ok.ru/fb.do"
METHOD_GET_PROFILE = "users.getLoggedInUser"
METHOD_GET_USER = "users.getCurrentUser"


def invoke_method(
    flow: AuthorizationFlow,
    method: str,
    token: AccessToken,
    params: Mapping[str, Any] | None = None,
) -> Any:
    """Call one OK API method with a signed query string."""
    config = flow.config
    if not isinstance(config, OkConfig):
        raise ConfigurationError("Odnoklassniki needs an OkConfig with public_key")

    query: dict[str, Any] = dict(params or {})
    query["application_key"] = config.public_key
    query["method"] = method
    query["sig"] = sign_md5(query, token.token, config.client_secret)
    query["access_token"] = token.token

    payload = flow.request_json("GET", flow.profile.api_url, params=query)
    if isinstance(payload, dict) and "error_code" in payload:
        raise ProfileFetchError(
            f"OK API error in {method}: {payload.get('error_msg', payload['error_code'])}",
            provider_error=payload["error_code"],
        )
    return payload


def fetch_profile(flow: AuthorizationFlow, token: AccessToken) -> dict[str, Any]:
    user_id = invoke_method(flow, METHOD_GET_PROFILE, token)
    if isinstance(user_id, (dict, list)) or not user_id:
        raise ProfileFetchError(f"OK {METHOD_GET_PROFILE} returned no user id")

    payload = invoke_method(
        flow,
        METHOD_GET_USER,
        token,
        {"uids": user_id, "fields": ",".join(flow.profile.fields)},
    )
    return dict(first_record(payload))


def map_user(raw: Mapping[str, Any]) -> NormalizedUser:
    return NormalizedUser(
        provider="odnoklassniki",
        id=item(raw, "uid"),
        nickname=item(raw, "name"),
        name=join_name(item(raw, "first_name"), item(raw, "last_name")),
        email=item(raw, "email"),
        avatar=item(raw, "pic_5"),
        avatar_original=item(raw, "pic1024x768"),
        raw=raw,
    )


ODNOKLASSNIKI = ProviderProfile(
    name="odnoklassniki",
    protocol=Protocol.OAUTH2,
    authorize_url="https://connect.ok.ru/oauth/authorize",
    token_url="https://api.ok.ru/oauth/token.do",
    api_url=API_URL,
    scopes=("VALUABLE_ACCESS", "GET_EMAIL"),
    fields=(
        "uid", "first_name", "last_name", "name", "gender", "birthday",
        "pic1024x768", "pic_5", "email",
    ),
    scope_separator=",",
    token_params_in="query",
    fetch_profile=fetch_profile,
    map_user=map_user,
)
