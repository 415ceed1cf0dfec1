"""Generic OAuth 2.0 provider — bring-your-own-provider support."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from socialfort.core.tokens import TokenShape
from socialfort.core.user import NormalizedUser, item
from socialfort.providers.base import (
    Protocol,
    ProviderProfile,
    UserMapper,
    bearer_fetcher,
)


def default_mapper(provider_name: str) -> UserMapper:
    """Map a userinfo response using common field names.

    Tries ``sub`` or ``id`` for the account ID, ``email`` for the email
    address, ``preferred_username`` or ``login`` for the nickname, ``name``
    for the display name, and ``picture`` or ``avatar_url`` for the avatar.
    """

    def map_user(raw: Mapping[str, Any]) -> NormalizedUser:
        avatar = item(raw, "picture") or item(raw, "avatar_url")
        return NormalizedUser(
            provider=provider_name,
            id=item(raw, "sub") or item(raw, "id"),
            nickname=item(raw, "preferred_username") or item(raw, "login"),
            name=item(raw, "name"),
            email=item(raw, "email"),
            avatar=avatar,
            avatar_original=avatar,
            raw=raw,
        )

    return map_user


def generic_profile(
    name: str,
    *,
    authorize_url: str,
    token_url: str,
    userinfo_url: str,
    scopes: tuple[str, ...] | list[str] = (),
    map_user: UserMapper | None = None,
    scope_separator: str = " ",
    token_method: str = "POST",
    token_shape: TokenShape = TokenShape.JSON,
) -> ProviderProfile:
    """Describe any bearer-token OAuth 2.0 provider.

    Example::

        GITLAB = generic_profile(
            "gitlab",
            authorize_url="https://gitlab.com/oauth/authorize",
            token_url="https://gitlab.com/oauth/token",
            userinfo_url="https://gitlab.com/api/v4/user",
            scopes=("read_user",),
        )
    """
    return ProviderProfile(
        name=name,
        protocol=Protocol.OAUTH2,
        authorize_url=authorize_url,
        token_url=token_url,
        api_url=userinfo_url,
        scopes=tuple(scopes),
        scope_separator=scope_separator,
        token_method=token_method,
        token_shape=token_shape,
        fetch_profile=bearer_fetcher(userinfo_url),
        map_user=map_user or default_mapper(name),
    )
