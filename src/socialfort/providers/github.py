"""GitHub OAuth 2.0 provider."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from socialfort.core.tokens import AccessToken
from socialfort.core.user import NormalizedUser, item
from socialfort.errors import TransportError
from socialfort.providers.base import Protocol, ProviderProfile

if TYPE_CHECKING:
    from socialfort.flows.base import AuthorizationFlow

logger = logging.getLogger("socialfort.providers.github")

API_URL = "https://api.github.com"
EMAILS_REFUSED_STATUSES = (401, 403, 404)


def _pick_email(email: str | None, emails: list[dict[str, Any]]) -> tuple[str | None, bool]:
    """Choose the address to report and whether GitHub has verified it."""
    if email:
        # Check if the public email is verified
        for entry in emails:
            if entry.get("email") == email and entry.get("verified"):
                return email, True
        return email, False

    # Find primary verified email
    for entry in emails:
        if entry.get("primary") and entry.get("verified"):
            return entry.get("email"), True

    # Fallback: any verified email
    for entry in emails:
        if entry.get("verified"):
            return entry.get("email"), True

    # Last resort: any email
    if emails:
        return emails[0].get("email"), False
    return None, False


def fetch_profile(flow: AuthorizationFlow, token: AccessToken) -> dict[str, Any]:
    """Fetch the GitHub user, then /user/emails for a private or unverified email.

    The emails call needs the ``user:email`` scope; when GitHub refuses it
    (401, 403 or 404) the profile from the first call is returned as is.
    """
    headers = {
        "Authorization": f"Bearer {token.token}",
        "Accept": "application/vnd.github+json",
    }
    raw = flow.expect_object(flow.request_json("GET", f"{API_URL}/user", headers=headers))

    try:
        emails = flow.request_json("GET", f"{API_URL}/user/emails", headers=headers)
    except TransportError as e:
        # Only a refusal by GitHub is tolerated; network failures propagate
        if e.extra.get("http_status") not in EMAILS_REFUSED_STATUSES:
            raise
        logger.debug("GitHub /user/emails unavailable: %s", e.message)
        return raw

    if isinstance(emails, list):
        email, verified = _pick_email(raw.get("email"), emails)
        raw = {**raw, "email": email, "email_verified": verified}
    return raw


def map_user(raw: Mapping[str, Any]) -> NormalizedUser:
    return NormalizedUser(
        provider="github",
        id=item(raw, "id"),
        nickname=item(raw, "login"),
        name=item(raw, "name") or item(raw, "login"),
        email=item(raw, "email"),
        avatar=item(raw, "avatar_url"),
        avatar_original=item(raw, "avatar_url"),
        raw=raw,
    )


GITHUB = ProviderProfile(
    name="github",
    protocol=Protocol.OAUTH2,
    authorize_url="https://github.com/login/oauth/authorize",
    token_url="https://github.com/login/oauth/access_token",
    api_url=API_URL,
    scopes=("read:user", "user:email"),
    fetch_profile=fetch_profile,
    map_user=map_user,
)
