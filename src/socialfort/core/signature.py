"""Request signing — OAuth 1.0a HMAC-SHA1 and the keyed-MD5 scheme.

Pure functions over the supplied inputs plus the wall clock and ``secrets``.
Nothing here holds state, so one set of credentials can sign any number of
concurrent requests.

Reference: RFC 5849 - The OAuth 1.0 Protocol
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from socialfort.errors import ConfigurationError

SIGNATURE_METHOD = "HMAC-SHA1"
OAUTH_VERSION = "1.0"


def percent_encode(value: Any) -> str:
    """Percent-encode a value according to RFC 3986.

    Encodes all characters except unreserved: A-Z, a-z, 0-9, -, ., _, ~
    """
    return quote(str(value), safe="~")


def generate_nonce() -> str:
    """Fresh unpredictable nonce, independent of the timestamp."""
    return secrets.token_hex(16)


def generate_timestamp() -> str:
    return str(int(time.time()))


@dataclass(frozen=True, slots=True)
class OAuth1Credentials:
    """Consumer credentials plus the (optional) token pair being used."""

    consumer_key: str
    consumer_secret: str
    token: str = ""
    token_secret: str = ""

    def validate(self, *, require_token: bool = False) -> None:
        """Raise ConfigurationError when the credentials cannot sign a request.

        Consumer key and secret are always needed. ``require_token`` is for
        calls made on behalf of a user, which need both halves of the token.
        """
        missing = [
            name
            for name, value in (
                ("api_key", self.consumer_key),
                ("api_key_secret", self.consumer_secret),
            )
            if not value
        ]
        if require_token:
            if not self.token:
                missing.append("access_token")
            if not self.token_secret:
                missing.append("access_token_secret")
        elif self.token_secret and not self.token:
            missing.append("access_token")
        if missing:
            raise ConfigurationError(
                f"OAuth1 signing requires {', '.join(missing)}",
                missing=missing,
            )


def normalize_parameters(params: Mapping[str, Any]) -> str:
    """``k=v`` pairs sorted by key and joined with ``&``, both sides encoded."""
    return "&".join(
        f"{percent_encode(k)}={percent_encode(v)}" for k, v in sorted(params.items())
    )


def signature_base_string(method: str, base_url: str, params: Mapping[str, Any]) -> str:
    """Build the signature base string per RFC 5849.

    Format: HTTP_METHOD&URL&NORMALIZED_PARAMS
    """
    parts = [
        method.upper(),
        percent_encode(base_url),
        percent_encode(normalize_parameters(params)),
    ]
    return "&".join(parts)


def hmac_sha1(base_string: str, credentials: OAuth1Credentials) -> str:
    """Sign the base string using HMAC-SHA1.

    Signing key: percent_encode(consumer_secret)&percent_encode(token_secret)
    """
    key = (
        f"{percent_encode(credentials.consumer_secret)}"
        f"&{percent_encode(credentials.token_secret)}"
    )
    digest = hmac.new(key.encode("utf-8"), base_string.encode("utf-8"), hashlib.sha1).digest()
    return base64.b64encode(digest).decode("ascii")


def oauth1_parameters(
    credentials: OAuth1Credentials,
    *,
    nonce: str | None = None,
    timestamp: str | None = None,
) -> dict[str, str]:
    """The standard ``oauth_*`` set merged into every signed request."""
    params = {
        "oauth_consumer_key": credentials.consumer_key,
        "oauth_nonce": nonce or generate_nonce(),
        "oauth_signature_method": SIGNATURE_METHOD,
        "oauth_timestamp": timestamp or generate_timestamp(),
        "oauth_version": OAUTH_VERSION,
    }
    # Request-token leg has no user token yet
    if credentials.token:
        params["oauth_token"] = credentials.token
    return params


def sign_hmac_sha1(
    method: str,
    base_url: str,
    params: Mapping[str, Any],
    credentials: OAuth1Credentials,
    *,
    nonce: str | None = None,
    timestamp: str | None = None,
    require_token: bool = False,
) -> str:
    """Sign a request: request params merged with the standard OAuth set.

    Returns base64 of the raw HMAC-SHA1 digest. Pass ``nonce`` and
    ``timestamp`` to make the output deterministic.
    """
    credentials.validate(require_token=require_token)
    bag = {**params, **oauth1_parameters(credentials, nonce=nonce, timestamp=timestamp)}
    return hmac_sha1(signature_base_string(method, base_url, bag), credentials)


def oauth1_authorization_header(
    method: str,
    base_url: str,
    params: Mapping[str, Any],
    credentials: OAuth1Credentials,
    *,
    oauth_params: Mapping[str, str] | None = None,
    require_token: bool = False,
    nonce: str | None = None,
    timestamp: str | None = None,
) -> str:
    """Build the ``Authorization: OAuth ...`` header for one request.

    ``params`` are the query or form parameters that travel with the request;
    ``oauth_params`` are extra protocol parameters (``oauth_callback``,
    ``oauth_verifier``) that travel in the header. Both are signed.

    Format: OAuth oauth_consumer_key="...", oauth_nonce="...", ...
    """
    credentials.validate(require_token=require_token)
    protocol = oauth1_parameters(credentials, nonce=nonce, timestamp=timestamp)
    protocol.update(oauth_params or {})
    base_string = signature_base_string(method, base_url, {**params, **protocol})
    protocol["oauth_signature"] = hmac_sha1(base_string, credentials)
    return "OAuth " + ", ".join(
        f'{percent_encode(k)}="{percent_encode(v)}"' for k, v in sorted(protocol.items())
    )


def sign_md5(params: Mapping[str, Any], token: str, client_secret: str) -> str:
    """Keyed-MD5 signature used by providers without full OAuth1.

    ``key=value`` for every parameter sorted by key, concatenated with no
    separator, followed by ``md5(token + client_secret)``; the result is the
    lowercase MD5 hex digest of that whole string.
    """
    if not client_secret:
        raise ConfigurationError("Keyed-MD5 signing requires client_secret")
    payload = "".join(f"{key}={params[key]}" for key in sorted(params))
    payload += hashlib.md5(f"{token}{client_secret}".encode("utf-8")).hexdigest()
    return hashlib.md5(payload.encode("utf-8")).hexdigest().lower()
