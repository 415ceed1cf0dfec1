"""SocialFort configuration — per-provider credential dataclasses and env loading."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import MISSING, dataclass, fields
from typing import Any

from socialfort.errors import ConfigurationError

DEFAULT_TIMEOUT = 10.0
ENV_PREFIX = "SOCIALFORT"


def _require(config: Any, *names: str) -> None:
    missing = [name for name in names if not getattr(config, name)]
    if missing:
        raise ConfigurationError(
            f"{type(config).__name__} is missing required fields: {', '.join(missing)}",
            missing=missing,
        )


def _check_timeout(config: Any) -> None:
    if config.timeout <= 0:
        raise ConfigurationError(f"timeout must be positive, got {config.timeout!r}")


@dataclass(frozen=True, slots=True, kw_only=True)
class OAuth2Config:
    """Credentials and overrides for an OAuth 2.0 provider.

    ``scopes`` and ``fields`` replace the provider defaults when given;
    ``api_version`` replaces the provider's pinned API version.

    Example:
        OAuth2Config(client_id="...", client_secret="...", redirect_uri="https://app/cb")
        OAuth2Config(..., scopes=("email", "friends"), popup=True)
    """

    client_id: str
    client_secret: str
    redirect_uri: str
    api_version: str | None = None
    popup: bool = False
    scopes: tuple[str, ...] | None = None
    fields: tuple[str, ...] | None = None
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        _require(self, "client_id", "client_secret", "redirect_uri")
        _check_timeout(self)


@dataclass(frozen=True, slots=True, kw_only=True)
class OkConfig(OAuth2Config):
    """Odnoklassniki also needs the application public key for signed API calls."""

    public_key: str

    def __post_init__(self) -> None:
        _require(self, "client_id", "client_secret", "redirect_uri", "public_key")
        _check_timeout(self)


@dataclass(frozen=True, slots=True, kw_only=True)
class OAuth1Config:
    """Consumer credentials for an OAuth 1.0a provider.

    ``redirect_uri`` is sent as ``oauth_callback`` on the request-token leg.
    """

    api_key: str
    api_key_secret: str
    redirect_uri: str
    popup: bool = False
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        _require(self, "api_key", "api_key_secret", "redirect_uri")
        _check_timeout(self)


ProviderConfig = OAuth2Config | OAuth1Config


def _parse_env_value(name: str, value: str) -> Any:
    if name == "popup":
        return value.strip().lower() in ("1", "true", "yes", "on")
    if name in ("scopes", "fields"):
        return tuple(part.strip() for part in value.split(",") if part.strip())
    if name == "timeout":
        try:
            return float(value)
        except ValueError:
            raise ConfigurationError(f"timeout must be a number, got {value!r}")
    return value


def load_config(
    provider: str,
    config_type: type[ProviderConfig],
    environ: Mapping[str, str] | None = None,
) -> ProviderConfig:
    """Build a provider config from ``SOCIALFORT_<PROVIDER>_<FIELD>`` variables.

    Lists are comma-separated; ``popup`` accepts 1/true/yes/on.

    Example:
        SOCIALFORT_VKONTAKTE_CLIENT_ID=123
        SOCIALFORT_VKONTAKTE_SCOPES=email,friends
    """
    env = os.environ if environ is None else environ
    prefix = f"{ENV_PREFIX}_{provider.upper()}_"
    kwargs: dict[str, Any] = {}
    for f in fields(config_type):
        raw = env.get(prefix + f.name.upper())
        if raw is not None:
            kwargs[f.name] = _parse_env_value(f.name, raw)
        elif f.default is MISSING and f.default_factory is MISSING:
            # Let __post_init__ report every missing field at once
            kwargs[f.name] = ""
    return config_type(**kwargs)
