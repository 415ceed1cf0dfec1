"""Built-in provider registry and the flow factory."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from socialfort.config import OAuth1Config, OAuth2Config, OkConfig, ProviderConfig, load_config
from socialfort.errors import ConfigurationError
from socialfort.flows.base import AuthorizationFlow
from socialfort.flows.oauth1 import OAuth1Flow
from socialfort.flows.oauth2 import OAuth2Flow
from socialfort.providers import GITHUB, GOOGLE, ODNOKLASSNIKI, TWITTER, VKONTAKTE
from socialfort.providers.base import Protocol, ProviderProfile
from socialfort.transport import HttpTransport

PROVIDERS: Mapping[str, ProviderProfile] = MappingProxyType(
    {p.name: p for p in (GOOGLE, GITHUB, VKONTAKTE, ODNOKLASSNIKI, TWITTER)}
)

CONFIG_TYPES: Mapping[str, type[ProviderConfig]] = MappingProxyType({
    "odnoklassniki": OkConfig,
})


def get_profile(name: str) -> ProviderProfile:
    profile = PROVIDERS.get(name)
    if profile is None:
        raise ConfigurationError(
            f"Provider '{name}' is not configured",
            code="unknown_provider",
            status_code=404,
        )
    return profile


def config_type(profile: ProviderProfile) -> type[ProviderConfig]:
    """The config class a provider needs (OkConfig for Odnoklassniki, ...)."""
    if profile.name in CONFIG_TYPES:
        return CONFIG_TYPES[profile.name]
    return OAuth1Config if profile.protocol is Protocol.OAUTH1 else OAuth2Config


def config_from_env(
    provider: str | ProviderProfile, environ: Mapping[str, str] | None = None,
) -> ProviderConfig:
    profile = get_profile(provider) if isinstance(provider, str) else provider
    return load_config(profile.name, config_type(profile), environ)


def create_flow(
    provider: str | ProviderProfile,
    config: ProviderConfig,
    *,
    transport: HttpTransport | None = None,
) -> AuthorizationFlow:
    """Pick the flow variant for a provider and apply the config overrides.

    Raises:
        ConfigurationError: If the provider is unknown or ``config`` is the
            wrong type for it.
    """
    profile = get_profile(provider) if isinstance(provider, str) else provider
    expected = config_type(profile)
    if not isinstance(config, expected):
        raise ConfigurationError(
            f"{profile.name} needs a {expected.__name__}, got {type(config).__name__}",
        )

    if profile.protocol is Protocol.OAUTH1:
        return OAuth1Flow(
            profile.customize(popup=config.popup or None), config, transport=transport,
        )

    profile = profile.customize(
        scopes=config.scopes,
        fields=config.fields,
        popup=config.popup or None,
        api_version=config.api_version,
    )
    return OAuth2Flow(profile, config, transport=transport)
