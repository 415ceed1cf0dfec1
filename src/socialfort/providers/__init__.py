"""SocialFort provider profiles."""

from socialfort.providers.base import (
    ProfileFetcher,
    Protocol,
    ProviderProfile,
    UserMapper,
    bearer_fetcher,
)
from socialfort.providers.generic import default_mapper, generic_profile
from socialfort.providers.github import GITHUB
from socialfort.providers.google import GOOGLE
from socialfort.providers.odnoklassniki import ODNOKLASSNIKI
from socialfort.providers.twitter import TWITTER
from socialfort.providers.vkontakte import VKONTAKTE

__all__ = [
    "GITHUB",
    "GOOGLE",
    "ODNOKLASSNIKI",
    "TWITTER",
    "VKONTAKTE",
    "ProfileFetcher",
    "Protocol",
    "ProviderProfile",
    "UserMapper",
    "bearer_fetcher",
    "default_mapper",
    "generic_profile",
]
