"""SocialFort — social login (OAuth 1.0a / OAuth 2.0) for Python."""

__version__ = "0.1.0"

from socialfort.config import OAuth1Config, OAuth2Config, OkConfig, load_config
from socialfort.core.signature import OAuth1Credentials, sign_hmac_sha1, sign_md5
from socialfort.core.state import generate_state, verify_state
from socialfort.core.tokens import AccessToken, TokenShape, decode_token, encode_token
from socialfort.core.user import NormalizedUser
from socialfort.errors import (
    AuthorizationDenied,
    CallbackMalformed,
    ConfigurationError,
    MalformedTokenResponse,
    ProfileFetchError,
    SocialAuthError,
    StateMismatch,
    TransportError,
)
from socialfort.flows import (
    AuthorizationFlow,
    AuthorizationRequest,
    FlowStep,
    OAuth1Flow,
    OAuth2Flow,
)
from socialfort.providers import (
    GITHUB,
    GOOGLE,
    ODNOKLASSNIKI,
    TWITTER,
    VKONTAKTE,
    Protocol,
    ProviderProfile,
    generic_profile,
)
from socialfort.registry import PROVIDERS, config_from_env, create_flow, get_profile
from socialfort.transport import HttpTransport

__all__ = [
    "AccessToken",
    "AuthorizationDenied",
    "AuthorizationFlow",
    "AuthorizationRequest",
    "CallbackMalformed",
    "ConfigurationError",
    "FlowStep",
    "GITHUB",
    "GOOGLE",
    "HttpTransport",
    "MalformedTokenResponse",
    "NormalizedUser",
    "OAuth1Config",
    "OAuth1Credentials",
    "OAuth1Flow",
    "OAuth2Config",
    "OAuth2Flow",
    "ODNOKLASSNIKI",
    "OkConfig",
    "PROVIDERS",
    "ProfileFetchError",
    "Protocol",
    "ProviderProfile",
    "SocialAuthError",
    "StateMismatch",
    "TWITTER",
    "TokenShape",
    "TransportError",
    "VKONTAKTE",
    "config_from_env",
    "create_flow",
    "decode_token",
    "encode_token",
    "generate_state",
    "generic_profile",
    "get_profile",
    "load_config",
    "sign_hmac_sha1",
    "sign_md5",
    "verify_state",
]
