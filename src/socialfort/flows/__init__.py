"""SocialFort authorization flows."""

from socialfort.flows.base import AuthorizationFlow, AuthorizationRequest, FlowStep
from socialfort.flows.oauth1 import OAuth1Flow
from socialfort.flows.oauth2 import OAuth2Flow

__all__ = [
    "AuthorizationFlow",
    "AuthorizationRequest",
    "FlowStep",
    "OAuth1Flow",
    "OAuth2Flow",
]
