"""FastAPI integration for SocialFort."""

from socialfort.integrations.fastapi.deps import (
    callback_query,
    social_error_detail,
    to_http_exception,
)
from socialfort.integrations.fastapi.oauth_router import create_social_router

__all__ = [
    "callback_query",
    "create_social_router",
    "social_error_detail",
    "to_http_exception",
]
