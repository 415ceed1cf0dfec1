"""Vulture whitelist — false positives that are actually used by frameworks."""

# ---------------------------------------------------------------------------
# Public API (used by consumers, not internally)
# ---------------------------------------------------------------------------
from socialfort.core.tokens import encode_token
from socialfort.flows.oauth2 import OAuth2Flow
from socialfort.providers.base import ProviderProfile

encode_token
OAuth2Flow.get_user
ProviderProfile.customize

# ---------------------------------------------------------------------------
# FastAPI route handlers (registered via decorators, not called directly)
# ---------------------------------------------------------------------------
_.social_authorize
_.social_callback

# ---------------------------------------------------------------------------
# Pydantic / dataclass fields (used for serialization, not accessed in code)
# ---------------------------------------------------------------------------
_.avatar_original
_.refresh_token
_.expires_in
_.INITIAL
_.COMPLETED
_.FAILED
