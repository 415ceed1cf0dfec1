"""Example app with social login using SocialFort.

Providers are configured from the environment, for example:

    SOCIALFORT_VKONTAKTE_CLIENT_ID=...
    SOCIALFORT_VKONTAKTE_CLIENT_SECRET=...
    SOCIALFORT_VKONTAKTE_REDIRECT_URI=http://localhost:8000/auth/social/vkontakte/callback

Only providers whose variables are set are mounted.

Run:  uvicorn main:app --reload --port 8000
"""

import logging
import secrets

from fastapi import FastAPI, Request, Response

from socialfort import AuthorizationRequest, ConfigurationError, PROVIDERS, config_from_env, create_flow
from socialfort.integrations.fastapi import create_social_router

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("socialfort.example")

# In-memory pending attempts keyed by (session id, provider). Use your real session store.
PENDING: dict[tuple[str, str], AuthorizationRequest] = {}


def save_pending(request: Request, response: Response, provider: str, pending: AuthorizationRequest) -> None:
    sid = request.cookies.get("sid") or secrets.token_urlsafe(16)
    PENDING[(sid, provider)] = pending
    response.set_cookie("sid", sid, httponly=True, samesite="lax")


def load_pending(request: Request, provider: str) -> AuthorizationRequest | None:
    # One attempt per callback
    return PENDING.pop((request.cookies.get("sid", ""), provider), None)


flows = []
for name in PROVIDERS:
    try:
        flows.append(create_flow(name, config_from_env(name)))
    except ConfigurationError as e:
        logger.info("Skipping %s: %s", name, e.message)

app = FastAPI(title="SocialFort Example")
app.include_router(
    create_social_router(flows, save_pending=save_pending, load_pending=load_pending),
    prefix="/auth",
)


@app.get("/")
async def index():
    return {"providers": [f"/auth/social/{flow.name}/authorize" for flow in flows]}
