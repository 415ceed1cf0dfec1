"""FastAPI social login router — factory that creates authorize/callback endpoints per flow.

SocialFort does not manage sessions: the application supplies ``save_pending``
and ``load_pending`` to keep each attempt's AuthorizationRequest (state or
request token) between the redirect and the callback.
"""

from collections.abc import Callable, Iterable, Mapping
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import RedirectResponse

from socialfort.core.schemas import UserResponse
from socialfort.errors import SocialAuthError
from socialfort.flows.base import AuthorizationFlow, AuthorizationRequest
from socialfort.integrations.fastapi.deps import callback_query, to_http_exception

SavePending = Callable[[Request, Response, str, AuthorizationRequest], None]
LoadPending = Callable[[Request, str], AuthorizationRequest | None]


def create_social_router(
    flows: Iterable[AuthorizationFlow] | Mapping[str, AuthorizationFlow],
    *,
    save_pending: SavePending,
    load_pending: LoadPending,
) -> APIRouter:
    """Create a FastAPI router with social login endpoints for each flow.

    Registers:
        GET /social/{provider_name}/authorize
        GET /social/{provider_name}/callback
    """
    router = APIRouter(tags=["social"])
    if isinstance(flows, Mapping):
        flow_map: dict[str, AuthorizationFlow] = dict(flows)
    else:
        flow_map = {f.name: f for f in flows}

    def _get_flow(provider_name: str) -> AuthorizationFlow:
        flow = flow_map.get(provider_name)
        if flow is None:
            raise HTTPException(
                status_code=404,
                detail={"error": "unknown_provider", "message": f"Provider '{provider_name}' is not configured"},
            )
        return flow

    # Flows block on provider HTTP calls, so the endpoints are sync and run in the threadpool
    @router.get("/social/{provider_name}/authorize")
    def social_authorize(provider_name: str, request: Request):
        """Start a login — redirect to the provider's consent screen."""
        flow = _get_flow(provider_name)
        try:
            pending = flow.begin()
        except SocialAuthError as e:
            raise to_http_exception(e)

        response = RedirectResponse(url=pending.url, status_code=302)
        save_pending(request, response, provider_name, pending)
        return response

    @router.get("/social/{provider_name}/callback", response_model=UserResponse)
    def social_callback(
        provider_name: str,
        request: Request,
        query: Annotated[dict[str, str], Depends(callback_query)],
    ):
        """Provider callback — exchanges the code/verifier and returns the normalized user."""
        flow = _get_flow(provider_name)
        pending = load_pending(request, provider_name)
        try:
            user = flow.complete(query, pending)
        except SocialAuthError as e:
            raise to_http_exception(e)
        return UserResponse.from_user(user)

    return router
