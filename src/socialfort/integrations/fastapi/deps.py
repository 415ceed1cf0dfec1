"""FastAPI dependencies and error translation for SocialFort flows."""

from fastapi import HTTPException, Request

from socialfort.core.schemas import ErrorDetail
from socialfort.errors import SocialAuthError


def callback_query(request: Request) -> dict[str, str]:
    """Dependency: the provider callback's query parameters as a plain dict.

    Repeated keys keep their last value.
    """
    return dict(request.query_params)


def social_error_detail(e: SocialAuthError) -> dict:
    """Build HTTPException detail dict from a SocialAuthError."""
    detail = ErrorDetail(
        error=e.code,
        message=e.message,
        step=e.step.value if e.step is not None else None,
    ).model_dump(exclude_none=True)
    # Provider response bodies can carry tokens; keep them out of HTTP errors
    detail.update({k: v for k, v in e.extra.items() if k != "body"})
    return detail


def to_http_exception(e: SocialAuthError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=social_error_detail(e))
