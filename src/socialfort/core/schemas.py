"""Response schemas — pydantic models for adapters that serialize results."""

from typing import Any

from pydantic import BaseModel

from socialfort.core.user import NormalizedUser


class UserResponse(BaseModel):
    """Normalized user returned by the callback endpoint (no tokens)."""
    provider: str
    id: str
    nickname: str
    name: str
    email: str
    avatar: str
    avatar_original: str
    raw: dict[str, Any] = {}

    @classmethod
    def from_user(cls, user: NormalizedUser) -> "UserResponse":
        return cls(
            provider=user.provider,
            id=user.id,
            nickname=user.nickname,
            name=user.name,
            email=user.email,
            avatar=user.avatar,
            avatar_original=user.avatar_original,
            raw=dict(user.raw),
        )


class ErrorDetail(BaseModel):
    """Error body shape used by the FastAPI integration."""
    error: str
    message: str
    step: str | None = None
