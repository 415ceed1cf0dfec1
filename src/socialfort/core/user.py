"""Normalized user record and the helpers provider mappers are built from."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from socialfort.core.tokens import AccessToken


@dataclass(frozen=True, slots=True)
class NormalizedUser:
    """Normalized user info returned by any provider.

    ``raw`` keeps the full provider payload for provider-specific extensions.
    """

    provider: str
    id: str = ""
    nickname: str = ""
    name: str = ""
    email: str = ""
    avatar: str = ""
    avatar_original: str = ""
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False)
    token: AccessToken | None = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "raw", MappingProxyType(dict(self.raw)))

    def with_token(self, token: AccessToken) -> NormalizedUser:
        return replace(self, token=token)


def _step(value: Any, key: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(key)
    if isinstance(value, Sequence) and not isinstance(value, str) and key.isdigit():
        index = int(key)
        return value[index] if index < len(value) else None
    return None


def item(raw: Any, path: str) -> str:
    """Look up a dotted path (``"response.0.first_name"``) as a string.

    Missing keys, out-of-range indexes, ``None`` and container values all map
    to ``""``; provider responses are not guaranteed complete.
    """
    value = raw
    for key in path.split("."):
        value = _step(value, key)
        if value is None:
            return ""
    if isinstance(value, (Mapping, list, tuple)):
        return ""
    return str(value)


def first_record(value: Any) -> Mapping[str, Any]:
    """Unwrap batch-style payloads: a list yields its first mapping."""
    if isinstance(value, Mapping):
        return value
    if isinstance(value, Sequence) and not isinstance(value, str) and value:
        head = value[0]
        if isinstance(head, Mapping):
            return head
    return {}


def join_name(*parts: str) -> str:
    """Join name parts with single spaces, skipping the empty ones."""
    return " ".join(p for p in parts if p)
