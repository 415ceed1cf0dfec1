"""Blocking HTTP transport used by every flow.

One ``httpx.Client`` per request, bounded by a timeout. Failures are never
retried; they surface as TransportError with the httpx error chained.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from socialfort.config import DEFAULT_TIMEOUT
from socialfort.errors import TransportError

logger = logging.getLogger("socialfort.transport")


class HttpTransport:
    """Sends provider requests and turns transport failures into TransportError.

    Args:
        timeout: HTTP request timeout in seconds (default 10).
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        _transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._transport = _transport

    def request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        data: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        """Send one request; non-2xx answers raise TransportError."""
        kwargs: dict = {"timeout": self._timeout}
        if self._transport is not None:
            kwargs["transport"] = self._transport

        logger.debug("%s %s", method.upper(), url)
        try:
            with httpx.Client(**kwargs) as client:
                response = client.request(
                    method.upper(), url, params=params, data=data, headers=headers,
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning("%s %s answered HTTP %d", method.upper(), url, status)
            raise TransportError(
                f"{method.upper()} {url} failed with HTTP {status}",
                http_status=status,
                body=e.response.text,
            ) from e
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method.upper(), url, e)
            raise TransportError(f"{method.upper()} {url} failed: {e}") from e
        return response
