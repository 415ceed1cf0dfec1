"""Test fixtures for SocialFort — an in-process fake provider over httpx.MockTransport."""

from collections.abc import Callable
from urllib.parse import unquote

import httpx
import pytest

from socialfort.config import OAuth1Config, OAuth2Config, OkConfig
from socialfort.transport import HttpTransport

Responder = httpx.Response | Callable[[httpx.Request], httpx.Response]


class FakeProvider:
    """Routes requests by method + URL (without query) to canned responses and records them."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[Responder]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, url: str, *responses: Responder) -> None:
        """Register responses for a route; several are served in order, the last one repeats."""
        self.routes[(method.upper(), url)] = list(responses)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, str(request.url).split("?")[0])
        queue = self.routes.get(key)
        if not queue:
            return httpx.Response(404, json={"message": f"no route for {key}"})
        responder = queue.pop(0) if len(queue) > 1 else queue[0]
        if callable(responder):
            return responder(request)
        # Fresh copy so a repeated route never hands out an already-consumed response
        return httpx.Response(
            responder.status_code, headers=responder.headers, content=responder.content,
        )

    @property
    def transport(self) -> HttpTransport:
        return HttpTransport(_transport=httpx.MockTransport(self.handler))

    def last(self, url: str) -> httpx.Request:
        for request in reversed(self.requests):
            if str(request.url).split("?")[0] == url:
                return request
        raise AssertionError(f"no request sent to {url}")


def parse_oauth_header(value: str) -> dict[str, str]:
    """Decode an ``Authorization: OAuth k="v", ...`` header into a dict."""
    assert value.startswith("OAuth ")
    params = {}
    for part in value[len("OAuth "):].split(", "):
        key, _, quoted = part.partition("=")
        params[unquote(key)] = unquote(quoted.strip('"'))
    return params


def form_body(request: httpx.Request) -> dict[str, str]:
    return dict(httpx.QueryParams(request.content.decode()))


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def oauth2_config() -> OAuth2Config:
    return OAuth2Config(
        client_id="X",
        client_secret="client-secret",
        redirect_uri="https://app/cb",
    )


@pytest.fixture
def ok_config() -> OkConfig:
    return OkConfig(
        client_id="ok-app",
        client_secret="ok-secret",
        redirect_uri="https://app/cb",
        public_key="PUBKEY",
    )


@pytest.fixture
def oauth1_config() -> OAuth1Config:
    return OAuth1Config(api_key="CK", api_key_secret="CS", redirect_uri="https://app/cb")
