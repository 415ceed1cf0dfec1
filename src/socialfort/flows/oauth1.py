"""OAuth 1.0a three-legged flow with HMAC-SHA1 signed requests.

1. Obtain temporary credentials (request token)
2. Redirect user for authorization
3. Exchange the verifier for access token credentials

Every request is signed with a fresh nonce and timestamp. There is no CSRF
state parameter; the request token binds the callback to the attempt.
"""

from __future__ import annotations

import logging
import urllib.parse
from collections.abc import Mapping
from typing import Any

import httpx

from socialfort.config import OAuth1Config
from socialfort.core.signature import OAuth1Credentials, oauth1_authorization_header
from socialfort.core.state import verify_state
from socialfort.core.tokens import AccessToken, TokenShape, decode_token
from socialfort.core.user import NormalizedUser
from socialfort.errors import (
    AuthorizationDenied,
    CallbackMalformed,
    ConfigurationError,
    MalformedTokenResponse,
    StateMismatch,
)
from socialfort.flows.base import AuthorizationFlow, AuthorizationRequest, FlowStep
from socialfort.providers.base import Protocol, ProviderProfile
from socialfort.transport import HttpTransport

logger = logging.getLogger("socialfort.flows.oauth1")


class OAuth1Flow(AuthorizationFlow):
    """Three-legged OAuth 1.0a flow for an OAuth1 ProviderProfile."""

    config: OAuth1Config

    def __init__(
        self,
        profile: ProviderProfile,
        config: OAuth1Config,
        *,
        transport: HttpTransport | None = None,
    ) -> None:
        if profile.protocol is not Protocol.OAUTH1:
            raise ConfigurationError(f"{profile.name} is not an OAuth 1.0a provider")
        if not isinstance(config, OAuth1Config):
            raise ConfigurationError(
                f"{profile.name} needs an OAuth1Config, got {type(config).__name__}",
            )
        super().__init__(profile, config, transport=transport)

    def credentials(self, token: str = "", token_secret: str = "") -> OAuth1Credentials:
        return OAuth1Credentials(
            consumer_key=self.config.api_key,
            consumer_secret=self.config.api_key_secret,
            token=token,
            token_secret=token_secret,
        )

    def signed_request(
        self,
        method: str,
        url: str,
        *,
        token: str = "",
        token_secret: str = "",
        params: Mapping[str, Any] | None = None,
        oauth_params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        require_token: bool = False,
    ) -> httpx.Response:
        """Send one request signed with the consumer credentials (and token, if any).

        ``params`` travel as the query string for GET and as the form body
        otherwise; both are part of the signature.
        """
        params = dict(params or {})
        authorization = oauth1_authorization_header(
            method,
            url,
            params,
            self.credentials(token, token_secret),
            oauth_params=oauth_params,
            require_token=require_token,
        )
        all_headers = {**(headers or {}), "Authorization": authorization}
        if method.upper() == "GET":
            return self.transport.request(
                "GET", url, params=params or None, headers=all_headers,
            )
        return self.transport.request(method, url, data=params or None, headers=all_headers)

    def signed_json(
        self,
        method: str,
        url: str,
        token: AccessToken,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        """User-context API call; needs the access token and its secret."""
        headers = {"Accept": "application/json"} if self.profile.accept_json else None
        response = self.signed_request(
            method,
            url,
            token=token.token,
            token_secret=token.secret or "",
            params=params,
            headers=headers,
            require_token=True,
        )
        return self.decode_json(response)

    def obtain_request_token(self) -> AccessToken:
        """Obtain temporary credentials, signed with the consumer credentials only."""
        with self.step(FlowStep.REQUEST_TOKEN_OBTAINED):
            logger.debug("Requesting %s temporary credentials", self.name)
            response = self.signed_request(
                "POST",
                self.profile.request_token_url,
                oauth_params={"oauth_callback": self.config.redirect_uri},
            )
            token = decode_token(response.content, TokenShape.URLENCODED)
            if token.secret is None:
                raise MalformedTokenResponse("Request token response has no oauth_token_secret")
            if token.get("oauth_callback_confirmed", "true") != "true":
                raise MalformedTokenResponse("Provider did not confirm the oauth_callback")
            return token

    def build_authorization_url(self, request_token: AccessToken) -> str:
        params = {"oauth_token": request_token.token}
        params.update(self.profile.authorize_params)
        if self.profile.popup:
            params["display"] = "popup"
        return f"{self.profile.authorize_url}?{urllib.parse.urlencode(params)}"

    def begin(self) -> AuthorizationRequest:
        """Run the request-token leg and build the redirect.

        The returned request carries the request token; keep it for the callback.
        """
        request_token = self.obtain_request_token()
        with self.step(FlowStep.REDIRECT_BUILT):
            url = self.build_authorization_url(request_token)
        return AuthorizationRequest(provider=self.name, url=url, request_token=request_token)

    def handle_callback(
        self, query: Mapping[str, str], request_token: AccessToken | None = None,
    ) -> tuple[str, str]:
        """Read ``oauth_verifier`` and ``oauth_token`` from the callback.

        When the pending request token is known, the callback must echo it.

        Raises:
            AuthorizationDenied: If the user declined (``denied`` or ``error``).
            CallbackMalformed: If either field is missing.
            StateMismatch: If the echoed token is not the pending request token.
        """
        with self.step(FlowStep.CALLBACK_RECEIVED):
            denied = query.get("denied") or query.get("error")
            if denied:
                raise AuthorizationDenied(
                    query.get("error_description") or "User denied the authorization",
                    provider_error=denied,
                )
            verifier = query.get("oauth_verifier")
            token = query.get("oauth_token")
            if not verifier or not token:
                raise CallbackMalformed("Missing oauth_token or oauth_verifier parameter")
            if request_token is not None:
                verify_state(token, request_token.token)
            return verifier, token

    def exchange_verifier_for_access_token(
        self, token: str, verifier: str, *, token_secret: str = "",
    ) -> AccessToken:
        """Exchange the verified request token for access token credentials."""
        with self.step(FlowStep.TOKEN_EXCHANGED):
            response = self.signed_request(
                "POST",
                self.profile.token_url,
                token=token,
                token_secret=token_secret,
                oauth_params={"oauth_verifier": verifier},
            )
            access_token = decode_token(response.content, TokenShape.URLENCODED)
            logger.info("Exchanged verifier for a %s access token", self.name)
            return access_token

    def fetch_profile(self, token: AccessToken) -> dict[str, Any]:
        with self.step(FlowStep.PROFILE_FETCHED):
            return self.profile.fetch_profile(self, token)

    def complete(
        self, query: Mapping[str, str], request: AuthorizationRequest | None,
    ) -> NormalizedUser:
        """Run callback -> verifier exchange -> profile fetch -> mapping.

        Fails with StateMismatch when there is no pending request token to
        bind the callback to.
        """
        with self.step(FlowStep.CALLBACK_RECEIVED):
            if request is None or request.request_token is None:
                raise StateMismatch("No pending OAuth1 request")
            if request.provider != self.name:
                raise StateMismatch(
                    f"Pending request belongs to {request.provider}, not {self.name}",
                )
        request_token = request.request_token
        verifier, token = self.handle_callback(query, request_token)
        access_token = self.exchange_verifier_for_access_token(
            token, verifier, token_secret=request_token.secret or "",
        )
        return self.get_user(access_token)
