"""OAuth 2.0 authorization-code flow with a state (CSRF) parameter."""

from __future__ import annotations

import logging
import urllib.parse
from collections.abc import Mapping
from typing import Any

from socialfort.config import OAuth2Config
from socialfort.core.state import generate_state, verify_state
from socialfort.core.tokens import AccessToken, decode_token
from socialfort.core.user import NormalizedUser
from socialfort.errors import (
    AuthorizationDenied,
    CallbackMalformed,
    ConfigurationError,
    StateMismatch,
)
from socialfort.flows.base import AuthorizationFlow, AuthorizationRequest, FlowStep
from socialfort.providers.base import Protocol, ProviderProfile
from socialfort.transport import HttpTransport

logger = logging.getLogger("socialfort.flows.oauth2")


class OAuth2Flow(AuthorizationFlow):
    """Authorization-code flow for any OAuth 2.0 ProviderProfile.

    Example::

        flow = OAuth2Flow(VKONTAKTE, OAuth2Config(client_id="...", client_secret="...",
                                                  redirect_uri="https://app/cb"))
        request = flow.begin()            # redirect the user to request.url
        user = flow.complete(query, request)
    """

    config: OAuth2Config

    def __init__(
        self,
        profile: ProviderProfile,
        config: OAuth2Config,
        *,
        transport: HttpTransport | None = None,
    ) -> None:
        if profile.protocol is not Protocol.OAUTH2:
            raise ConfigurationError(f"{profile.name} is not an OAuth 2.0 provider")
        if not isinstance(config, OAuth2Config):
            raise ConfigurationError(
                f"{profile.name} needs an OAuth2Config, got {type(config).__name__}",
            )
        super().__init__(profile, config, transport=transport)

    def authorization_params(self, state: str | None) -> dict[str, str]:
        params = {
            "client_id": self.config.client_id,
            "redirect_uri": self.config.redirect_uri,
            "response_type": "code",
        }
        scope = self.profile.scope
        if scope:
            params["scope"] = scope
        if state is not None:
            params["state"] = state
        params.update(self.profile.authorize_params)
        if self.profile.popup:
            params["display"] = "popup"
        return params

    def build_authorization_url(self) -> AuthorizationRequest:
        """Build the authorize redirect with a fresh state (unless stateless)."""
        state = None if self.profile.stateless else generate_state()
        query = urllib.parse.urlencode(self.authorization_params(state))
        logger.debug("Built %s authorization URL", self.name)
        return AuthorizationRequest(
            provider=self.name, url=f"{self.profile.authorize_url}?{query}", state=state,
        )

    def begin(self) -> AuthorizationRequest:
        return self.build_authorization_url()

    def handle_callback(self, query: Mapping[str, str], expected_state: str | None) -> str:
        """Validate the callback and return the authorization code.

        Raises:
            AuthorizationDenied: If the provider sent an ``error`` instead of a code.
            StateMismatch: If ``state`` differs from ``expected_state``.
            CallbackMalformed: If there is no ``code``.
        """
        with self.step(FlowStep.CALLBACK_RECEIVED):
            error = query.get("error")
            if error:
                raise AuthorizationDenied(
                    query.get("error_description") or error, provider_error=error,
                )
            if not self.profile.stateless:
                verify_state(query.get("state"), expected_state)
            code = query.get("code")
            if not code:
                raise CallbackMalformed("Missing code parameter")
            return code

    def token_params(self, code: str) -> dict[str, str]:
        return {
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": self.config.redirect_uri,
        }

    def exchange_code_for_token(self, code: str) -> AccessToken:
        """Exchange the authorization code at the token endpoint."""
        with self.step(FlowStep.TOKEN_EXCHANGED):
            fields = self.token_params(code)
            headers = {"Accept": "application/json"} if self.profile.accept_json else None
            method = self.profile.token_method
            if method == "GET" or self.profile.token_params_in == "query":
                response = self.transport.request(
                    method, self.profile.token_url, params=fields, headers=headers,
                )
            else:
                response = self.transport.request(
                    method, self.profile.token_url, data=fields, headers=headers,
                )
            token = decode_token(response.content, self.profile.token_shape)
            logger.info("Exchanged authorization code for a %s access token", self.name)
            return token

    def fetch_profile(self, token: AccessToken) -> dict[str, Any]:
        with self.step(FlowStep.PROFILE_FETCHED):
            return self.profile.fetch_profile(self, token)

    def complete(
        self, query: Mapping[str, str], request: AuthorizationRequest | None,
    ) -> NormalizedUser:
        """Run callback -> code exchange -> profile fetch -> mapping."""
        with self.step(FlowStep.CALLBACK_RECEIVED):
            if request is not None and request.provider != self.name:
                raise StateMismatch(
                    f"Pending request belongs to {request.provider}, not {self.name}",
                )
        code = self.handle_callback(query, request.state if request is not None else None)
        token = self.exchange_code_for_token(code)
        return self.get_user(token)
