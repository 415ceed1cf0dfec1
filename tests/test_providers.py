"""Tests for the built-in provider profiles — profile fetch strategies and user mappers."""

import hashlib

import httpx
import pytest

from socialfort.config import OAuth2Config
from socialfort.core.signature import sign_md5
from socialfort.core.tokens import AccessToken
from socialfort.errors import ConfigurationError, ProfileFetchError, TransportError
from socialfort.flows.base import FlowStep
from socialfort.flows.oauth2 import OAuth2Flow
from socialfort.providers import (
    GITHUB,
    GOOGLE,
    ODNOKLASSNIKI,
    TWITTER,
    VKONTAKTE,
    Protocol,
    ProviderProfile,
    default_mapper,
    generic_profile,
)
from socialfort.providers.github import _pick_email

VK_USERS_URL = "https://api.vk.com/method/users.get"
OK_API_URL = "https://api.ok.ru/fb.do"


# ---------------------------------------------------------------------------
# Profile descriptors
# ---------------------------------------------------------------------------


class TestProviderProfile:
    def test_builtin_protocols(self):
        assert GOOGLE.protocol is Protocol.OAUTH2
        assert GITHUB.protocol is Protocol.OAUTH2
        assert VKONTAKTE.protocol is Protocol.OAUTH2
        assert ODNOKLASSNIKI.protocol is Protocol.OAUTH2
        assert TWITTER.protocol is Protocol.OAUTH1
        assert TWITTER.request_token_url

    def test_vk_defaults(self):
        assert VKONTAKTE.scope == "email"
        assert VKONTAKTE.api_version == "5.52"
        assert "photo_medium" in VKONTAKTE.fields

    def test_customize_overrides(self):
        custom = VKONTAKTE.customize(scopes=["email", "friends"], api_version="5.131", popup=True)
        assert custom.scope == "email,friends"
        assert custom.api_version == "5.131"
        assert custom.popup is True
        assert VKONTAKTE.scope == "email"
        assert VKONTAKTE.popup is False

    def test_customize_without_changes_is_same_object(self):
        assert GOOGLE.customize() is GOOGLE

    def test_immutable(self):
        with pytest.raises(AttributeError):
            GOOGLE.name = "other"

    def test_oauth1_needs_request_token_url(self):
        with pytest.raises(ConfigurationError):
            ProviderProfile(
                name="broken",
                protocol=Protocol.OAUTH1,
                authorize_url="https://x/authorize",
                token_url="https://x/token",
                fetch_profile=lambda flow, token: {},
                map_user=default_mapper("broken"),
            )

    def test_needs_endpoints(self):
        with pytest.raises(ConfigurationError):
            generic_profile("broken", authorize_url="", token_url="https://x/t", userinfo_url="https://x/u")


# ---------------------------------------------------------------------------
# Mappers
# ---------------------------------------------------------------------------


class TestMappers:
    @pytest.mark.parametrize("profile", [GOOGLE, GITHUB, VKONTAKTE, ODNOKLASSNIKI, TWITTER])
    def test_empty_payload_gives_empty_fields(self, profile):
        user = profile.map_user({})
        assert user.provider == profile.name
        assert user.id == ""
        assert user.email == ""
        assert user.name == ""
        assert user.avatar == ""
        assert user.avatar_original == ""

    def test_google(self):
        user = GOOGLE.map_user({
            "id": "1234567890",
            "email": "user@gmail.com",
            "name": "Test User",
            "given_name": "Test",
            "picture": "https://lh3.googleusercontent.com/photo.jpg",
        })
        assert user.id == "1234567890"
        assert user.email == "user@gmail.com"
        assert user.name == "Test User"
        assert user.nickname == "Test"
        assert user.avatar == "https://lh3.googleusercontent.com/photo.jpg"

    def test_github_falls_back_to_login(self):
        user = GITHUB.map_user({"id": 12345, "login": "octocat", "name": None, "avatar_url": "https://a/u"})
        assert user.id == "12345"
        assert user.name == "octocat"
        assert user.nickname == "octocat"
        assert user.avatar_original == "https://a/u"

    def test_vkontakte(self):
        user = VKONTAKTE.map_user({
            "response": [{
                "id": 1,
                "first_name": "Pavel",
                "last_name": "Durov",
                "screen_name": "durov",
                "photo_medium": "https://vk.com/m.jpg",
                "photo_big": "https://vk.com/b.jpg",
                "mobile_phone": "+7 000",
            }],
            "email": "durov@vk.com",
        })
        assert user.id == "1"
        assert user.nickname == "durov"
        assert user.name == "Pavel Durov"
        assert user.email == "durov@vk.com"
        assert user.avatar == "https://vk.com/m.jpg"
        assert user.avatar_original == "https://vk.com/b.jpg"

    def test_vkontakte_id_from_token_when_profile_empty(self):
        user = VKONTAKTE.map_user({"response": [], "user_id": 7})
        assert user.id == "7"
        assert user.name == ""

    def test_odnoklassniki(self):
        user = ODNOKLASSNIKI.map_user({
            "uid": "5555",
            "first_name": "Olga",
            "last_name": "Ivanova",
            "name": "Olga Ivanova",
            "email": "olga@ok.ru",
            "pic_5": "https://ok.ru/small.jpg",
            "pic1024x768": "https://ok.ru/big.jpg",
        })
        assert user.id == "5555"
        assert user.name == "Olga Ivanova"
        assert user.email == "olga@ok.ru"
        assert user.avatar == "https://ok.ru/small.jpg"
        assert user.avatar_original == "https://ok.ru/big.jpg"

    def test_twitter_without_https_image(self):
        user = TWITTER.map_user({"id": 9, "profile_image_url": "http://pbs/x_normal.png"})
        assert user.id == "9"
        assert user.avatar == "http://pbs/x_normal.png"
        assert user.avatar_original == "http://pbs/x.png"

    def test_default_mapper(self):
        user = default_mapper("gitlab")({"id": 3, "login": "dev", "avatar_url": "https://g/a"})
        assert (user.provider, user.id, user.nickname, user.avatar) == ("gitlab", "3", "dev", "https://g/a")


# ---------------------------------------------------------------------------
# GitHub
# ---------------------------------------------------------------------------


class TestGitHub:
    def _flow(self, oauth2_config, fake_provider):
        return OAuth2Flow(GITHUB, oauth2_config, transport=fake_provider.transport)

    def test_private_email_from_emails_endpoint(self, oauth2_config, fake_provider):
        fake_provider.add("GET", "https://api.github.com/user", httpx.Response(200, json={
            "id": 12345, "login": "octocat", "name": "The Octocat", "email": None,
        }))
        fake_provider.add("GET", "https://api.github.com/user/emails", httpx.Response(200, json=[
            {"email": "other@github.com", "primary": False, "verified": True},
            {"email": "octocat@github.com", "primary": True, "verified": True},
        ]))

        user = self._flow(oauth2_config, fake_provider).get_user(AccessToken(token="gho"))

        assert user.email == "octocat@github.com"
        assert user.raw["email_verified"] is True
        request = fake_provider.last("https://api.github.com/user")
        assert request.headers["Authorization"] == "Bearer gho"

    def test_emails_endpoint_refused(self, oauth2_config, fake_provider):
        fake_provider.add("GET", "https://api.github.com/user", httpx.Response(200, json={
            "id": 1, "login": "octocat", "email": "public@github.com",
        }))
        fake_provider.add("GET", "https://api.github.com/user/emails", httpx.Response(403, json={}))

        user = self._flow(oauth2_config, fake_provider).get_user(AccessToken(token="gho"))

        assert user.email == "public@github.com"
        assert "email_verified" not in user.raw

    def test_emails_network_failure_propagates(self, oauth2_config, fake_provider):
        def reset(request):
            raise httpx.ConnectError("connection reset", request=request)

        fake_provider.add("GET", "https://api.github.com/user", httpx.Response(200, json={
            "id": 1, "login": "octocat", "email": "public@github.com",
        }))
        fake_provider.add("GET", "https://api.github.com/user/emails", reset)

        with pytest.raises(TransportError) as exc_info:
            self._flow(oauth2_config, fake_provider).get_user(AccessToken(token="gho"))
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
        assert exc_info.value.step is FlowStep.PROFILE_FETCHED

    def test_emails_server_error_propagates(self, oauth2_config, fake_provider):
        fake_provider.add("GET", "https://api.github.com/user", httpx.Response(200, json={"id": 1}))
        fake_provider.add("GET", "https://api.github.com/user/emails", httpx.Response(502, text="bad gateway"))

        with pytest.raises(TransportError) as exc_info:
            self._flow(oauth2_config, fake_provider).get_user(AccessToken(token="gho"))
        assert exc_info.value.extra["http_status"] == 502

    @pytest.mark.parametrize(
        ("email", "emails", "expected"),
        [
            ("a@x", [{"email": "a@x", "verified": True}], ("a@x", True)),
            ("a@x", [{"email": "a@x", "verified": False}], ("a@x", False)),
            (None, [{"email": "b@x", "verified": True}], ("b@x", True)),
            (None, [{"email": "c@x", "verified": False}], ("c@x", False)),
            (None, [], (None, False)),
        ],
    )
    def test_pick_email(self, email, emails, expected):
        assert _pick_email(email, emails) == expected


# ---------------------------------------------------------------------------
# VKontakte
# ---------------------------------------------------------------------------


class TestVKontakte:
    def _flow(self, oauth2_config, fake_provider, profile=VKONTAKTE):
        return OAuth2Flow(profile, oauth2_config, transport=fake_provider.transport)

    def test_token_exchange_is_get(self, oauth2_config, fake_provider):
        fake_provider.add("GET", "https://oauth.vk.com/access_token", httpx.Response(200, json={
            "access_token": "vk-token", "expires_in": 86400, "user_id": 1, "email": "durov@vk.com",
        }))

        token = self._flow(oauth2_config, fake_provider).exchange_code_for_token("c0de")

        assert token.token == "vk-token"
        assert token.get("email") == "durov@vk.com"
        request = fake_provider.last("https://oauth.vk.com/access_token")
        assert request.url.params["code"] == "c0de"
        assert request.url.params["client_id"] == "X"

    def test_fetch_profile(self, oauth2_config, fake_provider):
        fake_provider.add("GET", VK_USERS_URL, httpx.Response(200, json={
            "response": [{"id": 1, "first_name": "Pavel", "last_name": "Durov"}],
        }))
        token = AccessToken(token="vk-token", attributes={"user_id": 1, "email": "durov@vk.com"})

        user = self._flow(oauth2_config, fake_provider).get_user(token)

        assert user.id == "1"
        assert user.email == "durov@vk.com"
        assert user.name == "Pavel Durov"
        params = fake_provider.last(VK_USERS_URL).url.params
        assert params["access_token"] == "vk-token"
        assert params["v"] == "5.52"
        assert params["user_ids"] == "1"
        assert params["fields"] == ",".join(VKONTAKTE.fields)

    def test_api_version_and_fields_override(self, fake_provider):
        config = OAuth2Config(
            client_id="X", client_secret="S", redirect_uri="https://app/cb",
            api_version="5.131", fields=("first_name", "photo_big"),
        )
        fake_provider.add("GET", VK_USERS_URL, httpx.Response(200, json={"response": [{"id": 1}]}))
        profile = VKONTAKTE.customize(fields=config.fields, api_version=config.api_version)

        self._flow(config, fake_provider, profile).get_user(AccessToken(token="t"))

        params = fake_provider.last(VK_USERS_URL).url.params
        assert params["v"] == "5.131"
        assert params["fields"] == "first_name,photo_big"

    def test_api_error(self, oauth2_config, fake_provider):
        fake_provider.add("GET", VK_USERS_URL, httpx.Response(200, json={
            "error": {"error_code": 5, "error_msg": "User authorization failed"},
        }))

        with pytest.raises(ProfileFetchError) as exc_info:
            self._flow(oauth2_config, fake_provider).fetch_profile(AccessToken(token="t"))
        assert "User authorization failed" in exc_info.value.message
        assert exc_info.value.extra["provider_error"] == 5
        assert exc_info.value.step is FlowStep.PROFILE_FETCHED

    def test_comma_scopes_in_authorize_url(self, oauth2_config, fake_provider):
        profile = VKONTAKTE.customize(scopes=("email", "friends"))
        url = self._flow(oauth2_config, fake_provider, profile).begin().url
        assert "scope=email%2Cfriends" in url


# ---------------------------------------------------------------------------
# Odnoklassniki
# ---------------------------------------------------------------------------


class TestOdnoklassniki:
    def _flow(self, config, fake_provider):
        return OAuth2Flow(ODNOKLASSNIKI, config, transport=fake_provider.transport)

    def _serve_profile(self, fake_provider):
        def respond(request):
            method = request.url.params["method"]
            if method == "users.getLoggedInUser":
                return httpx.Response(200, json="5555")
            return httpx.Response(200, json=[{"uid": "5555", "first_name": "Olga", "last_name": "Ivanova"}])

        fake_provider.add("GET", OK_API_URL, respond)

    def test_token_params_in_query(self, ok_config, fake_provider):
        fake_provider.add("POST", "https://api.ok.ru/oauth/token.do", httpx.Response(200, json={
            "access_token": "ok-token", "refresh_token": "r", "expires_in": "1800",
        }))

        token = self._flow(ok_config, fake_provider).exchange_code_for_token("c0de")

        assert token.token == "ok-token"
        assert token.expires_in == 1800
        request = fake_provider.last("https://api.ok.ru/oauth/token.do")
        assert request.method == "POST"
        assert request.url.params["code"] == "c0de"
        assert request.content == b""

    def test_fetch_profile_two_signed_calls(self, ok_config, fake_provider):
        self._serve_profile(fake_provider)

        user = self._flow(ok_config, fake_provider).get_user(AccessToken(token="ok-token"))

        assert user.id == "5555"
        assert user.name == "Olga Ivanova"
        first, second = fake_provider.requests
        assert first.url.params["method"] == "users.getLoggedInUser"
        assert second.url.params["method"] == "users.getCurrentUser"
        assert second.url.params["uids"] == "5555"
        assert second.url.params["fields"] == ",".join(ODNOKLASSNIKI.fields)

    def test_signature(self, ok_config, fake_provider):
        self._serve_profile(fake_provider)
        self._flow(ok_config, fake_provider).get_user(AccessToken(token="ok-token"))

        for request in fake_provider.requests:
            params = dict(request.url.params)
            assert params.pop("access_token") == "ok-token"
            sig = params.pop("sig")
            assert params["application_key"] == "PUBKEY"
            assert sig == sign_md5(params, "ok-token", "ok-secret")

        # Known answer for the first call
        secret_part = hashlib.md5(b"ok-tokenok-secret").hexdigest()
        expected = hashlib.md5(
            ("application_key=PUBKEYmethod=users.getLoggedInUser" + secret_part).encode()
        ).hexdigest()
        assert fake_provider.requests[0].url.params["sig"] == expected

    def test_api_error(self, ok_config, fake_provider):
        fake_provider.add("GET", OK_API_URL, httpx.Response(200, json={
            "error_code": 102, "error_msg": "PARAM_SESSION_EXPIRED",
        }))

        with pytest.raises(ProfileFetchError) as exc_info:
            self._flow(ok_config, fake_provider).fetch_profile(AccessToken(token="t"))
        assert exc_info.value.extra["provider_error"] == 102
        assert "PARAM_SESSION_EXPIRED" in exc_info.value.message

    def test_no_user_id(self, ok_config, fake_provider):
        fake_provider.add("GET", OK_API_URL, httpx.Response(200, json=""))

        with pytest.raises(ProfileFetchError):
            self._flow(ok_config, fake_provider).fetch_profile(AccessToken(token="t"))

    def test_requires_public_key(self, oauth2_config, fake_provider):
        with pytest.raises(ConfigurationError) as exc_info:
            self._flow(oauth2_config, fake_provider).fetch_profile(AccessToken(token="t"))
        assert exc_info.value.step is FlowStep.PROFILE_FETCHED
        assert fake_provider.requests == []


# ---------------------------------------------------------------------------
# Generic providers
# ---------------------------------------------------------------------------


class TestGeneric:
    def test_bearer_userinfo(self, oauth2_config, fake_provider):
        gitlab = generic_profile(
            "gitlab",
            authorize_url="https://gitlab.com/oauth/authorize",
            token_url="https://gitlab.com/oauth/token",
            userinfo_url="https://gitlab.com/api/v4/user",
            scopes=("read_user",),
        )
        fake_provider.add("GET", "https://gitlab.com/api/v4/user", httpx.Response(200, json={
            "id": 77, "username": "dev", "email": "dev@gitlab.com", "name": "Dev",
        }))
        flow = OAuth2Flow(gitlab, oauth2_config, transport=fake_provider.transport)

        user = flow.get_user(AccessToken(token="gl"))

        assert (user.provider, user.id, user.email, user.name) == ("gitlab", "77", "dev@gitlab.com", "Dev")
        assert fake_provider.last("https://gitlab.com/api/v4/user").headers["Authorization"] == "Bearer gl"

    def test_non_object_profile(self, oauth2_config, fake_provider):
        fake_provider.add("GET", "https://www.googleapis.com/oauth2/v2/userinfo", httpx.Response(200, json=[1, 2]))
        flow = OAuth2Flow(GOOGLE, oauth2_config, transport=fake_provider.transport)

        with pytest.raises(ProfileFetchError):
            flow.get_user(AccessToken(token="t"))

    def test_google_offline_access(self, oauth2_config, fake_provider):
        url = OAuth2Flow(GOOGLE, oauth2_config, transport=fake_provider.transport).begin().url
        assert "access_type=offline" in url
        assert "prompt=consent" in url
        assert "scope=openid+email+profile" in url
