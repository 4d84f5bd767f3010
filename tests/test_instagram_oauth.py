import httpx
import pytest
from urllib.parse import parse_qs, urlparse

from instagram_strategy.auth import instagram as instagram_oauth
from conftest import CALLBACK_URL, TOKEN_BODY, TOKEN_HOST


def _form(request: httpx.Request) -> dict:
    return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}


def test_client_config_merges_defaults_settings_and_opts():
    '''Explicit options win over settings, which win over the endpoint defaults'''
    config = instagram_oauth.client_config(client_id="override_id", client_secret=None)

    assert config["client_id"] == "override_id"
    assert config["client_secret"] == "test_client_secret"  # None does not override
    assert config["authorize_url"] == "https://api.instagram.com/oauth/authorize"
    assert config["token_url"] == "https://api.instagram.com/oauth/access_token"


def test_authorize_url_contains_client_and_params():
    url = instagram_oauth.authorize_url(
        {"scope": "user_profile", "state": "abc", "display": "popup"},
        redirect_uri=CALLBACK_URL,
    )
    parsed = urlparse(url)
    query = {k: v[0] for k, v in parse_qs(parsed.query).items()}

    assert parsed.netloc == "api.instagram.com"
    assert parsed.path == "/oauth/authorize"
    assert query == {
        "response_type": "code",
        "client_id": "test_client_id",
        "redirect_uri": CALLBACK_URL,
        "scope": "user_profile",
        "state": "abc",
        "display": "popup",
    }


@pytest.mark.asyncio
async def test_get_token_success(instagram):
    '''Secret goes in the body and JSON is requested explicitly'''
    async with instagram_oauth.client({"transport": instagram.transport}, redirect_uri=CALLBACK_URL) as client:
        exchange = await instagram_oauth.get_token(client, code="auth_code")

    assert exchange.ok
    assert exchange.token.access_token == TOKEN_BODY["access_token"]
    assert exchange.token.other_params["scope"] == "user_profile,user_media"
    assert exchange.token.other_params["user_id"] == TOKEN_BODY["user_id"]

    [request] = instagram.requests_to(TOKEN_HOST)
    assert request.method == "POST"
    assert request.headers["accept"] == "application/json"
    assert "authorization" not in request.headers
    form = _form(request)
    assert form["grant_type"] == "authorization_code"
    assert form["code"] == "auth_code"
    assert form["redirect_uri"] == CALLBACK_URL
    assert form["client_id"] == "test_client_id"
    assert form["client_secret"] == "test_client_secret"


@pytest.mark.asyncio
async def test_get_token_per_call_credentials(instagram):
    async with instagram_oauth.client(
        {"transport": instagram.transport}, client_id="other_id", client_secret="other_secret"
    ) as client:
        await instagram_oauth.get_token(client, code="auth_code")

    form = _form(instagram.requests_to(TOKEN_HOST)[0])
    assert form["client_id"] == "other_id"
    assert form["client_secret"] == "other_secret"


@pytest.mark.asyncio
async def test_get_token_expiry(instagram):
    instagram.token_response = httpx.Response(200, json={"access_token": "tok", "expires_in": 3600})

    async with instagram_oauth.client({"transport": instagram.transport}) as client:
        exchange = await instagram_oauth.get_token(client, code="auth_code")

    assert exchange.token.expires_at is not None
    assert exchange.token.other_params["expires_in"] == 3600


@pytest.mark.asyncio
async def test_get_token_rejected_code(instagram):
    '''A used or expired code comes back as an error result, not an exception'''
    instagram.token_response = httpx.Response(400, json={
        "error_type": "OAuthException",
        "code": 400,
        "error_message": "This authorization code has been used",
    })

    async with instagram_oauth.client({"transport": instagram.transport}) as client:
        exchange = await instagram_oauth.get_token(client, code="used_code")

    assert not exchange.ok
    assert exchange.token is None
    assert "400" in exchange.error


@pytest.mark.asyncio
async def test_get_token_error_payload(instagram):
    instagram.token_response = httpx.Response(200, json={
        "error": "access_denied",
        "error_description": "The user denied your request.",
    })

    async with instagram_oauth.client({"transport": instagram.transport}) as client:
        exchange = await instagram_oauth.get_token(client, code="auth_code")

    assert exchange.ok
    assert exchange.token.access_token is None
    assert exchange.token.other_params == {
        "error": "access_denied",
        "error_description": "The user denied your request.",
    }


@pytest.mark.asyncio
async def test_get_token_transport_error(instagram):
    instagram.token_response = httpx.ConnectError("connection refused")

    async with instagram_oauth.client({"transport": instagram.transport}) as client:
        exchange = await instagram_oauth.get_token(client, code="auth_code")

    assert not exchange.ok
    assert "connection refused" in exchange.error
