import os

# Settings are read at import time, so the environment must be in place first
os.environ["INSTAGRAM_CLIENT_ID"] = "test_client_id"
os.environ["INSTAGRAM_CLIENT_SECRET"] = "test_client_secret"
os.environ["APP_SECRET_KEY"] = "test_app_secret"
os.environ.pop("INSTAGRAM_REDIRECT_URI", None)

import httpx
import pytest

from instagram_strategy.models.auth import StrategyOptions
from instagram_strategy.services.instagram import InstagramStrategy

TOKEN_HOST = "api.instagram.com"
GRAPH_HOST = "graph.instagram.com"
CALLBACK_URL = "http://test/auth/instagram/callback"

TOKEN_BODY = {
    "access_token": "IGQVJ_test_access_token",
    "user_id": 17841400000000000,
    "scope": "user_profile,user_media",
}
PROFILE_BODY = {"id": "123", "username": "u", "account_type": "PERSONAL"}


class InstagramStub:
    '''
    Stands in for api.instagram.com and graph.instagram.com.
    Each response may be an httpx.Response or an exception to raise.
    '''

    def __init__(self):
        self.token_response = httpx.Response(200, json=TOKEN_BODY)
        self.profile_response = httpx.Response(200, json=PROFILE_BODY)
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == TOKEN_HOST and request.url.path == "/oauth/access_token":
            response = self.token_response
        elif request.url.host == GRAPH_HOST and request.url.path == "/me":
            response = self.profile_response
        else:
            return httpx.Response(404)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def requests_to(self, host: str):
        return [r for r in self.requests if r.url.host == host]


@pytest.fixture
def instagram():
    return InstagramStub()


@pytest.fixture
def options():
    return StrategyOptions()


@pytest.fixture
def strategy(instagram, options):
    return InstagramStrategy(options, client_kwargs={"transport": instagram.transport})
