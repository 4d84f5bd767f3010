'''
OAuth2 client for Instagram.

Client credentials come from INSTAGRAM_CLIENT_ID / INSTAGRAM_CLIENT_SECRET (see
instagram_strategy.utils.config) and can be overridden per call. The strategy in
instagram_strategy.services.instagram uses this module for you; the helpers are
only useful directly when talking to Instagram outside the callback phase.
'''
from typing import Any, Dict, Optional
import logging

import httpx
from authlib.integrations.base_client.errors import OAuthError
from authlib.integrations.httpx_client import AsyncOAuth2Client
from authlib.oauth2.rfc6749.parameters import prepare_grant_uri

from instagram_strategy.models.token import Token, TokenExchange
from instagram_strategy.utils.config import settings

logger = logging.getLogger(__name__)

DEFAULTS = {
    "authorize_url": "https://api.instagram.com/oauth/authorize",
    "token_url": "https://api.instagram.com/oauth/access_token",
    "token_method": "POST",
}

# authlib only applies its default headers when none are passed
TOKEN_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/x-www-form-urlencoded;charset=UTF-8",
}


class CodeExchangeError(Exception):
    '''The token endpoint refused the authorization code.'''

    def __init__(self, status_code: int, body: str = ""):
        super().__init__(f"token endpoint returned {status_code}")
        self.status_code = status_code
        self.body = body


def _reject_error_status(response: httpx.Response) -> httpx.Response:
    # Runs before authlib parses the token body
    if response.status_code >= 400:
        raise CodeExchangeError(response.status_code, response.text)
    return response


def client_config(**opts) -> Dict[str, Any]:
    '''Merges the endpoint defaults, the configured credentials and `opts`, later ones winning.'''
    config = dict(DEFAULTS)
    config.update(
        client_id=settings.instagram_client_id,
        client_secret=settings.instagram_client_secret,
    )
    config.update({k: v for k, v in opts.items() if v is not None})
    return config


def client(client_kwargs: Optional[Dict[str, Any]] = None, **opts) -> AsyncOAuth2Client:
    '''
    Construct a client for requests to Instagram.

    `client_kwargs` are handed to httpx (timeout, transport, ...). The client
    must be used as an async context manager so the connection pool is closed.
    '''
    config = client_config(**opts)
    oauth_client = AsyncOAuth2Client(
        client_id=config["client_id"],
        client_secret=config["client_secret"],
        # Instagram expects the secret as a body parameter, not basic auth
        token_endpoint_auth_method="client_secret_post",
        redirect_uri=config.get("redirect_uri"),
        token_endpoint=config["token_url"],
        **(client_kwargs or {}),
    )
    oauth_client.register_compliance_hook("access_token_response", _reject_error_status)
    return oauth_client


def authorize_url(params: Optional[Dict[str, Any]] = None, **opts) -> str:
    '''Builds the URL the user is redirected to in the request phase.'''
    params = dict(params or {})
    config = client_config(**opts)
    if "redirect_uri" not in params and config.get("redirect_uri"):
        params["redirect_uri"] = config["redirect_uri"]
    return prepare_grant_uri(
        config["authorize_url"],
        client_id=config["client_id"],
        response_type="code",
        **params,
    )


async def get_token(oauth_client: AsyncOAuth2Client, **params) -> TokenExchange:
    '''
    Trades an authorization code for a token.

    Failures are returned, not raised: an HTTP error status or a transport
    problem gives a TokenExchange with `error` set, while an explicit
    error/error_description payload in a successful response gives a Token
    without access_token that carries the payload in other_params.
    '''
    try:
        token = await oauth_client.fetch_token(
            method=DEFAULTS["token_method"], headers=TOKEN_HEADERS, **params
        )
    except CodeExchangeError as e:
        logger.debug(f"Instagram rejected the authorization code: {e} {e.body}")
        return TokenExchange(error=str(e))
    except (httpx.HTTPError, ValueError) as e:
        return TokenExchange(error=f"token request failed: {e}")
    except OAuthError as e:
        # authlib raises on an "error" key in the token body
        return TokenExchange(token=Token(other_params={
            "error": e.error,
            "error_description": e.description,
        }))
    return TokenExchange(token=Token.from_response(token))
