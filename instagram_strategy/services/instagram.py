from typing import Any, Dict, Optional
import logging

import httpx
from authlib.integrations.base_client.errors import OAuthError
from authlib.integrations.httpx_client import AsyncOAuth2Client

from instagram_strategy.auth import instagram as instagram_oauth
from instagram_strategy.auth.strategy import AuthContext, Strategy
from instagram_strategy.models.auth import Credentials, Extra, Info
from instagram_strategy.models.token import Token

logger = logging.getLogger(__name__)

PROFILE_URL = "https://graph.instagram.com/me"
PROFILE_FIELDS = "id,username,account_type"

# Request params that fall back to a configured option when absent
PARAM_DEFAULTS = (
    ("auth_type", "auth_type"),
    ("scope", "default_scope"),
    ("display", "display"),
)

USER_KEY = "instagram_user"
TOKEN_KEY = "instagram_token"


def fetch_image(uid: Any) -> str:
    return f"https://graph.instagram.com/{uid}/picture?type=large"


class InstagramStrategy(Strategy):
    '''Instagram login: user_profile scope, profile read from graph.instagram.com/me.'''

    name = "instagram"

    async def handle_request(self, ctx: AuthContext) -> None:
        '''Redirects to Instagram's authorization page.'''
        allowed_params = set(self.option(ctx, "allowed_request_params"))

        params = dict(ctx.params)
        for name, config_key in PARAM_DEFAULTS:
            params = self._maybe_replace_param(params, ctx, name, config_key)

        params = {k: v for k, v in params.items() if k in allowed_params}
        params["redirect_uri"] = ctx.callback_url
        params = self.with_state_param(params, ctx)

        url = instagram_oauth.authorize_url(params, **self._client_options(ctx))
        logger.debug(f"Redirecting to Instagram authorization with params: {sorted(params)}")
        self.redirect(ctx, url)

    async def handle_callback(self, ctx: AuthContext) -> None:
        '''Exchanges the callback code for a token and loads the user's profile.'''
        code = ctx.params.get("code")
        if not code:
            self.set_errors(ctx, [self.error("missing_code", "No code received")])
            return

        async with instagram_oauth.client(self.client_kwargs, **self._client_options(ctx)) as oauth_client:
            exchange = await instagram_oauth.get_token(oauth_client, code=code)

            if not exchange.ok:
                self.set_errors(ctx, [self.error("invalid_code", "The code has been used or has expired")])
                return

            token = exchange.token
            if token.access_token is None:
                err = token.other_params.get("error")
                desc = token.other_params.get("error_description")
                self.set_errors(ctx, [self.error(err, desc)])
                return

            await self._fetch_user(ctx, oauth_client, token)

    def handle_cleanup(self, ctx: AuthContext) -> None:
        self.put_private(ctx, USER_KEY, None)
        self.put_private(ctx, TOKEN_KEY, None)

    def uid(self, ctx: AuthContext) -> Any:
        '''Value of the configured uid field (`id` by default) from the profile.'''
        uid_field = str(self.option(ctx, "uid_field"))
        return ctx.private[USER_KEY].get(uid_field)

    def credentials(self, ctx: AuthContext) -> Credentials:
        token: Token = ctx.private[TOKEN_KEY]
        scopes = token.other_params.get("scope") or ""
        return Credentials(
            token=token.access_token,
            refresh_token=token.refresh_token,
            token_type=token.token_type,
            expires=token.expires_at is not None,
            expires_at=token.expires_at,
            scopes=scopes.split(",") if scopes else [],
        )

    def info(self, ctx: AuthContext) -> Info:
        '''
        Populates the normalized info section from the profile. The image is
        always the Graph picture URL built from the user id.
        '''
        user = ctx.private[USER_KEY]
        return Info(
            description=user.get("bio"),
            email=user.get("email"),
            first_name=user.get("first_name"),
            image=fetch_image(user.get("id")),
            last_name=user.get("last_name"),
            name=user.get("name"),
            nickname=user.get("username"),
            urls={
                "instagram": user.get("link"),
                "website": user.get("website"),
            },
        )

    def extra(self, ctx: AuthContext) -> Extra:
        '''Raw token and profile exactly as Instagram returned them.'''
        return Extra(raw_info={
            "token": ctx.private[TOKEN_KEY],
            "user": ctx.private[USER_KEY],
        })

    async def _fetch_user(self, ctx: AuthContext, oauth_client: AsyncOAuth2Client, token: Token) -> None:
        params = {"fields": PROFILE_FIELDS, "access_token": token.access_token}
        try:
            response = await oauth_client.get(PROFILE_URL, params=params)
        except (httpx.HTTPError, OAuthError) as e:
            self.set_errors(ctx, [self.error("OAuth2", str(e))])
            return

        if response.status_code == 401:
            self.set_errors(ctx, [self.error("token", "unauthorized")])
            return
        if not 200 <= response.status_code <= 399:
            self.set_errors(ctx, [self.error("OAuth2", f"unexpected status {response.status_code}")])
            return

        try:
            user = response.json()
        except ValueError as e:
            self.set_errors(ctx, [self.error("OAuth2", f"invalid profile response: {e}")])
            return

        self.put_private(ctx, TOKEN_KEY, token)
        self.put_private(ctx, USER_KEY, user)

    def _maybe_replace_param(self, params: Dict[str, Any], ctx: AuthContext, name: str, config_key: str) -> Dict[str, Any]:
        # An explicit, non-empty request value always wins
        if params.get(name):
            return params
        default = self.option(ctx, config_key)
        if default is None:
            return params
        params[name] = default
        return params

    def _client_options(self, ctx: AuthContext) -> Dict[str, Optional[str]]:
        opts = {"redirect_uri": ctx.callback_url}
        client_id = self.option(ctx, "client_id")
        client_secret = self.option(ctx, "client_secret")
        # Per-strategy credentials only count as a pair
        if client_id and client_secret:
            opts.update(client_id=client_id, client_secret=client_secret)
        return opts
