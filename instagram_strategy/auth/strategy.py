"""Common interface for identity-provider strategies."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from authlib.common.security import generate_token

from instagram_strategy.models.auth import AuthError, Credentials, Extra, Info, StrategyOptions


@dataclass
class AuthContext:
    """Request-scoped state shared by the host and a strategy during one phase."""

    params: Dict[str, str]
    options: StrategyOptions
    callback_url: Optional[str] = None
    state: Optional[str] = None
    redirect_url: Optional[str] = None
    private: Dict[str, Any] = field(default_factory=dict)
    errors: List[AuthError] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return bool(self.errors)


class Strategy(ABC):
    """
    One identity provider's OAuth2 flow behind fixed lifecycle hooks.

    The host calls `handle_request` in the request phase. In the callback phase
    it calls `handle_callback`, then either reads `errors` off the context or
    the projections (`uid`, `credentials`, `info`, `extra`), and finally
    `handle_cleanup`.
    """

    name: str = ""

    def __init__(self, options: StrategyOptions, client_kwargs: Optional[Dict[str, Any]] = None):
        self.options = options
        # Passed through to the HTTP client (timeout, transport, ...)
        self.client_kwargs = dict(client_kwargs or {})

    def new_context(self, params: Dict[str, str], callback_url: Optional[str] = None) -> AuthContext:
        return AuthContext(
            params=dict(params),
            options=self.options,
            callback_url=self.options.callback_url or callback_url,
        )

    @abstractmethod
    async def handle_request(self, ctx: AuthContext) -> None:
        """Set `ctx.redirect_url` to the provider's authorization page."""

    @abstractmethod
    async def handle_callback(self, ctx: AuthContext) -> None:
        """Complete the flow, storing provider data in `ctx.private` or errors in `ctx.errors`."""

    @abstractmethod
    def handle_cleanup(self, ctx: AuthContext) -> None:
        """Drop whatever `handle_callback` stored on the context."""

    @abstractmethod
    def uid(self, ctx: AuthContext) -> Any:
        ...

    @abstractmethod
    def credentials(self, ctx: AuthContext) -> Credentials:
        ...

    @abstractmethod
    def info(self, ctx: AuthContext) -> Info:
        ...

    @abstractmethod
    def extra(self, ctx: AuthContext) -> Extra:
        ...

    # Helpers

    @staticmethod
    def option(ctx: AuthContext, key: str) -> Any:
        return getattr(ctx.options, key, None)

    @staticmethod
    def error(key: str, message: Optional[str]) -> AuthError:
        return AuthError(message_key=key, message=message)

    @staticmethod
    def set_errors(ctx: AuthContext, errors: List[AuthError]) -> None:
        ctx.errors.extend(errors)

    @staticmethod
    def put_private(ctx: AuthContext, key: str, value: Any) -> None:
        ctx.private[key] = value

    @staticmethod
    def redirect(ctx: AuthContext, url: str) -> None:
        ctx.redirect_url = url

    @staticmethod
    def with_state_param(params: Dict[str, Any], ctx: AuthContext) -> Dict[str, Any]:
        """Attach a fresh anti-forgery state; the host checks it on callback."""
        ctx.state = generate_token(32)
        params["state"] = ctx.state
        return params
