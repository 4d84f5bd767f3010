from typing import Union
from instagram_strategy.auth.strategy import AuthContext, Strategy
from instagram_strategy.models.auth import Auth, Failure
import logging

logger = logging.getLogger(__name__)

# --- Request Phase ---

async def run_request(strategy: Strategy, ctx: AuthContext) -> AuthContext:
    '''Lets the strategy compute the provider redirect for this request.'''
    await strategy.handle_request(ctx)
    logger.debug(f"{strategy.name} request phase redirecting to {ctx.redirect_url}")
    return ctx

# --- Callback Phase ---

async def run_callback(strategy: Strategy, ctx: AuthContext) -> Union[Auth, Failure]:
    '''
    Runs the strategy's callback handling and assembles the result.
    Cleanup always runs, so nothing stored for this request outlives it.
    '''
    try:
        await strategy.handle_callback(ctx)
        if ctx.failed:
            return build_failure(strategy, ctx)
        return Auth(
            provider=strategy.name,
            strategy=type(strategy).__name__,
            uid=strategy.uid(ctx),
            credentials=strategy.credentials(ctx),
            info=strategy.info(ctx),
            extra=strategy.extra(ctx),
        )
    finally:
        strategy.handle_cleanup(ctx)

def build_failure(strategy: Strategy, ctx: AuthContext) -> Failure:
    return Failure(
        provider=strategy.name,
        strategy=type(strategy).__name__,
        errors=list(ctx.errors),
    )
