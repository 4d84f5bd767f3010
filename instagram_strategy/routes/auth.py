from fastapi import APIRouter, Depends, status, Request
from fastapi.responses import RedirectResponse, JSONResponse
from instagram_strategy.dependencies import get_instagram_strategy
from instagram_strategy.models.auth import Auth
from instagram_strategy.services.auth_service import run_request, run_callback, build_failure
from instagram_strategy.services.instagram import InstagramStrategy
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["Authentication"])

# Session key holding the state issued in the request phase
STATE_SESSION_KEY = "instagram_oauth_state"

@router.get("/instagram", summary="Initiate Instagram OAuth2 login")
async def login_instagram(request: Request, strategy: InstagramStrategy = Depends(get_instagram_strategy)):
    '''
    Redirects the user to Instagram's authorization page.
    Accepts the optional scope, auth_type, locale and display query parameters.
    '''
    callback_url = str(request.url_for("auth_instagram_callback"))
    ctx = strategy.new_context(request.query_params, callback_url)
    await run_request(strategy, ctx)
    request.session[STATE_SESSION_KEY] = ctx.state
    return RedirectResponse(url=ctx.redirect_url)


@router.get("/instagram/callback", summary="Handle Instagram OAuth2 callback", name="auth_instagram_callback")
async def auth_instagram_callback(request: Request, strategy: InstagramStrategy = Depends(get_instagram_strategy)):
    '''
    Handles the redirect back from Instagram.
    Returns the normalized auth record, or 401 with the list of errors.
    '''
    callback_url = str(request.url_for("auth_instagram_callback"))
    ctx = strategy.new_context(request.query_params, callback_url)

    expected_state = request.session.pop(STATE_SESSION_KEY, None)
    if not expected_state or ctx.params.get("state") != expected_state:
        logger.warning("Instagram callback state does not match the one issued for this session.")
        strategy.set_errors(ctx, [strategy.error("csrf_attack", "Cross-Site Request Forgery attack")])
        result = build_failure(strategy, ctx)
    else:
        result = await run_callback(strategy, ctx)

    if isinstance(result, Auth):
        logger.info(f"Instagram callback successful for uid: {result.uid}")
        return JSONResponse(content=result.model_dump(mode="json"))

    keys = ", ".join(e.message_key or "" for e in result.errors)
    logger.warning(f"Instagram authentication failed: {keys}")
    return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content=result.model_dump(mode="json"))
