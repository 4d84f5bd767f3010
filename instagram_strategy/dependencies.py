from fastapi import Depends, HTTPException, status
from functools import lru_cache

from instagram_strategy.models.auth import StrategyOptions
from instagram_strategy.services.instagram import InstagramStrategy
from instagram_strategy.utils.config import settings
import logging

logger = logging.getLogger(__name__)

@lru_cache(maxsize=1)
def get_strategy_options() -> StrategyOptions:
    '''
    Strategy configuration built once from settings and shared by every request.
    '''
    logger.info("Building Instagram strategy options from settings.")
    return StrategyOptions(
        default_scope=settings.instagram_default_scope,
        profile_fields=settings.instagram_profile_fields,
        uid_field=settings.instagram_uid_field,
        display=settings.instagram_display,
        auth_type=settings.instagram_auth_type,
        allowed_request_params=tuple(settings.instagram_allowed_request_params),
        callback_url=settings.instagram_redirect_uri,
    )

def get_instagram_strategy(options: StrategyOptions = Depends(get_strategy_options)) -> InstagramStrategy:
    '''
    Returns the Instagram strategy, or 501 when no client credentials are configured.
    '''
    client_id = options.client_id or settings.instagram_client_id
    client_secret = options.client_secret or settings.instagram_client_secret
    if not client_id or not client_secret:
        logger.error("Instagram OAuth client not configured (INSTAGRAM_CLIENT_ID or INSTAGRAM_CLIENT_SECRET missing).")
        raise HTTPException(status_code=status.HTTP_501_NOT_IMPLEMENTED, detail="Instagram login is not configured.")
    return InstagramStrategy(options)
