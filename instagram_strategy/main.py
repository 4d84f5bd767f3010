from fastapi import FastAPI
from contextlib import asynccontextmanager
from starlette.middleware.sessions import SessionMiddleware
from instagram_strategy.routes import auth
from instagram_strategy.utils.config import settings
import logging
import uvicorn

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup...")
    if not (settings.instagram_client_id and settings.instagram_client_secret):
        logger.warning("Instagram login disabled: INSTAGRAM_CLIENT_ID or INSTAGRAM_CLIENT_SECRET missing.")
    yield
    logger.info("Application shutdown...")

app = FastAPI(
    lifespan=lifespan,
    title="Instagram OAuth2 Strategy",
    description="Instagram login through a pluggable OAuth2 strategy.",
    version="0.9.0",
)

# Carries the OAuth state between the request and callback phases
app.add_middleware(SessionMiddleware, secret_key=settings.app_secret_key)

@app.get("/", tags=["Root"])
async def read_root():
    '''Basic health check endpoint.'''
    return {"message": "Instagram OAuth2 strategy is running"}

app.include_router(auth.router)

# Allows running `python -m instagram_strategy.main` during development
if __name__ == "__main__":
    logger.info("Starting Uvicorn server...")
    uvicorn.run(
        "instagram_strategy.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
