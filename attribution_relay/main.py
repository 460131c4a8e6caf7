"""Attribution relay - FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from attribution_relay import __version__
from attribution_relay.config import Settings
from attribution_relay.dependencies import verify_branch_token
from attribution_relay.routers import health, webhooks

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    level = "DEBUG" if settings.debug else settings.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the relay app around an explicit Settings instance.

    Required settings are checked when the app starts serving; a missing
    Amplitude key, endpoint or Branch token aborts startup.
    """
    if settings is None:
        settings = Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings)
        settings.check_required()
        logger.info(f"Relaying Branch webhooks to {settings.amplitude_http_endpoint}")
        yield

    app = FastAPI(
        title="Attribution Relay",
        description="Relays Branch attribution webhooks to Amplitude",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Rate limiting
    app.state.limiter = Limiter(key_func=get_remote_address, default_limits=[settings.branch_rate_limit])
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Routers (health is public; the webhook checks the Branch token)
    app.include_router(health.router)
    app.include_router(
        webhooks.router,
        prefix="/api",
        tags=["webhooks"],
        dependencies=[Depends(verify_branch_token)],
    )
    return app


app = create_app()
