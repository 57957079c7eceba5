import logging
import os
import time
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

# Load env before settings are read
if "PYTEST_CURRENT_TEST" not in os.environ:
    load_dotenv()

from ecotrack.core.config import settings, validate_config  # noqa: E402
from ecotrack.core.logging import configure_logging  # noqa: E402
from ecotrack.core.middleware.metrics import MetricsMiddleware  # noqa: E402
from ecotrack.core.middleware.request_id import RequestIdMiddleware  # noqa: E402
from ecotrack.core.errors import (  # noqa: E402
    AppError,
    app_error_handler,
    http_error_handler,
    request_validation_handler,
    unhandled_exception_handler,
)
from ecotrack.api import (  # noqa: E402
    challenges,
    community,
    export as export_api,
    footprint,
    health,
    insights,
    leaderboard,
    notifications,
    profile,
)
from ecotrack.services import AppServices, build_services  # noqa: E402


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("ecotrack")
    logger.info(f"Starting EcoTrack backend ({type(app.state.services.store).__name__})...")
    app.state.startup_time = time.time()
    try:
        yield
    finally:
        logging.getLogger("ecotrack").info("Stopping EcoTrack backend...")


def create_app(services: Optional[AppServices] = None) -> FastAPI:
    """Build the API. Tests pass their own services; otherwise the store comes from config."""
    configure_logging(settings.ENV)
    validate_config(strict=settings.CONFIG_STRICT)

    app = FastAPI(title="EcoTrack - Backend", lifespan=lifespan)
    app.state.services = services or build_services()

    # Middlewares
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(MetricsMiddleware)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(footprint.router, tags=["footprint"])
    app.include_router(insights.router, tags=["insights"])
    app.include_router(leaderboard.router, tags=["leaderboard"])
    app.include_router(challenges.router, tags=["challenges"])
    app.include_router(community.router, tags=["community"])
    app.include_router(profile.router, tags=["profile"])
    app.include_router(notifications.router, tags=["notifications"])
    app.include_router(export_api.router, tags=["export"])
    app.include_router(health.router)

    return app


app = create_app()
