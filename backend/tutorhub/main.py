# backend/tutorhub/main.py
"""
tutorhub booking store.

Mounts the v1 routers under ``/api/v1`` and exposes Prometheus metrics
at ``/metrics``.
"""

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI, Response

from . import __version__
from .core.config import settings
from .core.constants import BRAND_NAME
from .database import init_db
from .errors import register_error_handlers
from .monitoring.prometheus_metrics import prometheus_metrics
from .routes import availability, bookings, payments, uploads

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info(f"Starting tutorhub booking store ({settings.environment})")
    init_db()
    yield
    logger.info("Shutting down tutorhub booking store")


metrics_router = APIRouter()


@metrics_router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(
        content=prometheus_metrics.get_metrics(),
        media_type=prometheus_metrics.get_content_type(),
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title=BRAND_NAME,
        description="Lesson booking and bank-transfer payment confirmation",
        version=__version__,
        lifespan=app_lifespan,
    )
    register_error_handlers(app)

    api_v1 = APIRouter(prefix=API_PREFIX)
    api_v1.include_router(availability.router)
    api_v1.include_router(bookings.router)
    api_v1.include_router(payments.router)
    api_v1.include_router(payments.admin_router)
    api_v1.include_router(uploads.router)

    app.include_router(api_v1)
    app.include_router(metrics_router)
    return app


app = create_app()
