"""FastAPI application entry point."""

import logging

from dotenv import load_dotenv

from fastapi import FastAPI

# Load environment variables from .env file
load_dotenv()

from shop_discovery import models  # noqa: F401
from shop_discovery.api.routes import router
from shop_discovery.core.config import settings
from shop_discovery.core.errors import ApiError, api_error_handler
from shop_discovery.db.init_db import init_db
from shop_discovery.services.google_maps import GoogleMapsClient

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.project_name)
app.include_router(router, prefix=settings.api_v1_prefix)
app.add_exception_handler(ApiError, api_error_handler)


@app.on_event("startup")
def on_startup() -> None:
    """Initialize database artifacts and the Maps client."""
    init_db()
    app.state.maps_client = GoogleMapsClient.from_settings(settings)
    if not settings.google_maps_api_key:
        logger.warning("GOOGLE_MAPS_API_KEY is not set; maps endpoints will return 500")


@app.on_event("shutdown")
async def on_shutdown() -> None:
    client = getattr(app.state, "maps_client", None)
    if client is not None:
        await client.close()


@app.get("/", tags=["root"])
async def root() -> dict[str, str]:
    """Basic sanity endpoint."""
    return {"message": "Shop Discovery API is running"}


@app.get("/health", tags=["health"])
async def health() -> dict[str, str]:
    """Health check endpoint for Docker."""
    return {"status": "healthy"}
