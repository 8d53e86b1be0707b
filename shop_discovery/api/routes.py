"""Root API router."""

from fastapi import APIRouter

from shop_discovery.api.endpoints import maps, shops

router = APIRouter()


@router.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Simple health check endpoint."""
    return {"status": "ok"}


router.include_router(maps.router)
router.include_router(shops.router)
