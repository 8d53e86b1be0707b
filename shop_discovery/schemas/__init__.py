"""Expose schemas for easier import."""

from shop_discovery.schemas.place import (  # noqa: F401
    AutocompletePrediction,
    AutocompleteResponse,
    BusinessHours,
    GeocodeResult,
    PlaceDetail,
    StationResult,
)
from shop_discovery.schemas.search import SearchFilters, SortBy  # noqa: F401
from shop_discovery.schemas.shop import (  # noqa: F401
    EnrichedShopPayload,
    EnrichmentStatus,
    LikeStatus,
    ShopCreated,
    ShopOut,
    ShopResult,
    ShopSubmission,
    ShopUpdate,
)
