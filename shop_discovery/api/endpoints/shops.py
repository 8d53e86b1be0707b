"""Shop endpoints: search, submit, edit, delete, likes and photo upload."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from shop_discovery.api.deps import (
    get_current_user_id,
    get_orchestrator,
    get_photo_storage,
    require_user_id,
)
from shop_discovery.core.errors import ShopNotFoundError, StorageError
from shop_discovery.db.session import get_db
from shop_discovery.schemas.search import SearchFilters, SortBy
from shop_discovery.schemas.shop import (
    LikeStatus,
    PhotoUploadResponse,
    ShopCreated,
    ShopOut,
    ShopResult,
    ShopSubmission,
    ShopUpdate,
)
from shop_discovery.services.enrichment import EnrichmentOrchestrator
from shop_discovery.services.search import get_shop_by_id, search_shops
from shop_discovery.services.shops import (
    create_shop,
    delete_shop,
    get_owned_shop,
    like_shop,
    unlike_shop,
    update_shop,
)
from utils.s3_storage import PhotoUploadError, S3StorageManager

router = APIRouter(prefix="/shops", tags=["shops"])


@router.get("", response_model=list[ShopResult])
def list_shops(
    keyword: Optional[str] = None,
    location: Optional[str] = Query(None, description="주소 키워드"),
    category: Optional[list[str]] = Query(None),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    radius: Optional[float] = Query(None, gt=0, description="meters"),
    sort_by: SortBy = SortBy.CREATED_AT_DESC,
    posted_by: Optional[str] = None,
    liked_by: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user_id: Optional[str] = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> list[ShopResult]:
    """Search posted shops."""
    filters = SearchFilters(
        keyword=keyword,
        location_keyword=location,
        category=category,
        search_lat=lat,
        search_lng=lng,
        search_radius=radius,
        sort_by=sort_by,
        limit=limit,
        offset=offset,
    )
    return search_shops(
        db,
        filters,
        current_user_id=user_id,
        posted_by_user_id=posted_by,
        liked_by_user_id=liked_by,
    )


@router.post("", response_model=ShopCreated, status_code=201)
async def submit_shop(
    payload: ShopSubmission,
    user_id: str = Depends(require_user_id),
    orchestrator: EnrichmentOrchestrator = Depends(get_orchestrator),
    db: Session = Depends(get_db),
) -> ShopCreated:
    """Enrich a submission and store it as a new shop."""
    enriched = await orchestrator.enrich(payload)
    shop = await run_in_threadpool(create_shop, db, user_id, enriched)
    return ShopCreated(shop=ShopOut.model_validate(shop), enrichment=enriched.status)


@router.post("/photos", response_model=PhotoUploadResponse, status_code=201)
async def upload_photo(
    photo: UploadFile = File(...),
    user_id: str = Depends(require_user_id),
    storage: S3StorageManager = Depends(get_photo_storage),
) -> PhotoUploadResponse:
    """Upload a user photo; the returned URL goes into `photo_url` on submit/edit."""
    data = await photo.read()
    try:
        url = storage.upload_shop_photo(user_id, data, photo.filename)
    except PhotoUploadError as exc:
        raise StorageError("Failed to upload photo", details=str(exc)) from exc
    return PhotoUploadResponse(photo_url=url)


@router.get("/{shop_id}", response_model=ShopResult)
def get_shop(
    shop_id: str,
    user_id: Optional[str] = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ShopResult:
    shop = get_shop_by_id(db, shop_id, current_user_id=user_id)
    if shop is None:
        raise ShopNotFoundError(shop_id)
    return shop


@router.patch("/{shop_id}", response_model=ShopOut)
async def edit_shop(
    shop_id: str,
    updates: ShopUpdate,
    user_id: str = Depends(require_user_id),
    orchestrator: EnrichmentOrchestrator = Depends(get_orchestrator),
    db: Session = Depends(get_db),
) -> ShopOut:
    """Owner edit; `re_enrich` re-runs enrichment on the stored address/place."""
    enriched = None
    if updates.re_enrich:
        shop = await run_in_threadpool(get_owned_shop, db, shop_id, user_id)
        stored_coordinates = (shop.latitude, shop.longitude)
        # 주소/place_id가 있으면 좌표부터 다시 해석
        resolvable = bool(shop.location or shop.place_id)
        submission = ShopSubmission(
            name=updates.name or shop.name,
            location=shop.location,
            place_id=shop.place_id,
            latitude=None if resolvable else stored_coordinates[0],
            longitude=None if resolvable else stored_coordinates[1],
            categories=updates.categories if updates.categories is not None else (shop.category or []),
            detailed_category=updates.detailed_category or shop.detailed_category,
            comments=updates.comments if updates.comments is not None else shop.comments,
            url=updates.url if updates.url is not None else shop.url,
            photo_url=updates.photo_url or shop.photo_url,
        )
        enriched = await orchestrator.enrich(submission)
        if enriched.latitude is None or enriched.longitude is None:
            enriched.latitude, enriched.longitude = stored_coordinates
    shop = await run_in_threadpool(update_shop, db, shop_id, user_id, updates, enriched=enriched)
    return ShopOut.model_validate(shop)


@router.delete("/{shop_id}", status_code=204)
def remove_shop(
    shop_id: str,
    user_id: str = Depends(require_user_id),
    db: Session = Depends(get_db),
) -> Response:
    delete_shop(db, shop_id, user_id)
    return Response(status_code=204)


@router.post("/{shop_id}/like", response_model=LikeStatus)
def like(
    shop_id: str,
    user_id: str = Depends(require_user_id),
    db: Session = Depends(get_db),
) -> LikeStatus:
    return like_shop(db, user_id, shop_id)


@router.delete("/{shop_id}/like", response_model=LikeStatus)
def unlike(
    shop_id: str,
    user_id: str = Depends(require_user_id),
    db: Session = Depends(get_db),
) -> LikeStatus:
    return unlike_shop(db, user_id, shop_id)
