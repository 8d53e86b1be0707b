"""Shop write path: create, edit, delete and like toggling."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shop_discovery.core.errors import (
    BadRequestError,
    ShopConflictError,
    ShopNotFoundError,
    ShopPermissionError,
)
from shop_discovery.models.like import Like
from shop_discovery.models.profile import Profile
from shop_discovery.models.shop import Shop
from shop_discovery.schemas.shop import EnrichedShopPayload, LikeStatus, ShopUpdate

logger = logging.getLogger(__name__)

MSG_ALREADY_POSTED = "This place has already been posted"

_ENRICHED_FIELDS = (
    "name",
    "location",
    "formatted_address",
    "latitude",
    "longitude",
    "detailed_category",
    "comments",
    "url",
    "place_id",
    "price_range",
    "api_rating",
    "phone_number",
    "photo_url",
    "photo_url_api",
    "types",
    "api_last_updated",
    "nearest_station_name",
    "walk_time_from_station",
)


def ensure_profile(db: Session, user_id: str) -> Profile:
    profile = db.get(Profile, user_id)
    if profile is None:
        profile = Profile(id=user_id)
        db.add(profile)
        db.flush()
    return profile


def _apply_payload(shop: Shop, payload: EnrichedShopPayload) -> None:
    for field in _ENRICHED_FIELDS:
        setattr(shop, field, getattr(payload, field))
    shop.business_hours_weekly = (
        [h.model_dump() for h in payload.business_hours_weekly] if payload.business_hours_weekly else None
    )
    shop.set_categories(payload.category)


def _is_place_conflict(exc: IntegrityError) -> bool:
    # SQLite: "UNIQUE constraint failed: shops.place_id", PostgreSQL: "ix_shops_place_id"
    return "place_id" in str(exc.orig)


def _integrity_error(exc: IntegrityError, place_id: str | None) -> Exception:
    if _is_place_conflict(exc):
        return ShopConflictError(MSG_ALREADY_POSTED, details={"place_id": place_id})
    return BadRequestError("Invalid shop data", details=str(exc.orig))


def _claim_unowned(db: Session, shop: Shop, user_id: str) -> bool:
    """Take ownership of a cache row only if it is still unowned."""
    claimed_at = datetime.now(timezone.utc)
    result = db.execute(
        update(Shop)
        .where(Shop.id == shop.id, Shop.user_id.is_(None))
        .values(user_id=user_id, created_at=claimed_at)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        return False
    shop.user_id = user_id
    shop.created_at = claimed_at
    return True


def create_shop(db: Session, user_id: str, payload: EnrichedShopPayload) -> Shop:
    """Persist an enriched submission owned by `user_id`.

    If the place id already has an unowned row (left by the place details
    cache) that row is claimed; a row owned by someone else is a conflict.
    The claim is a conditional UPDATE, so two concurrent submissions of the
    same place cannot both win.
    """
    try:
        ensure_profile(db, user_id)
        shop = None
        if payload.place_id:
            shop = db.query(Shop).filter(Shop.place_id == payload.place_id).first()
            if shop is not None and (shop.user_id is not None or not _claim_unowned(db, shop, user_id)):
                raise ShopConflictError(
                    MSG_ALREADY_POSTED,
                    details={"place_id": payload.place_id, "shop_id": shop.id},
                )
        if shop is None:
            shop = Shop(user_id=user_id)
            db.add(shop)
        _apply_payload(shop, payload)
        db.commit()
        db.refresh(shop)
    except IntegrityError as exc:
        db.rollback()
        raise _integrity_error(exc, payload.place_id) from exc
    except Exception:
        db.rollback()
        raise
    logger.info("Shop created id=%s user_id=%s place_id=%s", shop.id, user_id, shop.place_id)
    return shop


def get_owned_shop(db: Session, shop_id: str, user_id: str) -> Shop:
    shop = db.get(Shop, shop_id)
    if shop is None or shop.user_id is None:
        raise ShopNotFoundError(shop_id)
    if shop.user_id != user_id:
        raise ShopPermissionError("Only the owner can modify this shop")
    return shop


def update_shop(
    db: Session,
    shop_id: str,
    user_id: str,
    updates: ShopUpdate,
    enriched: EnrichedShopPayload | None = None,
) -> Shop:
    """Apply an owner's edit; `enriched` (from re-enrichment) refreshes place fields."""
    shop = get_owned_shop(db, shop_id, user_id)
    place_id = shop.place_id
    try:
        if enriched is not None:
            _apply_payload(shop, enriched)
        data = updates.model_dump(exclude_unset=True, exclude={"re_enrich"})
        categories = data.pop("categories", None)
        for field, value in data.items():
            setattr(shop, field, value)
        if categories is not None:
            shop.set_categories(categories)
        db.commit()
        db.refresh(shop)
    except IntegrityError as exc:
        db.rollback()
        raise _integrity_error(exc, place_id) from exc
    except Exception:
        db.rollback()
        raise
    return shop


def delete_shop(db: Session, shop_id: str, user_id: str) -> None:
    shop = get_owned_shop(db, shop_id, user_id)
    try:
        db.delete(shop)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Shop deleted id=%s user_id=%s", shop_id, user_id)


def _like_count(db: Session, shop_id: str) -> int:
    return db.query(func.count(Like.id)).filter(Like.shop_id == shop_id).scalar() or 0


def _require_posted_shop(db: Session, shop_id: str) -> None:
    shop = db.get(Shop, shop_id)
    if shop is None or shop.user_id is None:
        raise ShopNotFoundError(shop_id)


def _find_like(db: Session, user_id: str, shop_id: str) -> Like | None:
    return db.query(Like).filter(Like.user_id == user_id, Like.shop_id == shop_id).first()


def like_shop(db: Session, user_id: str, shop_id: str) -> LikeStatus:
    """Add a like; an existing like (or an insert race) is a no-op."""
    _require_posted_shop(db, shop_id)
    if _find_like(db, user_id, shop_id) is None:
        try:
            db.add(Like(user_id=user_id, shop_id=shop_id))
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.info("Duplicate like ignored user_id=%s shop_id=%s", user_id, shop_id)
    return LikeStatus(shop_id=shop_id, liked=True, like_count=_like_count(db, shop_id))


def unlike_shop(db: Session, user_id: str, shop_id: str) -> LikeStatus:
    _require_posted_shop(db, shop_id)
    try:
        db.query(Like).filter(Like.user_id == user_id, Like.shop_id == shop_id).delete(synchronize_session=False)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return LikeStatus(shop_id=shop_id, liked=False, like_count=_like_count(db, shop_id))

