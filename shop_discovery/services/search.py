"""Shop search: filtering, aggregation and ranking."""

from __future__ import annotations

import logging
from math import asin, cos, degrees, radians, sin, sqrt

from sqlalchemy import ColumnElement, Select, and_, exists, false, func, literal, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shop_discovery.core.config import settings
from shop_discovery.models.like import Like
from shop_discovery.models.profile import Profile
from shop_discovery.models.rating import Rating
from shop_discovery.models.review import Review
from shop_discovery.models.shop import Shop
from shop_discovery.schemas.search import SearchFilters, SortBy
from shop_discovery.schemas.shop import ShopResult

logger = logging.getLogger(__name__)

EARTH_RADIUS_M = 6_371_000.0


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters."""
    lat1, lon1, lat2, lon2 = map(radians, (lat1, lon1, lat2, lon2))
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_M * asin(sqrt(a))


def _search_stmt(
    filters: SearchFilters,
    current_user_id: str | None,
    posted_by_user_id: str | None,
    liked_by_user_id: str | None,
    shop_id: str | None,
) -> Select:
    # 집계는 서브쿼리로 따로 group by → likes/ratings/reviews 조인 fan-out 방지
    like_counts = (
        select(Like.shop_id, func.count(Like.id).label("like_count"))
        .group_by(Like.shop_id)
        .subquery()
    )
    rating_stats = (
        select(Rating.shop_id, func.avg(Rating.rating).label("avg_rating"))
        .group_by(Rating.shop_id)
        .subquery()
    )
    review_counts = (
        select(Review.shop_id, func.count(Review.id).label("review_count"))
        .group_by(Review.shop_id)
        .subquery()
    )
    like_count = func.coalesce(like_counts.c.like_count, 0).label("like_count")

    if current_user_id:
        liked = exists().where(and_(Like.shop_id == Shop.id, Like.user_id == current_user_id)).label("liked")
    else:
        liked = false().label("liked")

    stmt = (
        select(
            Shop,
            like_count,
            liked,
            rating_stats.c.avg_rating,
            func.coalesce(review_counts.c.review_count, 0).label("review_count"),
            Profile.username,
            Profile.avatar_url,
        )
        .outerjoin(Profile, Profile.id == Shop.user_id)
        .outerjoin(like_counts, like_counts.c.shop_id == Shop.id)
        .outerjoin(rating_stats, rating_stats.c.shop_id == Shop.id)
        .outerjoin(review_counts, review_counts.c.shop_id == Shop.id)
        # 소유자 없는 행은 place details 캐시일 뿐, 게시된 가게가 아님
        .where(Shop.user_id.is_not(None))
    )

    if filters.keyword:
        keyword = filters.keyword.strip()
        if keyword:
            stmt = stmt.where(
                or_(
                    Shop.name.icontains(keyword, autoescape=True),
                    Shop.detailed_category.icontains(keyword, autoescape=True),
                    Shop.comments.icontains(keyword, autoescape=True),
                    Shop.searchable_categories_text.icontains(keyword, autoescape=True),
                    Shop.nearest_station_name.icontains(keyword, autoescape=True),
                )
            )
    if filters.location_keyword:
        location_keyword = filters.location_keyword.strip()
        if location_keyword:
            stmt = stmt.where(
                or_(
                    Shop.location.icontains(location_keyword, autoescape=True),
                    Shop.formatted_address.icontains(location_keyword, autoescape=True),
                )
            )
    if filters.category:
        stmt = stmt.where(or_(*(_has_category(category) for category in filters.category)))
    if filters.has_geo_center:
        stmt = stmt.where(*_bounding_box(filters.search_lat, filters.search_lng, _radius(filters)))
    if posted_by_user_id:
        stmt = stmt.where(Shop.user_id == posted_by_user_id)
    if liked_by_user_id:
        stmt = stmt.where(exists().where(and_(Like.shop_id == Shop.id, Like.user_id == liked_by_user_id)))
    if shop_id:
        stmt = stmt.where(Shop.id == shop_id)

    if filters.sort_by == SortBy.CREATED_AT_ASC:
        stmt = stmt.order_by(Shop.created_at.asc(), Shop.id.asc())
    elif filters.sort_by == SortBy.LIKES_DESC:
        stmt = stmt.order_by(like_count.desc(), Shop.created_at.desc(), Shop.id.asc())
    else:
        stmt = stmt.order_by(Shop.created_at.desc(), Shop.id.asc())

    # 반경 검색은 haversine 후처리 뒤에 잘라야 하므로 Python에서 페이징
    if not filters.has_geo_center:
        stmt = stmt.offset(filters.offset)
        if filters.limit:
            stmt = stmt.limit(filters.limit)
    return stmt


def _has_category(category: str) -> ColumnElement[bool]:
    """Exact element match against the comma-joined category text."""
    wrapped = literal(",") + Shop.searchable_categories_text + literal(",")
    return wrapped.contains(f",{category},", autoescape=True)


def _radius(filters: SearchFilters) -> float:
    return filters.search_radius or settings.default_search_radius


def _bounding_box(latitude: float, longitude: float, radius_m: float) -> list[ColumnElement[bool]]:
    """Coarse lat/lng box around the circle; haversine does the exact cut."""
    lat_delta = degrees(radius_m / EARTH_RADIUS_M)
    clauses = [Shop.latitude.between(latitude - lat_delta, latitude + lat_delta)]
    cos_lat = cos(radians(latitude))
    if cos_lat > 1e-6:
        lng_delta = lat_delta / cos_lat
        # 날짜변경선을 넘으면 경도 조건은 생략
        if -180 <= longitude - lng_delta and longitude + lng_delta <= 180:
            clauses.append(Shop.longitude.between(longitude - lng_delta, longitude + lng_delta))
    return clauses


def _within_radius(shop: Shop, filters: SearchFilters) -> bool:
    # 중심 좌표가 없으면 반경 값은 무시
    if not filters.has_geo_center:
        return True
    if shop.latitude is None or shop.longitude is None:
        return False
    distance = haversine_m(filters.search_lat, filters.search_lng, shop.latitude, shop.longitude)
    return distance <= _radius(filters)


def search_shops(
    db: Session,
    filters: SearchFilters | None = None,
    current_user_id: str | None = None,
    posted_by_user_id: str | None = None,
    liked_by_user_id: str | None = None,
    shop_id: str | None = None,
) -> list[ShopResult]:
    """Return posted shops matching `filters`, ranked by `filters.sort_by`.

    Read-only and never raises: a database failure is logged and yields an
    empty list.
    """
    filters = filters or SearchFilters()
    stmt = _search_stmt(filters, current_user_id, posted_by_user_id, liked_by_user_id, shop_id)
    try:
        rows = db.execute(stmt).all()
    except SQLAlchemyError:
        logger.exception("Error fetching shops (filters=%s)", filters.model_dump(exclude_none=True))
        db.rollback()
        return []

    results: list[ShopResult] = []
    for shop, like_count, liked, avg_rating, review_count, username, avatar_url in rows:
        if not _within_radius(shop, filters):
            continue
        result = ShopResult.model_validate(shop)
        result.like_count = int(like_count or 0)
        result.liked = bool(liked) if current_user_id else False
        result.rating = round(float(avg_rating), 1) if avg_rating is not None else 0.0
        result.review_count = int(review_count or 0)
        result.username = username
        result.avatar_url = avatar_url
        results.append(result)

    if filters.has_geo_center:
        start = filters.offset
        end = start + filters.limit if filters.limit else None
        return results[start:end]
    return results


def get_shop_by_id(db: Session, shop_id: str, current_user_id: str | None = None) -> ShopResult | None:
    shops = search_shops(db, SearchFilters(), current_user_id=current_user_id, shop_id=shop_id)
    return shops[0] if shops else None
