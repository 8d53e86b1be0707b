"""Shop model."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from shop_discovery.db.base import Base


class Shop(Base):
    """A posted shop, or an unowned row holding cached place details."""

    __tablename__ = "shops"
    __table_args__ = (
        Index("ix_shops_created_at", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    location = Column(Text)  # 사용자가 입력한 주소 텍스트
    formatted_address = Column(Text)
    latitude = Column(Float)
    longitude = Column(Float)
    category = Column(JSON)  # list[str]
    searchable_categories_text = Column(Text)
    detailed_category = Column(Text)
    comments = Column(Text)
    url = Column(Text)

    # Google Places 캐시 필드
    place_id = Column(String(255), unique=True, index=True)
    price_range = Column(String(20))
    business_hours_weekly = Column(JSON)  # [{"day": ..., "time": ...}]
    api_rating = Column(Float)
    phone_number = Column(String(50))
    photo_url = Column(Text)
    photo_url_api = Column(Text)
    types = Column(JSON)
    api_last_updated = Column(DateTime(timezone=True))

    nearest_station_name = Column(String(255))
    walk_time_from_station = Column(Integer)  # minutes

    user_id = Column(String(64), ForeignKey("profiles.id", ondelete="SET NULL"), index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    owner = relationship("Profile")
    likes = relationship("Like", back_populates="shop", cascade="all, delete-orphan")
    ratings = relationship("Rating", back_populates="shop", cascade="all, delete-orphan")
    reviews = relationship("Review", back_populates="shop", cascade="all, delete-orphan")

    def set_categories(self, categories: list[str] | None) -> None:
        """Store the category set and its keyword-searchable text together."""
        self.category = list(categories) if categories else None
        self.searchable_categories_text = ",".join(categories) if categories else None
