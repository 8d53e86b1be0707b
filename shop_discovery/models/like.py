"""Like model."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from shop_discovery.db.base import Base


class Like(Base):
    """A user's like on a shop; one row per (user, shop)."""

    __tablename__ = "likes"
    __table_args__ = (
        UniqueConstraint("user_id", "shop_id", name="uq_like_user_shop"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    shop_id = Column(String(36), ForeignKey("shops.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    shop = relationship("Shop", back_populates="likes")
