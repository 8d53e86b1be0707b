"""Profile model."""

from sqlalchemy import Column, String, Text

from shop_discovery.db.base import Base


class Profile(Base):
    """Public profile of a user (id comes from the identity provider)."""

    __tablename__ = "profiles"

    id = Column(String(64), primary_key=True)
    username = Column(String(100))
    avatar_url = Column(Text)
