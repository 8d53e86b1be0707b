"""Database initialization utilities."""

from sqlalchemy.engine import Engine

from shop_discovery import models  # noqa: F401
from shop_discovery.db.base import Base


def init_db(bind: Engine | None = None) -> None:
    """Create tables (and their indexes) if they do not exist yet."""
    if bind is None:
        from shop_discovery.db.session import engine as bind
    Base.metadata.create_all(bind=bind)
