"""ORM models; importing this package registers every table on Base.metadata."""

from shop_discovery.models.like import Like  # noqa: F401
from shop_discovery.models.profile import Profile  # noqa: F401
from shop_discovery.models.rating import Rating  # noqa: F401
from shop_discovery.models.review import Review  # noqa: F401
from shop_discovery.models.shop import Shop  # noqa: F401
