"""Expose API endpoint routers."""

from shop_discovery.api.endpoints import maps, shops

__all__ = ["maps", "shops"]
