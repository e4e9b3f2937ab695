"""Product catalog read by pricing.

get_catalog() returns the active catalog, an in-memory one unless
set_catalog() installed another.
"""

from ordering.catalog.memory_adapter import MemoryProductCatalog
from ordering.catalog.port import Product, ProductCatalog

__all__ = ["Product", "ProductCatalog", "get_catalog", "reset_catalog", "set_catalog"]

_current_catalog: ProductCatalog | None = None


def get_catalog() -> ProductCatalog:
    global _current_catalog
    if _current_catalog is None:
        _current_catalog = MemoryProductCatalog()
    return _current_catalog


def set_catalog(catalog: ProductCatalog) -> None:
    global _current_catalog
    _current_catalog = catalog


def reset_catalog() -> None:
    global _current_catalog
    _current_catalog = None
