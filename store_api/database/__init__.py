# Database modules

from .catalog import catalog_db, CatalogDatabase
from .orders import order_db, OrderDatabase

__all__ = [
    "catalog_db",
    "CatalogDatabase",
    "order_db",
    "OrderDatabase",
]
