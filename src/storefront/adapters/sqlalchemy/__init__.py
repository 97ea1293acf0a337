"""SQLAlchemy adapter package for storefront."""

from __future__ import annotations

from .engine import create_database_engine
from .mappings import mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyCatalogRepository,
    SqlAlchemyCustomerRepository,
    SqlAlchemyLocationRepository,
    SqlAlchemyMerchantRepository,
    SqlAlchemyOrderRepository,
    SqlAlchemyUserRepository,
)

__all__ = [
    "SqlAlchemyCatalogRepository",
    "SqlAlchemyCustomerRepository",
    "SqlAlchemyLocationRepository",
    "SqlAlchemyMerchantRepository",
    "SqlAlchemyOrderRepository",
    "SqlAlchemyUserRepository",
    "create_database_engine",
    "mapper_registry",
    "start_mappers",
]
