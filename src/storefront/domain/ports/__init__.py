"""Ports the domain depends on."""

from __future__ import annotations

from storefront.domain.ports.notifications import NotificationChannel
from storefront.domain.ports.persistence import (
    CatalogRepository,
    CustomerRepository,
    LocationRepository,
    MerchantRepository,
    OrderRepository,
    Repository,
    UserRepository,
)
from storefront.domain.ports.platform import CommercePlatform
from storefront.domain.ports.unit_of_work import (
    CatalogRepositories,
    CatalogUnitOfWork,
    OrderingRepositories,
    OrderingUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "CatalogRepositories",
    "CatalogRepository",
    "CatalogUnitOfWork",
    "CommercePlatform",
    "CustomerRepository",
    "LocationRepository",
    "MerchantRepository",
    "NotificationChannel",
    "OrderRepository",
    "OrderingRepositories",
    "OrderingUnitOfWork",
    "Repository",
    "RepositoryCollection",
    "UnitOfWork",
    "UserRepository",
]
