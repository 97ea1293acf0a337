"""Domain model for the catalog mirror and order lifecycle."""

from __future__ import annotations

from storefront.domain.model.catalog import (
    CATALOG_RECORD_TYPES,
    Catalog,
    CatalogEntity,
    CatalogImage,
    CatalogRecord,
    Category,
    Item,
    ItemModifierList,
    LocationGated,
    LocationOverride,
    Modifier,
    ModifierList,
    Variation,
)
from storefront.domain.model.commerce import (
    DEFAULT_PICKUP_LEAD_MINUTES,
    AppInstall,
    Customer,
    Merchant,
    User,
)
from storefront.domain.model.entity import Entity, ExternallyMirrored, assign, new_id
from storefront.domain.model.enums import (
    CatalogObjectType,
    DayOfWeek,
    FulfillmentStatus,
    SelectionType,
)
from storefront.domain.model.location import BusinessHoursPeriod, Location
from storefront.domain.model.order import HydratedOrder, LineItem, LineItemModifier, Order

__all__ = [
    "CATALOG_RECORD_TYPES",
    "DEFAULT_PICKUP_LEAD_MINUTES",
    "AppInstall",
    "BusinessHoursPeriod",
    "Catalog",
    "CatalogEntity",
    "CatalogImage",
    "CatalogObjectType",
    "CatalogRecord",
    "Category",
    "Customer",
    "DayOfWeek",
    "Entity",
    "ExternallyMirrored",
    "FulfillmentStatus",
    "HydratedOrder",
    "Item",
    "ItemModifierList",
    "LineItem",
    "LineItemModifier",
    "Location",
    "LocationGated",
    "LocationOverride",
    "Merchant",
    "Modifier",
    "ModifierList",
    "Order",
    "SelectionType",
    "User",
    "Variation",
    "assign",
    "new_id",
]
