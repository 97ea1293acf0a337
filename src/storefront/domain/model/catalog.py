"""Catalog entities mirrored from the remote platform.

All relations are explicit id references. Ownership (category -> items,
item -> variations, list -> modifiers) is resolved through repository lookups,
never through object pointers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from storefront.domain.model.entity import Entity, ExternallyMirrored
from storefront.domain.model.enums import CatalogObjectType, SelectionType

if TYPE_CHECKING:
    from uuid import UUID


@dataclass(eq=False, kw_only=True)
class Catalog(Entity):
    """Root scope for a merchant's catalog; one per merchant."""

    merchant_id: UUID


@dataclass(eq=False, kw_only=True)
class CatalogEntity(ExternallyMirrored):
    catalog_id: UUID


@dataclass(eq=False, kw_only=True)
class LocationGated:
    """Presence fields shared by items and modifiers."""

    present_at_all_locations: bool = True
    present_at_location_ids: frozenset[UUID] = field(default_factory=frozenset)
    absent_at_location_ids: frozenset[UUID] = field(default_factory=frozenset)


@dataclass(eq=False, kw_only=True)
class Category(CatalogEntity):
    name: str | None = None
    ordinal: int = 0
    enabled: bool = True


@dataclass(eq=False, kw_only=True)
class Item(CatalogEntity, LocationGated):
    category_id: UUID
    name: str | None = None
    description: str | None = None
    ordinal: int = 0
    enabled: bool = True


@dataclass(eq=False, kw_only=True)
class Variation(CatalogEntity):
    item_id: UUID
    name: str | None = None
    ordinal: int | None = None
    base_amount: int = 0
    currency: str | None = None
    enabled: bool = True


@dataclass(eq=False, kw_only=True)
class ModifierList(CatalogEntity):
    name: str | None = None
    selection_type: SelectionType = SelectionType.SINGLE
    enabled: bool = True


@dataclass(eq=False, kw_only=True)
class Modifier(CatalogEntity, LocationGated):
    modifier_list_id: UUID
    name: str | None = None
    ordinal: int | None = None
    base_amount: int = 0
    currency: str | None = None


@dataclass(eq=False, kw_only=True)
class CatalogImage(CatalogEntity):
    """Image attached to exactly one item, variation, category or modifier list."""

    owner_type: CatalogObjectType
    owner_id: UUID
    name: str | None = None
    url: str | None = None
    caption: str | None = None


@dataclass(eq=False, kw_only=True)
class ItemModifierList(Entity):
    """Join row between an item and a modifier list with per-item selection bounds."""

    item_id: UUID
    modifier_list_id: UUID
    min_selected: int | None = None
    max_selected: int | None = None
    enabled: bool = True

    def signature(self) -> tuple[UUID, int | None, int | None, bool]:
        return (self.modifier_list_id, self.min_selected, self.max_selected, self.enabled)


@dataclass(eq=False, kw_only=True)
class LocationOverride(Entity):
    """Per-location price exception for a variation or modifier."""

    owner_type: CatalogObjectType
    owner_id: UUID
    location_id: UUID
    amount: int | None = None

    def signature(self) -> tuple[UUID, int | None]:
        return (self.location_id, self.amount)


type CatalogRecord = Category | Item | Variation | ModifierList | Modifier | CatalogImage

CATALOG_RECORD_TYPES: dict[CatalogObjectType, type[CatalogRecord]] = {
    CatalogObjectType.CATEGORY: Category,
    CatalogObjectType.ITEM: Item,
    CatalogObjectType.ITEM_VARIATION: Variation,
    CatalogObjectType.MODIFIER_LIST: ModifierList,
    CatalogObjectType.MODIFIER: Modifier,
    CatalogObjectType.IMAGE: CatalogImage,
}
