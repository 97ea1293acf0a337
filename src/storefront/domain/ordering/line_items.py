"""Translate local catalog selections into remote line items and back."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from storefront.domain.errors import ValidationFailure
from storefront.domain.model import CatalogObjectType, Item, Modifier, Variation
from storefront.domain.ports.platform import LineItemSpec
from storefront.domain.reconciliation import effective_price, is_visible

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from storefront.domain.model import Catalog
    from storefront.domain.ports.persistence import CatalogRepository
    from storefront.domain.ports.platform import RemoteOrder

log = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class VariationSelection:
    variation_id: UUID
    quantity: int = 1
    note: str | None = None
    modifier_ids: tuple[UUID, ...] = ()


def build_line_item_specs(
    catalogs: CatalogRepository,
    *,
    catalog: Catalog,
    location_id: UUID,
    selections: Sequence[VariationSelection],
) -> tuple[LineItemSpec, ...]:
    """Resolve selections against the catalog mirror.

    Every variation and modifier must be mirrored (have an external id), belong
    to ``catalog`` and be visible at ``location_id``. Unit prices honour
    location overrides.
    """

    if not selections:
        raise ValidationFailure("An order needs at least one line item")
    return tuple(
        _build_spec(catalogs, catalog=catalog, location_id=location_id, selection=selection)
        for selection in selections
    )


def _build_spec(
    catalogs: CatalogRepository,
    *,
    catalog: Catalog,
    location_id: UUID,
    selection: VariationSelection,
) -> LineItemSpec:
    if selection.quantity < 1:
        raise ValidationFailure(f"Quantity must be positive, got {selection.quantity}")

    variation = catalogs.get_record(Variation, selection.variation_id)
    if variation is None or variation.catalog_id != catalog.id or variation.external_id is None:
        raise ValidationFailure(f"Unknown variation {selection.variation_id}")
    item = catalogs.get_record(Item, variation.item_id)
    if item is None or not item.enabled or not variation.enabled:
        raise ValidationFailure(f"Variation {variation.id} is not available")
    if not is_visible(item, location_id):
        raise ValidationFailure(f"Variation {variation.id} is not sold at location {location_id}")

    modifier_ids: list[str] = []
    for modifier_id in selection.modifier_ids:
        modifier = catalogs.get_record(Modifier, modifier_id)
        if modifier is None or modifier.catalog_id != catalog.id or modifier.external_id is None:
            raise ValidationFailure(f"Unknown modifier {modifier_id}")
        if not is_visible(modifier, location_id):
            raise ValidationFailure(f"Modifier {modifier_id} is not sold at location {location_id}")
        modifier_ids.append(modifier.external_id)

    overrides = catalogs.location_overrides(CatalogObjectType.ITEM_VARIATION, variation.id)
    return LineItemSpec(
        catalog_object_id=variation.external_id,
        quantity=selection.quantity,
        note=selection.note,
        base_price_amount=effective_price(variation.base_amount, overrides, location_id),
        currency=variation.currency,
        modifier_ids=tuple(modifier_ids),
    )


def line_item_specs_from_remote(remote: RemoteOrder) -> tuple[LineItemSpec, ...]:
    """Rebuild line item specs from an existing remote order.

    Ad hoc line items (no catalog object) cannot be carried over and are dropped.
    """

    specs: list[LineItemSpec] = []
    for line_item in remote.line_items:
        if line_item.catalog_object_id is None:
            log.warning("Dropping ad hoc line item %s of order %s", line_item.uid, remote.id)
            continue
        specs.append(
            LineItemSpec(
                catalog_object_id=line_item.catalog_object_id,
                quantity=line_item.quantity,
                note=line_item.note,
                base_price_amount=line_item.base_price_amount,
                currency=line_item.currency,
                modifier_ids=tuple(
                    modifier.catalog_object_id
                    for modifier in line_item.modifiers
                    if modifier.catalog_object_id is not None
                ),
            )
        )
    return tuple(specs)


def selections_from_remote(
    catalogs: CatalogRepository, *, catalog: Catalog, remote: RemoteOrder
) -> tuple[VariationSelection, ...]:
    """Map an existing remote order back onto mirrored catalog rows.

    Used when the order moves: the selections are then priced and checked for
    visibility at the new location. Ad hoc line items are dropped.
    """

    selections: list[VariationSelection] = []
    for line_item in remote.line_items:
        if line_item.catalog_object_id is None:
            log.warning("Dropping ad hoc line item %s of order %s", line_item.uid, remote.id)
            continue
        variation = catalogs.find_by_external_id(
            catalog.id, Variation, line_item.catalog_object_id
        )
        if variation is None:
            raise ValidationFailure(f"Unknown variation {line_item.catalog_object_id}")
        modifier_ids: list[UUID] = []
        for remote_modifier in line_item.modifiers:
            if remote_modifier.catalog_object_id is None:
                continue
            modifier = catalogs.find_by_external_id(
                catalog.id, Modifier, remote_modifier.catalog_object_id
            )
            if modifier is None:
                raise ValidationFailure(f"Unknown modifier {remote_modifier.catalog_object_id}")
            modifier_ids.append(modifier.id)
        selections.append(
            VariationSelection(
                variation_id=variation.id,
                quantity=line_item.quantity,
                note=line_item.note,
                modifier_ids=tuple(modifier_ids),
            )
        )
    return tuple(selections)
