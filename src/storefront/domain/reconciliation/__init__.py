"""Catalog reconciliation primitives: diffing, presence and pricing."""

from __future__ import annotations

from storefront.domain.reconciliation.diff import ReconciliationDiff, diff_by_external_id
from storefront.domain.reconciliation.presence import (
    Presence,
    is_visible,
    resolve_presence,
    visible_locations,
)
from storefront.domain.reconciliation.pricing import effective_price

__all__ = [
    "Presence",
    "ReconciliationDiff",
    "diff_by_external_id",
    "effective_price",
    "is_visible",
    "resolve_presence",
    "visible_locations",
]
