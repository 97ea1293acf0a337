"""Effective price of a variation or modifier at a location."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from uuid import UUID

    from storefront.domain.model import LocationOverride


def effective_price(
    base_amount: int,
    overrides: Iterable[LocationOverride],
    location_id: UUID,
) -> int:
    """Return the override amount for ``location_id`` if one exists, else ``base_amount``.

    An override row without an amount does not override anything.
    """

    for override in overrides:
        if override.location_id == location_id and override.amount is not None:
            return override.amount
    return base_amount
