"""Order lifecycle against the remote order API."""

from __future__ import annotations

from storefront.domain.ordering.fees import SUPPORTED_TIERS, FeeSchedule
from storefront.domain.ordering.lifecycle import OrderLifecycleManager, PaymentDetails
from storefront.domain.ordering.line_items import VariationSelection
from storefront.domain.ordering.pickup import (
    DEFAULT_MAX_PICKUP_AHEAD,
    first_pickup_time,
    resolve_pickup_time,
    validate_pickup_time,
)

__all__ = [
    "DEFAULT_MAX_PICKUP_AHEAD",
    "SUPPORTED_TIERS",
    "FeeSchedule",
    "OrderLifecycleManager",
    "PaymentDetails",
    "VariationSelection",
    "first_pickup_time",
    "resolve_pickup_time",
    "validate_pickup_time",
]
