"""Fulfillment events and their webhook translation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, cast

from storefront.domain.errors import ValidationFailure
from storefront.domain.model import FulfillmentStatus

if TYPE_CHECKING:
    from uuid import UUID

log = logging.getLogger(__name__)

FULFILLMENT_UPDATED_EVENT = "order.fulfillment.updated"


@dataclass(slots=True, frozen=True)
class FulfillmentUpdated:
    order_external_id: str
    merchant_external_id: str | None
    old_state: FulfillmentStatus | None
    new_state: FulfillmentStatus


@dataclass(slots=True, frozen=True)
class NotificationIntent:
    order_id: UUID
    status: FulfillmentStatus


def parse_fulfillment_webhook(payload: dict[str, Any]) -> FulfillmentUpdated | None:
    """Translate a ``order.fulfillment.updated`` webhook body.

    Returns ``None`` for other event types. The last entry of
    ``fulfillment_update`` wins.
    """

    event_type = str(payload.get("type", ""))
    if not event_type.endswith(FULFILLMENT_UPDATED_EVENT):
        log.debug("Ignoring webhook of type %s", event_type)
        return None

    data = cast(dict[str, Any], payload.get("data") or {})
    body = cast(dict[str, Any], (data.get("object") or {}).get("order_fulfillment_updated") or {})
    order_id = body.get("order_id") or data.get("id")
    updates = cast(list[dict[str, Any]], body.get("fulfillment_update") or [])
    if not order_id or not updates:
        raise ValidationFailure("Fulfillment webhook carries no order id or update")

    last = updates[-1]
    try:
        new_state = FulfillmentStatus(str(last.get("new_state")))
        old_raw = last.get("old_state")
        old_state = FulfillmentStatus(str(old_raw)) if old_raw else None
    except ValueError as exc:
        raise ValidationFailure(f"Unknown fulfillment state in webhook: {exc}") from exc

    return FulfillmentUpdated(
        order_external_id=str(order_id),
        merchant_external_id=payload.get("merchant_id"),
        old_state=old_state,
        new_state=new_state,
    )
