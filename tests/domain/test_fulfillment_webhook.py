from __future__ import annotations

from typing import Any

import pytest

from storefront.domain.errors import ValidationFailure
from storefront.domain.fulfillment import FulfillmentUpdated, parse_fulfillment_webhook
from storefront.domain.model import FulfillmentStatus


def _payload(*updates: dict[str, str], order_id: str = "order-1") -> dict[str, Any]:
    return {
        "merchant_id": "M-1",
        "type": "order.fulfillment.updated",
        "event_id": "evt-1",
        "data": {
            "type": "order_fulfillment_updated",
            "id": order_id,
            "object": {
                "order_fulfillment_updated": {
                    "order_id": order_id,
                    "version": 4,
                    "location_id": "L-MAIN",
                    "state": "OPEN",
                    "fulfillment_update": list(updates),
                }
            },
        },
    }


def test_parses_the_last_fulfillment_update() -> None:
    event = parse_fulfillment_webhook(
        _payload(
            {"fulfillment_uid": "f1", "old_state": "PROPOSED", "new_state": "RESERVED"},
            {"fulfillment_uid": "f1", "old_state": "RESERVED", "new_state": "PREPARED"},
        )
    )

    assert event == FulfillmentUpdated(
        order_external_id="order-1",
        merchant_external_id="M-1",
        old_state=FulfillmentStatus.RESERVED,
        new_state=FulfillmentStatus.PREPARED,
    )


def test_missing_old_state_is_none() -> None:
    event = parse_fulfillment_webhook(_payload({"new_state": "RESERVED"}))

    assert event is not None
    assert event.old_state is None


def test_other_event_types_are_ignored() -> None:
    assert parse_fulfillment_webhook({"type": "payment.updated", "data": {}}) is None


def test_update_without_entries_is_invalid() -> None:
    with pytest.raises(ValidationFailure):
        parse_fulfillment_webhook(_payload())


def test_unknown_state_is_invalid() -> None:
    with pytest.raises(ValidationFailure, match="Unknown fulfillment state"):
        parse_fulfillment_webhook(_payload({"new_state": "TELEPORTED"}))
