"""Fulfillment status tracking and notification fan-out."""

from __future__ import annotations

from storefront.domain.fulfillment.dispatch import DispatchReport, NotificationDispatcher
from storefront.domain.fulfillment.events import (
    FulfillmentUpdated,
    NotificationIntent,
    parse_fulfillment_webhook,
)
from storefront.domain.fulfillment.state_machine import FulfillmentStateMachine
from storefront.domain.fulfillment.transitions import TransitionDecision, decide_transition

__all__ = [
    "DispatchReport",
    "FulfillmentStateMachine",
    "FulfillmentUpdated",
    "NotificationDispatcher",
    "NotificationIntent",
    "TransitionDecision",
    "decide_transition",
    "parse_fulfillment_webhook",
]
