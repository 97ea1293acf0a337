"""Apply remote fulfillment updates to local orders."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from storefront.domain.fulfillment.events import FulfillmentUpdated, NotificationIntent
from storefront.domain.fulfillment.transitions import TransitionDecision, decide_transition
from storefront.domain.locking import KeyedLocks

if TYPE_CHECKING:
    from collections.abc import Callable

    from storefront.domain.events import EventBus
    from storefront.domain.fulfillment.dispatch import NotificationDispatcher
    from storefront.domain.ports.unit_of_work import OrderingUnitOfWork

log = logging.getLogger(__name__)


@dataclass(slots=True)
class FulfillmentStateMachine:
    """Persists accepted status changes, then enqueues one notification intent each.

    Duplicate events are no-ops, so a redelivered webhook never notifies twice.
    """

    unit_of_work_factory: Callable[[], OrderingUnitOfWork]
    dispatcher: NotificationDispatcher
    locks: KeyedLocks = field(default_factory=KeyedLocks)

    def subscribe(self, bus: EventBus) -> None:
        bus.subscribe(FulfillmentUpdated, self.handle)

    async def handle(self, event: FulfillmentUpdated) -> TransitionDecision | None:
        """Return the decision taken, or ``None`` when the order is unknown."""

        async with self.locks.hold(("order", event.order_external_id)):
            with self.unit_of_work_factory() as uow:
                repositories = uow.repositories
                order = repositories.orders.find_by_external_id(event.order_external_id)
                if order is None:
                    log.warning("Fulfillment update for unknown order %s", event.order_external_id)
                    return None
                if event.merchant_external_id is not None:
                    merchant = repositories.merchants.get(order.merchant_id)
                    if merchant is not None and merchant.external_id not in (
                        None,
                        event.merchant_external_id,
                    ):
                        log.warning(
                            "Fulfillment update for order %s came from merchant %s, expected %s",
                            event.order_external_id,
                            event.merchant_external_id,
                            merchant.external_id,
                        )
                        return None

                decision = decide_transition(order.fulfillment_status, event.new_state)
                if not decision.applies:
                    log.info(
                        "Ignoring fulfillment update %s -> %s for order %s (%s)",
                        order.fulfillment_status,
                        event.new_state,
                        order.id,
                        decision,
                    )
                    return decision

                order.fulfillment_status = event.new_state
                uow.commit()
                order_id = order.id

        log.info("Order %s fulfillment is now %s", order_id, event.new_state)
        self.dispatcher.enqueue(NotificationIntent(order_id=order_id, status=event.new_state))
        return decision
