"""Queue-based fan-out of order status notifications.

Each channel is called independently; a failing channel is logged and never
affects its siblings or the already persisted status.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from storefront.domain.model import HydratedOrder

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from uuid import UUID

    from storefront.domain.fulfillment.events import NotificationIntent
    from storefront.domain.model import FulfillmentStatus
    from storefront.domain.ports.notifications import NotificationChannel
    from storefront.domain.ports.unit_of_work import OrderingUnitOfWork

log = logging.getLogger(__name__)


@dataclass(slots=True)
class DispatchReport:
    order_id: UUID
    status: FulfillmentStatus
    delivered: list[str] = field(default_factory=list[str])
    failed: list[str] = field(default_factory=list[str])
    hydrated: bool = True


class NotificationDispatcher:
    def __init__(
        self,
        unit_of_work_factory: Callable[[], OrderingUnitOfWork],
        channels: Sequence[NotificationChannel],
    ) -> None:
        self._unit_of_work_factory = unit_of_work_factory
        self._channels = tuple(channels)
        self._queue: asyncio.Queue[NotificationIntent] = asyncio.Queue()

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def enqueue(self, intent: NotificationIntent) -> None:
        self._queue.put_nowait(intent)

    async def drain(self) -> list[DispatchReport]:
        """Deliver everything queued so far and return once the queue is empty."""

        reports: list[DispatchReport] = []
        while not self._queue.empty():
            intent = self._queue.get_nowait()
            try:
                reports.append(await self.deliver(intent))
            finally:
                self._queue.task_done()
        return reports

    async def join(self) -> None:
        """Wait until every queued intent has been handled by ``run`` or ``drain``."""

        await self._queue.join()

    async def run(self) -> None:
        """Deliver intents forever; cancel the task to stop."""

        while True:
            intent = await self._queue.get()
            try:
                await self.deliver(intent)
            except Exception:  # noqa: BLE001
                log.exception("Dispatching notifications for order %s failed", intent.order_id)
            finally:
                self._queue.task_done()

    async def deliver(self, intent: NotificationIntent) -> DispatchReport:
        report = DispatchReport(order_id=intent.order_id, status=intent.status)
        order = self._hydrate(intent.order_id)
        if order is None:
            report.hydrated = False
            return report

        outcomes = await asyncio.gather(
            *(self._send(channel, order, intent.status) for channel in self._channels)
        )
        for channel, delivered in zip(self._channels, outcomes, strict=True):
            (report.delivered if delivered else report.failed).append(channel.name)
        return report

    async def _send(
        self, channel: NotificationChannel, order: HydratedOrder, status: FulfillmentStatus
    ) -> bool:
        try:
            await channel.send(order, status)
        except Exception:  # noqa: BLE001
            log.exception(
                "Channel %s failed to notify order %s (%s)", channel.name, order.order.id, status
            )
            return False
        return True

    def _hydrate(self, order_id: UUID) -> HydratedOrder | None:
        with self._unit_of_work_factory() as uow:
            repositories = uow.repositories
            order = repositories.orders.get(order_id)
            if order is None:
                log.error("Cannot notify for missing order %s", order_id)
                return None
            customer = repositories.customers.get(order.customer_id)
            merchant = repositories.merchants.get(order.merchant_id)
            user = repositories.users.get(customer.user_id) if customer is not None else None
            if customer is None or merchant is None or user is None:
                log.error("Order %s lacks customer, user or merchant; skipping notifications", order_id)
                return None
            return HydratedOrder(
                order=order,
                customer=customer,
                user=user,
                app_installs=tuple(repositories.customers.app_installs(customer.id)),
                merchant=merchant,
            )
