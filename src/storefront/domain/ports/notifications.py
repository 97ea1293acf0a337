"""Port for notification channels (messaging, mail, push)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from storefront.domain.model import FulfillmentStatus, HydratedOrder


@runtime_checkable
class NotificationChannel(Protocol):
    """A delivery channel for order status notifications."""

    @property
    def name(self) -> str: ...

    async def send(self, order: HydratedOrder, status: FulfillmentStatus) -> None: ...
