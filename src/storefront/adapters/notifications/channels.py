"""Channels that turn an order status change into customer notifications."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from storefront.domain.model import FulfillmentStatus
from storefront.domain.ports.notifications import NotificationChannel

from .senders import LoggingSender

if TYPE_CHECKING:
    from storefront.domain.model import HydratedOrder

    from .senders import MailSender, PushSender, TextSender

log = getLogger(__name__)

_STATUS_PHRASES: dict[FulfillmentStatus, str] = {
    FulfillmentStatus.PROPOSED: "has been received",
    FulfillmentStatus.RESERVED: "is being prepared",
    FulfillmentStatus.PREPARED: "is ready for pickup",
    FulfillmentStatus.COMPLETED: "has been picked up",
    FulfillmentStatus.CANCELED: "has been canceled",
    FulfillmentStatus.FAILED: "could not be completed",
}

# mail is reserved for outcomes; intermediate states only go to push and text
MAIL_STATUSES = frozenset(
    {FulfillmentStatus.PREPARED, FulfillmentStatus.COMPLETED, FulfillmentStatus.CANCELED}
)


def status_message(order: HydratedOrder, status: FulfillmentStatus) -> tuple[str, str]:
    """Return ``(title, body)`` describing the new status."""

    merchant_name = order.merchant.name or "your store"
    title = f"Order update from {merchant_name}"
    body = f"Your order {order.order.id} {_STATUS_PHRASES[status]}."
    return title, body


@dataclass(slots=True)
class PushChannel:
    sender: PushSender = field(default_factory=LoggingSender)
    name: str = "push"

    async def send(self, order: HydratedOrder, status: FulfillmentStatus) -> None:
        tokens = order.push_tokens
        if not tokens:
            log.debug("No push tokens for customer %s", order.customer.id)
            return
        title, body = status_message(order, status)
        for token in tokens:
            await self.sender.push(token, title=title, body=body)


@dataclass(slots=True)
class MailChannel:
    sender: MailSender = field(default_factory=LoggingSender)
    name: str = "mail"

    async def send(self, order: HydratedOrder, status: FulfillmentStatus) -> None:
        if status not in MAIL_STATUSES or not order.user.email:
            return
        subject, text = status_message(order, status)
        await self.sender.mail(order.user.email, subject=subject, text=text)


@dataclass(slots=True)
class MessagingChannel:
    sender: TextSender = field(default_factory=LoggingSender)
    name: str = "messaging"

    async def send(self, order: HydratedOrder, status: FulfillmentStatus) -> None:
        if not order.user.phone:
            return
        _, body = status_message(order, status)
        await self.sender.text(order.user.phone, body=body)


def default_channels(sender: LoggingSender | None = None) -> list[NotificationChannel]:
    """Messaging, mail and push channels sharing one sender."""

    shared = sender or LoggingSender()
    return [MessagingChannel(shared), MailChannel(shared), PushChannel(shared)]


if TYPE_CHECKING:
    _push_check: NotificationChannel = PushChannel()
    _mail_check: NotificationChannel = MailChannel()
    _messaging_check: NotificationChannel = MessagingChannel()
