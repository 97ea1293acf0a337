"""Merchants, customers and the people behind them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from storefront.domain.model.entity import Entity, ExternallyMirrored

if TYPE_CHECKING:
    from uuid import UUID

DEFAULT_PICKUP_LEAD_MINUTES = 10


@dataclass(eq=False, kw_only=True)
class Merchant(ExternallyMirrored):
    name: str | None = None
    access_token: str | None = None
    tier: int | None = None
    pickup_lead_minutes: int | None = None
    app_enabled: bool = True

    @property
    def has_remote_credentials(self) -> bool:
        return bool(self.access_token)


@dataclass(eq=False, kw_only=True)
class User(Entity):
    display_name: str
    email: str | None = None
    phone: str | None = None


@dataclass(eq=False, kw_only=True)
class Customer(ExternallyMirrored):
    """A user's membership at one merchant.

    ``current_order_id`` is owned by the order lifecycle manager; nothing else
    writes it.
    """

    merchant_id: UUID
    user_id: UUID
    preferred_location_id: UUID | None = None
    current_order_id: UUID | None = None


@dataclass(eq=False, kw_only=True)
class AppInstall(Entity):
    customer_id: UUID
    push_token: str | None = None
