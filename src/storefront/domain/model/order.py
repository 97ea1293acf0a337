"""Orders mirrored from the remote order API."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from storefront.domain.model.entity import Entity, ExternallyMirrored

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from storefront.domain.model.commerce import AppInstall, Customer, Merchant, User
    from storefront.domain.model.enums import FulfillmentStatus


@dataclass(eq=False, kw_only=True)
class LineItemModifier(Entity):
    catalog_object_external_id: str | None = None
    name: str | None = None
    line_item_id: UUID | None = None
    position: int = 0


@dataclass(eq=False, kw_only=True)
class LineItem(Entity):
    external_uid: str | None = None
    catalog_object_external_id: str | None = None
    quantity: int = 1
    note: str | None = None
    name: str | None = None
    total_amount: int | None = None
    order_id: UUID | None = None
    position: int = 0

    modifiers: list[LineItemModifier] = field(
        default_factory=list["LineItemModifier"], repr=False
    )


@dataclass(eq=False, kw_only=True)
class Order(ExternallyMirrored):
    customer_id: UUID
    merchant_id: UUID
    location_id: UUID
    external_version: int | None = None

    currency: str | None = None
    total_amount: int | None = None
    tax_amount: int | None = None
    discount_amount: int | None = None
    tip_amount: int | None = None
    service_charge_amount: int | None = None
    app_fee_amount: int | None = None

    fulfillment_status: FulfillmentStatus | None = None
    pickup_at: datetime | None = None
    closed_at: datetime | None = None

    line_items: list[LineItem] = field(default_factory=list["LineItem"], repr=False)

    @property
    def is_closed(self) -> bool:
        return self.closed_at is not None

    def replace_line_items(self, line_items: list[LineItem]) -> None:
        """Fully replace the owned line items, keeping remote order."""

        self.line_items.clear()
        for position, line_item in enumerate(line_items):
            line_item.position = position
            line_item.order_id = self.id
            self.line_items.append(line_item)


@dataclass(slots=True, frozen=True, kw_only=True)
class HydratedOrder:
    """Order with everything notification channels need already loaded."""

    order: Order
    customer: Customer
    user: User
    app_installs: tuple[AppInstall, ...]
    merchant: Merchant

    @property
    def push_tokens(self) -> tuple[str, ...]:
        return tuple(install.push_token for install in self.app_installs if install.push_token)
