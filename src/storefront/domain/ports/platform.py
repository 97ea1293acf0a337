"""Port for the remote commerce platform and the value types it exchanges.

Remote catalog objects form a closed tagged union: ``RemoteCatalogObject.type``
names the kind and ``data`` holds the matching payload variant.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from storefront.domain.model import CatalogObjectType, SelectionType

if TYPE_CHECKING:
    from datetime import datetime, time

    from storefront.domain.model import DayOfWeek, FulfillmentStatus

MAIN_LOCATION_ID = "main"


# Catalog -------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class RemoteLocationOverride:
    location_id: str
    amount: int | None = None


@dataclass(slots=True, frozen=True)
class RemoteCategoryData:
    name: str | None = None


@dataclass(slots=True, frozen=True)
class RemoteModifierListInfo:
    modifier_list_id: str
    min_selected: int | None = None
    max_selected: int | None = None
    enabled: bool = True


@dataclass(slots=True, frozen=True)
class RemoteItemData:
    name: str | None = None
    description: str | None = None
    category_id: str | None = None
    modifier_list_info: tuple[RemoteModifierListInfo, ...] = ()
    image_ids: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class RemoteVariationData:
    item_id: str
    name: str | None = None
    ordinal: int | None = None
    amount: int | None = None
    currency: str | None = None
    location_overrides: tuple[RemoteLocationOverride, ...] = ()


@dataclass(slots=True, frozen=True)
class RemoteModifierListData:
    name: str | None = None
    selection_type: SelectionType = SelectionType.SINGLE


@dataclass(slots=True, frozen=True)
class RemoteModifierData:
    modifier_list_id: str
    name: str | None = None
    ordinal: int | None = None
    amount: int | None = None
    currency: str | None = None
    location_overrides: tuple[RemoteLocationOverride, ...] = ()


@dataclass(slots=True, frozen=True)
class RemoteImageData:
    name: str | None = None
    url: str | None = None
    caption: str | None = None


type RemoteCatalogData = (
    RemoteCategoryData
    | RemoteItemData
    | RemoteVariationData
    | RemoteModifierListData
    | RemoteModifierData
    | RemoteImageData
)

CATALOG_DATA_TYPES: dict[CatalogObjectType, type[RemoteCatalogData]] = {
    CatalogObjectType.CATEGORY: RemoteCategoryData,
    CatalogObjectType.ITEM: RemoteItemData,
    CatalogObjectType.ITEM_VARIATION: RemoteVariationData,
    CatalogObjectType.MODIFIER_LIST: RemoteModifierListData,
    CatalogObjectType.MODIFIER: RemoteModifierData,
    CatalogObjectType.IMAGE: RemoteImageData,
}


@dataclass(slots=True, frozen=True)
class RemoteCatalogObject:
    id: str
    type: CatalogObjectType
    data: RemoteCatalogData
    present_at_all_locations: bool = True
    present_at_location_ids: tuple[str, ...] = ()
    absent_at_location_ids: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        expected = CATALOG_DATA_TYPES[self.type]
        if not isinstance(self.data, expected):
            raise TypeError(
                f"{self.type} object {self.id} carries {type(self.data).__name__}, "
                f"expected {expected.__name__}"
            )


# Locations -----------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class RemoteBusinessHoursPeriod:
    day_of_week: DayOfWeek
    start_local_time: time
    end_local_time: time


@dataclass(slots=True, frozen=True)
class RemoteLocation:
    id: str
    name: str | None = None
    timezone: str | None = None
    active: bool = True
    business_hours: tuple[RemoteBusinessHoursPeriod, ...] = ()


# Orders --------------------------------------------------------------------


class RemoteOrderState(StrEnum):
    DRAFT = "DRAFT"
    OPEN = "OPEN"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"


class PickupScheduleType(StrEnum):
    SCHEDULED = "SCHEDULED"
    ASAP = "ASAP"


@dataclass(slots=True, frozen=True)
class RemoteMoney:
    amount: int
    currency: str | None = None


@dataclass(slots=True, frozen=True)
class RemoteLineItemModifier:
    catalog_object_id: str | None = None
    uid: str | None = None
    name: str | None = None


@dataclass(slots=True, frozen=True)
class RemoteLineItem:
    uid: str | None
    catalog_object_id: str | None
    quantity: int = 1
    note: str | None = None
    name: str | None = None
    total_amount: int | None = None
    base_price_amount: int | None = None
    currency: str | None = None
    modifiers: tuple[RemoteLineItemModifier, ...] = ()


@dataclass(slots=True, frozen=True)
class RemoteFulfillment:
    uid: str | None = None
    state: FulfillmentStatus | None = None


@dataclass(slots=True, frozen=True)
class RemoteOrder:
    id: str
    location_id: str
    version: int | None = None
    state: RemoteOrderState | None = None
    line_items: tuple[RemoteLineItem, ...] = ()
    total_money: RemoteMoney | None = None
    total_tax_money: RemoteMoney | None = None
    total_discount_money: RemoteMoney | None = None
    total_tip_money: RemoteMoney | None = None
    total_service_charge_money: RemoteMoney | None = None
    fulfillments: tuple[RemoteFulfillment, ...] = ()


@dataclass(slots=True, frozen=True)
class LineItemSpec:
    catalog_object_id: str
    quantity: int = 1
    note: str | None = None
    base_price_amount: int | None = None
    currency: str | None = None
    modifier_ids: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class PickupFulfillmentSpec:
    schedule_type: PickupScheduleType
    pickup_at: datetime
    recipient_customer_id: str
    note: str | None = None


@dataclass(slots=True, frozen=True)
class OrderSpec:
    location_id: str
    state: RemoteOrderState
    line_items: tuple[LineItemSpec, ...]
    customer_id: str | None = None
    reference_id: str | None = None
    version: int | None = None
    fulfillment: PickupFulfillmentSpec | None = None


# Payments ------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class PaymentSpec:
    source_id: str
    idempotency_key: str
    amount: RemoteMoney
    order_id: str
    location_id: str
    customer_id: str | None = None
    reference_id: str | None = None
    tip: RemoteMoney | None = None
    app_fee: RemoteMoney | None = None
    note: str | None = None


@dataclass(slots=True, frozen=True)
class RemotePayment:
    id: str
    total_money: RemoteMoney | None = None
    tip_money: RemoteMoney | None = None
    app_fee_money: RemoteMoney | None = None
    status: str | None = None


@dataclass(slots=True, frozen=True)
class RemoteCatalogSnapshot:
    """Full remote catalog, grouped per object type in remote order."""

    objects: dict[CatalogObjectType, tuple[RemoteCatalogObject, ...]] = field(default_factory=dict)

    def of_type(self, object_type: CatalogObjectType) -> tuple[RemoteCatalogObject, ...]:
        return self.objects.get(object_type, ())

    def ids(self, object_type: CatalogObjectType) -> set[str]:
        return {remote.id for remote in self.of_type(object_type)}


@runtime_checkable
class CommercePlatform(Protocol):
    """Remote commerce API. Implementations page internally and raise RemoteServiceFailure."""

    async def list_catalog_objects(
        self, access_token: str, object_type: CatalogObjectType
    ) -> list[RemoteCatalogObject]: ...

    async def list_locations(self, access_token: str) -> list[RemoteLocation]: ...

    async def retrieve_location(self, access_token: str, location_id: str) -> RemoteLocation: ...

    async def create_order(
        self, access_token: str, spec: OrderSpec, *, idempotency_key: str | None = None
    ) -> RemoteOrder: ...

    async def retrieve_order(self, access_token: str, order_id: str) -> RemoteOrder: ...

    async def update_order(
        self,
        access_token: str,
        order_id: str,
        spec: OrderSpec,
        *,
        idempotency_key: str | None = None,
    ) -> RemoteOrder: ...

    async def clear_order_fields(
        self,
        access_token: str,
        order_id: str,
        *,
        location_id: str,
        version: int | None,
        field_paths: tuple[str, ...],
    ) -> RemoteOrder: ...

    async def cancel_order(
        self,
        access_token: str,
        order_id: str,
        *,
        location_id: str,
        version: int | None,
        idempotency_key: str | None = None,
    ) -> RemoteOrder: ...

    async def create_payment(self, access_token: str, spec: PaymentSpec) -> RemotePayment: ...
