"""In-memory ``CommercePlatform`` double with call recording and injectable failures."""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from storefront.domain.errors import RemoteServiceFailure
from storefront.domain.ports.platform import (
    MAIN_LOCATION_ID,
    RemoteFulfillment,
    RemoteLineItem,
    RemoteLineItemModifier,
    RemoteMoney,
    RemoteOrder,
    RemoteOrderState,
    RemotePayment,
)

if TYPE_CHECKING:
    from storefront.domain.model import CatalogObjectType
    from storefront.domain.ports.platform import (
        CommercePlatform,
        LineItemSpec,
        OrderSpec,
        PaymentSpec,
        RemoteCatalogObject,
        RemoteLocation,
    )

_FIELD_PATH = re.compile(r"line_items\[(?P<uid>[^\]]+)\]")


@dataclass
class FakeCommercePlatform:
    catalog: dict[CatalogObjectType, list[RemoteCatalogObject]] = field(default_factory=dict)
    locations: list[RemoteLocation] = field(default_factory=list)
    main_location_id: str | None = None
    orders: dict[str, RemoteOrder] = field(default_factory=dict)
    order_specs: list[OrderSpec] = field(default_factory=list)
    payments: list[PaymentSpec] = field(default_factory=list)
    idempotency_keys: list[str | None] = field(default_factory=list)
    calls: list[str] = field(default_factory=list)
    failures: dict[str, RemoteServiceFailure] = field(default_factory=dict)
    currency: str = "USD"
    _sequence: int = 0

    def set_catalog(self, *objects: RemoteCatalogObject) -> None:
        self.catalog = {}
        for remote in objects:
            self.catalog.setdefault(remote.type, []).append(remote)

    def fail(self, operation: str, *, code: str | None = None, status: int = 500) -> None:
        self.failures[operation] = RemoteServiceFailure(
            f"{operation} failed", code=code, status=status
        )

    def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        failure = self.failures.get(operation)
        if failure is not None:
            raise failure

    def _next(self, prefix: str) -> str:
        self._sequence += 1
        return f"{prefix}-{self._sequence}"

    # Catalog and locations -----------------------------------------------------

    async def list_catalog_objects(
        self, access_token: str, object_type: CatalogObjectType
    ) -> list[RemoteCatalogObject]:
        _ = access_token
        self._enter("list_catalog_objects")
        return list(self.catalog.get(object_type, []))

    async def list_locations(self, access_token: str) -> list[RemoteLocation]:
        _ = access_token
        self._enter("list_locations")
        return list(self.locations)

    async def retrieve_location(self, access_token: str, location_id: str) -> RemoteLocation:
        _ = access_token
        self._enter("retrieve_location")
        if location_id == MAIN_LOCATION_ID:
            location_id = self.main_location_id or self.locations[0].id
        for location in self.locations:
            if location.id == location_id:
                return location
        raise RemoteServiceFailure(
            f"Location {location_id} not found", code="NOT_FOUND", status=404
        )

    # Orders --------------------------------------------------------------------

    async def create_order(
        self, access_token: str, spec: OrderSpec, *, idempotency_key: str | None = None
    ) -> RemoteOrder:
        _ = access_token
        self._enter("create_order")
        self.order_specs.append(spec)
        self.idempotency_keys.append(idempotency_key)
        order_id = self._next("order")
        order = RemoteOrder(
            id=order_id,
            location_id=spec.location_id,
            version=1,
            state=spec.state,
            line_items=tuple(
                self._line_item(order_id, position, line_item)
                for position, line_item in enumerate(spec.line_items)
            ),
            fulfillments=(RemoteFulfillment(uid=f"{order_id}-pickup"),) if spec.fulfillment else (),
        )
        return self._store(order)

    async def retrieve_order(self, access_token: str, order_id: str) -> RemoteOrder:
        _ = access_token
        self._enter("retrieve_order")
        return self._existing(order_id)

    async def update_order(
        self,
        access_token: str,
        order_id: str,
        spec: OrderSpec,
        *,
        idempotency_key: str | None = None,
    ) -> RemoteOrder:
        _ = access_token
        self._enter("update_order")
        self.order_specs.append(spec)
        self.idempotency_keys.append(idempotency_key)
        current = self._existing(order_id)
        self._check_version(current, spec.version)
        return self._store(
            _replace(
                current,
                line_items=tuple(
                    self._line_item(order_id, position, line_item)
                    for position, line_item in enumerate(spec.line_items)
                ),
            )
        )

    async def clear_order_fields(
        self,
        access_token: str,
        order_id: str,
        *,
        location_id: str,
        version: int | None,
        field_paths: tuple[str, ...],
    ) -> RemoteOrder:
        _ = (access_token, location_id)
        self._enter("clear_order_fields")
        current = self._existing(order_id)
        self._check_version(current, version)
        cleared: set[str] = set()
        for path in field_paths:
            match = _FIELD_PATH.fullmatch(path)
            if match is not None:
                cleared.add(match.group("uid"))
        return self._store(
            _replace(
                current,
                line_items=tuple(
                    line_item for line_item in current.line_items if line_item.uid not in cleared
                ),
            )
        )

    async def cancel_order(
        self,
        access_token: str,
        order_id: str,
        *,
        location_id: str,
        version: int | None,
        idempotency_key: str | None = None,
    ) -> RemoteOrder:
        _ = (access_token, location_id)
        self._enter("cancel_order")
        self.idempotency_keys.append(idempotency_key)
        current = self._existing(order_id)
        self._check_version(current, version)
        return self._store(_replace(current, state=RemoteOrderState.CANCELED))

    async def create_payment(self, access_token: str, spec: PaymentSpec) -> RemotePayment:
        _ = access_token
        self._enter("create_payment")
        self.payments.append(spec)
        tip = spec.tip.amount if spec.tip else 0
        return RemotePayment(
            id=self._next("payment"),
            total_money=RemoteMoney(spec.amount.amount + tip, spec.amount.currency),
            tip_money=spec.tip,
            app_fee_money=spec.app_fee,
            status="COMPLETED",
        )

    # Helpers -------------------------------------------------------------------

    def _line_item(self, order_id: str, position: int, spec: LineItemSpec) -> RemoteLineItem:
        unit = spec.base_price_amount or 0
        return RemoteLineItem(
            uid=f"{order_id}-li-{position}",
            catalog_object_id=spec.catalog_object_id,
            quantity=spec.quantity,
            note=spec.note,
            total_amount=unit * spec.quantity,
            base_price_amount=spec.base_price_amount,
            currency=spec.currency or self.currency,
            modifiers=tuple(
                RemoteLineItemModifier(catalog_object_id=modifier_id)
                for modifier_id in spec.modifier_ids
            ),
        )

    def _existing(self, order_id: str) -> RemoteOrder:
        order = self.orders.get(order_id)
        if order is None:
            raise RemoteServiceFailure(f"Order {order_id} not found", code="NOT_FOUND", status=404)
        return order

    def _check_version(self, order: RemoteOrder, version: int | None) -> None:
        if version is not None and version != order.version:
            raise RemoteServiceFailure(
                f"Order {order.id} is at version {order.version}, not {version}",
                code="VERSION_MISMATCH",
                status=400,
            )

    def _store(self, order: RemoteOrder) -> RemoteOrder:
        total = sum(line_item.total_amount or 0 for line_item in order.line_items)
        stored = _replace(order, total_money=RemoteMoney(total, self.currency))
        self.orders[stored.id] = stored
        return stored


def _replace(order: RemoteOrder, **changes: Any) -> RemoteOrder:
    if "line_items" in changes or "state" in changes:
        changes["version"] = (order.version or 0) + 1
    return dataclasses.replace(order, **changes)


if TYPE_CHECKING:
    _platform_check: CommercePlatform = FakeCommercePlatform()
