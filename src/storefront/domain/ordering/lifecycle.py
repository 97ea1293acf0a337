"""Order lifecycle: creation, edits and checkout against the remote order API.

Every operation follows the same shape: load and validate local state, call
the remote platform, and only then mirror the remote result locally. Edits of
one customer's orders are serialised through a per-customer lock.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from storefront.domain.errors import (
    ConflictError,
    NotFoundError,
    RemoteServiceFailure,
    UnprocessableStateError,
    ValidationFailure,
)
from storefront.domain.locations import mirror_location
from storefront.domain.locking import KeyedLocks
from storefront.domain.model import DEFAULT_PICKUP_LEAD_MINUTES, Order
from storefront.domain.ordering.line_items import (
    build_line_item_specs,
    line_item_specs_from_remote,
    selections_from_remote,
)
from storefront.domain.ordering.mirror import mirror_remote_order
from storefront.domain.ordering.pickup import DEFAULT_MAX_PICKUP_AHEAD, resolve_pickup_time
from storefront.domain.ports.platform import (
    MAIN_LOCATION_ID,
    OrderSpec,
    PaymentSpec,
    PickupFulfillmentSpec,
    RemoteMoney,
    RemoteOrderState,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from uuid import UUID

    from storefront.domain.model import Catalog, Customer, Location, Merchant
    from storefront.domain.ordering.fees import FeeSchedule
    from storefront.domain.ordering.line_items import VariationSelection
    from storefront.domain.ports.platform import CommercePlatform
    from storefront.domain.ports.unit_of_work import OrderingRepositories, OrderingUnitOfWork

log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(slots=True, frozen=True)
class PaymentDetails:
    source_id: str
    idempotency_key: str
    pickup_at: datetime | None = None
    tip_amount: int = 0
    note: str | None = None


@dataclass(slots=True)
class OrderLifecycleManager:
    platform: CommercePlatform
    unit_of_work_factory: Callable[[], OrderingUnitOfWork]
    fees: FeeSchedule
    locks: KeyedLocks = field(default_factory=KeyedLocks)
    clock: Callable[[], datetime] = _utcnow
    max_pickup_ahead: timedelta = DEFAULT_MAX_PICKUP_AHEAD
    default_lead_minutes: int = DEFAULT_PICKUP_LEAD_MINUTES

    # Current order pointer -----------------------------------------------------

    def set_current_order(self, customer: Customer, order: Order) -> None:
        if customer.current_order_id not in (None, order.id):
            raise ConflictError(f"Customer {customer.id} already has an open order")
        customer.current_order_id = order.id

    def clear_current_order(self, customer: Customer) -> None:
        customer.current_order_id = None

    def current_order(self, customer_id: UUID) -> Order | None:
        with self.unit_of_work_factory() as uow:
            customer = _require(uow.repositories.customers.get(customer_id), "Customer", customer_id)
            if customer.current_order_id is None:
                return None
            return uow.repositories.orders.get(customer.current_order_id)

    # Operations ----------------------------------------------------------------

    async def create(
        self,
        *,
        customer_id: UUID,
        merchant_id: UUID,
        selections: Sequence[VariationSelection],
        location_id: UUID | None = None,
        idempotency_key: str | None = None,
    ) -> Order:
        """Create a draft order remotely and make it the customer's current order.

        The local row is written first so its id can travel as the remote
        reference; it is deleted again when the remote create fails.
        """

        async with self.locks.hold(("customer", customer_id)):
            with self.unit_of_work_factory() as uow:
                repositories = uow.repositories
                customer = _require(repositories.customers.get(customer_id), "Customer", customer_id)
                merchant = _require(repositories.merchants.get(merchant_id), "Merchant", merchant_id)
                if customer.merchant_id != merchant.id:
                    raise ValidationFailure(
                        f"Customer {customer.id} does not belong to merchant {merchant.id}"
                    )
                if customer.current_order_id is not None:
                    raise ConflictError(f"Customer {customer.id} already has an open order")
                access_token = _access_token(merchant)

                location = await self._resolve_location(
                    repositories, merchant, customer, location_id, access_token
                )
                line_items = build_line_item_specs(
                    repositories.catalogs,
                    catalog=_catalog(repositories, merchant),
                    location_id=location.id,
                    selections=selections,
                )
                order = Order(
                    customer_id=customer.id,
                    merchant_id=merchant.id,
                    location_id=location.id,
                )
                repositories.orders.add(order)
                uow.commit()
                spec = OrderSpec(
                    location_id=_external_location_id(location),
                    state=RemoteOrderState.DRAFT,
                    line_items=line_items,
                    customer_id=customer.external_id,
                    reference_id=str(order.id),
                )

            try:
                remote = await self.platform.create_order(
                    access_token, spec, idempotency_key=idempotency_key
                )
            except RemoteServiceFailure:
                log.warning("Remote order creation failed; discarding draft %s", order.id)
                self._discard(order.id)
                raise

            with self.unit_of_work_factory() as uow:
                repositories = uow.repositories
                order = _require(repositories.orders.get(order.id), "Order", order.id)
                customer = _require(repositories.customers.get(customer_id), "Customer", customer_id)
                mirror_remote_order(order, remote)
                self.set_current_order(customer, order)
                uow.commit()

        log.info("Created order %s (remote %s) for customer %s", order.id, remote.id, customer_id)
        return order

    async def update_location(
        self,
        *,
        order_id: UUID,
        location_id: UUID,
        idempotency_key: str | None = None,
    ) -> Order:
        """Move an order to another location.

        Remote orders cannot change location, so an equivalent remote order is
        created at the new location and mirrored onto the same local row.
        """

        customer_id = self._customer_of(order_id)
        async with self.locks.hold(("customer", customer_id)):
            with self.unit_of_work_factory() as uow:
                repositories = uow.repositories
                order, merchant, access_token = _editable_order(repositories, order_id)
                location = _require(repositories.locations.get(location_id), "Location", location_id)
                if location.merchant_id != merchant.id:
                    raise ValidationFailure(
                        f"Location {location.id} does not belong to merchant {merchant.id}"
                    )
                if location.id == order.location_id:
                    return order
                customer = _require(
                    repositories.customers.get(order.customer_id), "Customer", order.customer_id
                )
                catalog = _catalog(repositories, merchant)

                existing = await self.platform.retrieve_order(access_token, _remote_id(order))
                # priced and checked for visibility at the new location
                line_items = build_line_item_specs(
                    repositories.catalogs,
                    catalog=catalog,
                    location_id=location.id,
                    selections=selections_from_remote(
                        repositories.catalogs, catalog=catalog, remote=existing
                    ),
                )
                spec = OrderSpec(
                    location_id=_external_location_id(location),
                    state=RemoteOrderState.DRAFT,
                    line_items=line_items,
                    customer_id=customer.external_id,
                    reference_id=str(order.id),
                )
                remote = await self.platform.create_order(
                    access_token, spec, idempotency_key=idempotency_key
                )
                mirror_remote_order(order, remote)
                order.location_id = location.id
                uow.commit()

        log.info("Moved order %s to location %s (remote %s)", order.id, location.id, remote.id)
        return order

    async def update_line_items(
        self,
        *,
        order_id: UUID,
        selections: Sequence[VariationSelection],
        idempotency_key: str | None = None,
    ) -> Order:
        """Replace all line items; the stored remote version guards the update."""

        customer_id = self._customer_of(order_id)
        async with self.locks.hold(("customer", customer_id)):
            with self.unit_of_work_factory() as uow:
                repositories = uow.repositories
                order, merchant, access_token = _editable_order(repositories, order_id)
                location = _require(
                    repositories.locations.get(order.location_id), "Location", order.location_id
                )
                customer = _require(
                    repositories.customers.get(order.customer_id), "Customer", order.customer_id
                )
                line_items = build_line_item_specs(
                    repositories.catalogs,
                    catalog=_catalog(repositories, merchant),
                    location_id=location.id,
                    selections=selections,
                )
                spec = OrderSpec(
                    location_id=_external_location_id(location),
                    state=RemoteOrderState.DRAFT,
                    line_items=line_items,
                    customer_id=customer.external_id,
                    reference_id=str(order.id),
                    version=order.external_version,
                )
                remote = await self.platform.update_order(
                    access_token, _remote_id(order), spec, idempotency_key=idempotency_key
                )
                mirror_remote_order(order, remote)
                uow.commit()

        log.info("Replaced line items of order %s (version %s)", order.id, order.external_version)
        return order

    async def remove_line_items(self, *, order_id: UUID, line_item_ids: Sequence[UUID]) -> Order:
        customer_id = self._customer_of(order_id)
        async with self.locks.hold(("customer", customer_id)):
            with self.unit_of_work_factory() as uow:
                repositories = uow.repositories
                order, _, access_token = _editable_order(repositories, order_id)
                location = _require(
                    repositories.locations.get(order.location_id), "Location", order.location_id
                )
                by_id = {line_item.id: line_item for line_item in order.line_items}
                field_paths: list[str] = []
                for line_item_id in line_item_ids:
                    line_item = by_id.get(line_item_id)
                    if line_item is None:
                        raise NotFoundError(
                            f"Line item {line_item_id} not found on order {order.id}"
                        )
                    if line_item.external_uid is None:
                        raise UnprocessableStateError(
                            f"Line item {line_item_id} has no remote uid"
                        )
                    field_paths.append(f"line_items[{line_item.external_uid}]")

                remote = await self.platform.clear_order_fields(
                    access_token,
                    _remote_id(order),
                    location_id=_external_location_id(location),
                    version=order.external_version,
                    field_paths=tuple(field_paths),
                )
                mirror_remote_order(order, remote)
                uow.commit()

        log.info("Removed %s line items from order %s", len(field_paths), order.id)
        return order

    async def create_payment(
        self,
        *,
        order_id: UUID,
        customer_id: UUID,
        details: PaymentDetails,
    ) -> Order:
        """Check out the order: reopen it remotely for pickup and take the payment.

        All preconditions and the pickup time are validated before the first
        remote call. The customer's current order is cleared only once the
        payment went through.
        """

        async with self.locks.hold(("customer", customer_id)):
            with self.unit_of_work_factory() as uow:
                repositories = uow.repositories
                order = _require(repositories.orders.get(order_id), "Order", order_id)
                if order.customer_id != customer_id:
                    raise NotFoundError(f"Order {order_id} not found for customer {customer_id}")
                if order.is_closed:
                    raise ConflictError(f"Order {order_id} is already paid")
                customer = _require(repositories.customers.get(customer_id), "Customer", customer_id)
                merchant = _require(
                    repositories.merchants.get(order.merchant_id), "Merchant", order.merchant_id
                )
                location = _require(
                    repositories.locations.get(order.location_id), "Location", order.location_id
                )

                access_token = _access_token(merchant)
                if not location.enabled:
                    raise UnprocessableStateError(f"Location {location.id} is disabled")
                tier = self.fees.ensure_supported(merchant.tier)
                if not merchant.app_enabled:
                    raise UnprocessableStateError(f"Merchant {merchant.id} has the app disabled")
                if not customer.external_id:
                    raise UnprocessableStateError(f"Customer {customer.id} has no remote id")
                remote_order_id = _remote_id(order)

                now = self.clock()
                lead = timedelta(minutes=merchant.pickup_lead_minutes or self.default_lead_minutes)
                pickup_at, schedule_type = resolve_pickup_time(
                    details.pickup_at,
                    location=location,
                    now=now,
                    lead=lead,
                    max_ahead=self.max_pickup_ahead,
                )

                draft = await self.platform.retrieve_order(access_token, remote_order_id)
                line_items = line_item_specs_from_remote(draft)
                if not line_items:
                    raise UnprocessableStateError(f"Order {order.id} has no line items to pay for")
                await self.platform.cancel_order(
                    access_token,
                    draft.id,
                    location_id=draft.location_id,
                    version=draft.version,
                    idempotency_key=f"{details.idempotency_key}:cancel",
                )
                opened = await self.platform.create_order(
                    access_token,
                    OrderSpec(
                        location_id=_external_location_id(location),
                        state=RemoteOrderState.OPEN,
                        line_items=line_items,
                        customer_id=customer.external_id,
                        reference_id=str(order.id),
                        fulfillment=PickupFulfillmentSpec(
                            schedule_type=schedule_type,
                            pickup_at=pickup_at,
                            recipient_customer_id=customer.external_id,
                            note=details.note,
                        ),
                    ),
                    idempotency_key=f"{details.idempotency_key}:order",
                )
                mirror_remote_order(order, opened)
                uow.commit()

                subtotal = order.total_amount or 0
                app_fee = self.fees.application_fee(subtotal, tier)
                currency = order.currency
                payment = await self.platform.create_payment(
                    access_token,
                    PaymentSpec(
                        source_id=details.source_id,
                        idempotency_key=details.idempotency_key,
                        amount=RemoteMoney(subtotal, currency),
                        order_id=opened.id,
                        location_id=_external_location_id(location),
                        customer_id=customer.external_id,
                        reference_id=str(order.id),
                        tip=RemoteMoney(details.tip_amount, currency) if details.tip_amount else None,
                        app_fee=RemoteMoney(app_fee, currency),
                        note=details.note,
                    ),
                )

                if payment.total_money is not None:
                    order.total_amount = payment.total_money.amount
                order.tip_amount = (
                    payment.tip_money.amount if payment.tip_money else details.tip_amount
                )
                order.app_fee_amount = (
                    payment.app_fee_money.amount if payment.app_fee_money else app_fee
                )
                order.pickup_at = pickup_at
                order.closed_at = now
                self.clear_current_order(customer)
                uow.commit()

        log.info(
            "Captured payment %s for order %s (fee %s, pickup %s)",
            payment.id,
            order.id,
            app_fee,
            pickup_at.isoformat(),
        )
        return order

    # Helpers -------------------------------------------------------------------

    async def _resolve_location(
        self,
        repositories: OrderingRepositories,
        merchant: Merchant,
        customer: Customer,
        location_id: UUID | None,
        access_token: str,
    ) -> Location:
        """Explicit location, then the customer's preferred one, then the remote main location."""

        for candidate_id in (location_id, customer.preferred_location_id):
            if candidate_id is None:
                continue
            location = _require(repositories.locations.get(candidate_id), "Location", candidate_id)
            if location.merchant_id != merchant.id:
                raise ValidationFailure(
                    f"Location {location.id} does not belong to merchant {merchant.id}"
                )
            return location

        remote = await self.platform.retrieve_location(access_token, MAIN_LOCATION_ID)
        location = repositories.locations.find_by_external_id(merchant.id, remote.id)
        if location is None:
            location, _, _ = mirror_location(repositories.locations, merchant, remote, is_main=True)
            log.info("Mirrored main location %s for merchant %s", remote.id, merchant.id)
        return location

    def _customer_of(self, order_id: UUID) -> UUID:
        with self.unit_of_work_factory() as uow:
            return _require(uow.repositories.orders.get(order_id), "Order", order_id).customer_id

    def _discard(self, order_id: UUID) -> None:
        with self.unit_of_work_factory() as uow:
            order = uow.repositories.orders.get(order_id)
            if order is not None:
                uow.repositories.orders.remove(order)
                uow.commit()


def _require[T](entity: T | None, kind: str, entity_id: UUID) -> T:
    if entity is None:
        raise NotFoundError(f"{kind} {entity_id} not found")
    return entity


def _access_token(merchant: Merchant) -> str:
    if not merchant.access_token:
        raise UnprocessableStateError(f"Merchant {merchant.id} has no remote credentials")
    return merchant.access_token


def _catalog(repositories: OrderingRepositories, merchant: Merchant) -> Catalog:
    catalog = repositories.catalogs.get_for_merchant(merchant.id)
    if catalog is None:
        raise UnprocessableStateError(f"Merchant {merchant.id} has no synced catalog")
    return catalog


def _external_location_id(location: Location) -> str:
    if location.external_id is None:
        raise UnprocessableStateError(f"Location {location.id} is not mirrored remotely")
    return location.external_id


def _remote_id(order: Order) -> str:
    if order.external_id is None:
        raise UnprocessableStateError(f"Order {order.id} has no remote counterpart")
    return order.external_id


def _editable_order(
    repositories: OrderingRepositories, order_id: UUID
) -> tuple[Order, Merchant, str]:
    order = _require(repositories.orders.get(order_id), "Order", order_id)
    if order.is_closed:
        raise UnprocessableStateError(f"Order {order.id} is already closed")
    merchant = _require(
        repositories.merchants.get(order.merchant_id), "Merchant", order.merchant_id
    )
    access_token = _access_token(merchant)
    _remote_id(order)
    return order, merchant, access_token
