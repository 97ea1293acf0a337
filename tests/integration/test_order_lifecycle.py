from __future__ import annotations

import asyncio
import dataclasses
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import select

from storefront.domain.catalog_sync import CatalogSyncEngine
from storefront.domain.errors import (
    ConflictError,
    RemoteServiceFailure,
    UnprocessableStateError,
    ValidationFailure,
)
from storefront.domain.model import Modifier, Order, Variation
from storefront.domain.ordering import (
    FeeSchedule,
    OrderLifecycleManager,
    PaymentDetails,
    VariationSelection,
)
from storefront.domain.ports.platform import PickupScheduleType, RemoteMoney, RemoteOrderState
from tests.helpers.catalog import coffee_catalog
from tests.helpers.records import add_location, record_id

if TYPE_CHECKING:
    from collections.abc import Callable

    from storefront.adapters.sqlalchemy.unit_of_work import (
        SqlAlchemyCatalogUnitOfWork,
        SqlAlchemyOrderingUnitOfWork,
    )
    from tests.helpers.platform import FakeCommercePlatform
    from tests.helpers.records import StoreRecords

    type OrderingUowFactory = Callable[[], SqlAlchemyOrderingUnitOfWork]

NOW = datetime(2026, 1, 5, 10, 0, tzinfo=UTC)
FEES = FeeSchedule(numerators={0: 0, 1: 3, 2: 5}, denominator=100)


@dataclasses.dataclass
class Shop:
    manager: OrderLifecycleManager
    store: StoreRecords
    small: VariationSelection
    large: VariationSelection


@pytest.fixture
def shop(
    platform: FakeCommercePlatform,
    catalog_uow: Callable[[], SqlAlchemyCatalogUnitOfWork],
    ordering_uow: OrderingUowFactory,
    store: StoreRecords,
) -> Shop:
    platform.set_catalog(*coffee_catalog())
    engine = CatalogSyncEngine(platform=platform, unit_of_work_factory=catalog_uow)
    asyncio.run(engine.sync(merchant_id=store.merchant_id))
    platform.calls.clear()

    oat = record_id(ordering_uow, store.merchant_id, Modifier, "mod-oat")
    small = record_id(ordering_uow, store.merchant_id, Variation, "var-small")
    large = record_id(ordering_uow, store.merchant_id, Variation, "var-large")
    manager = OrderLifecycleManager(
        platform=platform, unit_of_work_factory=ordering_uow, fees=FEES, clock=lambda: NOW
    )
    return Shop(
        manager=manager,
        store=store,
        small=VariationSelection(variation_id=small, quantity=2, modifier_ids=(oat,)),
        large=VariationSelection(variation_id=large),
    )


def _create(shop: Shop, *selections: VariationSelection) -> Order:
    return asyncio.run(
        shop.manager.create(
            customer_id=shop.store.customer_id,
            merchant_id=shop.store.merchant_id,
            selections=selections or (shop.small,),
        )
    )


def _pay(
    shop: Shop, order: Order, *, pickup_at: datetime | None = None, tip_amount: int = 0
) -> Order:
    payment = PaymentDetails(
        source_id="cnon:card",
        idempotency_key="pay-1",
        pickup_at=pickup_at,
        tip_amount=tip_amount,
    )
    return asyncio.run(
        shop.manager.create_payment(
            order_id=order.id, customer_id=shop.store.customer_id, details=payment
        )
    )


def test_create_mirrors_the_remote_draft_and_sets_current_order(
    shop: Shop, platform: FakeCommercePlatform
) -> None:
    order = _create(shop)

    (spec,) = platform.order_specs
    assert spec.state is RemoteOrderState.DRAFT
    assert spec.location_id == "L-MAIN"
    assert spec.customer_id == "C-1"
    assert spec.reference_id == str(order.id)
    (line_item,) = spec.line_items
    assert line_item.catalog_object_id == "var-small"
    assert line_item.base_price_amount == 450
    assert line_item.modifier_ids == ("mod-oat",)

    assert order.external_id == "order-1"
    assert order.external_version == 1
    assert order.total_amount == 900
    assert order.location_id == shop.store.location_id
    current = shop.manager.current_order(shop.store.customer_id)
    assert current is not None
    assert current.id == order.id
    assert [item.external_uid for item in current.line_items] == ["order-1-li-0"]


def test_second_open_order_is_a_conflict(shop: Shop, platform: FakeCommercePlatform) -> None:
    _create(shop)

    with pytest.raises(ConflictError):
        _create(shop, shop.large)

    assert platform.calls.count("create_order") == 1


def test_failed_remote_create_discards_the_draft(
    shop: Shop, platform: FakeCommercePlatform, ordering_uow: OrderingUowFactory
) -> None:
    platform.fail("create_order", code="INTERNAL_SERVER_ERROR")

    with pytest.raises(RemoteServiceFailure):
        _create(shop)

    assert shop.manager.current_order(shop.store.customer_id) is None
    with ordering_uow() as uow:
        assert list(uow.session.scalars(select(Order))) == []


def test_invalid_selection_is_rejected_before_any_remote_call(
    shop: Shop, platform: FakeCommercePlatform
) -> None:
    with pytest.raises(ValidationFailure):
        _create(shop, dataclasses.replace(shop.large, quantity=0))

    assert platform.calls == []


def test_update_line_items_replaces_the_remote_line_items(
    shop: Shop, platform: FakeCommercePlatform
) -> None:
    order = _create(shop)

    updated = asyncio.run(
        shop.manager.update_line_items(order_id=order.id, selections=[shop.large])
    )

    assert platform.order_specs[-1].version == 1
    assert updated.external_version == 2
    assert updated.total_amount == 500
    assert [item.catalog_object_external_id for item in updated.line_items] == ["var-large"]


def test_stale_version_surfaces_as_a_version_conflict(
    shop: Shop, platform: FakeCommercePlatform
) -> None:
    order = _create(shop)
    remote = platform.orders["order-1"]
    platform.orders["order-1"] = dataclasses.replace(remote, version=5)

    with pytest.raises(RemoteServiceFailure) as excinfo:
        asyncio.run(shop.manager.update_line_items(order_id=order.id, selections=[shop.large]))

    assert excinfo.value.is_version_conflict
    current = shop.manager.current_order(shop.store.customer_id)
    assert current is not None
    assert current.external_version == 1


def test_remove_line_items_clears_them_remotely(
    shop: Shop, platform: FakeCommercePlatform
) -> None:
    order = _create(shop, shop.small, shop.large)
    first = order.line_items[0]

    updated = asyncio.run(
        shop.manager.remove_line_items(order_id=order.id, line_item_ids=[first.id])
    )

    assert platform.calls[-1] == "clear_order_fields"
    assert [item.catalog_object_external_id for item in updated.line_items] == ["var-large"]
    assert updated.total_amount == 500
    assert updated.external_version == 2


def test_update_location_recreates_the_remote_order(
    shop: Shop, platform: FakeCommercePlatform, ordering_uow: OrderingUowFactory
) -> None:
    order = _create(shop)
    second = add_location(ordering_uow, shop.store.merchant_id, "L-2")

    moved = asyncio.run(shop.manager.update_location(order_id=order.id, location_id=second))

    assert platform.calls[-2:] == ["retrieve_order", "create_order"]
    assert platform.order_specs[-1].location_id == "L-2"
    (line_item,) = platform.order_specs[-1].line_items
    # the L-MAIN override of 450 does not follow the order to L-2
    assert (line_item.catalog_object_id, line_item.base_price_amount) == ("var-small", 400)
    assert (line_item.quantity, line_item.modifier_ids) == (2, ("mod-oat",))
    assert moved.external_id == "order-2"
    assert moved.location_id == second
    assert moved.total_amount == 800


def test_pickup_outside_business_hours_fails_before_remote_calls(
    shop: Shop, platform: FakeCommercePlatform
) -> None:
    order = _create(shop)

    with pytest.raises(ValidationFailure, match="outside business hours"):
        _pay(shop, order, pickup_at=datetime(2026, 1, 5, 21, 0, tzinfo=UTC))

    assert platform.calls == ["create_order"]
    assert platform.payments == []


def test_unsupported_tier_fails_before_remote_calls(
    shop: Shop, platform: FakeCommercePlatform, ordering_uow: OrderingUowFactory
) -> None:
    order = _create(shop)
    with ordering_uow() as uow:
        merchant = uow.repositories.merchants.get(shop.store.merchant_id)
        assert merchant is not None
        merchant.tier = 7
        uow.commit()

    with pytest.raises(UnprocessableStateError, match="tier"):
        _pay(shop, order)

    assert platform.calls == ["create_order"]


def test_payment_reopens_the_order_for_pickup_and_charges_the_fee(
    shop: Shop, platform: FakeCommercePlatform
) -> None:
    order = _create(shop)

    paid = _pay(shop, order, tip_amount=100)

    assert platform.calls[-4:] == [
        "retrieve_order",
        "cancel_order",
        "create_order",
        "create_payment",
    ]
    assert platform.idempotency_keys[-2:] == ["pay-1:cancel", "pay-1:order"]
    opened = platform.order_specs[-1]
    assert opened.state is RemoteOrderState.OPEN
    assert opened.fulfillment is not None
    assert opened.fulfillment.schedule_type is PickupScheduleType.ASAP
    assert opened.fulfillment.pickup_at == datetime(2026, 1, 5, 10, 15, tzinfo=UTC)

    (payment,) = platform.payments
    assert payment.amount == RemoteMoney(900, "USD")
    assert payment.app_fee == RemoteMoney(27, "USD")
    assert payment.tip == RemoteMoney(100, "USD")
    assert payment.order_id == "order-2"

    assert paid.external_id == "order-2"
    assert paid.total_amount == 1000
    assert paid.app_fee_amount == 27
    assert paid.closed_at == NOW
    assert shop.manager.current_order(shop.store.customer_id) is None


def test_paid_order_cannot_be_paid_again(shop: Shop) -> None:
    order = _create(shop)
    _pay(shop, order)

    with pytest.raises(ConflictError):
        _pay(shop, order)
