"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, Any

from storefront.adapters.notifications import default_channels
from storefront.adapters.square import SquareCommercePlatform
from storefront.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    SqlAlchemyOrderingUnitOfWork,
    is_started,
    startup,
)
from storefront.config import get_fee_config, get_ordering_config, get_square_config
from storefront.domain.catalog_sync import CatalogSyncEngine, CatalogSyncResult
from storefront.domain.events import EventBus
from storefront.domain.fulfillment import (
    DispatchReport,
    FulfillmentStateMachine,
    NotificationDispatcher,
    parse_fulfillment_webhook,
)
from storefront.domain.locations import LocationMirror, LocationSyncResult
from storefront.domain.locking import KeyedLocks
from storefront.domain.ordering import FeeSchedule, OrderLifecycleManager

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from uuid import UUID

    from storefront.domain.ports.notifications import NotificationChannel
    from storefront.domain.ports.platform import CommercePlatform
    from storefront.domain.ports.unit_of_work import CatalogUnitOfWork, OrderingUnitOfWork

type CatalogUnitOfWorkFactory = Callable[[], CatalogUnitOfWork]
type OrderingUnitOfWorkFactory = Callable[[], OrderingUnitOfWork]

log = getLogger(__name__)

# one lock table for every engine, manager and state machine built here
LOCKS = KeyedLocks()


def _ensure_started() -> None:
    if not is_started():
        startup()


def build_platform() -> CommercePlatform:
    return SquareCommercePlatform(config=get_square_config())


def sync_locations(
    *,
    merchant_id: UUID,
    platform: CommercePlatform | None = None,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
) -> LocationSyncResult:
    """Mirror the merchant's remote locations and business hours."""

    if unit_of_work_factory is None:
        _ensure_started()
    mirror = LocationMirror(
        platform=platform or build_platform(),
        unit_of_work_factory=unit_of_work_factory or SqlAlchemyCatalogUnitOfWork,
    )
    log.info("Starting location sync for merchant %s", merchant_id)
    return asyncio.run(mirror.sync(merchant_id=merchant_id))


def sync_catalog(
    *,
    merchant_id: UUID,
    platform: CommercePlatform | None = None,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
) -> CatalogSyncResult:
    """Run one catalog reconciliation pass for the merchant."""

    return asyncio.run(
        run_catalog_sync(
            merchant_id=merchant_id, platform=platform, unit_of_work_factory=unit_of_work_factory
        )
    )


async def run_catalog_sync(
    *,
    merchant_id: UUID,
    platform: CommercePlatform | None = None,
    unit_of_work_factory: CatalogUnitOfWorkFactory | None = None,
) -> CatalogSyncResult:
    """Catalog pass for callers already inside an event loop; serialised through ``LOCKS``."""

    if unit_of_work_factory is None:
        _ensure_started()
    engine = CatalogSyncEngine(
        platform=platform or build_platform(),
        unit_of_work_factory=unit_of_work_factory or SqlAlchemyCatalogUnitOfWork,
        locks=LOCKS,
    )
    log.info("Starting catalog sync for merchant %s", merchant_id)
    return await engine.sync(merchant_id=merchant_id)


def build_order_manager(
    *,
    platform: CommercePlatform | None = None,
    unit_of_work_factory: OrderingUnitOfWorkFactory | None = None,
    locks: KeyedLocks | None = None,
) -> OrderLifecycleManager:
    """Order lifecycle manager wired from environment configuration."""

    if unit_of_work_factory is None:
        _ensure_started()
    fee_config = get_fee_config()
    ordering = get_ordering_config()
    manager = OrderLifecycleManager(
        platform=platform or build_platform(),
        unit_of_work_factory=unit_of_work_factory or SqlAlchemyOrderingUnitOfWork,
        fees=FeeSchedule(numerators=fee_config.numerators, denominator=fee_config.denominator),
        max_pickup_ahead=ordering.max_pickup_ahead,
        default_lead_minutes=ordering.pickup_default_lead_minutes,
        locks=LOCKS if locks is None else locks,
    )
    return manager


def build_fulfillment_pipeline(
    *,
    unit_of_work_factory: OrderingUnitOfWorkFactory,
    channels: Sequence[NotificationChannel] | None = None,
) -> tuple[EventBus, NotificationDispatcher]:
    """Event bus with the fulfillment state machine subscribed, plus its dispatcher."""

    dispatcher = NotificationDispatcher(
        unit_of_work_factory=unit_of_work_factory,
        channels=default_channels() if channels is None else channels,
    )
    bus = EventBus()
    machine = FulfillmentStateMachine(
        unit_of_work_factory=unit_of_work_factory, dispatcher=dispatcher, locks=LOCKS
    )
    machine.subscribe(bus)
    return bus, dispatcher


def handle_fulfillment_webhook(
    payload: dict[str, Any],
    *,
    unit_of_work_factory: OrderingUnitOfWorkFactory | None = None,
    channels: Sequence[NotificationChannel] | None = None,
) -> list[DispatchReport]:
    """Apply one webhook body and deliver the resulting notifications."""

    event = parse_fulfillment_webhook(payload)
    if event is None:
        return []

    if unit_of_work_factory is None:
        _ensure_started()
    bus, dispatcher = build_fulfillment_pipeline(
        unit_of_work_factory=unit_of_work_factory or SqlAlchemyOrderingUnitOfWork,
        channels=channels,
    )

    async def _apply() -> list[DispatchReport]:
        await bus.publish(event)
        return await dispatcher.drain()

    return asyncio.run(_apply())
