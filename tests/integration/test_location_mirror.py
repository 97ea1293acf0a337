from __future__ import annotations

import asyncio
from datetime import time
from typing import TYPE_CHECKING
from uuid import uuid4

import pytest

from storefront.domain.errors import NotFoundError
from storefront.domain.locations import LocationMirror
from storefront.domain.model import DayOfWeek
from tests.helpers.catalog import every_day, remote_location

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from storefront.adapters.sqlalchemy.unit_of_work import SqlAlchemyCatalogUnitOfWork
    from storefront.domain.locations import LocationSyncResult
    from storefront.domain.model import Location
    from tests.helpers.platform import FakeCommercePlatform
    from tests.helpers.records import StoreRecords

    type CatalogUowFactory = Callable[[], SqlAlchemyCatalogUnitOfWork]


def _mirror(
    platform: FakeCommercePlatform, catalog_uow: CatalogUowFactory, merchant_id: UUID
) -> LocationSyncResult:
    mirror = LocationMirror(platform=platform, unit_of_work_factory=catalog_uow)
    return asyncio.run(mirror.sync(merchant_id=merchant_id))


def _locations(catalog_uow: CatalogUowFactory, merchant_id: UUID) -> dict[str | None, Location]:
    with catalog_uow() as uow:
        locations = uow.repositories.locations.list_for_merchant(merchant_id)
    return {location.external_id: location for location in locations}


def test_new_remote_locations_are_created(
    platform: FakeCommercePlatform, catalog_uow: CatalogUowFactory, store: StoreRecords
) -> None:
    platform.locations = [
        remote_location("L-MAIN", name="Main Street"),
        remote_location("L-2", name="Second Street", timezone="Europe/Berlin"),
    ]

    result = _mirror(platform, catalog_uow, store.merchant_id)

    assert (result.created, result.updated) == (1, 0)
    assert platform.calls == ["list_locations", "retrieve_location"]
    locations = _locations(catalog_uow, store.merchant_id)
    assert locations["L-MAIN"].id == store.location_id
    assert locations["L-MAIN"].is_main
    second = locations["L-2"]
    assert not second.is_main
    assert second.timezone == "Europe/Berlin"
    assert len(second.business_hours) == len(DayOfWeek)


def test_main_flag_follows_the_remote_main_location(
    platform: FakeCommercePlatform, catalog_uow: CatalogUowFactory, store: StoreRecords
) -> None:
    platform.locations = [
        remote_location("L-MAIN", name="Main Street"),
        remote_location("L-2", name="Second Street"),
    ]
    platform.main_location_id = "L-2"

    result = _mirror(platform, catalog_uow, store.merchant_id)

    assert (result.created, result.updated) == (1, 1)
    locations = _locations(catalog_uow, store.merchant_id)
    assert not locations["L-MAIN"].is_main
    assert locations["L-2"].is_main


def test_business_hours_are_replaced_in_order(
    platform: FakeCommercePlatform, catalog_uow: CatalogUowFactory, store: StoreRecords
) -> None:
    platform.locations = [
        remote_location("L-MAIN", name="Main Street", business_hours=every_day(time(9), time(17)))
    ]

    result = _mirror(platform, catalog_uow, store.merchant_id)

    assert result.updated == 1
    main = _locations(catalog_uow, store.merchant_id)["L-MAIN"]
    assert [period.day_of_week for period in main.business_hours] == list(DayOfWeek)
    assert {
        (period.start_local_time, period.end_local_time) for period in main.business_hours
    } == {(time(9), time(17))}
    assert [period.position for period in main.business_hours] == list(range(len(DayOfWeek)))


def test_inactive_remote_location_is_disabled(
    platform: FakeCommercePlatform, catalog_uow: CatalogUowFactory, store: StoreRecords
) -> None:
    platform.locations = [remote_location("L-MAIN", name="Main Street", active=False)]

    result = _mirror(platform, catalog_uow, store.merchant_id)

    assert result.updated == 1
    assert not _locations(catalog_uow, store.merchant_id)["L-MAIN"].enabled


def test_unchanged_locations_are_not_counted(
    platform: FakeCommercePlatform, catalog_uow: CatalogUowFactory, store: StoreRecords
) -> None:
    platform.locations = [
        remote_location("L-MAIN", name="Main Street"),
        remote_location("L-2", name="Second Street"),
    ]
    _mirror(platform, catalog_uow, store.merchant_id)

    again = _mirror(platform, catalog_uow, store.merchant_id)

    assert (again.created, again.updated) == (0, 0)


def test_unknown_merchant_is_rejected(
    platform: FakeCommercePlatform, catalog_uow: CatalogUowFactory, store: StoreRecords
) -> None:
    _ = store
    platform.locations = [remote_location("L-MAIN")]

    with pytest.raises(NotFoundError):
        _mirror(platform, catalog_uow, uuid4())

    assert platform.calls == []
