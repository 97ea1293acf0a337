"""Mirror of a merchant's remote locations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from storefront.domain.errors import NotFoundError, UnprocessableStateError
from storefront.domain.model import BusinessHoursPeriod, Location, assign
from storefront.domain.ports.platform import MAIN_LOCATION_ID

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from storefront.domain.model import Merchant
    from storefront.domain.ports.persistence import LocationRepository
    from storefront.domain.ports.platform import CommercePlatform, RemoteLocation
    from storefront.domain.ports.unit_of_work import CatalogUnitOfWork

log = logging.getLogger(__name__)


@dataclass(slots=True)
class LocationSyncResult:
    created: int = 0
    updated: int = 0


def mirror_location(
    locations: LocationRepository,
    merchant: Merchant,
    remote: RemoteLocation,
    *,
    is_main: bool | None = None,
) -> tuple[Location, bool, bool]:
    """Upsert one remote location; return ``(location, created, updated)``."""

    location = locations.find_by_external_id(merchant.id, remote.id)
    created = location is None
    if location is None:
        location = Location(merchant_id=merchant.id, external_id=remote.id)
        locations.add(location)

    fields: dict[str, object] = {
        "name": remote.name,
        "timezone": remote.timezone,
        "enabled": remote.active,
    }
    if is_main is not None:
        fields["is_main"] = is_main
    changed = assign(location, **fields)
    periods = [
        BusinessHoursPeriod(
            day_of_week=period.day_of_week,
            start_local_time=period.start_local_time,
            end_local_time=period.end_local_time,
        )
        for period in remote.business_hours
    ]
    changed = location.replace_business_hours(periods) or changed
    return location, created, changed and not created


@dataclass(slots=True)
class LocationMirror:
    platform: CommercePlatform
    unit_of_work_factory: Callable[[], CatalogUnitOfWork]

    async def sync(self, *, merchant_id: UUID) -> LocationSyncResult:
        result = LocationSyncResult()
        with self.unit_of_work_factory() as uow:
            merchant = uow.repositories.merchants.get(merchant_id)
            if merchant is None:
                raise NotFoundError(f"Merchant {merchant_id} not found")
            if not merchant.access_token:
                raise UnprocessableStateError(f"Merchant {merchant_id} has no remote credentials")

            remote_locations = await self.platform.list_locations(merchant.access_token)
            main = await self.platform.retrieve_location(merchant.access_token, MAIN_LOCATION_ID)

            for remote in remote_locations:
                _, created, updated = mirror_location(
                    uow.repositories.locations,
                    merchant,
                    remote,
                    is_main=remote.id == main.id,
                )
                result.created += int(created)
                result.updated += int(updated)
            uow.commit()

        log.info(
            "Mirrored locations for merchant %s: created=%s updated=%s",
            merchant_id,
            result.created,
            result.updated,
        )
        return result
