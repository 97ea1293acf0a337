"""Per-location visibility of items and modifiers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from uuid import UUID

    from storefront.domain.ports.platform import RemoteCatalogObject

log = logging.getLogger(__name__)


class PresenceFields(Protocol):
    @property
    def present_at_all_locations(self) -> bool: ...

    @property
    def present_at_location_ids(self) -> frozenset[UUID]: ...

    @property
    def absent_at_location_ids(self) -> frozenset[UUID]: ...


@dataclass(slots=True, frozen=True)
class Presence:
    present_at_all_locations: bool
    present_at_location_ids: frozenset[UUID]
    absent_at_location_ids: frozenset[UUID]

    def as_fields(self) -> dict[str, object]:
        return {
            "present_at_all_locations": self.present_at_all_locations,
            "present_at_location_ids": self.present_at_location_ids,
            "absent_at_location_ids": self.absent_at_location_ids,
        }


def is_visible(entity: PresenceFields, location_id: UUID) -> bool:
    """An explicit present list wins over ``present_at_all_locations``."""

    if entity.present_at_location_ids:
        return location_id in entity.present_at_location_ids
    if entity.present_at_all_locations:
        return location_id not in entity.absent_at_location_ids
    return False


def visible_locations(entity: PresenceFields, location_ids: Iterable[UUID]) -> set[UUID]:
    return {location_id for location_id in location_ids if is_visible(entity, location_id)}


def resolve_presence(
    remote: RemoteCatalogObject,
    location_ids_by_external_id: Mapping[str, UUID],
) -> Presence:
    """Translate remote presence lists into local location ids.

    Remote locations without a local mirror are dropped.
    """

    return Presence(
        present_at_all_locations=remote.present_at_all_locations,
        present_at_location_ids=_map_locations(
            remote.id, remote.present_at_location_ids, location_ids_by_external_id
        ),
        absent_at_location_ids=_map_locations(
            remote.id, remote.absent_at_location_ids, location_ids_by_external_id
        ),
    )


def _map_locations(
    object_id: str,
    external_ids: Iterable[str],
    location_ids_by_external_id: Mapping[str, UUID],
) -> frozenset[UUID]:
    resolved: set[UUID] = set()
    for external_id in external_ids:
        location_id = location_ids_by_external_id.get(external_id)
        if location_id is None:
            log.warning("Object %s references unknown location %s", object_id, external_id)
            continue
        resolved.add(location_id)
    return frozenset(resolved)
