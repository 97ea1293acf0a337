"""Create/update/delete diff of a local mirror against a remote snapshot."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable

log = logging.getLogger(__name__)


class ExternallyKeyed(Protocol):
    @property
    def external_id(self) -> str | None: ...


class RemotelyKeyed(Protocol):
    @property
    def id(self) -> str: ...


@dataclass(slots=True)
class ReconciliationDiff[TLocal: ExternallyKeyed, TRemote: RemotelyKeyed]:
    """Outcome of one diff pass for one entity type.

    ``pairs`` holds every remote object in remote order with its local match,
    or ``None`` when the object has to be created.
    """

    to_delete: list[TLocal] = field(default_factory=list["TLocal"])
    pairs: list[tuple[TRemote, TLocal | None]] = field(
        default_factory=list["tuple[TRemote, TLocal | None]"]
    )

    @property
    def matches(self) -> list[tuple[TRemote, TLocal]]:
        return [(remote, local) for remote, local in self.pairs if local is not None]

    @property
    def to_create(self) -> list[TRemote]:
        return [remote for remote, local in self.pairs if local is None]


def diff_by_external_id[TLocal: ExternallyKeyed, TRemote: RemotelyKeyed](
    local: Iterable[TLocal],
    remote: Iterable[TRemote],
) -> ReconciliationDiff[TLocal, TRemote]:
    """Diff ``local`` against ``remote`` by external id.

    Locals without an external id are never scheduled for deletion. When the
    remote side repeats an id, the first occurrence claims the local match and
    later ones are scheduled for creation.
    """

    remote_objects = list(remote)
    remote_ids = {item.id for item in remote_objects}

    result: ReconciliationDiff[TLocal, TRemote] = ReconciliationDiff()
    by_external_id: dict[str, TLocal] = {}
    for entity in local:
        external_id = entity.external_id
        if external_id is None:
            continue
        if external_id not in remote_ids:
            result.to_delete.append(entity)
            continue
        by_external_id.setdefault(external_id, entity)

    claimed: set[str] = set()
    for item in remote_objects:
        if item.id in claimed:
            log.warning("Duplicate remote id %s in snapshot; scheduling another row", item.id)
            result.pairs.append((item, None))
            continue
        claimed.add(item.id)
        result.pairs.append((item, by_external_id.get(item.id)))
    return result
