"""Base building blocks: identity and external identity."""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID, uuid4


def new_id() -> UUID:
    return uuid4()


@dataclass(eq=False, kw_only=True)
class Entity:
    """Internal identity exists immediately in the domain."""

    id: UUID = field(default_factory=new_id)


@dataclass(eq=False, kw_only=True)
class ExternallyMirrored(Entity):
    """Entity mirrored from the remote platform.

    ``external_id`` is ``None`` for rows that originated locally; those are never
    pruned by a sync pass.
    """

    external_id: str | None = None

    @property
    def is_mirrored(self) -> bool:
        return self.external_id is not None


def assign(entity: object, **values: object) -> bool:
    """Set attributes that differ from ``values``; return whether anything changed."""

    changed = False
    for name, value in values.items():
        if getattr(entity, name) != value:
            setattr(entity, name, value)
            changed = True
    return changed
