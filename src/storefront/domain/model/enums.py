"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class CatalogObjectType(StrEnum):
    """Discriminator for remote catalog objects and polymorphic catalog ownership."""

    CATEGORY = "CATEGORY"
    ITEM = "ITEM"
    ITEM_VARIATION = "ITEM_VARIATION"
    MODIFIER_LIST = "MODIFIER_LIST"
    MODIFIER = "MODIFIER"
    IMAGE = "IMAGE"


class SelectionType(StrEnum):
    SINGLE = "SINGLE"
    MULTIPLE = "MULTIPLE"


class DayOfWeek(StrEnum):
    MON = "MON"
    TUE = "TUE"
    WED = "WED"
    THU = "THU"
    FRI = "FRI"
    SAT = "SAT"
    SUN = "SUN"

    @classmethod
    def from_weekday(cls, weekday: int) -> DayOfWeek:
        """Map ``datetime.weekday()`` (Monday == 0) to a day."""
        return _WEEKDAYS[weekday]


_WEEKDAYS: tuple[DayOfWeek, ...] = tuple(DayOfWeek)


class FulfillmentStatus(StrEnum):
    PROPOSED = "PROPOSED"
    RESERVED = "RESERVED"
    PREPARED = "PREPARED"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATUSES


_TERMINAL_STATUSES = frozenset(
    {FulfillmentStatus.COMPLETED, FulfillmentStatus.CANCELED, FulfillmentStatus.FAILED}
)
