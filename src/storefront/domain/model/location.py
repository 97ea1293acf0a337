"""Merchant locations and their business hours."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

from storefront.domain.model.entity import Entity, ExternallyMirrored

if TYPE_CHECKING:
    from datetime import time
    from uuid import UUID

    from storefront.domain.model.enums import DayOfWeek

DEFAULT_TIMEZONE = "UTC"


@dataclass(eq=False, kw_only=True)
class BusinessHoursPeriod(Entity):
    day_of_week: DayOfWeek
    start_local_time: time
    end_local_time: time
    location_id: UUID | None = None
    position: int = 0

    def contains(self, value: time) -> bool:
        return self.start_local_time <= value <= self.end_local_time

    def signature(self) -> tuple[DayOfWeek, time, time]:
        return (self.day_of_week, self.start_local_time, self.end_local_time)


@dataclass(eq=False, kw_only=True)
class Location(ExternallyMirrored):
    merchant_id: UUID
    name: str | None = None
    timezone: str | None = None
    enabled: bool = True
    is_main: bool = False

    business_hours: list[BusinessHoursPeriod] = field(
        default_factory=list["BusinessHoursPeriod"], repr=False
    )

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone or DEFAULT_TIMEZONE)

    def periods_on(self, day: DayOfWeek) -> list[BusinessHoursPeriod]:
        return sorted(
            (period for period in self.business_hours if period.day_of_week == day),
            key=lambda period: period.start_local_time,
        )

    def replace_business_hours(self, periods: list[BusinessHoursPeriod]) -> bool:
        """Replace the ordered periods; return whether anything changed."""

        current = [period.signature() for period in self.business_hours]
        if current == [period.signature() for period in periods]:
            return False
        self.business_hours.clear()
        for position, period in enumerate(periods):
            period.position = position
            period.location_id = self.id
            self.business_hours.append(period)
        return True
