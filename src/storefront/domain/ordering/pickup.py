"""Pickup scheduling against a location's business hours."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Final

from storefront.domain.errors import ValidationFailure
from storefront.domain.model import DayOfWeek
from storefront.domain.ports.platform import PickupScheduleType

if TYPE_CHECKING:
    from storefront.domain.model import Location

DEFAULT_MAX_PICKUP_AHEAD: Final[timedelta] = timedelta(days=7)


def validate_pickup_time(
    pickup_at: datetime,
    *,
    location: Location,
    now: datetime,
    max_ahead: timedelta = DEFAULT_MAX_PICKUP_AHEAD,
) -> None:
    """Raise ``ValidationFailure`` unless ``pickup_at`` lies in a business-hours period."""

    if pickup_at.tzinfo is None:
        raise ValidationFailure("Pickup time must be timezone-aware")
    if pickup_at < now:
        raise ValidationFailure("Pickup time is in the past")
    if pickup_at > now + max_ahead:
        raise ValidationFailure(f"Pickup time is more than {max_ahead.days} days ahead")

    local = pickup_at.astimezone(location.zone)
    day = DayOfWeek.from_weekday(local.weekday())
    periods = location.periods_on(day)
    if not periods:
        raise ValidationFailure(f"Location {location.id} is closed on {day}")
    local_time = local.time()
    if not any(period.contains(local_time) for period in periods):
        raise ValidationFailure(
            f"Pickup time {local_time.isoformat(timespec='seconds')} is outside business hours"
        )


def first_pickup_time(
    *,
    location: Location,
    now: datetime,
    lead: timedelta,
    max_ahead: timedelta = DEFAULT_MAX_PICKUP_AHEAD,
) -> datetime:
    """Earliest time ``lead`` after ``max(now, opening)`` that still falls inside a period."""

    zone = location.zone
    today = now.astimezone(zone).date()
    for offset in range(max_ahead.days + 1):
        day = today + timedelta(days=offset)
        for period in location.periods_on(DayOfWeek.from_weekday(day.weekday())):
            opens = datetime.combine(day, period.start_local_time, tzinfo=zone)
            closes = datetime.combine(day, period.end_local_time, tzinfo=zone)
            candidate = max(now, opens) + lead
            if candidate <= closes:
                return candidate.astimezone(UTC)
    raise ValidationFailure(f"Location {location.id} has no pickup slot in the next {max_ahead}")


def resolve_pickup_time(
    requested: datetime | None,
    *,
    location: Location,
    now: datetime,
    lead: timedelta,
    max_ahead: timedelta = DEFAULT_MAX_PICKUP_AHEAD,
) -> tuple[datetime, PickupScheduleType]:
    if requested is not None:
        validate_pickup_time(requested, location=location, now=now, max_ahead=max_ahead)
        return requested, PickupScheduleType.SCHEDULED
    pickup_at = first_pickup_time(location=location, now=now, lead=lead, max_ahead=max_ahead)
    validate_pickup_time(pickup_at, location=location, now=now, max_ahead=max_ahead)
    return pickup_at, PickupScheduleType.ASAP
