"""Order lifecycle defaults."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .env import int_env_var

DEFAULT_PICKUP_MAX_DAYS_AHEAD = 7
DEFAULT_PICKUP_LEAD_MINUTES = 10


@dataclass(frozen=True, slots=True)
class OrderingConfig:
    pickup_max_days_ahead: int = DEFAULT_PICKUP_MAX_DAYS_AHEAD
    pickup_default_lead_minutes: int = DEFAULT_PICKUP_LEAD_MINUTES

    @property
    def max_pickup_ahead(self) -> timedelta:
        return timedelta(days=self.pickup_max_days_ahead)


def get_ordering_config() -> OrderingConfig:
    return OrderingConfig(
        pickup_max_days_ahead=int_env_var("PICKUP_MAX_DAYS_AHEAD", DEFAULT_PICKUP_MAX_DAYS_AHEAD),
        pickup_default_lead_minutes=int_env_var(
            "PICKUP_DEFAULT_LEAD_MINUTES", DEFAULT_PICKUP_LEAD_MINUTES
        ),
    )
