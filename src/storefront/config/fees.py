"""Tiered application fee configuration."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .errors import ConfigurationError

FEE_DENOMINATOR_VAR = "APP_FEE_DENOMINATOR"
FEE_TIERS = (0, 1, 2)


def tier_numerator_var(tier: int) -> str:
    return f"APP_FEE_TIER_{tier}_NUMERATOR"


@dataclass(frozen=True, slots=True)
class FeeConfig:
    numerators: dict[int, int]
    denominator: int


def get_fee_config() -> FeeConfig:
    names = [FEE_DENOMINATOR_VAR, *(tier_numerator_var(tier) for tier in FEE_TIERS)]
    values = require_env_vars(names)
    try:
        parsed = {name: int(value) for name, value in values.items()}
    except ValueError as exc:
        raise ConfigurationError(f"Application fee settings must be integers: {exc}") from exc

    denominator = parsed[FEE_DENOMINATOR_VAR]
    if denominator == 0:
        raise ConfigurationError(f"{FEE_DENOMINATOR_VAR} must not be zero")
    return FeeConfig(
        numerators={tier: parsed[tier_numerator_var(tier)] for tier in FEE_TIERS},
        denominator=denominator,
    )
