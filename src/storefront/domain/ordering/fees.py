"""Tiered application fee."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from storefront.config.errors import ConfigurationError
from storefront.domain.errors import UnprocessableStateError

if TYPE_CHECKING:
    from collections.abc import Mapping

SUPPORTED_TIERS: Final[tuple[int, ...]] = (0, 1, 2)


@dataclass(frozen=True, slots=True)
class FeeSchedule:
    """``fee = floor(subtotal * numerators[tier] / denominator)``."""

    numerators: Mapping[int, int]
    denominator: int

    def ensure_supported(self, tier: int | None) -> int:
        if tier is None or tier not in SUPPORTED_TIERS:
            raise UnprocessableStateError(f"Unsupported merchant tier: {tier!r}")
        if tier not in self.numerators:
            raise ConfigurationError(f"No application fee numerator configured for tier {tier}")
        if self.denominator == 0:
            raise ConfigurationError("Application fee denominator must not be zero")
        return tier

    def application_fee(self, subtotal: int, tier: int | None) -> int:
        supported = self.ensure_supported(tier)
        return subtotal * self.numerators[supported] // self.denominator
