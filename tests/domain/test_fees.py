from __future__ import annotations

import pytest

from storefront.config import ConfigurationError
from storefront.domain.errors import UnprocessableStateError
from storefront.domain.ordering import FeeSchedule


@pytest.fixture
def schedule() -> FeeSchedule:
    return FeeSchedule(numerators={0: 0, 1: 3, 2: 5}, denominator=100)


@pytest.mark.parametrize(
    ("subtotal", "tier", "expected"),
    [(1000, 0, 0), (1000, 1, 30), (1000, 2, 50), (999, 1, 29), (0, 2, 0)],
)
def test_application_fee_floors_the_tier_share(
    schedule: FeeSchedule, subtotal: int, tier: int, expected: int
) -> None:
    assert schedule.application_fee(subtotal, tier) == expected


@pytest.mark.parametrize("tier", [None, 3, -1])
def test_unsupported_tier_is_unprocessable(schedule: FeeSchedule, tier: int | None) -> None:
    with pytest.raises(UnprocessableStateError):
        schedule.application_fee(1000, tier)


def test_zero_denominator_is_a_configuration_error() -> None:
    broken = FeeSchedule(numerators={0: 0, 1: 1, 2: 2}, denominator=0)

    with pytest.raises(ConfigurationError):
        broken.application_fee(100, 1)


def test_missing_tier_numerator_is_a_configuration_error() -> None:
    partial = FeeSchedule(numerators={0: 0}, denominator=100)

    with pytest.raises(ConfigurationError):
        partial.ensure_supported(2)
