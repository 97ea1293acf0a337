from __future__ import annotations

import pytest

from storefront.config import (
    ConfigurationError,
    MissingConfigurationError,
    get_fee_config,
    get_ordering_config,
    get_square_config,
    int_env_var,
    require_env_vars,
)
from storefront.config.fees import FEE_DENOMINATOR_VAR, tier_numerator_var
from storefront.config.square import SQUARE_BASE_URL


def _set_fees(monkeypatch: pytest.MonkeyPatch, denominator: str = "1000") -> None:
    monkeypatch.setenv(FEE_DENOMINATOR_VAR, denominator)
    for tier, numerator in enumerate(("0", "25", "50")):
        monkeypatch.setenv(tier_numerator_var(tier), numerator)


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FIRST_MISSING", raising=False)
    monkeypatch.setenv("SECOND_MISSING", "  ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["SECOND_MISSING", "FIRST_MISSING"])

    assert "FIRST_MISSING, SECOND_MISSING" in str(exc.value)


def test_fee_config_reads_all_tiers(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_fees(monkeypatch)

    config = get_fee_config()

    assert config.denominator == 1000
    assert config.numerators == {0: 0, 1: 25, 2: 50}


def test_fee_config_rejects_zero_denominator(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_fees(monkeypatch, denominator="0")

    with pytest.raises(ConfigurationError, match="must not be zero"):
        get_fee_config()


def test_fee_config_rejects_non_integers(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_fees(monkeypatch)
    monkeypatch.setenv(tier_numerator_var(1), "2.5%")

    with pytest.raises(ConfigurationError, match="integers"):
        get_fee_config()


def test_fee_config_requires_every_tier(monkeypatch: pytest.MonkeyPatch) -> None:
    _set_fees(monkeypatch)
    monkeypatch.delenv(tier_numerator_var(2))

    with pytest.raises(MissingConfigurationError, match="APP_FEE_TIER_2_NUMERATOR"):
        get_fee_config()


def test_int_env_var_defaults_and_validates(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SOME_LIMIT", raising=False)
    assert int_env_var("SOME_LIMIT", 3) == 3

    monkeypatch.setenv("SOME_LIMIT", "12")
    assert int_env_var("SOME_LIMIT", 3) == 12

    monkeypatch.setenv("SOME_LIMIT", "twelve")
    with pytest.raises(ConfigurationError, match="SOME_LIMIT"):
        int_env_var("SOME_LIMIT", 3)


def test_ordering_config_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PICKUP_MAX_DAYS_AHEAD", "3")
    monkeypatch.delenv("PICKUP_DEFAULT_LEAD_MINUTES", raising=False)

    config = get_ordering_config()

    assert config.max_pickup_ahead.days == 3
    assert config.pickup_default_lead_minutes == 10


def test_square_cache_is_off_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SQUARE_HTTP_CACHE", raising=False)
    monkeypatch.delenv("SQUARE_BASE_URL", raising=False)

    config = get_square_config()

    assert config.base_url == SQUARE_BASE_URL
    assert config.resilience.cache is None
    assert config.resilience.ratelimit is not None


def test_square_memory_cache_only_keeps_location_payloads(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("SQUARE_HTTP_CACHE", "memory")

    cache = get_square_config().resilience.cache

    assert cache is not None
    assert cache.backend == "memory"
    assert cache.should_cache is not None
    assert cache.should_cache({"locations": []})
    assert not cache.should_cache({"order": {}})


def test_square_cache_rejects_unknown_backends(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SQUARE_HTTP_CACHE", "redis")

    with pytest.raises(ConfigurationError, match="SQUARE_HTTP_CACHE"):
        get_square_config()
