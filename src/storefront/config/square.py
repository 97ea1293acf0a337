"""Remote commerce platform (Square API) configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import cast

from .errors import ConfigurationError
from .http_resilience import CacheBackend, CacheConfig, RateLimit, ResilienceConfig, ShouldCacheHook

SQUARE_BASE_URL = "https://connect.squareup.com"
SQUARE_API_VERSION = "2024-07-17"
SQUARE_TIMEOUT_SECONDS = 20.0
CACHE_BACKENDS = ("sqlite", "memory")


@dataclass(frozen=True)
class SquareConfig:
    """Holds remote platform configuration values."""

    base_url: str
    api_version: str
    resilience: ResilienceConfig


def _is_location_payload(payload: object) -> bool:
    return isinstance(payload, dict) and ("location" in payload or "locations" in payload)


def _cache_from_env(cache_predicate: ShouldCacheHook | None) -> CacheConfig | None:
    backend = os.getenv("SQUARE_HTTP_CACHE", "off").strip().lower()
    if backend in {"", "off", "none"}:
        return None
    if backend not in CACHE_BACKENDS:
        raise ConfigurationError(f"SQUARE_HTTP_CACHE must be one of off, sqlite, memory; got {backend}")
    return CacheConfig(
        backend=cast(CacheBackend, backend),
        default_ttl_seconds=300.0,
        should_cache=cache_predicate or _is_location_payload,
    )


def get_square_config(
    *,
    resilience: ResilienceConfig | None = None,
    cache_predicate: ShouldCacheHook | None = None,
) -> SquareConfig:
    base_url = os.getenv("SQUARE_BASE_URL") or SQUARE_BASE_URL
    return SquareConfig(
        base_url=base_url,
        api_version=os.getenv("SQUARE_API_VERSION") or SQUARE_API_VERSION,
        resilience=resilience
        or ResilienceConfig(
            name="square",
            base_url=base_url,
            timeout_seconds=SQUARE_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            cache=_cache_from_env(cache_predicate),
        ),
    )
