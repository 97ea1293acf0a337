"""Shared fixtures for Square adapter tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from storefront.adapters.http_resilience import ResilientClient
from storefront.adapters.square.client import SquareCommercePlatform
from storefront.config.http_resilience import ResilienceConfig, RetryPolicy
from storefront.config.square import SquareConfig
from tests.helpers.square import BASE_URL

if TYPE_CHECKING:
    from collections.abc import Callable


@pytest.fixture
def square_config() -> SquareConfig:
    return SquareConfig(
        base_url=BASE_URL,
        api_version="2024-07-17",
        resilience=ResilienceConfig(name="square-test", retry=RetryPolicy(total=0)),
    )


@pytest.fixture
def square_platform(
    square_config: SquareConfig,
) -> Callable[[Callable[[httpx.Request], httpx.Response]], SquareCommercePlatform]:
    def build(handler: Callable[[httpx.Request], httpx.Response]) -> SquareCommercePlatform:
        def client_factory(config: ResilienceConfig) -> ResilientClient:
            return ResilientClient(config, transport=httpx.MockTransport(handler))

        return SquareCommercePlatform(config=square_config, client_factory=client_factory)

    return build
