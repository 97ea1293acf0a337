"""HTTP client for the Square commerce API."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import httpx
from pydantic import BaseModel, ValidationError

from storefront.adapters.http_resilience import ResilientClient
from storefront.config.square import SquareConfig, get_square_config
from storefront.domain.errors import RemoteServiceFailure
from storefront.domain.ports.platform import CommercePlatform, RemoteOrderState

from .schema import (
    ErrorResponse,
    ListCatalogResponse,
    ListLocationsResponse,
    OrderResponse,
    PaymentResponse,
    RetrieveLocationResponse,
)
from .translator import (
    order_body,
    parse_catalog_object,
    parse_location,
    parse_order,
    parse_payment,
    payment_body,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from storefront.config.http_resilience import ResilienceConfig
    from storefront.domain.model import CatalogObjectType
    from storefront.domain.ports.platform import (
        OrderSpec,
        PaymentSpec,
        RemoteCatalogObject,
        RemoteLocation,
        RemoteOrder,
        RemotePayment,
    )

log = getLogger(__name__)


def _new_idempotency_key() -> str:
    # fixed per call so a retried request replays the same key
    return str(uuid4())


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class SquareCommercePlatform:
    """``CommercePlatform`` backed by the Square REST API.

    Every call opens its own resilient client; catalog listing follows the
    cursor until the last page.
    """

    config: SquareConfig = field(default_factory=get_square_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    async def list_catalog_objects(
        self, access_token: str, object_type: CatalogObjectType
    ) -> list[RemoteCatalogObject]:
        objects: list[RemoteCatalogObject] = []
        cursor: str | None = None
        async with self.client_factory(self.config.resilience) as client:
            while True:
                params: dict[str, str] = {"types": object_type.value}
                if cursor:
                    params["cursor"] = cursor
                page = await self._perform(
                    client,
                    "GET",
                    "/v2/catalog/list",
                    access_token=access_token,
                    params=params,
                    model=ListCatalogResponse,
                )
                for payload in page.objects:
                    remote = parse_catalog_object(payload)
                    if remote is not None and remote.type == object_type:
                        objects.append(remote)
                cursor = page.cursor
                if not cursor:
                    break
        log.debug("Listed %d remote %s objects", len(objects), object_type)
        return objects

    async def list_locations(self, access_token: str) -> list[RemoteLocation]:
        async with self.client_factory(self.config.resilience) as client:
            response = await self._perform(
                client,
                "GET",
                "/v2/locations",
                access_token=access_token,
                model=ListLocationsResponse,
            )
        return [parse_location(payload) for payload in response.locations]

    async def retrieve_location(self, access_token: str, location_id: str) -> RemoteLocation:
        async with self.client_factory(self.config.resilience) as client:
            response = await self._perform(
                client,
                "GET",
                f"/v2/locations/{location_id}",
                access_token=access_token,
                model=RetrieveLocationResponse,
            )
        return parse_location(response.location)

    async def create_order(
        self, access_token: str, spec: OrderSpec, *, idempotency_key: str | None = None
    ) -> RemoteOrder:
        body: dict[str, Any] = {"order": order_body(spec)}
        body["idempotency_key"] = idempotency_key or _new_idempotency_key()
        return await self._order_call("POST", "/v2/orders", access_token=access_token, body=body)

    async def retrieve_order(self, access_token: str, order_id: str) -> RemoteOrder:
        return await self._order_call("GET", f"/v2/orders/{order_id}", access_token=access_token)

    async def update_order(
        self,
        access_token: str,
        order_id: str,
        spec: OrderSpec,
        *,
        idempotency_key: str | None = None,
    ) -> RemoteOrder:
        # line items are replaced wholesale, so the old ones are cleared in the same request
        body: dict[str, Any] = {"order": order_body(spec), "fields_to_clear": ["line_items"]}
        body["idempotency_key"] = idempotency_key or _new_idempotency_key()
        return await self._order_call(
            "PUT", f"/v2/orders/{order_id}", access_token=access_token, body=body
        )

    async def clear_order_fields(
        self,
        access_token: str,
        order_id: str,
        *,
        location_id: str,
        version: int | None,
        field_paths: tuple[str, ...],
    ) -> RemoteOrder:
        order: dict[str, Any] = {"location_id": location_id}
        if version is not None:
            order["version"] = version
        body = {"order": order, "fields_to_clear": list(field_paths)}
        return await self._order_call(
            "PUT", f"/v2/orders/{order_id}", access_token=access_token, body=body
        )

    async def cancel_order(
        self,
        access_token: str,
        order_id: str,
        *,
        location_id: str,
        version: int | None,
        idempotency_key: str | None = None,
    ) -> RemoteOrder:
        order: dict[str, Any] = {
            "location_id": location_id,
            "state": RemoteOrderState.CANCELED.value,
        }
        if version is not None:
            order["version"] = version
        body = {"order": order, "idempotency_key": idempotency_key or _new_idempotency_key()}
        return await self._order_call(
            "PUT", f"/v2/orders/{order_id}", access_token=access_token, body=body
        )

    async def create_payment(self, access_token: str, spec: PaymentSpec) -> RemotePayment:
        async with self.client_factory(self.config.resilience) as client:
            response = await self._perform(
                client,
                "POST",
                "/v2/payments",
                access_token=access_token,
                body=payment_body(spec),
                model=PaymentResponse,
            )
        return parse_payment(response.payment)

    async def _order_call(
        self,
        method: str,
        path: str,
        *,
        access_token: str,
        body: dict[str, Any] | None = None,
    ) -> RemoteOrder:
        async with self.client_factory(self.config.resilience) as client:
            response = await self._perform(
                client, method, path, access_token=access_token, body=body, model=OrderResponse
            )
        return parse_order(response.order)

    async def _perform[TModel: BaseModel](
        self,
        client: ResilientClient,
        method: str,
        path: str,
        *,
        access_token: str,
        model: type[TModel],
        params: dict[str, str] | None = None,
        body: dict[str, Any] | None = None,
    ) -> TModel:
        url = f"{self.config.base_url.rstrip('/')}{path}"
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Square-Version": self.config.api_version,
            "Accept": "application/json",
        }
        try:
            response = await client.request(method, url, params=params, json=body, headers=headers)
        except httpx.TimeoutException as exc:
            raise RemoteServiceFailure(f"Square {method} {path} timed out") from exc
        except httpx.HTTPError as exc:
            raise RemoteServiceFailure(f"Square {method} {path} failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise RemoteServiceFailure(
                f"Square {method} {path} returned a non-JSON body", status=response.status_code
            ) from exc

        if response.is_error:
            raise _error_from_payload(method, path, response.status_code, payload)

        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise RemoteServiceFailure(
                f"Unexpected Square payload for {method} {path}", status=response.status_code
            ) from exc


def _error_from_payload(method: str, path: str, status: int, payload: object) -> RemoteServiceFailure:
    errors = ErrorResponse.model_validate(payload).errors if isinstance(payload, dict) else []
    first = errors[0] if errors else None
    code = first.code if first else None
    detail = first.detail if first and first.detail else f"HTTP {status}"
    log.error("Square API error on %s %s: %s (%s)", method, path, detail, code)
    return RemoteServiceFailure(detail, code=code, status=status)


if TYPE_CHECKING:
    _platform_check: CommercePlatform = SquareCommercePlatform()
