from __future__ import annotations

import json
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

import pytest

from storefront.domain.catalog_sync import CatalogSyncResult
from storefront.domain.errors import NotFoundError
from storefront.domain.locations import LocationSyncResult
from storefront.ui import cli as cli_module

if TYPE_CHECKING:
    from pathlib import Path


def test_sync_catalog_passes_the_merchant_id(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}
    merchant_id = uuid4()

    def fake_sync(**kwargs: object) -> CatalogSyncResult:
        captured.update(kwargs)
        return CatalogSyncResult()

    monkeypatch.setattr(cli_module, "sync_catalog", fake_sync)

    cli_module.main(["sync-catalog", "--merchant-id", str(merchant_id)])

    assert captured == {"merchant_id": merchant_id}


def test_sync_locations_passes_the_merchant_id(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}
    merchant_id = uuid4()

    def fake_sync(**kwargs: object) -> LocationSyncResult:
        captured.update(kwargs)
        return LocationSyncResult(created=1)

    monkeypatch.setattr(cli_module, "sync_locations", fake_sync)

    cli_module.main(["--log-level", "debug", "sync-locations", "--merchant-id", str(merchant_id)])

    assert isinstance(captured["merchant_id"], UUID)
    assert captured["merchant_id"] == merchant_id


def test_invalid_merchant_id_exits_with_usage_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_sync(**_: object) -> CatalogSyncResult:
        raise AssertionError("sync must not run")

    monkeypatch.setattr(cli_module, "sync_catalog", fake_sync)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["sync-catalog", "--merchant-id", "not-a-uuid"])

    assert excinfo.value.code == 2


def test_domain_failure_exits_with_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_sync(**kwargs: object) -> CatalogSyncResult:
        raise NotFoundError(f"Merchant {kwargs['merchant_id']} not found")

    monkeypatch.setattr(cli_module, "sync_catalog", fake_sync)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["sync-catalog", "--merchant-id", str(uuid4())])

    assert excinfo.value.code == 1


def test_fulfillment_event_reads_the_payload_file(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    received: list[dict[str, object]] = []
    body = {"type": "order.fulfillment.updated", "merchant_id": "M-1", "data": {}}
    source = tmp_path / "webhook.json"
    source.write_text(json.dumps(body), encoding="utf-8")

    def fake_handle(payload: dict[str, object]) -> list[object]:
        received.append(payload)
        return []

    monkeypatch.setattr(cli_module, "handle_fulfillment_webhook", fake_handle)

    cli_module.main(["fulfillment-event", str(source)])

    assert received == [body]


def test_fulfillment_event_rejects_non_object_payloads(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    def fake_handle(payload: dict[str, object]) -> list[object]:
        raise AssertionError(f"unexpected payload {payload}")

    monkeypatch.setattr(cli_module, "handle_fulfillment_webhook", fake_handle)
    source = tmp_path / "webhook.json"
    source.write_text("[1, 2, 3]", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["fulfillment-event", str(source)])

    assert excinfo.value.code == 2


def test_missing_command_is_a_usage_error() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main([])

    assert excinfo.value.code == 2
