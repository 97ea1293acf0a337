from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, cast
from uuid import UUID

from dotenv import load_dotenv

from storefront.app import handle_fulfillment_webhook, sync_catalog, sync_locations
from storefront.config import ConfigurationError, configure_logging
from storefront.domain.errors import CommerceError

if TYPE_CHECKING:
    from collections.abc import Sequence

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Mirror and operate a storefront")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level (default: %(default)s)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    locations = subparsers.add_parser("sync-locations", help="Mirror remote locations")
    locations.add_argument("--merchant-id", type=str, required=True, help="Local merchant id")

    catalog = subparsers.add_parser("sync-catalog", help="Reconcile the remote catalog")
    catalog.add_argument("--merchant-id", type=str, required=True, help="Local merchant id")

    fulfillment = subparsers.add_parser(
        "fulfillment-event",
        help="Apply an order.fulfillment.updated webhook body",
    )
    fulfillment.add_argument(
        "payload",
        type=str,
        help="Path to the JSON webhook body, or '-' to read it from stdin",
    )

    return parser.parse_args(list(argv))


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _load_payload(source: str) -> dict[str, Any]:
    try:
        raw = sys.stdin.read() if source == "-" else Path(source).read_text(encoding="utf-8")
        payload = json.loads(raw)
    except (OSError, json.JSONDecodeError) as exc:
        raise ValueError(f"Cannot read webhook payload from {source}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValueError("Webhook payload must be a JSON object")
    return cast(dict[str, Any], payload)


def main(argv: Sequence[str] | None = None) -> None:
    """Command line entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    load_dotenv()
    configure_logging(parsed_args.log_level.upper())

    try:
        merchant_id = (
            _parse_uuid(parsed_args.merchant_id) if hasattr(parsed_args, "merchant_id") else None
        )
        payload = None
        if parsed_args.command == "fulfillment-event":
            payload = _load_payload(parsed_args.payload)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "sync-locations" and merchant_id is not None:
            result = sync_locations(merchant_id=merchant_id)
            log.info("Locations synced: created=%s updated=%s", result.created, result.updated)
        elif parsed_args.command == "sync-catalog" and merchant_id is not None:
            catalog_result = sync_catalog(merchant_id=merchant_id)
            log.info(
                "Catalog synced: %s changes, %s skipped",
                catalog_result.total_changes,
                catalog_result.skipped,
            )
        elif parsed_args.command == "fulfillment-event" and payload is not None:
            reports = handle_fulfillment_webhook(payload)
            for report in reports:
                log.info(
                    "Order %s notified as %s: delivered=%s failed=%s",
                    report.order_id,
                    report.status,
                    report.delivered,
                    report.failed,
                )
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except (CommerceError, ConfigurationError, ValueError):
        log.exception("Command %s failed", parsed_args.command)
        sys.exit(1)
