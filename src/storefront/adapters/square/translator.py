"""Translate Square payloads into remote platform types, and order specs into request bodies."""

from __future__ import annotations

from datetime import UTC, time
from logging import getLogger
from typing import TYPE_CHECKING, Any

from storefront.domain.errors import RemoteServiceFailure
from storefront.domain.model import CatalogObjectType, DayOfWeek, FulfillmentStatus, SelectionType
from storefront.domain.ports.platform import (
    RemoteBusinessHoursPeriod,
    RemoteCatalogObject,
    RemoteCategoryData,
    RemoteFulfillment,
    RemoteImageData,
    RemoteItemData,
    RemoteLineItem,
    RemoteLineItemModifier,
    RemoteLocation,
    RemoteLocationOverride,
    RemoteModifierData,
    RemoteModifierListData,
    RemoteModifierListInfo,
    RemoteMoney,
    RemoteOrder,
    RemoteOrderState,
    RemotePayment,
    RemoteVariationData,
)

if TYPE_CHECKING:
    from storefront.domain.ports.platform import (
        LineItemSpec,
        OrderSpec,
        PaymentSpec,
        RemoteCatalogData,
    )

    from .schema import (
        CatalogObjectPayload,
        LocationOverridePayload,
        LocationPayload,
        MoneyPayload,
        OrderPayload,
        PaymentPayload,
    )

log = getLogger(__name__)


def parse_catalog_object(payload: CatalogObjectPayload) -> RemoteCatalogObject | None:
    """Return ``None`` for deleted objects and object types we do not mirror."""

    if payload.is_deleted:
        return None
    try:
        object_type = CatalogObjectType(payload.type)
    except ValueError:
        log.debug("Skipping unsupported catalog object type %s", payload.type)
        return None

    return RemoteCatalogObject(
        id=payload.id,
        type=object_type,
        data=_catalog_data(object_type, payload),
        present_at_all_locations=payload.present_at_all_locations,
        present_at_location_ids=tuple(payload.present_at_location_ids),
        absent_at_location_ids=tuple(payload.absent_at_location_ids),
    )


def _catalog_data(object_type: CatalogObjectType, payload: CatalogObjectPayload) -> RemoteCatalogData:
    match object_type:
        case CatalogObjectType.CATEGORY:
            category = payload.category_data
            return RemoteCategoryData(name=category.name if category else None)
        case CatalogObjectType.ITEM:
            item = _required(payload, payload.item_data, "item_data")
            return RemoteItemData(
                name=item.name,
                description=item.description,
                category_id=item.resolved_category_id,
                modifier_list_info=tuple(
                    RemoteModifierListInfo(
                        modifier_list_id=info.modifier_list_id,
                        min_selected=info.min_selected_modifiers,
                        max_selected=info.max_selected_modifiers,
                        enabled=info.enabled,
                    )
                    for info in item.modifier_list_info
                ),
                image_ids=tuple(item.image_ids),
            )
        case CatalogObjectType.ITEM_VARIATION:
            variation = _required(payload, payload.item_variation_data, "item_variation_data")
            return RemoteVariationData(
                item_id=variation.item_id,
                name=variation.name,
                ordinal=variation.ordinal,
                amount=variation.price_money.amount if variation.price_money else None,
                currency=variation.price_money.currency if variation.price_money else None,
                location_overrides=_overrides(variation.location_overrides),
            )
        case CatalogObjectType.MODIFIER_LIST:
            modifier_list = payload.modifier_list_data
            return RemoteModifierListData(
                name=modifier_list.name if modifier_list else None,
                selection_type=_selection_type(
                    modifier_list.selection_type if modifier_list else None
                ),
            )
        case CatalogObjectType.MODIFIER:
            modifier = _required(payload, payload.modifier_data, "modifier_data")
            return RemoteModifierData(
                modifier_list_id=modifier.modifier_list_id,
                name=modifier.name,
                ordinal=modifier.ordinal,
                amount=modifier.price_money.amount if modifier.price_money else None,
                currency=modifier.price_money.currency if modifier.price_money else None,
                location_overrides=_overrides(modifier.location_overrides),
            )
        case CatalogObjectType.IMAGE:
            image = payload.image_data
            return RemoteImageData(
                name=image.name if image else None,
                url=image.url if image else None,
                caption=image.caption if image else None,
            )


def _required[T](payload: CatalogObjectPayload, value: T | None, field_name: str) -> T:
    if value is None:
        raise RemoteServiceFailure(f"Catalog object {payload.id} ({payload.type}) lacks {field_name}")
    return value


def _overrides(payloads: list[LocationOverridePayload]) -> tuple[RemoteLocationOverride, ...]:
    return tuple(
        RemoteLocationOverride(
            location_id=override.location_id,
            amount=override.price_money.amount if override.price_money else None,
        )
        for override in payloads
    )


def _selection_type(value: str | None) -> SelectionType:
    if value is None:
        return SelectionType.SINGLE
    try:
        return SelectionType(value)
    except ValueError:
        log.warning("Unknown modifier selection type %s; assuming SINGLE", value)
        return SelectionType.SINGLE


def parse_location(payload: LocationPayload) -> RemoteLocation:
    periods: list[RemoteBusinessHoursPeriod] = []
    if payload.business_hours is not None:
        for period in payload.business_hours.periods:
            try:
                periods.append(
                    RemoteBusinessHoursPeriod(
                        day_of_week=DayOfWeek(period.day_of_week),
                        start_local_time=time.fromisoformat(period.start_local_time),
                        end_local_time=time.fromisoformat(period.end_local_time),
                    )
                )
            except ValueError as exc:
                raise RemoteServiceFailure(
                    f"Location {payload.id} has malformed business hours: {exc}"
                ) from exc
    return RemoteLocation(
        id=payload.id,
        name=payload.name,
        timezone=payload.timezone,
        active=payload.status in (None, "ACTIVE"),
        business_hours=tuple(periods),
    )


def _money(payload: MoneyPayload | None) -> RemoteMoney | None:
    if payload is None:
        return None
    return RemoteMoney(amount=payload.amount, currency=payload.currency)


def _order_state(value: str | None) -> RemoteOrderState | None:
    if value is None:
        return None
    try:
        return RemoteOrderState(value)
    except ValueError:
        log.warning("Unknown remote order state %s", value)
        return None


def _fulfillment_state(value: str | None) -> FulfillmentStatus | None:
    if value is None:
        return None
    try:
        return FulfillmentStatus(value)
    except ValueError:
        log.warning("Unknown fulfillment state %s", value)
        return None


def parse_order(payload: OrderPayload) -> RemoteOrder:
    return RemoteOrder(
        id=payload.id,
        location_id=payload.location_id,
        version=payload.version,
        state=_order_state(payload.state),
        line_items=tuple(
            RemoteLineItem(
                uid=line_item.uid,
                catalog_object_id=line_item.catalog_object_id,
                quantity=line_item.quantity,
                note=line_item.note,
                name=line_item.name,
                total_amount=line_item.total_money.amount if line_item.total_money else None,
                base_price_amount=(
                    line_item.base_price_money.amount if line_item.base_price_money else None
                ),
                currency=line_item.base_price_money.currency if line_item.base_price_money else None,
                modifiers=tuple(
                    RemoteLineItemModifier(
                        catalog_object_id=modifier.catalog_object_id,
                        uid=modifier.uid,
                        name=modifier.name,
                    )
                    for modifier in line_item.modifiers
                ),
            )
            for line_item in payload.line_items
        ),
        total_money=_money(payload.total_money),
        total_tax_money=_money(payload.total_tax_money),
        total_discount_money=_money(payload.total_discount_money),
        total_tip_money=_money(payload.total_tip_money),
        total_service_charge_money=_money(payload.total_service_charge_money),
        fulfillments=tuple(
            RemoteFulfillment(uid=fulfillment.uid, state=_fulfillment_state(fulfillment.state))
            for fulfillment in payload.fulfillments
        ),
    )


def parse_payment(payload: PaymentPayload) -> RemotePayment:
    return RemotePayment(
        id=payload.id,
        status=payload.status,
        total_money=_money(payload.total_money),
        tip_money=_money(payload.tip_money),
        app_fee_money=_money(payload.app_fee_money),
    )


# Request bodies --------------------------------------------------------------


def money_body(money: RemoteMoney) -> dict[str, Any]:
    body: dict[str, Any] = {"amount": money.amount}
    if money.currency:
        body["currency"] = money.currency
    return body


def _line_item_body(spec: LineItemSpec) -> dict[str, Any]:
    body: dict[str, Any] = {
        "catalog_object_id": spec.catalog_object_id,
        "quantity": str(spec.quantity),
    }
    if spec.note:
        body["note"] = spec.note
    if spec.base_price_amount is not None:
        body["base_price_money"] = money_body(RemoteMoney(spec.base_price_amount, spec.currency))
    if spec.modifier_ids:
        body["modifiers"] = [{"catalog_object_id": modifier_id} for modifier_id in spec.modifier_ids]
    return body


def order_body(spec: OrderSpec) -> dict[str, Any]:
    body: dict[str, Any] = {
        "location_id": spec.location_id,
        "state": spec.state.value,
        "line_items": [_line_item_body(line_item) for line_item in spec.line_items],
    }
    if spec.customer_id:
        body["customer_id"] = spec.customer_id
    if spec.reference_id:
        body["reference_id"] = spec.reference_id
    if spec.version is not None:
        body["version"] = spec.version
    if spec.fulfillment is not None:
        pickup = spec.fulfillment
        pickup_details: dict[str, Any] = {
            "schedule_type": pickup.schedule_type.value,
            "pickup_at": pickup.pickup_at.astimezone(UTC).isoformat().replace("+00:00", "Z"),
            "recipient": {"customer_id": pickup.recipient_customer_id},
        }
        if pickup.note:
            pickup_details["note"] = pickup.note
        body["fulfillments"] = [
            {"type": "PICKUP", "state": "PROPOSED", "pickup_details": pickup_details}
        ]
    return body


def payment_body(spec: PaymentSpec) -> dict[str, Any]:
    body: dict[str, Any] = {
        "source_id": spec.source_id,
        "idempotency_key": spec.idempotency_key,
        "amount_money": money_body(spec.amount),
        "order_id": spec.order_id,
        "location_id": spec.location_id,
        "autocomplete": True,
    }
    if spec.customer_id:
        body["customer_id"] = spec.customer_id
    if spec.reference_id:
        body["reference_id"] = spec.reference_id
    if spec.tip is not None:
        body["tip_money"] = money_body(spec.tip)
    if spec.app_fee is not None:
        body["app_fee_money"] = money_body(spec.app_fee)
    if spec.note:
        body["note"] = spec.note
    return body
