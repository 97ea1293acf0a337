"""Copy remote order state onto the local order row."""

from __future__ import annotations

from typing import TYPE_CHECKING

from storefront.domain.model import LineItem, LineItemModifier

if TYPE_CHECKING:
    from storefront.domain.model import Order
    from storefront.domain.ports.platform import RemoteMoney, RemoteOrder


def mirror_remote_order(order: Order, remote: RemoteOrder) -> None:
    """Overwrite identity, version, totals and line items from ``remote``.

    A remote order without a version bumps the local one.
    """

    order.external_id = remote.id
    if remote.version is not None:
        order.external_version = remote.version
    else:
        order.external_version = (order.external_version or 0) + 1

    if remote.total_money is not None and remote.total_money.currency:
        order.currency = remote.total_money.currency
    order.total_amount = _amount(remote.total_money)
    order.tax_amount = _amount(remote.total_tax_money)
    order.discount_amount = _amount(remote.total_discount_money)
    order.tip_amount = _amount(remote.total_tip_money)
    order.service_charge_amount = _amount(remote.total_service_charge_money)

    order.replace_line_items(
        [
            LineItem(
                external_uid=line_item.uid,
                catalog_object_external_id=line_item.catalog_object_id,
                quantity=line_item.quantity,
                note=line_item.note,
                name=line_item.name,
                total_amount=line_item.total_amount,
                modifiers=[
                    LineItemModifier(
                        catalog_object_external_id=modifier.catalog_object_id,
                        name=modifier.name,
                        position=position,
                    )
                    for position, modifier in enumerate(line_item.modifiers)
                ],
            )
            for line_item in remote.line_items
        ]
    )


def _amount(money: RemoteMoney | None) -> int | None:
    return None if money is None else money.amount
