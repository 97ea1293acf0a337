"""Initial storefront schema.

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

CATALOG_OBJECT_TYPES = ("CATEGORY", "ITEM", "ITEM_VARIATION", "MODIFIER_LIST", "MODIFIER", "IMAGE")
FULFILLMENT_STATUSES = ("PROPOSED", "RESERVED", "PREPARED", "COMPLETED", "CANCELED", "FAILED")


def _id() -> sa.Column[object]:
    return sa.Column("id", sa.Uuid(), primary_key=True)


def _owner(target: str, **fk_options: str) -> sa.Column[object]:
    column_name = f"{target.split('.')[0]}_id"
    return sa.Column(column_name, sa.Uuid(), sa.ForeignKey(target, **fk_options), nullable=False)


def _catalog_columns() -> list[sa.Column[object]]:
    return [
        _id(),
        sa.Column("external_id", sa.String(), nullable=True),
        sa.Column(
            "catalog_id", sa.Uuid(), sa.ForeignKey("catalog.id", ondelete="CASCADE"), nullable=False
        ),
    ]


def _parent(column_name: str, target: str) -> sa.Column[object]:
    # checked at commit so a sync pass can re-parent children of a deleted row
    return sa.Column(
        column_name,
        sa.Uuid(),
        sa.ForeignKey(target, deferrable=True, initially="DEFERRED"),
        nullable=False,
    )


def _presence_columns() -> list[sa.Column[object]]:
    return [
        sa.Column("present_at_all_locations", sa.Boolean(), nullable=False),
        sa.Column("present_at_location_ids", sa.Text(), nullable=False),
        sa.Column("absent_at_location_ids", sa.Text(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "merchant",
        _id(),
        sa.Column("external_id", sa.String(), nullable=True, unique=True),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("access_token", sa.String(), nullable=True),
        sa.Column("tier", sa.Integer(), nullable=True),
        sa.Column("pickup_lead_minutes", sa.Integer(), nullable=True),
        sa.Column("app_enabled", sa.Boolean(), nullable=False),
    )
    op.create_table(
        "user_account",
        _id(),
        sa.Column("display_name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
    )
    op.create_table(
        "location",
        _id(),
        sa.Column("external_id", sa.String(), nullable=True),
        _owner("merchant.id", ondelete="CASCADE"),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("timezone", sa.String(), nullable=True),
        sa.Column("enabled", sa.Boolean(), nullable=False),
        sa.Column("is_main", sa.Boolean(), nullable=False),
        sa.UniqueConstraint("merchant_id", "external_id", name="uq_location_merchant_external_id"),
    )
    op.create_table(
        "business_hours_period",
        _id(),
        _owner("location.id", ondelete="CASCADE"),
        sa.Column(
            "day_of_week",
            sa.Enum("MON", "TUE", "WED", "THU", "FRI", "SAT", "SUN", native_enum=False),
            nullable=False,
        ),
        sa.Column("start_local_time", sa.Time(), nullable=False),
        sa.Column("end_local_time", sa.Time(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
    )
    op.create_table(
        "customer",
        _id(),
        sa.Column("external_id", sa.String(), nullable=True),
        _owner("merchant.id", ondelete="CASCADE"),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("user_account.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "preferred_location_id",
            sa.Uuid(),
            sa.ForeignKey("location.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("current_order_id", sa.Uuid(), nullable=True, unique=True),
        sa.UniqueConstraint("merchant_id", "user_id", name="uq_customer_merchant_user"),
    )
    op.create_table(
        "app_install",
        _id(),
        _owner("customer.id", ondelete="CASCADE"),
        sa.Column("push_token", sa.String(), nullable=True),
    )

    op.create_table(
        "catalog",
        _id(),
        sa.Column(
            "merchant_id",
            sa.Uuid(),
            sa.ForeignKey("merchant.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
    )
    op.create_table(
        "catalog_category",
        *_catalog_columns(),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("ordinal", sa.Integer(), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False),
    )
    op.create_table(
        "catalog_item",
        *_catalog_columns(),
        _parent("category_id", "catalog_category.id"),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("ordinal", sa.Integer(), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False),
        *_presence_columns(),
    )
    op.create_table(
        "catalog_variation",
        *_catalog_columns(),
        _parent("item_id", "catalog_item.id"),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("ordinal", sa.Integer(), nullable=True),
        sa.Column("base_amount", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(3), nullable=True),
        sa.Column("enabled", sa.Boolean(), nullable=False),
    )
    op.create_table(
        "catalog_modifier_list",
        *_catalog_columns(),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("selection_type", sa.Enum("SINGLE", "MULTIPLE", native_enum=False), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False),
    )
    op.create_table(
        "catalog_modifier",
        *_catalog_columns(),
        _parent("modifier_list_id", "catalog_modifier_list.id"),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("ordinal", sa.Integer(), nullable=True),
        sa.Column("base_amount", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(3), nullable=True),
        *_presence_columns(),
    )
    op.create_table(
        "catalog_image",
        *_catalog_columns(),
        sa.Column("owner_type", sa.Enum(*CATALOG_OBJECT_TYPES, native_enum=False), nullable=False),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("url", sa.String(), nullable=True),
        sa.Column("caption", sa.Text(), nullable=True),
    )
    for table in (
        "catalog_category",
        "catalog_item",
        "catalog_variation",
        "catalog_modifier_list",
        "catalog_modifier",
        "catalog_image",
    ):
        op.create_index(f"ix_{table}_lookup", table, ["catalog_id", "external_id"])
    op.create_index("ix_catalog_image_owner", "catalog_image", ["owner_type", "owner_id"])

    op.create_table(
        "item_modifier_list",
        _id(),
        sa.Column(
            "item_id",
            sa.Uuid(),
            sa.ForeignKey("catalog_item.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "modifier_list_id",
            sa.Uuid(),
            sa.ForeignKey("catalog_modifier_list.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("min_selected", sa.Integer(), nullable=True),
        sa.Column("max_selected", sa.Integer(), nullable=True),
        sa.Column("enabled", sa.Boolean(), nullable=False),
    )
    op.create_table(
        "location_override",
        _id(),
        sa.Column("owner_type", sa.Enum(*CATALOG_OBJECT_TYPES, native_enum=False), nullable=False),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        _owner("location.id", ondelete="CASCADE"),
        sa.Column("amount", sa.Integer(), nullable=True),
        sa.UniqueConstraint(
            "owner_type", "owner_id", "location_id", name="uq_location_override_owner"
        ),
    )
    op.create_index("ix_location_override_owner", "location_override", ["owner_type", "owner_id"])

    op.create_table(
        "customer_order",
        _id(),
        sa.Column("external_id", sa.String(), nullable=True, unique=True),
        _owner("customer.id", ondelete="CASCADE"),
        _owner("merchant.id", ondelete="CASCADE"),
        _owner("location.id"),
        sa.Column("external_version", sa.Integer(), nullable=True),
        sa.Column("currency", sa.String(3), nullable=True),
        sa.Column("total_amount", sa.Integer(), nullable=True),
        sa.Column("tax_amount", sa.Integer(), nullable=True),
        sa.Column("discount_amount", sa.Integer(), nullable=True),
        sa.Column("tip_amount", sa.Integer(), nullable=True),
        sa.Column("service_charge_amount", sa.Integer(), nullable=True),
        sa.Column("app_fee_amount", sa.Integer(), nullable=True),
        sa.Column(
            "fulfillment_status",
            sa.Enum(*FULFILLMENT_STATUSES, native_enum=False),
            nullable=True,
        ),
        sa.Column("pickup_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_table(
        "line_item",
        _id(),
        sa.Column(
            "order_id",
            sa.Uuid(),
            sa.ForeignKey("customer_order.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("external_uid", sa.String(), nullable=True),
        sa.Column("catalog_object_external_id", sa.String(), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("total_amount", sa.Integer(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False),
    )
    op.create_table(
        "line_item_modifier",
        _id(),
        _owner("line_item.id", ondelete="CASCADE"),
        sa.Column("catalog_object_external_id", sa.String(), nullable=True),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("line_item_modifier")
    op.drop_table("line_item")
    op.drop_table("customer_order")
    op.drop_index("ix_location_override_owner", table_name="location_override")
    op.drop_table("location_override")
    op.drop_table("item_modifier_list")
    op.drop_index("ix_catalog_image_owner", table_name="catalog_image")
    for table in (
        "catalog_image",
        "catalog_modifier",
        "catalog_modifier_list",
        "catalog_variation",
        "catalog_item",
        "catalog_category",
    ):
        op.drop_index(f"ix_{table}_lookup", table_name=table)
        op.drop_table(table)
    op.drop_table("catalog")
    op.drop_table("app_install")
    op.drop_table("customer")
    op.drop_table("business_hours_period")
    op.drop_table("location")
    op.drop_table("user_account")
    op.drop_table("merchant")
