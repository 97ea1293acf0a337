"""SQLAlchemy mapping metadata for the storefront domain model."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import Any, cast

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    Time,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers, relationship

from storefront.domain.model import (
    AppInstall,
    BusinessHoursPeriod,
    Catalog,
    CatalogImage,
    CatalogObjectType,
    CatalogRecord,
    Category,
    Customer,
    DayOfWeek,
    FulfillmentStatus,
    Item,
    ItemModifierList,
    LineItem,
    LineItemModifier,
    Location,
    LocationOverride,
    Merchant,
    Modifier,
    ModifierList,
    Order,
    SelectionType,
    User,
    Variation,
)

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class UUIDSetType(TypeDecorator[frozenset[uuid.UUID]]):
    """Location id sets stored as a sorted JSON list."""

    impl = Text
    cache_ok = True

    def process_bind_param(
        self, value: frozenset[uuid.UUID] | None, dialect: Dialect
    ) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(sorted(str(item) for item in value))

    def process_result_value(self, value: str | None, dialect: Dialect) -> frozenset[uuid.UUID]:
        _ = dialect
        if value is None:
            return frozenset()
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return frozenset()
        items = cast(list[Any], loaded)
        return frozenset(uuid.UUID(item) for item in items if isinstance(item, str))


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def _id_column() -> Column[uuid.UUID]:
    return Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4)


def _presence_columns() -> list[Column[Any]]:
    return [
        Column("present_at_all_locations", Boolean, nullable=False, default=True),
        Column("present_at_location_ids", UUIDSetType, nullable=False),
        Column("absent_at_location_ids", UUIDSetType, nullable=False),
    ]


# Merchants and people ---------------------------------------------------------

merchant_table = Table(
    "merchant",
    mapper_registry.metadata,
    _id_column(),
    Column("external_id", String, nullable=True, unique=True),
    Column("name", String, nullable=True),
    Column("access_token", String, nullable=True),
    Column("tier", Integer, nullable=True),
    Column("pickup_lead_minutes", Integer, nullable=True),
    Column("app_enabled", Boolean, nullable=False, default=True),
)

user_table = Table(
    "user_account",
    mapper_registry.metadata,
    _id_column(),
    Column("display_name", String, nullable=False),
    Column("email", String, nullable=True),
    Column("phone", String, nullable=True),
)

location_table = Table(
    "location",
    mapper_registry.metadata,
    _id_column(),
    Column("external_id", String, nullable=True),
    Column(
        "merchant_id", UUIDColumnType, ForeignKey("merchant.id", ondelete="CASCADE"), nullable=False
    ),
    Column("name", String, nullable=True),
    Column("timezone", String, nullable=True),
    Column("enabled", Boolean, nullable=False, default=True),
    Column("is_main", Boolean, nullable=False, default=False),
    UniqueConstraint("merchant_id", "external_id", name="uq_location_merchant_external_id"),
)

business_hours_period_table = Table(
    "business_hours_period",
    mapper_registry.metadata,
    _id_column(),
    Column(
        "location_id", UUIDColumnType, ForeignKey("location.id", ondelete="CASCADE"), nullable=False
    ),
    Column("day_of_week", Enum(DayOfWeek, native_enum=False), nullable=False),
    Column("start_local_time", Time, nullable=False),
    Column("end_local_time", Time, nullable=False),
    Column("position", Integer, nullable=False, default=0),
)

customer_table = Table(
    "customer",
    mapper_registry.metadata,
    _id_column(),
    Column("external_id", String, nullable=True),
    Column(
        "merchant_id", UUIDColumnType, ForeignKey("merchant.id", ondelete="CASCADE"), nullable=False
    ),
    Column(
        "user_id", UUIDColumnType, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False
    ),
    Column(
        "preferred_location_id",
        UUIDColumnType,
        ForeignKey("location.id", ondelete="SET NULL"),
        nullable=True,
    ),
    # no foreign key: customer and order reference each other
    Column("current_order_id", UUIDColumnType, nullable=True, unique=True),
    UniqueConstraint("merchant_id", "user_id", name="uq_customer_merchant_user"),
)

app_install_table = Table(
    "app_install",
    mapper_registry.metadata,
    _id_column(),
    Column(
        "customer_id", UUIDColumnType, ForeignKey("customer.id", ondelete="CASCADE"), nullable=False
    ),
    Column("push_token", String, nullable=True),
)

# Catalog ------------------------------------------------------------------------

catalog_table = Table(
    "catalog",
    mapper_registry.metadata,
    _id_column(),
    Column(
        "merchant_id",
        UUIDColumnType,
        ForeignKey("merchant.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    ),
)


def _parent_key(target: str) -> ForeignKey:
    # checked at commit: a sync pass deletes a parent before re-parenting its surviving children
    return ForeignKey(target, deferrable=True, initially="DEFERRED")


def _catalog_columns() -> list[Column[Any]]:
    # external ids are indexed but not unique: duplicate remote ids are mirrored as created
    return [
        _id_column(),
        Column("external_id", String, nullable=True),
        Column(
            "catalog_id",
            UUIDColumnType,
            ForeignKey("catalog.id", ondelete="CASCADE"),
            nullable=False,
        ),
    ]


category_table = Table(
    "catalog_category",
    mapper_registry.metadata,
    *_catalog_columns(),
    Column("name", String, nullable=True),
    Column("ordinal", Integer, nullable=False, default=0),
    Column("enabled", Boolean, nullable=False, default=True),
    Index("ix_catalog_category_lookup", "catalog_id", "external_id"),
)

item_table = Table(
    "catalog_item",
    mapper_registry.metadata,
    *_catalog_columns(),
    Column(
        "category_id",
        UUIDColumnType,
        _parent_key("catalog_category.id"),
        nullable=False,
    ),
    Column("name", String, nullable=True),
    Column("description", Text, nullable=True),
    Column("ordinal", Integer, nullable=False, default=0),
    Column("enabled", Boolean, nullable=False, default=True),
    *_presence_columns(),
    Index("ix_catalog_item_lookup", "catalog_id", "external_id"),
)

variation_table = Table(
    "catalog_variation",
    mapper_registry.metadata,
    *_catalog_columns(),
    Column("item_id", UUIDColumnType, _parent_key("catalog_item.id"), nullable=False),
    Column("name", String, nullable=True),
    Column("ordinal", Integer, nullable=True),
    Column("base_amount", Integer, nullable=False, default=0),
    Column("currency", String(3), nullable=True),
    Column("enabled", Boolean, nullable=False, default=True),
    Index("ix_catalog_variation_lookup", "catalog_id", "external_id"),
)

modifier_list_table = Table(
    "catalog_modifier_list",
    mapper_registry.metadata,
    *_catalog_columns(),
    Column("name", String, nullable=True),
    Column("selection_type", Enum(SelectionType, native_enum=False), nullable=False),
    Column("enabled", Boolean, nullable=False, default=True),
    Index("ix_catalog_modifier_list_lookup", "catalog_id", "external_id"),
)

modifier_table = Table(
    "catalog_modifier",
    mapper_registry.metadata,
    *_catalog_columns(),
    Column(
        "modifier_list_id",
        UUIDColumnType,
        _parent_key("catalog_modifier_list.id"),
        nullable=False,
    ),
    Column("name", String, nullable=True),
    Column("ordinal", Integer, nullable=True),
    Column("base_amount", Integer, nullable=False, default=0),
    Column("currency", String(3), nullable=True),
    *_presence_columns(),
    Index("ix_catalog_modifier_lookup", "catalog_id", "external_id"),
)

image_table = Table(
    "catalog_image",
    mapper_registry.metadata,
    *_catalog_columns(),
    Column("owner_type", Enum(CatalogObjectType, native_enum=False), nullable=False),
    Column("owner_id", UUIDColumnType, nullable=False),
    Column("name", String, nullable=True),
    Column("url", String, nullable=True),
    Column("caption", Text, nullable=True),
    Index("ix_catalog_image_lookup", "catalog_id", "external_id"),
    Index("ix_catalog_image_owner", "owner_type", "owner_id"),
)

item_modifier_list_table = Table(
    "item_modifier_list",
    mapper_registry.metadata,
    _id_column(),
    Column(
        "item_id", UUIDColumnType, ForeignKey("catalog_item.id", ondelete="CASCADE"), nullable=False
    ),
    Column(
        "modifier_list_id",
        UUIDColumnType,
        ForeignKey("catalog_modifier_list.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("min_selected", Integer, nullable=True),
    Column("max_selected", Integer, nullable=True),
    Column("enabled", Boolean, nullable=False, default=True),
)

location_override_table = Table(
    "location_override",
    mapper_registry.metadata,
    _id_column(),
    Column("owner_type", Enum(CatalogObjectType, native_enum=False), nullable=False),
    Column("owner_id", UUIDColumnType, nullable=False),
    Column(
        "location_id",
        UUIDColumnType,
        ForeignKey("location.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("amount", Integer, nullable=True),
    UniqueConstraint("owner_type", "owner_id", "location_id", name="uq_location_override_owner"),
    Index("ix_location_override_owner", "owner_type", "owner_id"),
)

# Orders -------------------------------------------------------------------------

order_table = Table(
    "customer_order",
    mapper_registry.metadata,
    _id_column(),
    Column("external_id", String, nullable=True, unique=True),
    Column(
        "customer_id", UUIDColumnType, ForeignKey("customer.id", ondelete="CASCADE"), nullable=False
    ),
    Column(
        "merchant_id", UUIDColumnType, ForeignKey("merchant.id", ondelete="CASCADE"), nullable=False
    ),
    Column("location_id", UUIDColumnType, ForeignKey("location.id"), nullable=False),
    Column("external_version", Integer, nullable=True),
    Column("currency", String(3), nullable=True),
    Column("total_amount", Integer, nullable=True),
    Column("tax_amount", Integer, nullable=True),
    Column("discount_amount", Integer, nullable=True),
    Column("tip_amount", Integer, nullable=True),
    Column("service_charge_amount", Integer, nullable=True),
    Column("app_fee_amount", Integer, nullable=True),
    Column("fulfillment_status", Enum(FulfillmentStatus, native_enum=False), nullable=True),
    Column("pickup_at", UTCDateTime(), nullable=True),
    Column("closed_at", UTCDateTime(), nullable=True),
)

line_item_table = Table(
    "line_item",
    mapper_registry.metadata,
    _id_column(),
    Column(
        "order_id",
        UUIDColumnType,
        ForeignKey("customer_order.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("external_uid", String, nullable=True),
    Column("catalog_object_external_id", String, nullable=True),
    Column("quantity", Integer, nullable=False, default=1),
    Column("note", Text, nullable=True),
    Column("name", String, nullable=True),
    Column("total_amount", Integer, nullable=True),
    Column("position", Integer, nullable=False, default=0),
)

line_item_modifier_table = Table(
    "line_item_modifier",
    mapper_registry.metadata,
    _id_column(),
    Column(
        "line_item_id",
        UUIDColumnType,
        ForeignKey("line_item.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("catalog_object_external_id", String, nullable=True),
    Column("name", String, nullable=True),
    Column("position", Integer, nullable=False, default=0),
)

RECORD_TABLES: dict[type[CatalogRecord], Table] = {
    Category: category_table,
    Item: item_table,
    Variation: variation_table,
    ModifierList: modifier_list_table,
    Modifier: modifier_table,
    CatalogImage: image_table,
}


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Merchant, merchant_table)
    mapper_registry.map_imperatively(User, user_table)
    mapper_registry.map_imperatively(Customer, customer_table)
    mapper_registry.map_imperatively(AppInstall, app_install_table)

    mapper_registry.map_imperatively(BusinessHoursPeriod, business_hours_period_table)
    mapper_registry.map_imperatively(
        Location,
        location_table,
        properties={
            "business_hours": relationship(
                BusinessHoursPeriod,
                order_by=business_hours_period_table.c.position,
                cascade="all, delete-orphan",
                lazy="selectin",
            ),
        },
    )

    mapper_registry.map_imperatively(Catalog, catalog_table)
    for record_type, table in RECORD_TABLES.items():
        mapper_registry.map_imperatively(record_type, table)
    mapper_registry.map_imperatively(ItemModifierList, item_modifier_list_table)
    mapper_registry.map_imperatively(LocationOverride, location_override_table)

    mapper_registry.map_imperatively(LineItemModifier, line_item_modifier_table)
    mapper_registry.map_imperatively(
        LineItem,
        line_item_table,
        properties={
            "modifiers": relationship(
                LineItemModifier,
                order_by=line_item_modifier_table.c.position,
                cascade="all, delete-orphan",
                lazy="selectin",
            ),
        },
    )
    mapper_registry.map_imperatively(
        Order,
        order_table,
        properties={
            "line_items": relationship(
                LineItem,
                order_by=line_item_table.c.position,
                cascade="all, delete-orphan",
                lazy="selectin",
            ),
        },
    )

    configure_mappers()
    return mapper_registry
