"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from storefront.adapters.sqlalchemy.mappings import (
    RECORD_TABLES,
    app_install_table,
    catalog_table,
    image_table,
    item_modifier_list_table,
    item_table,
    location_override_table,
    location_table,
    modifier_table,
    order_table,
    variation_table,
)
from storefront.domain.errors import PersistenceFailure
from storefront.domain.model import (
    AppInstall,
    Catalog,
    CatalogImage,
    CatalogObjectType,
    Category,
    Customer,
    Item,
    ItemModifierList,
    Location,
    LocationOverride,
    Merchant,
    Modifier,
    ModifierList,
    Order,
    User,
    Variation,
)

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence
    from uuid import UUID

    from sqlalchemy import Table
    from sqlalchemy.orm import Session

    from storefront.domain.model import CatalogRecord


class SqlAlchemyRepository[TEntity]:
    """Shared ``add``/``get`` for repositories keyed by internal id."""

    def __init__(self, session: Session, entity_cls: type[TEntity]) -> None:
        self.session = session
        self._entity_cls = entity_cls

    def add(self, entity: TEntity) -> None:
        self.session.add(entity)

    def get(self, entity_id: UUID) -> TEntity | None:
        return self.session.get(self._entity_cls, entity_id)


class SqlAlchemyMerchantRepository(SqlAlchemyRepository[Merchant]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Merchant)


class SqlAlchemyUserRepository(SqlAlchemyRepository[User]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, User)


class SqlAlchemyCustomerRepository(SqlAlchemyRepository[Customer]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Customer)

    def app_installs(self, customer_id: UUID) -> list[AppInstall]:
        stmt = select(AppInstall).where(app_install_table.c.customer_id == customer_id)
        return list(self.session.scalars(stmt))

    def add_app_install(self, install: AppInstall) -> None:
        self.session.add(install)


class SqlAlchemyLocationRepository(SqlAlchemyRepository[Location]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Location)

    def list_for_merchant(self, merchant_id: UUID) -> list[Location]:
        stmt = (
            select(Location)
            .where(location_table.c.merchant_id == merchant_id)
            .order_by(location_table.c.name)
        )
        return list(self.session.scalars(stmt))

    def find_by_external_id(self, merchant_id: UUID, external_id: str) -> Location | None:
        stmt = (
            select(Location)
            .where(location_table.c.merchant_id == merchant_id)
            .where(location_table.c.external_id == external_id)
        )
        return self.session.scalars(stmt).one_or_none()

    def main_for_merchant(self, merchant_id: UUID) -> Location | None:
        stmt = (
            select(Location)
            .where(location_table.c.merchant_id == merchant_id)
            .where(location_table.c.is_main.is_(True))
            .limit(1)
        )
        return self.session.scalars(stmt).first()


class SqlAlchemyOrderRepository(SqlAlchemyRepository[Order]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Order)

    def find_by_external_id(self, external_id: str) -> Order | None:
        stmt = select(Order).where(order_table.c.external_id == external_id)
        return self.session.scalars(stmt).one_or_none()

    def remove(self, order: Order) -> None:
        self.session.delete(order)


class SqlAlchemyCatalogRepository:
    """One merchant catalog and every record it owns.

    Catalog records only reference each other by id, so cascading removal is
    done here: children are deleted and flushed before their parents.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_for_merchant(self, merchant_id: UUID) -> Catalog | None:
        stmt = select(Catalog).where(catalog_table.c.merchant_id == merchant_id)
        return self.session.scalars(stmt).one_or_none()

    def add(self, catalog: Catalog) -> None:
        self.session.add(catalog)

    def list_records[T: CatalogRecord](self, catalog_id: UUID, record_type: type[T]) -> list[T]:
        table = _table_for(record_type)
        stmt = select(record_type).where(table.c.catalog_id == catalog_id)
        if "ordinal" in table.c:
            stmt = stmt.order_by(table.c.ordinal)
        return list(self.session.scalars(stmt.order_by(table.c.name)))

    def find_by_external_id[T: CatalogRecord](
        self, catalog_id: UUID, record_type: type[T], external_id: str
    ) -> T | None:
        table = _table_for(record_type)
        stmt = (
            select(record_type)
            .where(table.c.catalog_id == catalog_id)
            .where(table.c.external_id == external_id)
            .limit(1)
        )
        return self.session.scalars(stmt).first()

    def get_record[T: CatalogRecord](self, record_type: type[T], record_id: UUID) -> T | None:
        return self.session.get(record_type, record_id)

    def add_record(self, record: CatalogRecord) -> None:
        self.session.add(record)

    def remove_records[T: CatalogRecord](
        self, record_type: type[T], records: Sequence[T], *, keep: Collection[str] = ()
    ) -> int:
        removed = 0
        for record in records:
            self._remove_owned(record, keep)
            self.session.delete(record)
            removed += 1
        self.session.flush()
        return removed

    def item_modifier_lists(self, item_id: UUID) -> list[ItemModifierList]:
        stmt = select(ItemModifierList).where(item_modifier_list_table.c.item_id == item_id)
        return list(self.session.scalars(stmt))

    def replace_item_modifier_lists(self, item_id: UUID, rows: Sequence[ItemModifierList]) -> None:
        for current in self.item_modifier_lists(item_id):
            self.session.delete(current)
        self.session.flush()
        for row in rows:
            row.item_id = item_id
            self.session.add(row)

    def location_overrides(
        self, owner_type: CatalogObjectType, owner_id: UUID
    ) -> list[LocationOverride]:
        stmt = (
            select(LocationOverride)
            .where(location_override_table.c.owner_type == owner_type)
            .where(location_override_table.c.owner_id == owner_id)
        )
        return list(self.session.scalars(stmt))

    def replace_location_overrides(
        self,
        owner_type: CatalogObjectType,
        owner_id: UUID,
        rows: Sequence[LocationOverride],
    ) -> None:
        current = self.location_overrides(owner_type, owner_id)
        try:
            with self.session.begin_nested():
                for row in current:
                    self.session.delete(row)
                self.session.flush()
                for row in rows:
                    self.session.add(row)
        except SQLAlchemyError as exc:
            raise PersistenceFailure(
                f"Could not replace location overrides of {owner_type} {owner_id}: {exc}"
            ) from exc

    def images_for(self, owner_type: CatalogObjectType, owner_id: UUID) -> list[CatalogImage]:
        stmt = (
            select(CatalogImage)
            .where(image_table.c.owner_type == owner_type)
            .where(image_table.c.owner_id == owner_id)
        )
        return list(self.session.scalars(stmt))

    # Cascades ------------------------------------------------------------------

    def _remove_owned(self, record: CatalogRecord, keep: Collection[str]) -> None:
        match record:
            case Category():
                items = self.session.scalars(
                    select(Item).where(item_table.c.category_id == record.id)
                ).all()
                self.remove_records(Item, _dropped(items, keep), keep=keep)
                self._remove_images(CatalogObjectType.CATEGORY, record.id)
            case Item():
                variations = self.session.scalars(
                    select(Variation).where(variation_table.c.item_id == record.id)
                ).all()
                self.remove_records(Variation, _dropped(variations, keep), keep=keep)
                for row in self.item_modifier_lists(record.id):
                    self.session.delete(row)
                self._remove_images(CatalogObjectType.ITEM, record.id)
            case Variation():
                self._remove_overrides(CatalogObjectType.ITEM_VARIATION, record.id)
                self._remove_images(CatalogObjectType.ITEM_VARIATION, record.id)
            case ModifierList():
                modifiers = self.session.scalars(
                    select(Modifier).where(modifier_table.c.modifier_list_id == record.id)
                ).all()
                self.remove_records(Modifier, _dropped(modifiers, keep), keep=keep)
                links = self.session.scalars(
                    select(ItemModifierList).where(
                        item_modifier_list_table.c.modifier_list_id == record.id
                    )
                ).all()
                for row in links:
                    self.session.delete(row)
                self._remove_images(CatalogObjectType.MODIFIER_LIST, record.id)
            case Modifier():
                self._remove_overrides(CatalogObjectType.MODIFIER, record.id)
            case CatalogImage():
                pass
        self.session.flush()

    def _remove_overrides(self, owner_type: CatalogObjectType, owner_id: UUID) -> None:
        for row in self.location_overrides(owner_type, owner_id):
            self.session.delete(row)

    def _remove_images(self, owner_type: CatalogObjectType, owner_id: UUID) -> None:
        for image in self.images_for(owner_type, owner_id):
            self.session.delete(image)


def _table_for(record_type: type[CatalogRecord]) -> Table:
    return RECORD_TABLES[record_type]


def _dropped[T: CatalogRecord](children: Sequence[T], keep: Collection[str]) -> list[T]:
    # kept children still exist remotely and get a new parent later in the pass
    return [
        child for child in children if child.external_id is None or child.external_id not in keep
    ]
