"""Narrow, per-aggregate persistence ports."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence
    from uuid import UUID

    from storefront.domain.model import (
        AppInstall,
        Catalog,
        CatalogImage,
        CatalogObjectType,
        CatalogRecord,
        Customer,
        ItemModifierList,
        Location,
        LocationOverride,
        Merchant,
        Order,
        User,
    )


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...

    def get(self, entity_id: UUID) -> TEntity | None: ...


@runtime_checkable
class MerchantRepository(Repository["Merchant"], Protocol):
    """Persistence contract for merchants."""


@runtime_checkable
class UserRepository(Repository["User"], Protocol):
    """Persistence contract for users."""


@runtime_checkable
class CustomerRepository(Repository["Customer"], Protocol):
    """Persistence contract for customers and their app installs."""

    def app_installs(self, customer_id: UUID) -> list[AppInstall]: ...

    def add_app_install(self, install: AppInstall) -> None: ...


@runtime_checkable
class LocationRepository(Repository["Location"], Protocol):
    """Persistence contract for merchant locations."""

    def list_for_merchant(self, merchant_id: UUID) -> list[Location]: ...

    def find_by_external_id(self, merchant_id: UUID, external_id: str) -> Location | None: ...

    def main_for_merchant(self, merchant_id: UUID) -> Location | None: ...


@runtime_checkable
class OrderRepository(Repository["Order"], Protocol):
    """Persistence contract for orders and their owned line items."""

    def find_by_external_id(self, external_id: str) -> Order | None: ...

    def remove(self, order: Order) -> None: ...


@runtime_checkable
class CatalogRepository(Protocol):
    """Persistence contract for one merchant catalog and everything it owns.

    ``remove_records`` cascades to owned rows, except child records whose external
    id is listed in ``keep``. ``replace_location_overrides``
    raises ``PersistenceFailure`` when the write fails; the session stays usable.
    """

    def get_for_merchant(self, merchant_id: UUID) -> Catalog | None: ...

    def add(self, catalog: Catalog) -> None: ...

    def list_records[T: CatalogRecord](self, catalog_id: UUID, record_type: type[T]) -> list[T]: ...

    def find_by_external_id[T: CatalogRecord](
        self, catalog_id: UUID, record_type: type[T], external_id: str
    ) -> T | None: ...

    def get_record[T: CatalogRecord](self, record_type: type[T], record_id: UUID) -> T | None: ...

    def add_record(self, record: CatalogRecord) -> None: ...

    def remove_records[T: CatalogRecord](
        self, record_type: type[T], records: Sequence[T], *, keep: Collection[str] = ()
    ) -> int: ...

    def item_modifier_lists(self, item_id: UUID) -> list[ItemModifierList]: ...

    def replace_item_modifier_lists(self, item_id: UUID, rows: Sequence[ItemModifierList]) -> None: ...

    def location_overrides(
        self, owner_type: CatalogObjectType, owner_id: UUID
    ) -> list[LocationOverride]: ...

    def replace_location_overrides(
        self,
        owner_type: CatalogObjectType,
        owner_id: UUID,
        rows: Sequence[LocationOverride],
    ) -> None: ...

    def images_for(self, owner_type: CatalogObjectType, owner_id: UUID) -> list[CatalogImage]: ...
