"""Catalog synchronisation: mirror a remote catalog snapshot into the local store.

One pass runs inside a single unit of work:

1. delete local rows whose external id vanished from the snapshot
   (variations, modifier lists, modifiers, categories, items, images);
   children that still exist remotely survive their deleted parent and are
   re-parented below;
2. upsert modifier lists, then modifiers;
3. upsert categories;
4. upsert items grouped by category, together with their modifier-list
   associations, presence, images and variations.

A missing parent aborts the pass before anything is committed. A failed
override write for one variation or modifier is logged and skipped.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from storefront.domain.errors import (
    MissingParentError,
    NotFoundError,
    PersistenceFailure,
    UnprocessableStateError,
)
from storefront.domain.locking import KeyedLocks
from storefront.domain.model import (
    Catalog,
    CatalogImage,
    CatalogObjectType,
    Category,
    Item,
    ItemModifierList,
    LocationOverride,
    Modifier,
    ModifierList,
    Variation,
    assign,
)
from storefront.domain.ports.platform import (
    RemoteCatalogSnapshot,
    RemoteCategoryData,
    RemoteImageData,
    RemoteItemData,
    RemoteModifierData,
    RemoteModifierListData,
    RemoteVariationData,
)
from storefront.domain.reconciliation import diff_by_external_id, resolve_presence

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence
    from uuid import UUID

    from storefront.domain.model import CatalogRecord
    from storefront.domain.ports.persistence import CatalogRepository
    from storefront.domain.ports.platform import (
        CommercePlatform,
        RemoteCatalogObject,
        RemoteLocationOverride,
    )
    from storefront.domain.ports.unit_of_work import CatalogRepositories, CatalogUnitOfWork

    type UpsertHandler = Callable[
        [RemoteCatalogObject, CatalogRecord | None, int], tuple[CatalogRecord, bool]
    ]

log = logging.getLogger(__name__)

# Deletes run in this order so that no surviving row points at a deleted parent.
DELETE_ORDER: tuple[type[CatalogRecord], ...] = (
    Variation,
    ModifierList,
    Modifier,
    Category,
    Item,
    CatalogImage,
)

RECORD_OBJECT_TYPES: dict[type[CatalogRecord], CatalogObjectType] = {
    Category: CatalogObjectType.CATEGORY,
    Item: CatalogObjectType.ITEM,
    Variation: CatalogObjectType.ITEM_VARIATION,
    ModifierList: CatalogObjectType.MODIFIER_LIST,
    Modifier: CatalogObjectType.MODIFIER,
    CatalogImage: CatalogObjectType.IMAGE,
}


@dataclass(slots=True)
class CatalogSyncResult:
    """Counts per catalog object type; ``updated`` only counts real field changes."""

    created: Counter[CatalogObjectType] = field(default_factory=Counter["CatalogObjectType"])
    updated: Counter[CatalogObjectType] = field(default_factory=Counter["CatalogObjectType"])
    deleted: Counter[CatalogObjectType] = field(default_factory=Counter["CatalogObjectType"])
    replaced_associations: int = 0
    skipped: int = 0

    @property
    def total_changes(self) -> int:
        return (
            self.created.total()
            + self.updated.total()
            + self.deleted.total()
            + self.replaced_associations
        )


@dataclass(slots=True)
class CatalogSyncEngine:
    platform: CommercePlatform
    unit_of_work_factory: Callable[[], CatalogUnitOfWork]
    locks: KeyedLocks = field(default_factory=KeyedLocks)

    async def sync(self, *, merchant_id: UUID) -> CatalogSyncResult:
        """Run one full sync pass for the merchant's catalog.

        Passes for the same merchant are serialised; the remote snapshot is
        fetched before the write transaction opens.
        """

        async with self.locks.hold(("catalog", merchant_id)):
            with self.unit_of_work_factory() as uow:
                merchant = uow.repositories.merchants.get(merchant_id)
                if merchant is None:
                    raise NotFoundError(f"Merchant {merchant_id} not found")
                access_token = merchant.access_token
            if not access_token:
                raise UnprocessableStateError(f"Merchant {merchant_id} has no remote credentials")

            snapshot = await self.fetch_snapshot(access_token)

            with self.unit_of_work_factory() as uow:
                catalog_pass = _CatalogPass.begin(uow.repositories, merchant_id, snapshot)
                result = catalog_pass.run()
                uow.commit()

        log.info(
            "Synced catalog for merchant %s: created=%s updated=%s deleted=%s skipped=%s",
            merchant_id,
            dict(result.created),
            dict(result.updated),
            dict(result.deleted),
            result.skipped,
        )
        return result

    async def fetch_snapshot(self, access_token: str) -> RemoteCatalogSnapshot:
        objects: dict[CatalogObjectType, tuple[RemoteCatalogObject, ...]] = {}
        for object_type in CatalogObjectType:
            listed = await self.platform.list_catalog_objects(access_token, object_type)
            objects[object_type] = tuple(listed)
            log.debug("Fetched %s remote %s objects", len(listed), object_type)
        return RemoteCatalogSnapshot(objects=objects)


class _CatalogPass:
    """State of one sync pass: the snapshot plus id-indexed lookups built along the way."""

    def __init__(
        self,
        catalogs: CatalogRepository,
        catalog: Catalog,
        snapshot: RemoteCatalogSnapshot,
        location_ids: Mapping[str, UUID],
    ) -> None:
        self._catalogs = catalogs
        self._catalog = catalog
        self._snapshot = snapshot
        self._location_ids = location_ids
        self._local_ids: dict[CatalogObjectType, dict[str, UUID]] = {
            object_type: {} for object_type in CatalogObjectType
        }
        self._images = {remote.id: remote for remote in snapshot.of_type(CatalogObjectType.IMAGE)}
        self._handlers: dict[CatalogObjectType, UpsertHandler] = {
            CatalogObjectType.MODIFIER_LIST: self._upsert_modifier_list,
            CatalogObjectType.MODIFIER: self._upsert_modifier,
            CatalogObjectType.CATEGORY: self._upsert_category,
            CatalogObjectType.ITEM: self._upsert_item,
            CatalogObjectType.ITEM_VARIATION: self._upsert_variation,
        }
        self.result = CatalogSyncResult()

    @classmethod
    def begin(
        cls,
        repositories: CatalogRepositories,
        merchant_id: UUID,
        snapshot: RemoteCatalogSnapshot,
    ) -> _CatalogPass:
        catalog = repositories.catalogs.get_for_merchant(merchant_id)
        if catalog is None:
            catalog = Catalog(merchant_id=merchant_id)
            repositories.catalogs.add(catalog)
            log.info("Created catalog %s for merchant %s", catalog.id, merchant_id)
        location_ids = {
            location.external_id: location.id
            for location in repositories.locations.list_for_merchant(merchant_id)
            if location.external_id is not None
        }
        return cls(repositories.catalogs, catalog, snapshot, location_ids)

    def run(self) -> CatalogSyncResult:
        self._delete_missing()
        self._upsert_all(ModifierList)
        self._upsert_all(Modifier)
        self._upsert_all(Category)
        self._sync_items()
        return self.result

    # Delete pass ---------------------------------------------------------------

    def _delete_missing(self) -> None:
        keep = self._reparented_ids()
        for record_type in DELETE_ORDER:
            object_type = RECORD_OBJECT_TYPES[record_type]
            # re-read every time: earlier steps may have cascaded into this type
            local = self._catalogs.list_records(self._catalog.id, record_type)
            diff = diff_by_external_id(local, self._snapshot.of_type(object_type))
            if not diff.to_delete:
                continue
            removed = self._catalogs.remove_records(record_type, diff.to_delete, keep=keep)
            self.result.deleted[object_type] += removed
            log.debug("Deleted %s %s rows absent from remote", removed, object_type)

    def _reparented_ids(self) -> frozenset[str]:
        """External ids of children the upsert pass will attach to a surviving parent.

        A parent deleted here must not take these along: their local ids stay stable.
        """

        items = {
            remote.id
            for remote in self._snapshot.of_type(CatalogObjectType.ITEM)
            if _payload(remote, RemoteItemData).category_id is not None
        }
        variations = {
            remote.id
            for remote in self._snapshot.of_type(CatalogObjectType.ITEM_VARIATION)
            if _payload(remote, RemoteVariationData).item_id in items
        }
        modifiers = {remote.id for remote in self._snapshot.of_type(CatalogObjectType.MODIFIER)}
        return frozenset(items | variations | modifiers)

    # Upsert pass ---------------------------------------------------------------

    def _upsert_all(self, record_type: type[CatalogRecord]) -> None:
        object_type = RECORD_OBJECT_TYPES[record_type]
        local = self._catalogs.list_records(self._catalog.id, record_type)
        diff = diff_by_external_id(local, self._snapshot.of_type(object_type))
        for position, (remote, existing) in enumerate(diff.pairs):
            self._upsert(remote, existing, position)

    def _upsert(
        self, remote: RemoteCatalogObject, existing: CatalogRecord | None, position: int
    ) -> CatalogRecord:
        record, changed = self._handlers[remote.type](remote, existing, position)
        if existing is None:
            self._catalogs.add_record(record)
            self.result.created[remote.type] += 1
        elif changed:
            self.result.updated[remote.type] += 1
        self._local_ids[remote.type].setdefault(remote.id, record.id)
        self._after_upsert(remote, record)
        return record

    def _after_upsert(self, remote: RemoteCatalogObject, record: CatalogRecord) -> None:
        match remote.data, record:
            case RemoteModifierData(location_overrides=overrides), Modifier() as modifier:
                self._replace_overrides(
                    CatalogObjectType.MODIFIER, modifier.id, remote.id, overrides
                )
            case RemoteVariationData(location_overrides=overrides), Variation() as variation:
                self._replace_overrides(
                    CatalogObjectType.ITEM_VARIATION, variation.id, remote.id, overrides
                )
            case RemoteItemData() as data, Item() as item:
                self._replace_item_modifier_lists(item, data)
                self._sync_item_images(item, data)
            case _:
                pass

    def _sync_items(self) -> None:
        items = self._snapshot.of_type(CatalogObjectType.ITEM)
        item_diff = diff_by_external_id(
            self._catalogs.list_records(self._catalog.id, Item), items
        )
        by_category: dict[str, list[tuple[RemoteCatalogObject, Item | None]]] = {
            remote.id: [] for remote in self._snapshot.of_type(CatalogObjectType.CATEGORY)
        }
        for remote, existing in item_diff.pairs:
            data = _payload(remote, RemoteItemData)
            if data.category_id is None:
                log.warning("Skipping item %s without a category", remote.id)
                self.result.skipped += 1
                continue
            bucket = by_category.get(data.category_id)
            if bucket is None:
                raise MissingParentError(
                    f"Item {remote.id} references unknown category {data.category_id}"
                )
            bucket.append((remote, existing))

        variation_diff = diff_by_external_id(
            self._catalogs.list_records(self._catalog.id, Variation),
            self._snapshot.of_type(CatalogObjectType.ITEM_VARIATION),
        )
        variations_by_item: dict[str, list[tuple[RemoteCatalogObject, Variation | None]]] = {}
        for remote, existing in variation_diff.pairs:
            data = _payload(remote, RemoteVariationData)
            variations_by_item.setdefault(data.item_id, []).append((remote, existing))

        for bucket in by_category.values():
            for position, (remote, existing) in enumerate(bucket):
                self._upsert(remote, existing, position)
                for variation_position, (variation, local_variation) in enumerate(
                    variations_by_item.pop(remote.id, [])
                ):
                    self._upsert(variation, local_variation, variation_position)

        for item_id, orphans in variations_by_item.items():
            log.warning("Skipping %s variations of unsynced item %s", len(orphans), item_id)
            self.result.skipped += len(orphans)

    # Handlers ------------------------------------------------------------------

    def _upsert_modifier_list(
        self, remote: RemoteCatalogObject, existing: CatalogRecord | None, position: int
    ) -> tuple[CatalogRecord, bool]:
        _ = position
        data = _payload(remote, RemoteModifierListData)
        record = _existing(existing, ModifierList) or ModifierList(
            catalog_id=self._catalog.id, external_id=remote.id
        )
        changed = assign(record, name=data.name, selection_type=data.selection_type)
        return record, changed

    def _upsert_modifier(
        self, remote: RemoteCatalogObject, existing: CatalogRecord | None, position: int
    ) -> tuple[CatalogRecord, bool]:
        _ = position
        data = _payload(remote, RemoteModifierData)
        modifier_list_id = self._resolve(CatalogObjectType.MODIFIER_LIST, data.modifier_list_id)
        if modifier_list_id is None:
            raise MissingParentError(
                f"Modifier {remote.id} references unknown modifier list {data.modifier_list_id}"
            )
        record = _existing(existing, Modifier) or Modifier(
            catalog_id=self._catalog.id,
            external_id=remote.id,
            modifier_list_id=modifier_list_id,
        )
        changed = assign(
            record,
            modifier_list_id=modifier_list_id,
            name=data.name,
            ordinal=data.ordinal,
            base_amount=data.amount or 0,
            currency=data.currency,
            **resolve_presence(remote, self._location_ids).as_fields(),
        )
        return record, changed

    def _upsert_category(
        self, remote: RemoteCatalogObject, existing: CatalogRecord | None, position: int
    ) -> tuple[CatalogRecord, bool]:
        data = _payload(remote, RemoteCategoryData)
        record = _existing(existing, Category) or Category(
            catalog_id=self._catalog.id, external_id=remote.id, ordinal=position
        )
        changed = assign(record, name=data.name)
        return record, changed

    def _upsert_item(
        self, remote: RemoteCatalogObject, existing: CatalogRecord | None, position: int
    ) -> tuple[CatalogRecord, bool]:
        data = _payload(remote, RemoteItemData)
        category_id = (
            self._resolve(CatalogObjectType.CATEGORY, data.category_id)
            if data.category_id
            else None
        )
        if category_id is None:
            raise MissingParentError(
                f"Item {remote.id} references unknown category {data.category_id}"
            )
        record = _existing(existing, Item) or Item(
            catalog_id=self._catalog.id,
            external_id=remote.id,
            category_id=category_id,
            ordinal=position,
        )
        changed = assign(
            record,
            category_id=category_id,
            name=data.name,
            description=data.description,
            **resolve_presence(remote, self._location_ids).as_fields(),
        )
        return record, changed

    def _upsert_variation(
        self, remote: RemoteCatalogObject, existing: CatalogRecord | None, position: int
    ) -> tuple[CatalogRecord, bool]:
        data = _payload(remote, RemoteVariationData)
        item_id = self._resolve(CatalogObjectType.ITEM, data.item_id)
        if item_id is None:
            raise MissingParentError(f"Variation {remote.id} references unknown item {data.item_id}")
        record = _existing(existing, Variation) or Variation(
            catalog_id=self._catalog.id, external_id=remote.id, item_id=item_id
        )
        changed = assign(
            record,
            item_id=item_id,
            name=data.name,
            ordinal=data.ordinal if data.ordinal is not None else position,
            base_amount=data.amount or 0,
            currency=data.currency,
        )
        return record, changed

    # Owned rows ----------------------------------------------------------------

    def _replace_item_modifier_lists(self, item: Item, data: RemoteItemData) -> None:
        rows: list[ItemModifierList] = []
        for info in data.modifier_list_info:
            modifier_list_id = self._resolve(CatalogObjectType.MODIFIER_LIST, info.modifier_list_id)
            if modifier_list_id is None:
                log.warning(
                    "Item %s references unknown modifier list %s",
                    item.external_id,
                    info.modifier_list_id,
                )
                continue
            rows.append(
                ItemModifierList(
                    item_id=item.id,
                    modifier_list_id=modifier_list_id,
                    min_selected=info.min_selected,
                    max_selected=info.max_selected,
                    enabled=info.enabled,
                )
            )
        current = self._catalogs.item_modifier_lists(item.id)
        if _same_rows(current, rows):
            return
        self._catalogs.replace_item_modifier_lists(item.id, rows)
        self.result.replaced_associations += 1

    def _replace_overrides(
        self,
        owner_type: CatalogObjectType,
        owner_id: UUID,
        remote_id: str,
        overrides: Sequence[RemoteLocationOverride],
    ) -> None:
        rows: list[LocationOverride] = []
        for override in overrides:
            location_id = self._location_ids.get(override.location_id)
            if location_id is None:
                log.warning(
                    "Dropping override of %s for unknown location %s",
                    remote_id,
                    override.location_id,
                )
                continue
            rows.append(
                LocationOverride(
                    owner_type=owner_type,
                    owner_id=owner_id,
                    location_id=location_id,
                    amount=override.amount,
                )
            )
        current = self._catalogs.location_overrides(owner_type, owner_id)
        if _same_rows(current, rows):
            return
        try:
            self._catalogs.replace_location_overrides(owner_type, owner_id, rows)
        except PersistenceFailure:
            log.exception("Failed to save location overrides for %s %s", owner_type, remote_id)
            self.result.skipped += 1
            return
        self.result.replaced_associations += 1

    def _sync_item_images(self, item: Item, data: RemoteItemData) -> None:
        current = self._catalogs.images_for(CatalogObjectType.ITEM, item.id)
        if not data.image_ids:
            if current:
                removed = self._catalogs.remove_records(CatalogImage, current)
                self.result.deleted[CatalogObjectType.IMAGE] += removed
            return

        for image_id in data.image_ids:
            remote = self._images.get(image_id)
            if remote is None:
                log.warning("Item %s references unknown image %s", item.external_id, image_id)
                continue
            image_data = _payload(remote, RemoteImageData)
            existing = self._catalogs.find_by_external_id(self._catalog.id, CatalogImage, image_id)
            record = existing or CatalogImage(
                catalog_id=self._catalog.id,
                external_id=image_id,
                owner_type=CatalogObjectType.ITEM,
                owner_id=item.id,
            )
            changed = assign(
                record,
                owner_type=CatalogObjectType.ITEM,
                owner_id=item.id,
                name=image_data.name,
                url=image_data.url,
                caption=image_data.caption,
            )
            if existing is None:
                self._catalogs.add_record(record)
                self.result.created[CatalogObjectType.IMAGE] += 1
            elif changed:
                self.result.updated[CatalogObjectType.IMAGE] += 1

    def _resolve(self, object_type: CatalogObjectType, external_id: str) -> UUID | None:
        return self._local_ids[object_type].get(external_id)


def _payload[T](remote: RemoteCatalogObject, data_type: type[T]) -> T:
    data = remote.data
    if not isinstance(data, data_type):
        raise TypeError(f"{remote.type} object {remote.id} carries {type(data).__name__}")
    return data


def _existing[T](record: CatalogRecord | None, record_type: type[T]) -> T | None:
    if record is None:
        return None
    if not isinstance(record, record_type):
        raise TypeError(f"Expected {record_type.__name__}, got {type(record).__name__}")
    return record


def _same_rows(
    current: Sequence[ItemModifierList | LocationOverride],
    desired: Sequence[ItemModifierList | LocationOverride],
) -> bool:
    return Counter(row.signature() for row in current) == Counter(
        row.signature() for row in desired
    )
