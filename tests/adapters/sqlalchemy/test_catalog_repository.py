"""Tests for the SQLAlchemy catalog repository."""

from __future__ import annotations

from uuid import uuid4

import pytest
from sqlalchemy.orm import Session  # noqa: TC002

from storefront.adapters.sqlalchemy.repositories import SqlAlchemyCatalogRepository
from storefront.domain.errors import PersistenceFailure
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
)


def _catalog(session: Session) -> tuple[SqlAlchemyCatalogRepository, Catalog]:
    repository = SqlAlchemyCatalogRepository(session)
    catalog = Catalog(merchant_id=uuid4())
    repository.add(catalog)
    session.flush()
    return repository, catalog


def test_records_are_listed_by_ordinal_then_name(sqlite_session: Session) -> None:
    repository, catalog = _catalog(sqlite_session)
    for name, ordinal in (("Tea", 1), ("Cocoa", 1), ("Coffee", 0)):
        repository.add_record(Category(catalog_id=catalog.id, name=name, ordinal=ordinal))
    sqlite_session.commit()

    categories = repository.list_records(catalog.id, Category)

    assert [category.name for category in categories] == ["Coffee", "Cocoa", "Tea"]
    assert repository.get_for_merchant(catalog.merchant_id) is catalog


def test_external_id_lookup_is_scoped_to_the_catalog(sqlite_session: Session) -> None:
    repository, catalog = _catalog(sqlite_session)
    other = Catalog(merchant_id=uuid4())
    repository.add(other)
    mine = Category(catalog_id=catalog.id, external_id="cat-1", name="Mine")
    theirs = Category(catalog_id=other.id, external_id="cat-1", name="Theirs")
    repository.add_record(mine)
    repository.add_record(theirs)
    sqlite_session.commit()

    assert repository.find_by_external_id(catalog.id, Category, "cat-1") is mine
    assert repository.find_by_external_id(other.id, Category, "cat-1") is theirs
    assert repository.find_by_external_id(catalog.id, Item, "cat-1") is None


def test_presence_sets_survive_a_round_trip(sqlite_session: Session) -> None:
    repository, catalog = _catalog(sqlite_session)
    category = Category(catalog_id=catalog.id, name="Coffee")
    present, absent = uuid4(), uuid4()
    item = Item(
        catalog_id=catalog.id,
        category_id=category.id,
        name="Latte",
        present_at_all_locations=False,
        present_at_location_ids=frozenset({present}),
        absent_at_location_ids=frozenset({absent}),
    )
    repository.add_record(category)
    repository.add_record(item)
    sqlite_session.commit()
    sqlite_session.expire_all()

    loaded = repository.get_record(Item, item.id)

    assert loaded is not None
    assert loaded.present_at_location_ids == frozenset({present})
    assert loaded.absent_at_location_ids == frozenset({absent})
    assert loaded.present_at_all_locations is False


def test_removing_a_category_cascades_through_its_items(sqlite_session: Session) -> None:
    repository, catalog = _catalog(sqlite_session)
    category = Category(catalog_id=catalog.id, name="Coffee")
    item = Item(catalog_id=catalog.id, category_id=category.id, name="Latte")
    variation = Variation(catalog_id=catalog.id, item_id=item.id, name="Small", base_amount=400)
    modifier_list = ModifierList(catalog_id=catalog.id, name="Milk")
    for record in (category, item, variation, modifier_list):
        repository.add_record(record)
    repository.add_record(
        CatalogImage(
            catalog_id=catalog.id,
            owner_type=CatalogObjectType.ITEM,
            owner_id=item.id,
            url="https://img.test/latte.png",
        )
    )
    sqlite_session.add(ItemModifierList(item_id=item.id, modifier_list_id=modifier_list.id))
    sqlite_session.add(
        LocationOverride(
            owner_type=CatalogObjectType.ITEM_VARIATION,
            owner_id=variation.id,
            location_id=uuid4(),
            amount=450,
        )
    )
    sqlite_session.commit()

    removed = repository.remove_records(Category, [category])
    sqlite_session.commit()

    assert removed == 1
    assert repository.list_records(catalog.id, Item) == []
    assert repository.list_records(catalog.id, Variation) == []
    assert repository.list_records(catalog.id, CatalogImage) == []
    assert repository.item_modifier_lists(item.id) == []
    assert repository.location_overrides(CatalogObjectType.ITEM_VARIATION, variation.id) == []
    assert repository.list_records(catalog.id, ModifierList) == [modifier_list]


def test_kept_children_outlive_their_removed_category(sqlite_session: Session) -> None:
    repository, catalog = _catalog(sqlite_session)
    category = Category(catalog_id=catalog.id, external_id="cat-old", name="Old")
    moving = Item(catalog_id=catalog.id, external_id="item-latte", category_id=category.id)
    retired = Item(catalog_id=catalog.id, external_id="item-retired", category_id=category.id)
    variation = Variation(catalog_id=catalog.id, external_id="var-small", item_id=moving.id)
    for record in (category, moving, retired, variation):
        repository.add_record(record)
    sqlite_session.commit()

    repository.remove_records(Category, [category], keep={"item-latte", "var-small"})
    replacement = Category(catalog_id=catalog.id, external_id="cat-new", name="New")
    repository.add_record(replacement)
    moving.category_id = replacement.id
    sqlite_session.commit()

    assert repository.list_records(catalog.id, Item) == [moving]
    assert repository.list_records(catalog.id, Variation) == [variation]
    assert repository.list_records(catalog.id, Category) == [replacement]


def test_removing_a_modifier_list_drops_modifiers_and_links(sqlite_session: Session) -> None:
    repository, catalog = _catalog(sqlite_session)
    category = Category(catalog_id=catalog.id, name="Coffee")
    item = Item(catalog_id=catalog.id, category_id=category.id, name="Latte")
    modifier_list = ModifierList(catalog_id=catalog.id, name="Milk")
    modifier = Modifier(catalog_id=catalog.id, modifier_list_id=modifier_list.id, name="Oat")
    for record in (category, item, modifier_list, modifier):
        repository.add_record(record)
    sqlite_session.add(ItemModifierList(item_id=item.id, modifier_list_id=modifier_list.id))
    sqlite_session.commit()

    repository.remove_records(ModifierList, [modifier_list])
    sqlite_session.commit()

    assert repository.list_records(catalog.id, Modifier) == []
    assert repository.item_modifier_lists(item.id) == []
    assert repository.list_records(catalog.id, Item) == [item]


def test_override_replacement_swaps_rows(sqlite_session: Session) -> None:
    repository, _ = _catalog(sqlite_session)
    owner_id = uuid4()
    first, second = uuid4(), uuid4()
    kind = CatalogObjectType.MODIFIER
    repository.replace_location_overrides(
        kind, owner_id, [LocationOverride(owner_type=kind, owner_id=owner_id, location_id=first)]
    )
    sqlite_session.commit()

    repository.replace_location_overrides(
        kind,
        owner_id,
        [LocationOverride(owner_type=kind, owner_id=owner_id, location_id=second, amount=75)],
    )
    sqlite_session.commit()

    assert [row.signature() for row in repository.location_overrides(kind, owner_id)] == [
        (second, 75)
    ]


def test_conflicting_override_rows_fail_without_losing_the_outer_transaction(
    sqlite_session: Session,
) -> None:
    repository, catalog = _catalog(sqlite_session)
    owner_id = uuid4()
    location_id = uuid4()
    kind = CatalogObjectType.ITEM_VARIATION
    category = Category(catalog_id=catalog.id, name="Kept")
    repository.add_record(category)

    with pytest.raises(PersistenceFailure):
        repository.replace_location_overrides(
            kind,
            owner_id,
            [
                LocationOverride(owner_type=kind, owner_id=owner_id, location_id=location_id),
                LocationOverride(owner_type=kind, owner_id=owner_id, location_id=location_id),
            ],
        )
    sqlite_session.commit()

    assert repository.location_overrides(kind, owner_id) == []
    assert repository.list_records(catalog.id, Category) == [category]
