from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from storefront.adapters.sqlalchemy import create_database_engine, start_mappers
from storefront.adapters.sqlalchemy.migrations import upgrade_head
from storefront.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    SqlAlchemyOrderingUnitOfWork,
    shutdown,
    startup,
)
from tests.helpers.platform import FakeCommercePlatform
from tests.helpers.records import StoreRecords, seed_store

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_database_engine("sqlite+pysqlite:///:memory:")
    start_mappers()
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True, expire_on_commit=False)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def started_engine(sqlite_engine: Engine) -> Iterator[Engine]:
    startup(engine=sqlite_engine, force=True)
    try:
        yield sqlite_engine
    finally:
        shutdown()


@pytest.fixture
def catalog_uow(started_engine: Engine) -> Callable[[], SqlAlchemyCatalogUnitOfWork]:
    _ = started_engine
    return SqlAlchemyCatalogUnitOfWork


@pytest.fixture
def ordering_uow(started_engine: Engine) -> Callable[[], SqlAlchemyOrderingUnitOfWork]:
    _ = started_engine
    return SqlAlchemyOrderingUnitOfWork


@pytest.fixture
def store(ordering_uow: Callable[[], SqlAlchemyOrderingUnitOfWork]) -> StoreRecords:
    return seed_store(ordering_uow)


@pytest.fixture
def platform() -> FakeCommercePlatform:
    return FakeCommercePlatform()
