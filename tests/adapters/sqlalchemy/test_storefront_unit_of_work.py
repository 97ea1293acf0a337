from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine

from storefront.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    SqlAlchemyOrderingUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)
from storefront.domain.model import Merchant, User

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_unit_of_work_requires_startup() -> None:
    assert not is_started()
    with pytest.raises(StartupError):
        SqlAlchemyOrderingUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:")
    engine_b = create_engine("sqlite+pysqlite:///:memory:")

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert configured_engine() is engine_b


def test_committed_rows_are_visible_to_the_next_unit_of_work(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    merchant = Merchant(external_id="M-1", name="Corner Cafe", tier=1)

    with SqlAlchemyOrderingUnitOfWork() as uow:
        uow.repositories.merchants.add(merchant)
        uow.commit()

    with SqlAlchemyCatalogUnitOfWork() as uow:
        loaded = uow.repositories.merchants.get(merchant.id)
        assert loaded is not None
        assert (loaded.external_id, loaded.tier) == ("M-1", 1)


def test_exception_rolls_back_uncommitted_work(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    user = User(display_name="Ada")

    with pytest.raises(RuntimeError), SqlAlchemyOrderingUnitOfWork() as uow:
        uow.repositories.users.add(user)
        uow.session.flush()
        raise RuntimeError("boom")

    with SqlAlchemyOrderingUnitOfWork() as uow:
        assert uow.repositories.users.get(user.id) is None


def test_repositories_are_unavailable_outside_the_context(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    uow = SqlAlchemyOrderingUnitOfWork()

    with pytest.raises(StartupError):
        _ = uow.repositories
