from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from ironcatalog.adapters.sqlalchemy import start_mappers
from ironcatalog.adapters.sqlalchemy.migrations import upgrade_head
from ironcatalog.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    shutdown,
    startup,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from sqlalchemy.engine import Engine

# Never touch a developer's catalog from the test suite.
os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

# Domain tests build records that other fixtures later persist.
start_mappers()


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    upgrade_head(engine=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    with Session(sqlite_engine) as session:
        yield session


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyCatalogUnitOfWork]]:
    """Start the adapter on a migrated in-memory engine and hand out units of work."""

    startup(engine=sqlite_engine, force=True)
    yield SqlAlchemyCatalogUnitOfWork
    shutdown()
