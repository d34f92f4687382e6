"""Transaction boundary for catalog writes.

The adapter keeps one process-wide engine. :func:`startup` creates it (or adopts one
passed in), registers the mappers and brings the schema to the latest migration.
Every :class:`SqlAlchemyCatalogUnitOfWork` then opens a fresh session from it, so a
whole import batch, its equipment rows and the seed state share a single commit.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from ironcatalog.adapters.sqlalchemy.mappings import start_mappers
from ironcatalog.adapters.sqlalchemy.migrations import upgrade_head
from ironcatalog.adapters.sqlalchemy.repositories import (
    SqlAlchemyEquipmentRepository,
    SqlAlchemyExerciseRepository,
    SqlAlchemyMetaRepository,
)
from ironcatalog.config import get_database_config
from ironcatalog.domain.ports.unit_of_work import CatalogRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """The catalog database is used before :func:`startup` or outside a transaction."""


class _Registry:
    """Holds the configured engine and lazily derives its session factory."""

    __slots__ = ("engine", "_sessions")

    def __init__(self) -> None:
        self.engine: Engine | None = None
        self._sessions: sessionmaker[Session] | None = None

    def install(self, engine: Engine | None) -> None:
        self.engine = engine
        self._sessions = None

    def sessions(self) -> sessionmaker[Session]:
        if self.engine is None:
            raise StartupError(
                "Catalog database not started; call "
                "ironcatalog.adapters.sqlalchemy.startup() first."
            )
        if self._sessions is None:
            self._sessions = sessionmaker(bind=self.engine, expire_on_commit=False)
        return self._sessions


_REGISTRY = _Registry()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Configure the catalog database and migrate it to the latest revision.

    Reconfiguring an already started adapter requires ``force=True``. The replaced
    engine is left for its owner to dispose.
    """

    if _REGISTRY.engine is not None and not force:
        raise StartupError("Catalog database already started; pass force=True to replace it.")

    target = engine or create_engine(database_uri or get_database_config().uri, future=True)
    start_mappers()
    upgrade_head(engine=target)
    if _REGISTRY.engine is target:
        return
    _REGISTRY.install(target)
    log.debug("Catalog database ready at %s", target.url)


def configured_engine() -> Engine | None:
    return _REGISTRY.engine


def is_started() -> bool:
    return _REGISTRY.engine is not None


def shutdown() -> None:
    """Dispose the engine and forget it; tests call this between cases."""

    if _REGISTRY.engine is not None:
        _REGISTRY.engine.dispose()
    _REGISTRY.install(None)


class SqlAlchemyCatalogUnitOfWork:
    """Exercises, equipment and meta repositories sharing one session.

    Leaving the ``with`` block because of an exception rolls back whatever was not
    committed. Callers commit explicitly.
    """

    def __init__(self) -> None:
        self._sessions = _REGISTRY.sessions()
        self._session: Session | None = None
        self._repositories: CatalogRepositories | None = None

    def _build_repositories(self, session: Session) -> CatalogRepositories:
        return CatalogRepositories(
            exercises=SqlAlchemyExerciseRepository(session),
            equipment=SqlAlchemyEquipmentRepository(session),
            meta=SqlAlchemyMetaRepository(session),
        )

    def __enter__(self) -> SqlAlchemyCatalogUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        self._session = self._sessions()
        self._repositories = self._build_repositories(self._session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work is not open")
        return self._session

    @property
    def repositories(self) -> CatalogRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work is not open")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from ironcatalog.domain.ports.unit_of_work import CatalogUnitOfWork

    _uow_check: CatalogUnitOfWork = SqlAlchemyCatalogUnitOfWork()
