"""SQLAlchemy-backed unit of work for catalog items and policies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from longbox.adapters.sqlalchemy.mappings import start_mappers
from longbox.adapters.sqlalchemy.migrations import upgrade_head
from longbox.adapters.sqlalchemy.repositories import (
    SqlAlchemyCatalogItemRepository,
    SqlAlchemyPolicyRepository,
)
from longbox.config import get_database_config
from longbox.domain.ports import CatalogRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _Adapter:
    engine: Engine | None = None
    session_factory: sessionmaker[Session] | None = None


_ADAPTER = _Adapter()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Bind the adapter to an engine, configure mappers and migrate the schema."""

    if _ADAPTER.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )
    engine = engine or create_engine(database_uri or get_database_config().uri, future=True)
    start_mappers()
    upgrade_head(engine=engine)
    _ADAPTER.engine = engine
    _ADAPTER.session_factory = sessionmaker(bind=engine, expire_on_commit=False)


def is_started() -> bool:
    return _ADAPTER.engine is not None


def shutdown() -> None:
    """Dispose the bound engine, if any."""

    if _ADAPTER.engine is not None:
        _ADAPTER.engine.dispose()
    _ADAPTER.engine = None
    _ADAPTER.session_factory = None


class SqlAlchemyCatalogUnitOfWork:
    """One session's worth of catalog and policy repositories.

    Items stay readable after the block exits: sessions do not expire
    attributes on commit.
    """

    def __init__(self) -> None:
        if _ADAPTER.session_factory is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call longbox.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        self._session_factory = _ADAPTER.session_factory
        self._session: Session | None = None
        self._repositories: CatalogRepositories | None = None

    def __enter__(self) -> SqlAlchemyCatalogUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = self._session_factory()
        self._repositories = CatalogRepositories(
            items=SqlAlchemyCatalogItemRepository(self._session),
            policies=SqlAlchemyPolicyRepository(self._session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self.session.close()
        self._session = None
        self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @property
    def repositories(self) -> CatalogRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from longbox.domain.ports import CatalogUnitOfWork

    _uow_check: CatalogUnitOfWork = SqlAlchemyCatalogUnitOfWork()
