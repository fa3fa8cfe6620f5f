from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional, TypeVar

from sqlalchemy import event, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError, StatementError
from sqlmodel import Session, SQLModel, create_engine

from .errors import ConstraintViolation, MalformedDocument, StorageUnavailable

T = TypeVar("T")


def _sqlite_connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        # Required for SQLite when used with FastAPI in threaded servers.
        return {"check_same_thread": False}
    return {}


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Owns the single engine of the process.

    The engine is opened lazily by :meth:`acquire` and dropped by
    :meth:`release`; a later ``acquire`` opens a fresh one. Every DBAPI
    connection gets ``PRAGMA foreign_keys=ON`` so the meal item cascade and
    the owner check are enforced by SQLite itself.

    Driver errors never leave :meth:`session`: integrity errors become
    :class:`ConstraintViolation`, operational errors :class:`StorageUnavailable`
    and unbindable values :class:`MalformedDocument`.
    """

    def __init__(self, url: str, echo: bool = False) -> None:
        self.url = url
        self.echo = echo
        self._engine: Optional[Engine] = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    def acquire(self) -> Engine:
        if self._engine is None:
            self._engine = self._open()
        return self._engine

    def release(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def _open(self) -> Engine:
        engine = create_engine(
            self.url,
            echo=self.echo,
            connect_args=_sqlite_connect_args(self.url),
        )
        if self.url.startswith("sqlite"):
            event.listen(engine, "connect", _enable_foreign_keys)

        # Import models so SQLModel sees the metadata.
        from healthlog import models  # noqa: F401

        try:
            SQLModel.metadata.create_all(engine)
        except OperationalError as exc:
            engine.dispose()
            raise StorageUnavailable(f"cannot open {self.url}: {exc.orig}") from exc
        return engine

    @contextmanager
    def session(self) -> Iterator[Session]:
        session = Session(self.acquire(), expire_on_commit=False)
        try:
            yield session
        except IntegrityError as exc:
            raise ConstraintViolation(str(exc.orig)) from exc
        except OperationalError as exc:
            raise StorageUnavailable(str(exc.orig)) from exc
        except StatementError as exc:
            # A value the driver cannot bind, e.g. text for a REAL column.
            raise MalformedDocument(f"rejected value: {exc.orig}") from exc
        finally:
            session.close()

    def run_atomic(self, unit_of_work: Callable[[Session], T]) -> T:
        """Run ``unit_of_work(session)`` in one transaction.

        Commits when it returns, rolls back when it raises; the exception is
        re-raised (translated if it came from the driver).
        """
        with self.session() as session:
            with session.begin():
                return unit_of_work(session)

    def foreign_keys_enabled(self) -> bool:
        with self.acquire().connect() as conn:
            return bool(conn.execute(text("PRAGMA foreign_keys")).scalar())

    def table_names(self) -> List[str]:
        return inspect(self.acquire()).get_table_names()
