from datetime import datetime, timezone

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from healthlog.core.database import Database, _sqlite_connect_args
from healthlog.core.errors import ConstraintViolation, StorageUnavailable
from healthlog.models import FoodItem, MealRecord


def test_sqlite_connect_args_returns_thread_check_flag():
    assert _sqlite_connect_args("sqlite:///foo.db") == {"check_same_thread": False}


def test_non_sqlite_connect_args_returns_empty_dict():
    assert _sqlite_connect_args("postgresql://example") == {}


def test_acquire_is_idempotent(database):
    assert database.acquire() is database.acquire()


def test_release_then_acquire_reopens(database):
    first = database.acquire()
    database.release()
    assert not database.is_open
    database.release()  # second release is a no-op

    second = database.acquire()
    assert second is not first
    assert database.is_open


def test_foreign_keys_are_enforced(database):
    assert database.foreign_keys_enabled() is True


def test_schema_has_the_five_tables(database):
    tables = set(database.table_names())
    assert {"food_items", "meals", "meal_items", "weight_entries", "weight_goals"} <= tables


def test_open_fails_fast_when_directory_is_missing(tmp_path):
    db = Database(f"sqlite:///{(tmp_path / 'missing' / 'nested' / 'test.db').as_posix()}")
    with pytest.raises(StorageUnavailable):
        db.acquire()
    assert not db.is_open


def test_run_atomic_commits_on_success(database):
    def _work(session):
        session.add(FoodItem(name="Apple", unit="medium", kcal=95))
        session.flush()
        return "done"

    assert database.run_atomic(_work) == "done"
    with database.session() as session:
        assert len(session.exec(select(FoodItem)).all()) == 1


def test_run_atomic_rolls_back_on_error(database):
    def _work(session):
        session.add(FoodItem(name="Apple", unit="medium", kcal=95))
        session.flush()
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        database.run_atomic(_work)

    with database.session() as session:
        assert session.exec(select(FoodItem)).all() == []


def test_integrity_errors_become_constraint_violations(database):
    def _work(session):
        now = datetime.now(timezone.utc)
        session.add(MealRecord(date="2025-08-15", created_at=now, updated_at=now))
        session.flush()
        session.add(MealRecord(date="2025-08-15", created_at=now, updated_at=now))
        session.flush()

    with pytest.raises(ConstraintViolation):
        database.run_atomic(_work)

    with database.session() as session:
        assert session.exec(select(MealRecord)).all() == []


def test_missing_table_is_storage_unavailable(database, weights):
    with database.acquire().begin() as conn:
        conn.execute(text("DROP TABLE weight_entries"))

    with pytest.raises(StorageUnavailable) as excinfo:
        weights.upsert("2025-08-15", 180.0)
    assert isinstance(excinfo.value.__cause__, OperationalError)
    assert "weight_entries" in str(excinfo.value)
