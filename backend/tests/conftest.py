import tempfile
from contextlib import suppress
from pathlib import Path
from typing import AsyncIterator, Iterator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from healthlog.core.config import Settings
from healthlog.core.database import Database
from healthlog.main import create_app
from healthlog.projector import CompatibilityProjector, build_projector
from healthlog.stores import FoodCatalog, MealLedger, WeightLedger


@pytest.fixture(scope="function")
def database() -> Iterator[Database]:
    # Use a fresh SQLite DB file in a temp dir per test for isolation
    tmp = tempfile.TemporaryDirectory()
    db_path = Path(tmp.name) / "test.db"
    db = Database(f"sqlite:///{db_path.as_posix()}")
    db.acquire()
    try:
        yield db
    finally:
        db.release()
        with suppress(Exception):
            tmp.cleanup()


@pytest.fixture
def catalog(database: Database) -> FoodCatalog:
    return FoodCatalog(database)


@pytest.fixture
def ledger(database: Database) -> MealLedger:
    return MealLedger(database)


@pytest.fixture
def weights(database: Database) -> WeightLedger:
    return WeightLedger(database)


@pytest.fixture
def projector(database: Database) -> CompatibilityProjector:
    return build_projector(database)


@pytest.fixture
def test_app(database: Database) -> FastAPI:
    settings = Settings(database_url=database.url)
    return create_app(settings, database=database)


@pytest.fixture
async def client(test_app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
