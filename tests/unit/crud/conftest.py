"""Shared fixtures for crud unit tests"""

import pytest
from sqlmodel import SQLModel

from mdsite.crud.cache import CacheStore
from mdsite.crud.database import init_db, make_engine


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = make_engine("sqlite://")
    init_db(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="store")
def store_fixture(engine):
    return CacheStore(engine)
