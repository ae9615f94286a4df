import os

# keep the module-level engine off the filesystem during tests
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from library_app.db import get_db, init_db
from library_app.main import app
from library_app.services import books, users


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_book(db):
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        data = {"name": f"Book {counter['n']:03d}", "author": "Some Author"}
        data.update(overrides)
        return books.create_book(db, **data)

    return _make


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        data = {"name": f"Reader {counter['n']}", "email": f"reader{counter['n']}@example.com"}
        data.update(overrides)
        return users.create_user(db, **data)

    return _make
