"""
Pytest fixtures for the test suite.

Data-layer and API tests use an in-memory SQLite engine and a session that rolls
back after each test, so tests do not affect each other. Policy tests need no
database at all.
"""
from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker


TEST_DB_URL = "sqlite:///:memory:"
MATRIX_PATH = Path(__file__).resolve().parents[1] / "config" / "authorization_matrix.yaml"


@pytest.fixture
def engine():
    """Create a fresh in-memory SQLite engine for each test."""
    return create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        echo=False,
    )


@pytest.fixture
def tables(engine):
    """Create all ORM tables on the test engine."""
    from taskauthz.db.base import Base
    from taskauthz.models import security, tasks  # noqa: F401  (register tables)
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def db_session(tables):
    """
    Provide a Session bound to the test DB; roll back after each test.

    The transaction is rolled back so the next test gets a clean state.
    """
    connection = tables.connect()
    transaction = connection.begin()
    TestSession = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        class_=Session,
    )
    session = TestSession()
    yield session
    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def seeded_db(db_session):
    """The demo data set from init_db, inside the rolled-back test transaction."""
    from taskauthz.db.init_db import seed_demo_data
    seed_demo_data(db_session)
    return db_session


@pytest.fixture
def matrix():
    from taskauthz.policy import load_rule_matrix
    return load_rule_matrix(MATRIX_PATH)


@pytest.fixture
def evaluator(matrix):
    from taskauthz.policy import PolicyEvaluator
    return PolicyEvaluator(matrix)


@pytest.fixture
def client(seeded_db, evaluator):
    """TestClient over the real app, wired to the test session (lifespan not run)."""
    from fastapi.testclient import TestClient

    from taskauthz.db.session import get_db
    from taskauthz.main import create_app

    app = create_app()
    app.state.evaluator = evaluator
    app.dependency_overrides[get_db] = lambda: seeded_db
    return TestClient(app)


@pytest.fixture
def user_by_name(seeded_db):
    from taskauthz.models.security import User

    def lookup(username: str) -> User:
        return seeded_db.execute(select(User).where(User.username == username)).scalar_one()

    return lookup


@pytest.fixture
def auth_header(user_by_name):
    """Build an Authorization header for a seeded user."""
    from taskauthz.security.auth import create_access_token
    from taskauthz.settings import get_settings

    def header(username: str) -> dict[str, str]:
        user = user_by_name(username)
        token = create_access_token({"sub": str(user.id), "role": user.role}, get_settings())
        return {"Authorization": f"Bearer {token}"}

    return header


@pytest.fixture(scope="session")
def anyio_backend():
    """Run anyio-marked tests on asyncio only (the tests use asyncio primitives)."""
    return "asyncio"
