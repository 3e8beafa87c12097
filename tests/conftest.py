"""Pytest fixtures for testing"""

from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from loanlight_admin.api.dependencies import get_gateway
from loanlight_admin.api.main import create_app
from loanlight_admin.infrastructure.database.models import Base
from loanlight_admin.infrastructure.database.session import build_session_factory
from loanlight_admin.infrastructure.database.sql_gateway import SqlGateway
from loanlight_admin.services.notifications import Notifier


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite shared across threads (the SQL gateway runs in the threadpool)"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    return build_session_factory(engine)


@pytest.fixture
def gateway(session_factory: sessionmaker) -> SqlGateway:
    return SqlGateway(session_factory)


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture
def seed(session_factory: sessionmaker):
    """Insert ORM rows; they stay readable after the session closes"""

    def _seed(*rows):
        with session_factory(expire_on_commit=False) as db:
            db.add_all(rows)
            db.commit()

    return _seed


@pytest.fixture
def client(gateway: SqlGateway) -> TestClient:
    """Create FastAPI test client backed by the SQLite gateway"""
    app = create_app()
    app.dependency_overrides[get_gateway] = lambda: gateway
    return TestClient(app)
