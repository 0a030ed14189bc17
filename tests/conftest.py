import os

# Must be set before order_pipeline.database creates its engine.
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from order_pipeline import auth
from order_pipeline.clients.payment_gateway import get_payment_gateway
from order_pipeline.database import Base, get_db, make_engine
from order_pipeline.main import app

from doubles import FakeGateway


@pytest.fixture
def db_session():
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def gateway():
    return FakeGateway(approve=True)


@pytest.fixture
def current_user():
    return auth.CurrentUser(id=7, email="admin@example.com", role="admin")


@pytest.fixture
def client(db_session, gateway, current_user):
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[auth.get_current_user] = lambda: current_user
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
