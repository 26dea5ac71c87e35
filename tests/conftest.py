import time
from unittest.mock import MagicMock

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from order_service.app import create_app as create_order_app
from order_service.database import Base
from order_service.identity import IdentityClient
from platform_common.auth import TokenVerifier

SECRET = "order-platform-test-secret-0123456789"


def make_token(user_id=42, secret=SECRET, expires_in=3600, **extra):
    now = int(time.time())
    payload = {"userId": user_id, "iat": now, "exp": now + expires_in}
    payload.update(extra)
    return jwt.encode(payload, secret, algorithm="HS256")


def bearer(user_id=42, **kwargs):
    return {"Authorization": f"Bearer {make_token(user_id, **kwargs)}"}


@pytest.fixture
def verifier():
    return TokenVerifier(SECRET)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def identity():
    client = MagicMock(spec=IdentityClient)
    client.exists.return_value = True
    return client


@pytest.fixture
def order_client(verifier, identity, engine):
    return TestClient(create_order_app(verifier, identity, engine))
