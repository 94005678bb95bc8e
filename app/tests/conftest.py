from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool
from app.main import get_application
from app.database import Database
from app.internal.identity import LocalIdentityProvider
from app.domain.user.models import User, Role
from app.tests.utils import create_test_user
from typing import Callable, Generator
import pytest


@pytest.fixture
def database() -> Generator[Database, None, None]:
    # one shared in-memory connection, so the test session and the app see the same data
    db = Database("sqlite://", poolclass=StaticPool)
    db.connect()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture
def session(database: Database) -> Generator[Session, None, None]:
    db = database.session()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture
def identity_provider() -> LocalIdentityProvider:
    return LocalIdentityProvider(secret_key="test-secret", expire_minutes=5)

@pytest.fixture
def application(database: Database, identity_provider: LocalIdentityProvider) -> FastAPI:
    return get_application(database=database, identity_provider=identity_provider)

@pytest.fixture
def client(application: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(application) as c:
        yield c

@pytest.fixture
def auth(identity_provider: LocalIdentityProvider) -> Callable[[str], dict[str, str]]:
    """Builds the Authorization header for an email."""

    def header(email: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {identity_provider.issue_token(email)}"}

    return header

@pytest.fixture
def citizen(session: Session) -> User:
    return create_test_user(session, "citizen@example.com", name="Alice Citizen")

@pytest.fixture
def other_citizen(session: Session) -> User:
    return create_test_user(session, "bob@example.com", name="Bob Citizen")

@pytest.fixture
def staff_user(session: Session) -> User:
    return create_test_user(session, "staff@example.com", name="Sam Staff", role=Role.STAFF)

@pytest.fixture
def admin_user(session: Session) -> User:
    return create_test_user(session, "admin@example.com", name="Ada Admin", role=Role.ADMIN, is_premium=True)

@pytest.fixture
def authorized_client(client: TestClient, citizen: User, auth) -> TestClient:
    client.headers.update(auth(citizen.email))
    return client

@pytest.fixture
def admin_client(client: TestClient, admin_user: User, auth) -> TestClient:
    client.headers.update(auth(admin_user.email))
    return client
