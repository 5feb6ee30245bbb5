import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("MAIL_SUPPRESS_SEND", "true")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from crm import settings
from crm.database import models  # noqa: F401
from crm.database.config.db import Base, get_db
from crm.database.models.auth import User, UserRole
from crm.database.models.organization import Branch, Region
from crm.main import app
from crm.utils.auth import create_access_token, get_password_hash
from crm.utils.smtp import get_mail_transport

PASSWORD = "Str0ng!Passw0rd"

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# pysqlite does not emit BEGIN on its own; take over so SAVEPOINTs behave
@event.listens_for(engine, "connect")
def _disable_pysqlite_transactions(dbapi_connection, connection_record):
    dbapi_connection.isolation_level = None


@event.listens_for(engine, "begin")
def _emit_begin(conn):
    conn.exec_driver_sql("BEGIN")


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False)


class FakeMailTransport:
    def __init__(self):
        self.outbox = []

    async def send(self, recipients, subject, body, **kwargs):
        if isinstance(recipients, str):
            recipients = [recipients]
        self.outbox.append({"recipients": recipients, "subject": subject, "body": body})


@pytest.fixture(scope="session", autouse=True)
def create_schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def no_code_backoff(monkeypatch):
    monkeypatch.setattr(settings, "CODE_ALLOCATION_BACKOFF_SECONDS", 0)


@pytest.fixture(scope="session")
def password_hash():
    return get_password_hash(PASSWORD)


@pytest.fixture
def db_session():
    """Session whose commits only release a SAVEPOINT; everything is rolled back after the test."""
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection, join_transaction_mode="create_savepoint")
    yield session
    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def mail_transport():
    return FakeMailTransport()


@pytest.fixture
def client(db_session, mail_transport):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mail_transport] = lambda: mail_transport
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def org(db_session):
    """Two regions; north has two branches, south has one."""
    north = Region(name="North")
    south = Region(name="South")
    db_session.add_all([north, south])
    db_session.flush()
    north_1 = Branch(name="North City", region_id=north.id)
    north_2 = Branch(name="North Harbour", region_id=north.id)
    south_1 = Branch(name="South Gate", region_id=south.id)
    db_session.add_all([north_1, north_2, south_1])
    db_session.commit()
    return {
        "north": north,
        "south": south,
        "north_1": north_1,
        "north_2": north_2,
        "south_1": south_1,
    }


@pytest.fixture
def make_user(db_session, password_hash):
    counter = {"n": 0}

    def _make(role: UserRole, region=None, branch=None, email=None, is_active=True) -> User:
        counter["n"] += 1
        user = User(
            email=email or f"{role.value}{counter['n']}@acme-edu.com",
            first_name=role.value.replace("_", " ").title(),
            last_name=str(counter["n"]),
            password_hash=password_hash,
            role=role.value,
            region_id=region.id if region is not None else (branch.region_id if branch is not None else None),
            branch_id=branch.id if branch is not None else None,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make


@pytest.fixture
def super_admin(make_user):
    return make_user(UserRole.SUPER_ADMIN)


@pytest.fixture
def admin(make_user):
    return make_user(UserRole.ADMIN)


@pytest.fixture
def headers_for():
    """Bearer headers for a user."""

    def _headers(user: User) -> dict:
        token = create_access_token(data={"sub": str(user.id), "role": user.role})
        return {"Authorization": f"Bearer {token}"}

    return _headers
