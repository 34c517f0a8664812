"""
Shared fixtures: an in-memory database and a client wired to it.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tallyup.db.base import Base
from tallyup.db.session import get_db
from tallyup.main import app
from tallyup.models import Group, GroupMember

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    """Fresh schema per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    """Test client whose requests share the test's session."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def group(db):
    """Group of three members, in joining order alice, bob, carol."""
    group = Group(
        name="Flat 4B",
        members=[
            GroupMember(member_id="alice", display_name="Alice"),
            GroupMember(member_id="bob", display_name="Bob"),
            GroupMember(member_id="carol", display_name="Carol"),
        ]
    )
    db.add(group)
    db.commit()
    db.refresh(group)
    return group
