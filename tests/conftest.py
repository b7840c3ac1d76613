"""
Relief Hub - test configuration and fixtures
"""
import os
from datetime import timedelta
from typing import Callable, Generator

# Point the app at a throwaway in-memory database before anything imports it
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["PASSWORD_ROUNDS"] = "1000"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from faker import Faker
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from reliefhub.database import engine, SessionLocal
from reliefhub.deps import principal_for
from reliefhub.main import app
from reliefhub.models import Base, ResourceCategory, Role, TaskStatus, User, VolunteerTask
from reliefhub.schemas import Principal
from reliefhub.security import hash_password
from reliefhub.utils import utcnow

fake = Faker()

DEFAULT_PASSWORD = "testpassword123"


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """Fresh schema and session for each test"""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Test client running the app's startup hooks against the test database"""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(db_session: Session) -> Callable[..., User]:
    def _make(role: Role = Role.VOLUNTEER, email: str | None = None, password: str = DEFAULT_PASSWORD,
              is_active: bool = True) -> User:
        user = User(
            email=email or fake.unique.email(),
            password_hash=hash_password(password),
            first_name=fake.first_name().replace("'", ""),
            last_name=fake.last_name().replace("'", ""),
            phone=fake.phone_number()[:50],
            address=fake.street_address(),
            role=role,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make


@pytest.fixture
def volunteer(make_user) -> User:
    return make_user(Role.VOLUNTEER)


@pytest.fixture
def admin(make_user) -> User:
    return make_user(Role.ADMIN)


@pytest.fixture
def as_principal() -> Callable[[User], Principal]:
    return principal_for


@pytest.fixture
def make_task(db_session: Session) -> Callable[..., VolunteerTask]:
    def _make(required: int = 2, current: int = 0, incident_id: str | None = None,
              starts_in: timedelta = timedelta(days=2), status: TaskStatus = TaskStatus.OPEN,
              title: str | None = None) -> VolunteerTask:
        start = utcnow() + starts_in
        task = VolunteerTask(
            incident_id=incident_id,
            title=title or fake.sentence(nb_words=4),
            description=fake.paragraph(),
            task_type="Distribution",
            location=fake.city(),
            required_volunteers=required,
            current_volunteers=current,
            start_date=start,
            end_date=start + timedelta(hours=8),
            status=status,
        )
        db_session.add(task)
        db_session.commit()
        db_session.refresh(task)
        return task
    return _make


@pytest.fixture
def category(db_session: Session) -> ResourceCategory:
    cat = db_session.query(ResourceCategory).filter(ResourceCategory.name == "Test Supplies").one_or_none()
    if cat is None:
        cat = ResourceCategory(name="Test Supplies", description="Supplies used in tests")
        db_session.add(cat)
        db_session.commit()
        db_session.refresh(cat)
    return cat


def login(client: TestClient, email: str, password: str = DEFAULT_PASSWORD):
    return client.post(
        "/account/login",
        data={"email": email, "password": password},
        follow_redirects=False,
    )
