"""
Test configuration and fixtures.

Provides:
- In-memory SQLite engine per test, injected into create_app
- Two distinct observers with minted access tokens
- Reference data and organization fixtures
- HTTPX AsyncClient over ASGITransport
"""
import os
from dataclasses import dataclass
from datetime import date
from typing import AsyncGenerator, Generator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session, sessionmaker

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ENV"] = "dev"
os.environ["SENTRY_DSN"] = ""

from classroom_observations.core.security import hash_password
from classroom_observations.db.models import (
    Classroom,
    IdeaCategory,
    School,
    Student,
    Teacher,
    User,
)
from classroom_observations.db.session import build_engine, build_session_factory, init_db
from classroom_observations.main import create_app
from classroom_observations.services import auth_service, reference_service

TEST_PASSWORD = "correct-horse-battery"


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def session_factory() -> Generator[sessionmaker, None, None]:
    """Fresh in-memory database for each test."""
    engine = build_engine("sqlite://")
    init_db(engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Session for arranging test data directly in the store."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(scope="function")
def app(session_factory: sessionmaker):
    return create_app(session_factory=session_factory)


# =============================================================================
# Observers
# =============================================================================

@dataclass
class ObserverAuth:
    """Observer account with a ready-to-use access token."""
    user: User
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


def _make_observer(db: Session, email: str, first_name: str, last_name: str) -> ObserverAuth:
    user = User(
        email=email,
        password_hash=hash_password(TEST_PASSWORD),
        first_name=first_name,
        last_name=last_name,
        title="School Psychologist",
        district="Riverside Unified",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return ObserverAuth(user=user, token=auth_service.issue_token(user))


@pytest.fixture(scope="function")
def observer(db: Session) -> ObserverAuth:
    return _make_observer(db, "jturner@example.com", "Jerry", "Turner")


@pytest.fixture(scope="function")
def other_observer(db: Session) -> ObserverAuth:
    return _make_observer(db, "mlopez@example.com", "Maria", "Lopez")


# =============================================================================
# Reference & Organization Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def reference_data(db: Session) -> dict:
    return reference_service.seed_reference_data(db)


@pytest.fixture(scope="function")
def idea_categories(db: Session, reference_data) -> dict[str, IdeaCategory]:
    return {c.code: c for c in db.query(IdeaCategory).all()}


@pytest.fixture(scope="function")
def school(db: Session) -> School:
    school = School(
        name="Lincoln Elementary",
        district="Riverside Unified",
        address="100 Main St",
        principal="Dr. Adams",
    )
    db.add(school)
    db.commit()
    db.refresh(school)
    return school


@pytest.fixture(scope="function")
def teacher(db: Session, school: School) -> Teacher:
    teacher = Teacher(first_name="Ann", last_name="Baker", school_id=school.id)
    db.add(teacher)
    db.commit()
    db.refresh(teacher)
    return teacher


@pytest.fixture(scope="function")
def classroom(db: Session, school: School, teacher: Teacher) -> Classroom:
    classroom = Classroom(
        name="Room 12",
        school_id=school.id,
        teacher_id=teacher.id,
        subject="Math",
        capacity=25,
    )
    db.add(classroom)
    db.commit()
    db.refresh(classroom)
    return classroom


@pytest.fixture(scope="function")
def student(db: Session, school: School, idea_categories) -> Student:
    student = Student(
        first_name="John",
        last_name="Smith",
        date_of_birth=date(2016, 5, 15),
        grade="3rd Grade",
        school_id=school.id,
        primary_idea_category_id=idea_categories["AU"].id,
    )
    db.add(student)
    db.commit()
    db.refresh(student)
    return student


@pytest.fixture(scope="function")
def observation_payload(student: Student, classroom: Classroom, teacher: Teacher) -> dict:
    return {
        "student_id": str(student.id),
        "classroom_id": str(classroom.id),
        "teacher_id": str(teacher.id),
        "date": "2024-03-15",
        "start_time": "09:00",
        "setting": "General Education",
        "total_students": 24,
        "total_teachers": 1,
        "purpose": "Baseline behavior observation",
    }


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture(scope="function")
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Unauthenticated client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest.fixture(scope="function")
async def authed_client(app, observer: ObserverAuth) -> AsyncGenerator[AsyncClient, None]:
    """Client signed in as the primary observer (bearer token)."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers=observer.headers,
    ) as c:
        yield c


@pytest.fixture(scope="function")
async def other_client(app, other_observer: ObserverAuth) -> AsyncGenerator[AsyncClient, None]:
    """Client signed in as a second, unrelated observer."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers=other_observer.headers,
    ) as c:
        yield c


@pytest.fixture(scope="function")
async def observation(authed_client: AsyncClient, observation_payload: dict) -> dict:
    """Draft observation owned by the primary observer."""
    response = await authed_client.post("/observations", json=observation_payload)
    assert response.status_code == 201, response.text
    return response.json()
