"""
Pytest Configuration and Fixtures.

Shared fixtures: an in-memory SQLite database per test, a frozen clock and
a seeded learner with one course of lessons.
"""
from datetime import date

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from lesson_srs.clock import FixedClock
from lesson_srs.crud import create_course, create_lesson, create_user, record_attempt, record_quiz_attempt
from lesson_srs.database import init_db, make_engine
from lesson_srs.schemas import AttemptSubmission, CourseCreate, LessonCreate, QuizAttemptCreate, UserCreate

TODAY = date(2025, 3, 10)


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        path = str(item.fspath)
        if "unit" in path:
            item.add_marker(pytest.mark.unit)
        elif "integration" in path:
            item.add_marker(pytest.mark.integration)
        elif "smoke" in path:
            item.add_marker(pytest.mark.smoke)


@pytest.fixture
def engine():
    """In-memory SQLite shared across threads through a single connection."""
    engine = make_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FixedClock(TODAY)


@pytest.fixture
def user(db):
    return create_user(db, UserCreate(name="Ada", email="ada@example.com"))


@pytest.fixture
def course(db, user):
    return create_course(db, CourseCreate(user_id=user.id, title="Networking Basics", topic="Networking"))


@pytest.fixture
def lessons(db, course):
    return [
        create_lesson(db, LessonCreate(course_id=course.id, title=f"Lesson {i}", order=i))
        for i in range(1, 6)
    ]


@pytest.fixture
def lesson(lessons):
    return lessons[0]


@pytest.fixture
def submit(db, user):
    """Store a quiz attempt on a given day and apply it to the lesson's review."""

    def _submit(lesson, score, on=TODAY, user_id=None):
        user_id = user_id or user.id
        day_clock = FixedClock(on)
        attempt = record_quiz_attempt(
            db,
            QuizAttemptCreate(user_id=user_id, lesson_id=lesson.id, score=score),
            now=day_clock.now(),
        )
        return record_attempt(
            db,
            AttemptSubmission(user_id=user_id, lesson_id=lesson.id, score=score, attempt_id=attempt.id),
            clock=day_clock,
        )

    return _submit
