"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
Database tests run against in-memory SQLite; DATABASE_URL is forced before
any project module reads the settings.
"""
import os
import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from wqn.db.models import (  # noqa: E402
    Base,
    Problem,
    ProblemSet,
    ProblemSetProblem,
    ProblemSetShare,
    ProblemTag,
    Subject,
    Tag,
)
from wqn.db.repositories import build_review_service  # noqa: E402
from wqn.review.models import ActingUser  # noqa: E402

OWNER = ActingUser(id="0b8f6f0e-4a43-4c1e-9d55-6d1f3c2b7a01", email="owner@example.com")
VIEWER = ActingUser(id="5c2d9a7e-1f3b-4e8a-b6c4-2a9e8d7f6b02", email="Viewer@Example.com")
STRANGER = ActingUser(id="9e4a1c3d-7b2f-4d6e-8a5c-1f3e2d4c6b03", email="stranger@example.com")

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (in-memory SQLite)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


# ========================================
# Database
# ========================================


@pytest.fixture
def db_engine():
    """Fresh in-memory SQLite database with all tables."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    """ORM session bound to the test database."""
    factory = sessionmaker(bind=db_engine, autoflush=False, expire_on_commit=False)
    session = factory()
    try:
        yield session
    finally:
        session.close()


class TickingClock:
    """Clock that advances one second per call so result timestamps are ordered."""

    def __init__(self, start: datetime = NOW, step: timedelta = timedelta(seconds=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def service(db_session, clock):
    """ReviewSessionService on the test database with a fixed-seed shuffle."""
    return build_review_service(db_session, clock=clock, rng=random.Random(7))


class Notebook:
    """Builder for notebook content in the test database."""

    def __init__(self, db):
        self.db = db
        self._created = NOW - timedelta(days=365)

    def subject(self, owner: ActingUser = OWNER, name: str = "Linear Algebra") -> Subject:
        subject = Subject(user_id=owner.id, name=name)
        self.db.add(subject)
        self.db.commit()
        return subject

    def tag(self, subject: Subject, name: str) -> Tag:
        tag = Tag(user_id=subject.user_id, subject_id=subject.id, name=name)
        self.db.add(tag)
        self.db.commit()
        return tag

    def problem(
        self,
        subject: Subject,
        title: str = "",
        status: str = "needs_review",
        problem_type: str = "short",
        tags: tuple = (),
        last_reviewed: datetime | None = None,
    ) -> Problem:
        # Each problem is one hour newer than the previous one
        self._created = self._created + timedelta(hours=1)
        problem = Problem(
            user_id=subject.user_id,
            subject_id=subject.id,
            title=title,
            status=status,
            problem_type=problem_type,
            last_reviewed_date=last_reviewed,
            created_at=self._created,
        )
        for tag in tags:
            problem.tag_links.append(ProblemTag(tag_id=tag.id, user_id=subject.user_id))
        self.db.add(problem)
        self.db.commit()
        return problem

    def problem_set(
        self,
        subject: Subject,
        problems: list[Problem] = (),
        name: str = "Midterm review",
        sharing_level: str = "private",
        is_smart: bool = False,
        filter_config: dict | None = None,
        session_config: dict | None = None,
        shared_with: tuple = (),
    ) -> ProblemSet:
        problem_set = ProblemSet(
            user_id=subject.user_id,
            subject_id=subject.id,
            name=name,
            sharing_level=sharing_level,
            is_smart=is_smart,
            filter_config=filter_config,
            session_config=session_config,
        )
        self.db.add(problem_set)
        self.db.flush()
        for problem in problems:
            self.db.add(ProblemSetProblem(problem_set_id=problem_set.id, problem_id=problem.id))
            self.db.flush()
        for email in shared_with:
            self.db.add(ProblemSetShare(problem_set_id=problem_set.id, shared_with_email=email))
        self.db.commit()
        return problem_set


@pytest.fixture
def notebook(db_session):
    return Notebook(db_session)


@pytest.fixture
def ordered_set(notebook):
    """Private manual set of four problems reviewed in membership order."""
    subject = notebook.subject()
    problems = [
        notebook.problem(subject, title="Eigenvalues of a 2x2", status="wrong"),
        notebook.problem(subject, title="Rank-nullity", status="wrong"),
        notebook.problem(subject, title="Gram-Schmidt", status="needs_review"),
        notebook.problem(subject, title="Determinant expansion", status="mastered"),
    ]
    problem_set = notebook.problem_set(
        subject, problems, session_config={"randomize": False, "session_size": None}
    )
    return problem_set, problems


# ========================================
# Users
# ========================================


@pytest.fixture
def owner():
    return OWNER


@pytest.fixture
def viewer():
    return VIEWER


@pytest.fixture
def stranger():
    return STRANGER
