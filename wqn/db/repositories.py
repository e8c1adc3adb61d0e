"""
SQLAlchemy implementations of the review engine stores.

All three repositories share one ORM session (one per request). Every write
commits immediately so a later failure in the same request never rolls back
an earlier, already acknowledged step (e.g. closing a session before its
summary is computed).

SQLite returns naive datetimes; they are read back as UTC.
"""
from __future__ import annotations

from datetime import datetime
from typing import Sequence

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from wqn.db.models import (
    Problem,
    ProblemSet,
    ProblemSetProblem,
    ProblemSetShare,
    ReviewSessionResult,
    ReviewSessionState,
)
from wqn.db.models.base import utcnow
from wqn.review.errors import NotFoundError
from wqn.review.filter_engine import as_utc
from wqn.review.models import (
    ProblemRef,
    ProblemSetInfo,
    ReviewSession,
    SessionResult,
    SessionState,
)
from wqn.review.service import ReviewSessionService
from wqn.review.stores import ActiveSessionExistsError


def _utc(value: datetime | None) -> datetime | None:
    return as_utc(value) if value is not None else None


def to_problem_ref(problem: Problem) -> ProblemRef:
    """Convert an ORM problem (with tag_links loaded) to the engine view."""
    return ProblemRef(
        id=problem.id,
        status=problem.status,
        problem_type=problem.problem_type,
        tag_ids=problem.tag_ids,
        last_reviewed_date=_utc(problem.last_reviewed_date),
        title=problem.title,
        subject_id=problem.subject_id,
        created_at=_utc(problem.created_at),
    )


def to_review_session(row: ReviewSessionState) -> ReviewSession:
    return ReviewSession(
        id=row.id,
        user_id=row.user_id,
        problem_set_id=row.problem_set_id,
        state=SessionState.from_dict(row.session_state or {}),
        is_active=row.is_active,
        started_at=_utc(row.started_at),
        last_activity_at=_utc(row.last_activity_at),
    )


def to_session_result(row: ReviewSessionResult) -> SessionResult:
    return SessionResult(
        id=row.id,
        problem_id=row.problem_id,
        was_correct=row.was_correct,
        was_skipped=row.was_skipped,
        completed_at=_utc(row.completed_at),
    )


class SqlProblemStore:
    """Problem store backed by the problems / problem_tag tables."""

    def __init__(self, db: Session):
        self.db = db

    def list_subject_problems(self, owner_id: str, subject_id: str) -> list[ProblemRef]:
        stmt = (
            select(Problem)
            .where(Problem.user_id == owner_id, Problem.subject_id == subject_id)
            .options(selectinload(Problem.tag_links))
            .order_by(Problem.created_at.desc(), Problem.id)
        )
        return [to_problem_ref(p) for p in self.db.scalars(stmt)]

    def get_problems(self, problem_ids: Sequence[str]) -> list[ProblemRef]:
        if not problem_ids:
            return []
        stmt = (
            select(Problem)
            .where(Problem.id.in_(list(problem_ids)))
            .options(selectinload(Problem.tag_links))
        )
        return [to_problem_ref(p) for p in self.db.scalars(stmt)]

    def get_statuses(self, problem_ids: Sequence[str]) -> dict[str, str]:
        if not problem_ids:
            return {}
        rows = self.db.execute(
            select(Problem.id, Problem.status).where(Problem.id.in_(list(problem_ids)))
        )
        return {pid: status for pid, status in rows}

    def mark_reviewed(self, problem_id: str, owner_id: str, reviewed_at: datetime) -> None:
        self.db.execute(
            update(Problem)
            .where(Problem.id == problem_id, Problem.user_id == owner_id)
            .values(last_reviewed_date=reviewed_at, updated_at=utcnow())
        )
        self.db.commit()

    def set_status(self, problem_id: str, owner_id: str, status: str) -> None:
        self.db.execute(
            update(Problem)
            .where(Problem.id == problem_id, Problem.user_id == owner_id)
            .values(status=status, updated_at=utcnow())
        )
        self.db.commit()
        logger.debug(f"Problem {problem_id} status -> {status}")


class SqlProblemSetStore:
    """Problem set store backed by problem_sets and its membership/share tables."""

    def __init__(self, db: Session):
        self.db = db

    def get_problem_set(self, problem_set_id: str) -> ProblemSetInfo | None:
        row = self.db.get(ProblemSet, problem_set_id)
        if row is None:
            return None
        return ProblemSetInfo(
            id=row.id,
            user_id=row.user_id,
            subject_id=row.subject_id,
            name=row.name,
            sharing_level=row.sharing_level,
            is_smart=row.is_smart,
            filter_config=row.filter_config,
            session_config=row.session_config,
        )

    def list_member_problems(self, problem_set_id: str) -> list[ProblemRef]:
        stmt = (
            select(Problem)
            .join(ProblemSetProblem, ProblemSetProblem.problem_id == Problem.id)
            .where(ProblemSetProblem.problem_set_id == problem_set_id)
            .options(selectinload(Problem.tag_links))
            .order_by(ProblemSetProblem.position)
        )
        return [to_problem_ref(p) for p in self.db.scalars(stmt)]

    def list_shared_emails(self, problem_set_id: str) -> list[str]:
        stmt = select(ProblemSetShare.shared_with_email).where(
            ProblemSetShare.problem_set_id == problem_set_id
        )
        return list(self.db.scalars(stmt))


class SqlSessionStore:
    """Session store backed by review_session_state / review_session_results."""

    def __init__(self, db: Session):
        self.db = db

    def _row(self, session_id: str) -> ReviewSessionState:
        row = self.db.get(ReviewSessionState, session_id)
        if row is None:
            raise NotFoundError("Session not found")
        return row

    def find_active(self, user_id: str, problem_set_id: str) -> ReviewSession | None:
        stmt = (
            select(ReviewSessionState)
            .where(
                ReviewSessionState.user_id == user_id,
                ReviewSessionState.problem_set_id == problem_set_id,
                ReviewSessionState.is_active.is_(True),
            )
            .order_by(ReviewSessionState.started_at.desc())
            .limit(1)
        )
        row = self.db.scalars(stmt).first()
        return to_review_session(row) if row is not None else None

    def create(self, user_id: str, problem_set_id: str, state: SessionState) -> ReviewSession:
        now = utcnow()
        row = ReviewSessionState(
            user_id=user_id,
            problem_set_id=problem_set_id,
            is_active=True,
            session_state=state.to_dict(),
            started_at=now,
            last_activity_at=now,
        )
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ActiveSessionExistsError(
                f"Active session already exists for user {user_id} and set {problem_set_id}"
            ) from e
        return to_review_session(row)

    def get(self, session_id: str) -> ReviewSession | None:
        row = self.db.get(ReviewSessionState, session_id)
        return to_review_session(row) if row is not None else None

    def save_state(self, session_id: str, state: SessionState) -> ReviewSession:
        row = self._row(session_id)
        row.session_state = state.to_dict()
        row.last_activity_at = utcnow()
        self.db.commit()
        return to_review_session(row)

    def deactivate(self, session_id: str) -> ReviewSession:
        row = self._row(session_id)
        row.is_active = False
        row.last_activity_at = utcnow()
        self.db.commit()
        return to_review_session(row)

    def append_result(self, session_id: str, result: SessionResult) -> SessionResult:
        row = ReviewSessionResult(
            session_state_id=session_id,
            problem_id=result.problem_id,
            was_correct=result.was_correct,
            was_skipped=result.was_skipped,
            completed_at=result.completed_at or utcnow(),
        )
        self.db.add(row)
        self.db.commit()
        return to_session_result(row)

    def list_results(self, session_id: str) -> list[SessionResult]:
        stmt = (
            select(ReviewSessionResult)
            .where(ReviewSessionResult.session_state_id == session_id)
            .order_by(ReviewSessionResult.completed_at)
        )
        return [to_session_result(r) for r in self.db.scalars(stmt)]

    def list_sessions(self, user_id: str, active_only: bool = False) -> list[ReviewSession]:
        stmt = select(ReviewSessionState).where(ReviewSessionState.user_id == user_id)
        if active_only:
            stmt = stmt.where(ReviewSessionState.is_active.is_(True))
        stmt = stmt.order_by(ReviewSessionState.last_activity_at.desc())
        return [to_review_session(r) for r in self.db.scalars(stmt)]


def build_review_service(db: Session, **kwargs) -> ReviewSessionService:
    """ReviewSessionService whose stores share one ORM session."""
    return ReviewSessionService(
        problems=SqlProblemStore(db),
        problem_sets=SqlProblemSetStore(db),
        sessions=SqlSessionStore(db),
        **kwargs,
    )
