"""
Store abstractions consumed by the review engine.

The engine never talks to the database directly. Implementations:
SQLAlchemy repositories (wqn.db.repositories) for the API and CLI.
"""
from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from wqn.review.models import (
    ProblemRef,
    ProblemSetInfo,
    ReviewSession,
    SessionResult,
    SessionState,
)


class ProblemStore(Protocol):
    """Read problems, write status and last_reviewed_date."""

    def list_subject_problems(self, owner_id: str, subject_id: str) -> list[ProblemRef]:
        """All problems of a subject owned by owner_id, in source order (newest first)."""
        ...

    def get_problems(self, problem_ids: Sequence[str]) -> list[ProblemRef]:
        """Problems by id; missing ids are omitted. Order is not guaranteed."""
        ...

    def get_statuses(self, problem_ids: Sequence[str]) -> dict[str, str]:
        """Current status per problem id."""
        ...

    def mark_reviewed(self, problem_id: str, owner_id: str, reviewed_at: datetime) -> None:
        """Set last_reviewed_date on a problem owned by owner_id."""
        ...

    def set_status(self, problem_id: str, owner_id: str, status: str) -> None:
        """Set status on a problem owned by owner_id."""
        ...


class ProblemSetStore(Protocol):
    """Problem set metadata, manual membership and share lists."""

    def get_problem_set(self, problem_set_id: str) -> ProblemSetInfo | None:
        ...

    def list_member_problems(self, problem_set_id: str) -> list[ProblemRef]:
        """Manual set members in insertion order."""
        ...

    def list_shared_emails(self, problem_set_id: str) -> list[str]:
        ...


class SessionStore(Protocol):
    """Session records and the append-only result log."""

    def find_active(self, user_id: str, problem_set_id: str) -> ReviewSession | None:
        """Most recently started active session for (user, problem set)."""
        ...

    def create(self, user_id: str, problem_set_id: str, state: SessionState) -> ReviewSession:
        """
        Insert a new active session.

        Raises:
            ActiveSessionExistsError: another active session won a concurrent start
        """
        ...

    def get(self, session_id: str) -> ReviewSession | None:
        """Session by id, active or not."""
        ...

    def save_state(self, session_id: str, state: SessionState) -> ReviewSession:
        """Replace the session_state blob and bump last_activity_at."""
        ...

    def deactivate(self, session_id: str) -> ReviewSession:
        """Set is_active=false and bump last_activity_at."""
        ...

    def append_result(self, session_id: str, result: SessionResult) -> SessionResult:
        ...

    def list_results(self, session_id: str) -> list[SessionResult]:
        """Result log in chronological order."""
        ...

    def list_sessions(self, user_id: str, active_only: bool = False) -> list[ReviewSession]:
        ...


class ActiveSessionExistsError(Exception):
    """Raised by SessionStore.create when the active-session uniqueness rule fires."""
