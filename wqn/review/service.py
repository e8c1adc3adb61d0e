"""
Review Session Service.

Provides the engine operations used by the API and CLI:
- Start (or resume) a session for a problem set
- Get a session with its problems and result log
- Record progress (answer / skip / heartbeat)
- Complete a session and summarize it
- Delete (abandon) a session
- Problem set progress (status counts)

Coordinates the Access Guard, Filter Engine, Session Composer, state
transitions and Summary Calculator over the store protocols.
"""
from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Callable
from uuid import UUID

from loguru import logger

from config import Settings, get_settings
from wqn.review.access import can_view_session, require_access
from wqn.review.composer import compose
from wqn.review.errors import (
    InvalidInputError,
    InvalidProblemIdError,
    NoMatchingProblemsError,
    NotFoundError,
)
from wqn.review.filter_engine import filter_problems
from wqn.review.models import (
    STATUS_VALUES,
    ActingUser,
    CompletionResult,
    CompletionStatus,
    FilterConfig,
    ProblemRef,
    ProblemSetInfo,
    ProblemStatus,
    ReviewSession,
    SessionConfig,
    SessionResult,
    SessionState,
    SessionSummary,
    SessionView,
    SharingLevel,
    StartSessionResult,
)
from wqn.review.state_machine import ActionKind, apply_progress, derive_action
from wqn.review.stores import (
    ActiveSessionExistsError,
    ProblemSetStore,
    ProblemStore,
    SessionStore,
)
from wqn.review.summary import count_statuses, summarize


def is_valid_uuid(value: str | None) -> bool:
    """Check that value is a canonical UUID string."""
    if not value:
        return False
    try:
        UUID(str(value))
    except ValueError:
        return False
    return True


def require_uuid(value: str | None, label: str) -> str:
    """Return value or raise InvalidInputError("Invalid <label> ID format")."""
    if not is_valid_uuid(value):
        raise InvalidInputError(f"Invalid {label} ID format")
    return str(value)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReviewSessionService:
    """
    High-level service for review sessions.

    One instance per request; the stores share the request's database session.
    """

    def __init__(
        self,
        problems: ProblemStore,
        problem_sets: ProblemSetStore,
        sessions: SessionStore,
        settings: Settings | None = None,
        clock: Callable[[], datetime] | None = None,
        rng: random.Random | None = None,
    ):
        """
        Initialize review session service.

        Args:
            problems: Problem store
            problem_sets: Problem set store
            sessions: Session state store
            settings: Application settings (default: get_settings())
            clock: Returns the current UTC time (injectable for tests)
            rng: Random source for shuffling (injectable for tests)
        """
        self.problems = problems
        self.problem_sets = problem_sets
        self.sessions = sessions
        self.settings = settings or get_settings()
        self._clock = clock or _utcnow
        self._rng = rng

    # ========================================
    # Helpers
    # ========================================

    def _authorize(self, problem_set_id: str, user: ActingUser) -> tuple[ProblemSetInfo, bool]:
        """Look up a set and run the Access Guard. Returns (set, is_owner)."""
        problem_set = self.problem_sets.get_problem_set(problem_set_id)
        shared_emails: list[str] = []
        if (
            problem_set is not None
            and problem_set.user_id != user.id
            and problem_set.sharing_level == SharingLevel.LIMITED.value
        ):
            shared_emails = self.problem_sets.list_shared_emails(problem_set_id)
        decision = require_access(problem_set, user.id, user.email, shared_emails)
        return problem_set, decision.is_owner

    def _eligible_problems(self, problem_set: ProblemSetInfo) -> list[ProblemRef]:
        """Candidate problems: filter results for smart sets, members for manual sets."""
        if problem_set.is_smart:
            if problem_set.filter_config is None:
                raise InvalidInputError("Smart problem set is missing filter configuration")
            filter_config = FilterConfig.from_dict(problem_set.filter_config)
            candidates = self.problems.list_subject_problems(problem_set.user_id, problem_set.subject_id)
            return filter_problems(candidates, filter_config, self._clock())
        return self.problem_sets.list_member_problems(problem_set.id)

    def _load_owned(self, session_id: str, user: ActingUser) -> ReviewSession:
        """Load a session the acting user may see, or raise NotFoundError."""
        require_uuid(session_id, "session")
        session = self.sessions.get(session_id)
        if session is None or not can_view_session(session.user_id, user.id):
            raise NotFoundError("Session not found")
        return session

    def _recheck_access(self, session: ReviewSession, user: ActingUser) -> None:
        """A read-only session may only change while its set is still visible to the user."""
        if session.state.is_read_only:
            self._authorize(session.problem_set_id, user)

    # ========================================
    # Operations
    # ========================================

    def start_session(self, problem_set_id: str, user: ActingUser) -> StartSessionResult:
        """
        Start a session, or resume the user's active one for this set.

        Raises:
            AccessDeniedError: Set missing or not visible to the user
            InvalidInputError: Malformed id or configuration
            NoMatchingProblemsError: Nothing to review
        """
        require_uuid(problem_set_id, "problem set")
        problem_set, is_owner = self._authorize(problem_set_id, user)

        existing = self.sessions.find_active(user.id, problem_set.id)
        if existing is not None:
            logger.info(f"Resuming session {existing.id} for user {user.id} at index {existing.state.current_index}")
            return StartSessionResult(session=existing, is_new=False)

        eligible = self._eligible_problems(problem_set)
        if not eligible:
            raise NoMatchingProblemsError()

        session_config = SessionConfig.from_dict(
            problem_set.session_config,
            defaults=self.settings.get_review_defaults(),
        )
        problem_ids = compose(eligible, session_config, rng=self._rng)
        statuses = {p.id: p.status for p in eligible}

        state = SessionState(
            problem_ids=tuple(problem_ids),
            initial_statuses={pid: statuses[pid] for pid in problem_ids},
            is_read_only=not is_owner,
        )

        try:
            session = self.sessions.create(user.id, problem_set.id, state)
        except ActiveSessionExistsError:
            winner = self.sessions.find_active(user.id, problem_set.id)
            if winner is None:
                raise
            logger.warning(f"Concurrent start for set {problem_set.id}; returning session {winner.id}")
            return StartSessionResult(session=winner, is_new=False)

        logger.info(
            f"Started session {session.id} for user {user.id} "
            f"({len(problem_ids)} problems, read_only={state.is_read_only})"
        )
        return StartSessionResult(session=session, is_new=True)

    def get_session(self, session_id: str, user: ActingUser) -> SessionView:
        """Session with its problems (in session order) and result log."""
        session = self._load_owned(session_id, user)
        problem_ids = session.state.problem_ids
        by_id = {p.id: p for p in self.problems.get_problems(problem_ids)} if problem_ids else {}
        problems = [by_id[pid] for pid in problem_ids if pid in by_id]
        results = self.sessions.list_results(session.id)
        return SessionView(session=session, problems=problems, results=results)

    def record_progress(
        self,
        session_id: str,
        user: ActingUser,
        problem_id: str,
        was_skipped: object = None,
        was_correct: object = None,
        current_index: int | None = None,
        elapsed_ms: int | None = None,
        status: str | None = None,
    ) -> ReviewSession:
        """
        Apply one progress call to an active session.

        Args:
            session_id: Session to update
            user: Acting user (must own the session)
            problem_id: Problem the action refers to
            was_skipped: Exactly True for a skip
            was_correct: A bool for an answer; any other value is a heartbeat
            current_index: New position, clamped to the session
            elapsed_ms: Client-reported elapsed time; never decreases
            status: Status the user selected; implies was_correct when that is absent

        Raises:
            NotFoundError: No active session with this id for the user
            AccessDeniedError: Read-only session whose set is no longer shared with the user
            InvalidProblemIdError: Problem id malformed or not in the session
            InvalidInputError: Negative index/time or unknown status
        """
        require_uuid(session_id, "session")
        if not is_valid_uuid(problem_id):
            raise InvalidProblemIdError()
        if current_index is not None and current_index < 0:
            raise InvalidInputError("currentIndex must not be negative")
        if elapsed_ms is not None and elapsed_ms < 0:
            raise InvalidInputError("elapsed_ms must not be negative")
        if status is not None and status not in STATUS_VALUES:
            raise InvalidInputError(f"Invalid status: {status}")

        session = self._load_owned(session_id, user)
        if not session.is_active:
            raise NotFoundError("Active session not found")
        self._recheck_access(session, user)
        if problem_id not in session.state.problem_ids:
            raise InvalidProblemIdError("Problem is not part of this session")

        if was_correct is None and status is not None and was_skipped is not True:
            was_correct = status == ProblemStatus.MASTERED.value

        action = derive_action(was_skipped, was_correct)
        new_state = apply_progress(session.state, problem_id, action, current_index, elapsed_ms)
        updated = self.sessions.save_state(session.id, new_state)

        if not action.records_result:
            return updated

        now = self._clock()
        self.sessions.append_result(
            session.id,
            SessionResult(
                problem_id=problem_id,
                was_correct=action.was_correct,
                was_skipped=action.kind == ActionKind.SKIP,
                completed_at=now,
            ),
        )

        if action.kind == ActionKind.ANSWER and not session.state.is_read_only:
            self.problems.mark_reviewed(problem_id, session.user_id, now)
            if status is not None:
                self.problems.set_status(problem_id, session.user_id, status)

        logger.debug(f"Session {session.id}: {action.kind.value} on {problem_id}")
        return updated

    def complete_session(self, session_id: str, user: ActingUser) -> CompletionResult:
        """
        Close a session and summarize it.

        The close is committed before the summary is computed; a failing
        summary yields COMPLETED_WITH_DEGRADED_SUMMARY, never a re-opened
        session.
        """
        session = self._load_owned(session_id, user)
        if session.is_active:
            self._recheck_access(session, user)
        closed = self.sessions.deactivate(session.id) if session.is_active else session

        try:
            summary = self.summarize_session(closed)
        except Exception:
            logger.exception(f"Summary failed for session {closed.id}; returning degraded summary")
            summary = SessionSummary(
                total_problems=len(closed.state.problem_ids),
                elapsed_ms=closed.state.elapsed_ms,
                started_at=closed.started_at,
                completed_at=closed.last_activity_at,
            )
            return CompletionResult(
                session=closed,
                summary=summary,
                status=CompletionStatus.COMPLETED_WITH_DEGRADED_SUMMARY,
            )

        logger.info(
            f"Completed session {closed.id}: {summary.correct_count} correct, "
            f"{summary.incorrect_count} incorrect, {summary.skipped_count} skipped"
        )
        return CompletionResult(session=closed, summary=summary)

    def summarize_session(self, session: ReviewSession) -> SessionSummary:
        """Summary from the result log and statuses read now."""
        problem_ids = session.state.problem_ids
        live_statuses = self.problems.get_statuses(problem_ids) if problem_ids else {}
        results = self.sessions.list_results(session.id)
        return summarize(session, results, live_statuses)

    def preview_summary(self, session_id: str, user: ActingUser) -> SessionSummary:
        """Summary of a session without closing it."""
        return self.summarize_session(self._load_owned(session_id, user))

    def delete_session(self, session_id: str, user: ActingUser) -> ReviewSession:
        """Soft-delete (abandon) a session without summarizing it."""
        session = self._load_owned(session_id, user)
        if not session.is_active:
            return session
        self._recheck_access(session, user)
        logger.info(f"Abandoning session {session.id}")
        return self.sessions.deactivate(session.id)

    def list_sessions(self, user: ActingUser, active_only: bool = False) -> list[ReviewSession]:
        return self.sessions.list_sessions(user.id, active_only=active_only)

    def get_problem_set_progress(self, problem_set_id: str, user: ActingUser) -> dict[str, int]:
        """Status counts for the set's current problems."""
        require_uuid(problem_set_id, "problem set")
        problem_set, _ = self._authorize(problem_set_id, user)
        problems = self._eligible_problems(problem_set)
        counts = count_statuses([p.id for p in problems], {p.id: p.status for p in problems})
        return {
            "total_problems": len(problems),
            "wrong_count": counts[ProblemStatus.WRONG.value],
            "needs_review_count": counts[ProblemStatus.NEEDS_REVIEW.value],
            "mastered_count": counts[ProblemStatus.MASTERED.value],
        }
