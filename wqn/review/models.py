"""
Domain types for the review session engine.

Implements:
- ProblemRef: the slice of a problem the engine reads (and the two fields it writes)
- FilterConfig / SessionConfig: immutable problem-set configuration
- SessionState: the per-session progress blob (stored as JSON)
- ReviewSession / SessionResult: persisted session record and result log entry
- SessionSummary / CompletionResult: output of session completion

Status values:
- wrong: answered incorrectly, needs rework
- needs_review: default for new problems
- mastered: answered correctly and confidently
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Mapping

from wqn.review.errors import InvalidInputError


class ProblemStatus(str, Enum):
    """Review status of a problem."""
    WRONG = "wrong"
    NEEDS_REVIEW = "needs_review"
    MASTERED = "mastered"


class ProblemType(str, Enum):
    """Answer format of a problem."""
    MCQ = "mcq"
    SHORT = "short"
    EXTENDED = "extended"


class SharingLevel(str, Enum):
    """Visibility of a problem set."""
    PRIVATE = "private"
    LIMITED = "limited"
    PUBLIC = "public"


class CompletionStatus(str, Enum):
    """Outcome of closing a session."""
    COMPLETED = "completed"
    COMPLETED_WITH_DEGRADED_SUMMARY = "completed_with_degraded_summary"


STATUS_VALUES = tuple(s.value for s in ProblemStatus)


def _coerce_enum_values(values: Iterable[Any] | None, enum_cls: type[Enum], name: str) -> frozenset[str]:
    result = set()
    for value in values or ():
        raw = value.value if isinstance(value, Enum) else str(value)
        try:
            result.add(enum_cls(raw).value)
        except ValueError as e:
            raise InvalidInputError(f"Invalid {name}: {raw}") from e
    return frozenset(result)


@dataclass(frozen=True)
class ProblemRef:
    """A problem as seen by the engine."""

    id: str
    status: str
    problem_type: str
    tag_ids: frozenset[str] = frozenset()
    last_reviewed_date: datetime | None = None
    title: str = ""
    subject_id: str | None = None
    created_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "subject_id": self.subject_id,
            "status": self.status,
            "problem_type": self.problem_type,
            "tag_ids": sorted(self.tag_ids),
            "last_reviewed_date": self.last_reviewed_date.isoformat() if self.last_reviewed_date else None,
        }


@dataclass(frozen=True)
class FilterConfig:
    """Eligibility rules for a smart problem set. Empty collections mean no restriction."""

    tag_ids: frozenset[str] = frozenset()
    statuses: frozenset[str] = frozenset()
    problem_types: frozenset[str] = frozenset()
    days_since_review: int | None = None
    include_never_reviewed: bool = True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "FilterConfig":
        """
        Build from a stored filter_config blob, filling the defaults the
        stored form may omit.

        Raises:
            InvalidInputError: unknown status/type or negative days_since_review
        """
        data = data or {}
        days = data.get("days_since_review")
        if days is not None:
            if isinstance(days, bool) or not isinstance(days, int):
                raise InvalidInputError("days_since_review must be an integer")
            if days < 0:
                raise InvalidInputError("days_since_review must not be negative")
        include_never = data.get("include_never_reviewed")
        return cls(
            tag_ids=frozenset(str(t) for t in data.get("tag_ids") or ()),
            statuses=_coerce_enum_values(data.get("statuses"), ProblemStatus, "status"),
            problem_types=_coerce_enum_values(data.get("problem_types"), ProblemType, "problem type"),
            days_since_review=days,
            include_never_reviewed=True if include_never is None else bool(include_never),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "tag_ids": sorted(self.tag_ids),
            "statuses": sorted(self.statuses),
            "problem_types": sorted(self.problem_types),
            "days_since_review": self.days_since_review,
            "include_never_reviewed": self.include_never_reviewed,
        }


@dataclass(frozen=True)
class SessionConfig:
    """How a problem list becomes a session sequence."""

    randomize: bool = True
    session_size: int | None = None
    auto_advance: bool = False  # UI hint only

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any] | None,
        defaults: Mapping[str, Any] | None = None,
    ) -> "SessionConfig":
        """
        Build from a stored session_config blob.

        Args:
            data: Stored config, or None to use defaults
            defaults: Values used for missing keys

        Raises:
            InvalidInputError: session_size not a positive integer
        """
        merged = dict(defaults or {})
        merged.update({k: v for k, v in (data or {}).items() if v is not None or k == "session_size"})
        size = merged.get("session_size")
        if size is not None:
            if isinstance(size, bool) or not isinstance(size, int) or size < 1:
                raise InvalidInputError("session_size must be a positive integer")
        return cls(
            randomize=bool(merged.get("randomize", True)),
            session_size=size,
            auto_advance=bool(merged.get("auto_advance", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SessionState:
    """
    Progress of one review session.

    problem_ids is fixed at creation and defines both order and the progress
    denominator. completed/skipped are duplicate-free and mutually exclusive;
    the update methods below are the only way to change them.
    """

    problem_ids: tuple[str, ...]
    current_index: int = 0
    completed_problem_ids: tuple[str, ...] = ()
    skipped_problem_ids: tuple[str, ...] = ()
    initial_statuses: Mapping[str, str] = field(default_factory=dict)
    elapsed_ms: int = 0
    is_read_only: bool = False

    def clamp_index(self, index: int) -> int:
        """Clamp a position to [0, len(problem_ids) - 1]."""
        if not self.problem_ids:
            return 0
        return max(0, min(index, len(self.problem_ids) - 1))

    def mark_skipped(self, problem_id: str) -> "SessionState":
        """Record a skip. No-op when already skipped or already answered."""
        if problem_id in self.skipped_problem_ids or problem_id in self.completed_problem_ids:
            return self
        return replace(self, skipped_problem_ids=self.skipped_problem_ids + (problem_id,))

    def mark_answered(self, problem_id: str) -> "SessionState":
        """Record an answer; it supersedes an earlier skip."""
        completed = self.completed_problem_ids
        if problem_id not in completed:
            completed = completed + (problem_id,)
        skipped = tuple(pid for pid in self.skipped_problem_ids if pid != problem_id)
        return replace(self, completed_problem_ids=completed, skipped_problem_ids=skipped)

    def move_to(self, index: int | None = None, elapsed_ms: int | None = None) -> "SessionState":
        """Update position and timer. elapsed_ms never decreases."""
        state = self
        if index is not None:
            state = replace(state, current_index=self.clamp_index(index))
        if elapsed_ms is not None:
            state = replace(state, elapsed_ms=max(self.elapsed_ms, int(elapsed_ms)))
        return state

    @property
    def current_problem_id(self) -> str | None:
        if not self.problem_ids:
            return None
        return self.problem_ids[self.clamp_index(self.current_index)]

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape stored in review_session_state.session_state."""
        return {
            "problem_ids": list(self.problem_ids),
            "current_index": self.current_index,
            "completed_problem_ids": list(self.completed_problem_ids),
            "skipped_problem_ids": list(self.skipped_problem_ids),
            "initial_statuses": dict(self.initial_statuses),
            "elapsed_ms": self.elapsed_ms,
            "is_read_only": self.is_read_only,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SessionState":
        """Create from the stored JSON shape, dropping duplicates and overlaps."""
        completed = tuple(dict.fromkeys(data.get("completed_problem_ids") or ()))
        skipped = tuple(
            pid for pid in dict.fromkeys(data.get("skipped_problem_ids") or ()) if pid not in completed
        )
        state = cls(
            problem_ids=tuple(data.get("problem_ids") or ()),
            completed_problem_ids=completed,
            skipped_problem_ids=skipped,
            initial_statuses=dict(data.get("initial_statuses") or {}),
            elapsed_ms=int(data.get("elapsed_ms") or 0),
            is_read_only=bool(data.get("is_read_only", False)),
        )
        return replace(state, current_index=state.clamp_index(int(data.get("current_index") or 0)))


@dataclass(frozen=True)
class ReviewSession:
    """Persisted session record."""

    id: str
    user_id: str
    problem_set_id: str
    state: SessionState
    is_active: bool = True
    started_at: datetime | None = None
    last_activity_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "problem_set_id": self.problem_set_id,
            "is_active": self.is_active,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "last_activity_at": self.last_activity_at.isoformat() if self.last_activity_at else None,
            "session_state": self.state.to_dict(),
        }


@dataclass(frozen=True)
class SessionResult:
    """One recorded outcome (answer or skip)."""

    problem_id: str
    was_correct: bool | None
    was_skipped: bool
    completed_at: datetime | None = None
    id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "problem_id": self.problem_id,
            "was_correct": self.was_correct,
            "was_skipped": self.was_skipped,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


@dataclass(frozen=True)
class ProblemSetInfo:
    """Problem set metadata needed to start a session."""

    id: str
    user_id: str
    subject_id: str
    name: str = ""
    sharing_level: str = SharingLevel.PRIVATE.value
    is_smart: bool = False
    filter_config: Mapping[str, Any] | None = None
    session_config: Mapping[str, Any] | None = None


@dataclass(frozen=True)
class ActingUser:
    """Identity resolved upstream."""

    id: str
    email: str = ""


def _zero_counts() -> dict[str, int]:
    return {status: 0 for status in STATUS_VALUES}


@dataclass
class SessionSummary:
    """Statistics for a completed (or in-progress) session."""

    total_problems: int = 0
    completed_count: int = 0
    skipped_count: int = 0
    correct_count: int = 0
    incorrect_count: int = 0
    accuracy: int = 0
    status_counts: dict[str, int] = field(default_factory=_zero_counts)
    status_deltas: dict[str, int] = field(default_factory=_zero_counts)
    status_transitions: dict[str, int] = field(default_factory=dict)
    elapsed_ms: int = 0
    started_at: datetime | None = None
    completed_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["started_at"] = self.started_at.isoformat() if self.started_at else None
        data["completed_at"] = self.completed_at.isoformat() if self.completed_at else None
        return data


@dataclass
class CompletionResult:
    """Closed session plus its (possibly degraded) summary."""

    session: ReviewSession
    summary: SessionSummary
    status: CompletionStatus = CompletionStatus.COMPLETED

    @property
    def is_degraded(self) -> bool:
        return self.status == CompletionStatus.COMPLETED_WITH_DEGRADED_SUMMARY


@dataclass
class StartSessionResult:
    """Outcome of StartSession."""

    session: ReviewSession
    is_new: bool

    @property
    def first_problem_id(self) -> str | None:
        return self.session.state.problem_ids[0] if self.session.state.problem_ids else None


@dataclass
class SessionView:
    """Outcome of GetSession."""

    session: ReviewSession
    problems: list[ProblemRef]
    results: list[SessionResult]
