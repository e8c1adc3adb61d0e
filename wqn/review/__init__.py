"""
Review Session Engine.

Turns a problem set into a resumable practice session:
- filter_engine: smart set eligibility
- composer: session ordering and size cap
- state_machine: answer / skip / heartbeat transitions
- summary: delta-aware session statistics
- access: owner / shared viewer / denied
- service: the operations exposed by the API and CLI
"""

from wqn.review.access import AccessDecision, can_view_session, check_access
from wqn.review.composer import compose
from wqn.review.errors import (
    AccessDeniedError,
    InvalidInputError,
    InvalidProblemIdError,
    NoMatchingProblemsError,
    NotFoundError,
    ReviewEngineError,
)
from wqn.review.filter_engine import filter_problems
from wqn.review.models import (
    ActingUser,
    CompletionResult,
    CompletionStatus,
    FilterConfig,
    ProblemRef,
    ProblemStatus,
    ProblemType,
    ReviewSession,
    SessionConfig,
    SessionResult,
    SessionState,
    SessionSummary,
    SharingLevel,
)
from wqn.review.service import ReviewSessionService
from wqn.review.state_machine import ProgressAction, apply_progress, derive_action, is_at_foremost
from wqn.review.summary import summarize

__all__ = [
    "AccessDecision",
    "AccessDeniedError",
    "ActingUser",
    "CompletionResult",
    "CompletionStatus",
    "FilterConfig",
    "InvalidInputError",
    "InvalidProblemIdError",
    "NoMatchingProblemsError",
    "NotFoundError",
    "ProblemRef",
    "ProblemStatus",
    "ProblemType",
    "ProgressAction",
    "ReviewEngineError",
    "ReviewSession",
    "ReviewSessionService",
    "SessionConfig",
    "SessionResult",
    "SessionState",
    "SessionSummary",
    "SharingLevel",
    "apply_progress",
    "can_view_session",
    "check_access",
    "compose",
    "derive_action",
    "filter_problems",
    "is_at_foremost",
    "summarize",
]
