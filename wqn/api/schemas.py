"""Request/response models shared by the API routers."""
from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from wqn.review.models import ProblemRef, ReviewSession, SessionResult, SessionSummary


class SessionStateModel(BaseModel):
    """The session_state blob."""

    problem_ids: list[str]
    current_index: int
    completed_problem_ids: list[str]
    skipped_problem_ids: list[str]
    initial_statuses: dict[str, str]
    elapsed_ms: int
    is_read_only: bool


class ReviewSessionModel(BaseModel):
    """A review session record."""

    id: str
    user_id: str
    problem_set_id: str
    is_active: bool
    started_at: datetime | None
    last_activity_at: datetime | None
    session_state: SessionStateModel

    @classmethod
    def from_session(cls, session: ReviewSession) -> "ReviewSessionModel":
        return cls.model_validate(session.to_dict())


class ProblemModel(BaseModel):
    """Problem as listed in a session."""

    id: str
    title: str
    subject_id: str | None
    status: str
    problem_type: str
    tag_ids: list[str]
    last_reviewed_date: datetime | None

    @classmethod
    def from_ref(cls, problem: ProblemRef) -> "ProblemModel":
        return cls.model_validate(problem.to_dict())


class SessionResultModel(BaseModel):
    """One entry of the result log."""

    id: str | None
    problem_id: str
    was_correct: bool | None
    was_skipped: bool
    completed_at: datetime | None

    @classmethod
    def from_result(cls, result: SessionResult) -> "SessionResultModel":
        return cls.model_validate(result.to_dict())


class SessionSummaryModel(BaseModel):
    """Session statistics."""

    total_problems: int
    completed_count: int
    skipped_count: int
    correct_count: int
    incorrect_count: int
    accuracy: int = Field(..., ge=0, le=100)
    status_counts: dict[str, int]
    status_deltas: dict[str, int]
    status_transitions: dict[str, int]
    elapsed_ms: int
    started_at: datetime | None
    completed_at: datetime | None

    @classmethod
    def from_summary(cls, summary: SessionSummary) -> "SessionSummaryModel":
        return cls.model_validate(summary.to_dict())


class ProgressRequest(BaseModel):
    """
    Progress update. Accepts the camelCase names sent by the web client.

    wasSkipped=true is a skip; a boolean wasCorrect is an answer; anything
    else only saves position and timer.
    """

    model_config = ConfigDict(populate_by_name=True)

    problem_id: str = Field(..., alias="problemId")
    # Raw values: only JSON true/false count, so no coercion here
    was_skipped: Any = Field(None, alias="wasSkipped")
    was_correct: Any = Field(None, alias="wasCorrect")
    current_index: int | None = Field(None, alias="currentIndex")
    elapsed_ms: int | None = Field(None)
    status: str | None = Field(None, description="Status selected for the problem")
