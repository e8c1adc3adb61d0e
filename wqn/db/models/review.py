"""
Review session models.

Implements:
- ReviewSessionState: one row per session, progress kept in the session_state JSON blob
- ReviewSessionResult: append-only answer/skip log

Sessions are never physically deleted; abandoning or completing a session
sets is_active = false. A partial unique index allows at most one active
session per (user, problem set).
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, List

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, UUIDPrimaryKeyMixin, utcnow


class ReviewSessionState(UUIDPrimaryKeyMixin, Base):
    """A review session and its progress."""

    __tablename__ = "review_session_state"

    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    problem_set_id: Mapped[str] = mapped_column(
        ForeignKey("problem_sets.id", ondelete="CASCADE"), nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    session_state: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    last_activity_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    results: Mapped[List[ReviewSessionResult]] = relationship(
        back_populates="session", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("idx_review_session_user_set", "user_id", "problem_set_id", "is_active"),
        Index(
            "uq_review_session_one_active",
            "user_id",
            "problem_set_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    def __repr__(self) -> str:
        return f"<ReviewSessionState {self.id} user={self.user_id} active={self.is_active}>"


class ReviewSessionResult(UUIDPrimaryKeyMixin, Base):
    """One recorded answer or skip."""

    __tablename__ = "review_session_results"

    session_state_id: Mapped[str] = mapped_column(
        ForeignKey("review_session_state.id", ondelete="CASCADE"), nullable=False
    )
    problem_id: Mapped[str] = mapped_column(String(36), nullable=False)
    was_correct: Mapped[bool | None] = mapped_column(Boolean)
    was_skipped: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    session: Mapped[ReviewSessionState] = relationship(back_populates="results")

    __table_args__ = (
        Index("idx_review_result_session", "session_state_id", "problem_id", "completed_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<ReviewSessionResult session={self.session_state_id} problem={self.problem_id} "
            f"correct={self.was_correct} skipped={self.was_skipped}>"
        )
