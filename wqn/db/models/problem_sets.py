"""
Problem set models.

A problem set is either:
- manual: fixed membership in problem_set_problems, reviewed in insertion order
- smart (is_smart): membership computed from filter_config at session start

session_config controls ordering and size of sessions started from the set.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, List

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, UUIDPrimaryKeyMixin, utcnow


class ProblemSet(UUIDPrimaryKeyMixin, Base):
    """A named collection of problems reviewed together."""

    __tablename__ = "problem_sets"

    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    subject_id: Mapped[str] = mapped_column(ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    sharing_level: Mapped[str] = mapped_column(String(16), nullable=False, default="private")
    is_smart: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    filter_config: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    session_config: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    members: Mapped[List[ProblemSetProblem]] = relationship(
        back_populates="problem_set",
        cascade="all, delete-orphan",
        order_by="ProblemSetProblem.position",
    )
    shares: Mapped[List[ProblemSetShare]] = relationship(
        back_populates="problem_set", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<ProblemSet {self.name} smart={self.is_smart} sharing={self.sharing_level}>"


class ProblemSetProblem(Base):
    """Manual set membership; position preserves insertion order."""

    __tablename__ = "problem_set_problems"

    position: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    problem_set_id: Mapped[str] = mapped_column(
        ForeignKey("problem_sets.id", ondelete="CASCADE"), nullable=False
    )
    problem_id: Mapped[str] = mapped_column(ForeignKey("problems.id", ondelete="CASCADE"), nullable=False)
    added_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    problem_set: Mapped[ProblemSet] = relationship(back_populates="members")

    __table_args__ = (
        UniqueConstraint("problem_set_id", "problem_id", name="uq_problem_set_member"),
    )


class ProblemSetShare(UUIDPrimaryKeyMixin, Base):
    """Email granted read access to a limited set."""

    __tablename__ = "problem_set_shares"

    problem_set_id: Mapped[str] = mapped_column(
        ForeignKey("problem_sets.id", ondelete="CASCADE"), nullable=False
    )
    shared_with_email: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    problem_set: Mapped[ProblemSet] = relationship(back_populates="shares")

    __table_args__ = (
        Index("idx_problem_set_shares_set", "problem_set_id"),
    )
