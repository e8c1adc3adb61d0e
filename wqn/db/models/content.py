"""
Notebook content models.

Implements:
- Subject: top-level grouping of problems
- Tag: per-subject label
- Problem: a question the user got wrong (or wants to keep), with review status
- ProblemTag: problem <-> tag junction

Problem status values: wrong, needs_review (default), mastered.
Problem types: mcq, short, extended.
"""
from __future__ import annotations

from datetime import datetime
from typing import List

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, UUIDPrimaryKeyMixin, utcnow


class Subject(UUIDPrimaryKeyMixin, Base):
    """A subject (course, exam, topic) owned by one user."""

    __tablename__ = "subjects"

    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    problems: Mapped[List[Problem]] = relationship(back_populates="subject")

    def __repr__(self) -> str:
        return f"<Subject {self.name}>"


class Tag(UUIDPrimaryKeyMixin, Base):
    """A label scoped to a subject."""

    __tablename__ = "tags"

    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    subject_id: Mapped[str] = mapped_column(ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    def __repr__(self) -> str:
        return f"<Tag {self.name}>"


class Problem(UUIDPrimaryKeyMixin, Base):
    """A problem with its review status."""

    __tablename__ = "problems"

    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    subject_id: Mapped[str] = mapped_column(ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    content: Mapped[str | None] = mapped_column(Text)
    problem_type: Mapped[str] = mapped_column(String(16), nullable=False, default="short")
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="needs_review")
    correct_answer: Mapped[str | None] = mapped_column(Text)
    last_reviewed_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    subject: Mapped[Subject] = relationship(back_populates="problems")
    tag_links: Mapped[List[ProblemTag]] = relationship(
        back_populates="problem", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("idx_problems_owner_subject", "user_id", "subject_id"),
        Index("idx_problems_status", "status"),
    )

    @property
    def tag_ids(self) -> frozenset[str]:
        return frozenset(link.tag_id for link in self.tag_links)

    def __repr__(self) -> str:
        return f"<Problem {self.id} status={self.status}>"


class ProblemTag(Base):
    """Problem <-> tag junction."""

    __tablename__ = "problem_tag"

    problem_id: Mapped[str] = mapped_column(
        ForeignKey("problems.id", ondelete="CASCADE"), primary_key=True
    )
    tag_id: Mapped[str] = mapped_column(ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False)

    problem: Mapped[Problem] = relationship(back_populates="tag_links")
