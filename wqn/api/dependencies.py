"""
Shared FastAPI dependencies.

- get_acting_user: identity forwarded by the upstream auth layer
- get_review_service: a ReviewSessionService bound to the request's DB session
- engine_http_error: review engine error -> HTTPException
"""
from __future__ import annotations

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from wqn.db.database import get_session
from wqn.db.repositories import build_review_service
from wqn.review.errors import (
    InvalidInputError,
    NoMatchingProblemsError,
    NotFoundError,
    ReviewEngineError,
)
from wqn.review.models import ActingUser
from wqn.review.service import ReviewSessionService

DATABASE_ERROR = "Database error"


def get_acting_user(
    x_user_id: str | None = Header(None),
    x_user_email: str | None = Header(None),
) -> ActingUser:
    """Resolve the acting user from X-User-Id / X-User-Email; 401 without an id."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return ActingUser(id=x_user_id, email=x_user_email or "")


def get_review_service(db: Session = Depends(get_session)) -> ReviewSessionService:
    return build_review_service(db)


def engine_http_error(exc: ReviewEngineError) -> HTTPException:
    """Map an engine error to its HTTP status, keeping the user-facing message."""
    if isinstance(exc, NotFoundError):
        status_code = 404
    elif isinstance(exc, (InvalidInputError, NoMatchingProblemsError)):
        status_code = 400
    else:
        status_code = 500
    return HTTPException(status_code=status_code, detail=exc.message)
