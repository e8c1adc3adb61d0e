"""
Problem set router.

Endpoints:
- Start (or resume) a review session for a problem set
- Status counts for a problem set's current problems
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from loguru import logger
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from wqn.api.dependencies import DATABASE_ERROR, engine_http_error, get_acting_user, get_review_service
from wqn.api.schemas import ReviewSessionModel
from wqn.review.errors import ReviewEngineError
from wqn.review.models import ActingUser
from wqn.review.service import ReviewSessionService

router = APIRouter()


# ========================================
# Request/Response Models
# ========================================


class StartSessionResponse(BaseModel):
    """Response model for starting a session."""

    session: ReviewSessionModel
    is_new: bool
    first_problem_id: str | None


class ProblemSetProgressResponse(BaseModel):
    """Status counts for a problem set."""

    total_problems: int
    wrong_count: int
    needs_review_count: int
    mastered_count: int


# ========================================
# Endpoints
# ========================================


@router.post(
    "/{problem_set_id}/start-session",
    response_model=StartSessionResponse,
    summary="Start or resume a review session",
)
def start_session(
    problem_set_id: str,
    response: Response,
    user: ActingUser = Depends(get_acting_user),
    service: ReviewSessionService = Depends(get_review_service),
) -> StartSessionResponse:
    """
    Start a review session for a problem set.

    Returns the user's active session for the set when one exists
    (200, is_new=false); otherwise creates one (201, is_new=true).
    Shared viewers get a read-only session.
    """
    logger.info(f"Start session requested for set {problem_set_id} by {user.id}")

    try:
        result = service.start_session(problem_set_id, user)
    except ReviewEngineError as exc:
        raise engine_http_error(exc)
    except SQLAlchemyError:
        logger.exception(f"Failed to start session for set {problem_set_id}")
        raise HTTPException(status_code=500, detail=DATABASE_ERROR)

    response.status_code = 201 if result.is_new else 200
    return StartSessionResponse(
        session=ReviewSessionModel.from_session(result.session),
        is_new=result.is_new,
        first_problem_id=result.first_problem_id,
    )


@router.get(
    "/{problem_set_id}/progress",
    response_model=ProblemSetProgressResponse,
    summary="Problem set status counts",
)
def get_problem_set_progress(
    problem_set_id: str,
    user: ActingUser = Depends(get_acting_user),
    service: ReviewSessionService = Depends(get_review_service),
) -> ProblemSetProgressResponse:
    """Count wrong / needs_review / mastered problems in the set."""
    try:
        counts = service.get_problem_set_progress(problem_set_id, user)
    except ReviewEngineError as exc:
        raise engine_http_error(exc)
    except SQLAlchemyError:
        logger.exception(f"Failed to load progress for set {problem_set_id}")
        raise HTTPException(status_code=500, detail=DATABASE_ERROR)

    return ProblemSetProgressResponse(**counts)
