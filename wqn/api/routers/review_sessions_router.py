"""
Review session router.

Endpoints:
- Get a session with its problems and result log
- Record progress (answer / skip / heartbeat)
- Complete a session and return its summary
- Delete (abandon) a session
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from wqn.api.dependencies import DATABASE_ERROR, engine_http_error, get_acting_user, get_review_service
from wqn.api.schemas import (
    ProblemModel,
    ProgressRequest,
    ReviewSessionModel,
    SessionResultModel,
    SessionSummaryModel,
)
from wqn.review.errors import ReviewEngineError
from wqn.review.models import ActingUser
from wqn.review.service import ReviewSessionService

router = APIRouter()


# ========================================
# Request/Response Models
# ========================================


class SessionDetailResponse(BaseModel):
    """Session with problems in session order and the result log."""

    session: ReviewSessionModel
    problems: List[ProblemModel]
    results: List[SessionResultModel]


class SessionResponse(BaseModel):
    session: ReviewSessionModel


class CompleteSessionResponse(BaseModel):
    """Closed session with its summary."""

    session: ReviewSessionModel
    summary: SessionSummaryModel
    status: str


class DeleteSessionResponse(BaseModel):
    id: str
    is_active: bool


# ========================================
# Endpoints
# ========================================


@router.get("/{session_id}", response_model=SessionDetailResponse, summary="Get review session")
def get_review_session(
    session_id: str,
    user: ActingUser = Depends(get_acting_user),
    service: ReviewSessionService = Depends(get_review_service),
) -> SessionDetailResponse:
    """Get a session, its problems (in session order) and its results."""
    try:
        view = service.get_session(session_id, user)
    except ReviewEngineError as exc:
        raise engine_http_error(exc)
    except SQLAlchemyError:
        logger.exception(f"Failed to load session {session_id}")
        raise HTTPException(status_code=500, detail=DATABASE_ERROR)

    return SessionDetailResponse(
        session=ReviewSessionModel.from_session(view.session),
        problems=[ProblemModel.from_ref(p) for p in view.problems],
        results=[SessionResultModel.from_result(r) for r in view.results],
    )


@router.patch("/{session_id}/progress", response_model=SessionResponse, summary="Record progress")
def record_progress(
    session_id: str,
    request: ProgressRequest,
    user: ActingUser = Depends(get_acting_user),
    service: ReviewSessionService = Depends(get_review_service),
) -> SessionResponse:
    """
    Record an answer, a skip or a heartbeat.

    Answers and skips are appended to the result log; heartbeats only save
    current_index and elapsed_ms.
    """
    try:
        session = service.record_progress(
            session_id,
            user,
            problem_id=request.problem_id,
            was_skipped=request.was_skipped,
            was_correct=request.was_correct,
            current_index=request.current_index,
            elapsed_ms=request.elapsed_ms,
            status=request.status,
        )
    except ReviewEngineError as exc:
        raise engine_http_error(exc)
    except SQLAlchemyError:
        logger.exception(f"Failed to record progress for session {session_id}")
        raise HTTPException(status_code=500, detail=DATABASE_ERROR)

    return SessionResponse(session=ReviewSessionModel.from_session(session))


@router.post(
    "/{session_id}/complete",
    response_model=CompleteSessionResponse,
    summary="Complete review session",
)
def complete_review_session(
    session_id: str,
    user: ActingUser = Depends(get_acting_user),
    service: ReviewSessionService = Depends(get_review_service),
) -> CompleteSessionResponse:
    """Close the session and return its summary."""
    logger.info(f"Completing session {session_id}")

    try:
        result = service.complete_session(session_id, user)
    except ReviewEngineError as exc:
        raise engine_http_error(exc)
    except SQLAlchemyError:
        logger.exception(f"Failed to complete session {session_id}")
        raise HTTPException(status_code=500, detail=DATABASE_ERROR)

    return CompleteSessionResponse(
        session=ReviewSessionModel.from_session(result.session),
        summary=SessionSummaryModel.from_summary(result.summary),
        status=result.status.value,
    )


@router.delete("/{session_id}", response_model=DeleteSessionResponse, summary="Delete review session")
def delete_review_session(
    session_id: str,
    user: ActingUser = Depends(get_acting_user),
    service: ReviewSessionService = Depends(get_review_service),
) -> DeleteSessionResponse:
    """Abandon a session. It is deactivated, not removed."""
    try:
        session = service.delete_session(session_id, user)
    except ReviewEngineError as exc:
        raise engine_http_error(exc)
    except SQLAlchemyError:
        logger.exception(f"Failed to delete session {session_id}")
        raise HTTPException(status_code=500, detail=DATABASE_ERROR)

    return DeleteSessionResponse(id=session.id, is_active=session.is_active)
