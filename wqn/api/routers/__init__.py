"""API routers for the review session service."""

from wqn.api.routers import problem_sets_router, review_sessions_router

__all__ = [
    "problem_sets_router",
    "review_sessions_router",
]
