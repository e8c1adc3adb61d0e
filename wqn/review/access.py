"""
Access Guard for problem sets and review sessions.

Sharing levels:
- private: owner only
- limited: owner plus the emails on the set's share list (read-only)
- public: any authenticated user (read-only)

A denial is reported exactly like a missing problem set so that the
existence of private sets is never revealed.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from wqn.review.errors import AccessDeniedError
from wqn.review.models import ProblemSetInfo, SharingLevel


@dataclass(frozen=True)
class AccessDecision:
    """Result of an access check."""

    allowed: bool
    is_owner: bool

    @property
    def is_read_only(self) -> bool:
        return self.allowed and not self.is_owner


DENIED = AccessDecision(allowed=False, is_owner=False)


def _normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def check_access(
    set_owner_id: str,
    sharing_level: str,
    acting_user_id: str,
    acting_user_email: str | None,
    shared_with_emails: Iterable[str] = (),
) -> AccessDecision:
    """
    Decide whether the acting user may read a problem set.

    Args:
        set_owner_id: Owner of the problem set
        sharing_level: private, limited or public
        acting_user_id: User making the request
        acting_user_email: Email of the user making the request
        shared_with_emails: The set's share list (only used for limited sets)

    Returns:
        AccessDecision(allowed, is_owner)
    """
    if acting_user_id and acting_user_id == set_owner_id:
        return AccessDecision(allowed=True, is_owner=True)

    if sharing_level == SharingLevel.PUBLIC.value:
        return AccessDecision(allowed=True, is_owner=False)

    if sharing_level == SharingLevel.LIMITED.value:
        email = _normalize_email(acting_user_email)
        if email and email in {_normalize_email(e) for e in shared_with_emails}:
            return AccessDecision(allowed=True, is_owner=False)

    return DENIED


def require_access(
    problem_set: ProblemSetInfo | None,
    acting_user_id: str,
    acting_user_email: str | None,
    shared_with_emails: Iterable[str] = (),
) -> AccessDecision:
    """
    check_access for a looked-up set; a missing set and a denied set raise
    the same AccessDeniedError.
    """
    if problem_set is None:
        raise AccessDeniedError()
    decision = check_access(
        problem_set.user_id,
        problem_set.sharing_level,
        acting_user_id,
        acting_user_email,
        shared_with_emails,
    )
    if not decision.allowed:
        raise AccessDeniedError()
    return decision


def can_view_session(session_user_id: str, acting_user_id: str) -> bool:
    """Sessions are private to the user who started them."""
    return bool(acting_user_id) and session_user_id == acting_user_id
