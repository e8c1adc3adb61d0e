"""
Unit tests for the Access Guard.
"""

import pytest

from wqn.review.access import can_view_session, check_access, require_access
from wqn.review.errors import AccessDeniedError, NotFoundError
from wqn.review.models import ProblemSetInfo

OWNER_ID = "owner-1"
OTHER_ID = "user-2"


class TestCheckAccess:
    @pytest.mark.parametrize("level", ["private", "limited", "public"])
    def test_owner_is_always_read_write(self, level):
        decision = check_access(OWNER_ID, level, OWNER_ID, "owner@example.com")
        assert decision.allowed and decision.is_owner
        assert not decision.is_read_only

    def test_public_set_is_read_only_for_others(self):
        decision = check_access(OWNER_ID, "public", OTHER_ID, None)
        assert decision.allowed
        assert decision.is_read_only

    def test_limited_set_matches_email_case_insensitively(self):
        decision = check_access(OWNER_ID, "limited", OTHER_ID, " Friend@Example.COM ", ["friend@example.com"])
        assert decision.allowed
        assert decision.is_read_only

    def test_limited_set_denies_unlisted_email(self):
        decision = check_access(OWNER_ID, "limited", OTHER_ID, "else@example.com", ["friend@example.com"])
        assert not decision.allowed

    def test_limited_set_denies_missing_email(self):
        assert not check_access(OWNER_ID, "limited", OTHER_ID, "", [""]).allowed

    def test_private_set_denies_others(self):
        assert not check_access(OWNER_ID, "private", OTHER_ID, "friend@example.com", ["friend@example.com"]).allowed

    def test_unknown_sharing_level_denies(self):
        assert not check_access(OWNER_ID, "team", OTHER_ID, "x@example.com").allowed


class TestRequireAccess:
    def test_missing_and_denied_look_the_same(self):
        private = ProblemSetInfo(id="ps1", user_id=OWNER_ID, subject_id="s1", sharing_level="private")
        with pytest.raises(AccessDeniedError) as missing:
            require_access(None, OTHER_ID, None)
        with pytest.raises(AccessDeniedError) as denied:
            require_access(private, OTHER_ID, None)
        assert missing.value.message == denied.value.message == "Problem set not found or access denied"
        assert isinstance(denied.value, NotFoundError)

    def test_returns_decision_when_allowed(self):
        public = ProblemSetInfo(id="ps1", user_id=OWNER_ID, subject_id="s1", sharing_level="public")
        assert require_access(public, OTHER_ID, None).is_read_only


class TestSessionVisibility:
    def test_only_session_user_can_view(self):
        assert can_view_session(OTHER_ID, OTHER_ID)
        assert not can_view_session(OTHER_ID, OWNER_ID)
        assert not can_view_session(OTHER_ID, "")
