"""
Redis Upload Session Repository Integration Tests

Integration tests for RedisUploadSessionRepository with a real Redis
instance: exclusive creation, issued part tracking and the state
compare-and-set script.
"""

import pytest

from tests.fixtures.domain_fixtures import create_completed_parts, create_upload_session
from vidrelay.domain.upload_session import SessionState
from vidrelay.infrastructure.redis_upload_session_repository import (
    RedisUploadSessionRepository,
)


@pytest.fixture
def session_repository(redis_repo):
    return RedisUploadSessionRepository(redis_repo)


class TestSessionCreation:
    """Test create/get/exists."""

    def test_create_and_get(self, session_repository):
        session = create_upload_session("v1", upload_id="u-1")

        assert session_repository.create(session) is True
        stored = session_repository.get("v1")

        assert stored.storage_key == session.storage_key
        assert stored.upload_id == "u-1"
        assert stored.state == SessionState.OPEN
        assert stored.issued_parts == frozenset()
        assert stored.parts == []
        assert stored.finalized_at is None

    def test_create_refuses_to_overwrite(self, session_repository):
        session_repository.create(create_upload_session("v1", upload_id="u-1"))

        assert session_repository.create(create_upload_session("v1", upload_id="u-2")) is False
        assert session_repository.get("v1").upload_id == "u-1"

    def test_create_stores_initial_issued_parts(self, session_repository):
        session_repository.create(create_upload_session("v1", issued_parts=[3, 1]))

        assert session_repository.get("v1").issued_parts == frozenset({1, 3})

    def test_exists(self, session_repository):
        assert session_repository.exists("v1") is False

        session_repository.create(create_upload_session("v1"))

        assert session_repository.exists("v1") is True

    def test_get_missing_session(self, session_repository):
        assert session_repository.get("v1") is None


class TestIssuedParts:
    """Test the issued part set."""

    def test_add_issued_parts_accumulates(self, session_repository):
        session_repository.create(create_upload_session("v1"))

        session_repository.add_issued_parts("v1", [2, 1])
        session_repository.add_issued_parts("v1", [2, 3])

        assert session_repository.get("v1").issued_parts == frozenset({1, 2, 3})

    def test_add_nothing(self, session_repository):
        session_repository.create(create_upload_session("v1"))

        assert session_repository.add_issued_parts("v1", []) is True
        assert session_repository.get("v1").issued_parts == frozenset()


class TestCompareAndSetState:
    """Test the state compare-and-set script."""

    def test_claims_open_session(self, session_repository):
        session_repository.create(create_upload_session("v1"))

        assert session_repository.compare_and_set_state(
            "v1", SessionState.OPEN, SessionState.FINALIZING
        ) is True
        assert session_repository.get("v1").state == SessionState.FINALIZING

    def test_only_one_claim_wins(self, session_repository):
        session_repository.create(create_upload_session("v1"))

        first = session_repository.compare_and_set_state(
            "v1", SessionState.OPEN, SessionState.FINALIZING
        )
        second = session_repository.compare_and_set_state(
            "v1", SessionState.OPEN, SessionState.FINALIZING
        )

        assert (first, second) == (True, False)

    def test_completion_records_parts_and_time(self, session_repository):
        session_repository.create(create_upload_session("v1", issued_parts=[1, 2]))
        session_repository.compare_and_set_state("v1", SessionState.OPEN, SessionState.FINALIZING)

        updated = session_repository.compare_and_set_state(
            "v1",
            SessionState.FINALIZING,
            SessionState.COMPLETED,
            parts=create_completed_parts(1, 2),
        )

        assert updated is True
        stored = session_repository.get("v1")
        assert stored.state == SessionState.COMPLETED
        assert [part.part_number for part in stored.parts] == [1, 2]
        assert stored.parts[0].etag == '"etag-1"'
        assert stored.finalized_at is not None

    def test_abort_without_parts(self, session_repository):
        session_repository.create(create_upload_session("v1"))

        session_repository.compare_and_set_state("v1", SessionState.OPEN, SessionState.ABORTED)

        stored = session_repository.get("v1")
        assert stored.state == SessionState.ABORTED
        assert stored.parts == []
        assert stored.finalized_at is not None

    def test_release_claim_back_to_open(self, session_repository):
        session_repository.create(create_upload_session("v1"))
        session_repository.compare_and_set_state("v1", SessionState.OPEN, SessionState.FINALIZING)

        released = session_repository.compare_and_set_state(
            "v1", SessionState.FINALIZING, SessionState.OPEN
        )

        assert released is True
        stored = session_repository.get("v1")
        assert stored.state == SessionState.OPEN
        assert stored.finalized_at is None

    def test_missing_session(self, session_repository):
        assert session_repository.compare_and_set_state(
            "v1", SessionState.OPEN, SessionState.FINALIZING
        ) is False
