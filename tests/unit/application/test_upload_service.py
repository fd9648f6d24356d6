"""
Unit tests for UploadService: completion chained with job dispatch.
"""

from datetime import datetime, timedelta

import pytest

from tests.fixtures.domain_fixtures import create_completed_parts, create_video
from vidrelay.domain.errors import (
    DispatchError,
    SessionAlreadyFinalizedError,
    ValidationError,
    VideoNotFoundError,
)
from vidrelay.domain.upload_session import SessionState
from vidrelay.domain.video_management import VideoStatus


@pytest.fixture
def uploaded(coordinator):
    """A video whose parts 1 and 2 were issued upload URLs."""
    created = coordinator.create_video("Holiday", "video/mp4", "a.mp4")
    coordinator.issue_part_urls(created.storage_key, created.upload_id, created.video_id, [1, 2])
    return created


def complete_and_dispatch(upload_service, created):
    return upload_service.complete_and_dispatch(
        created.storage_key, created.upload_id, created.video_id, create_completed_parts(1, 2)
    )


class TestCompleteAndDispatch:
    """Test completion followed by job dispatch."""

    def test_dispatches_job_with_parameters(self, upload_service, uploaded, job_launcher, video_repository):
        job = complete_and_dispatch(upload_service, uploaded)

        assert job_launcher.dispatched == [{"FILENAME": "a.mp4", "VIDEO_ID": uploaded.video_id}]
        assert job.job_handle == "arn:aws:ecs:test:task/1"
        assert job.to_dict() == {"message": "Added to queue", "video_id": uploaded.video_id}
        assert video_repository.status_of(uploaded.video_id) == VideoStatus.QUEUED

    def test_dispatch_failure_fails_video(
        self, upload_service, uploaded, job_launcher, video_repository, session_repository
    ):
        job_launcher.fail = True

        with pytest.raises(DispatchError):
            complete_and_dispatch(upload_service, uploaded)

        video = video_repository.get(uploaded.video_id)
        assert video.status == VideoStatus.FAILED
        assert "No capacity to run task" in video.error_message
        assert session_repository.state_of(uploaded.video_id) == SessionState.COMPLETED

    def test_unexpected_launcher_error_wrapped(self, upload_service, uploaded, job_launcher, video_repository):
        def broken_dispatch(parameters):
            raise ConnectionError("endpoint unreachable")

        job_launcher.dispatch = broken_dispatch

        with pytest.raises(DispatchError) as exc_info:
            complete_and_dispatch(upload_service, uploaded)

        assert isinstance(exc_info.value.original_error, ConnectionError)
        assert video_repository.status_of(uploaded.video_id) == VideoStatus.FAILED

    def test_never_dispatches_twice(self, upload_service, uploaded, job_launcher):
        complete_and_dispatch(upload_service, uploaded)

        with pytest.raises(SessionAlreadyFinalizedError):
            complete_and_dispatch(upload_service, uploaded)

        assert len(job_launcher.dispatched) == 1

    def test_no_dispatch_when_abandoned_during_completion(
        self, upload_service, uploaded, coordinator, storage_backend, job_launcher, video_repository
    ):
        real_finalize = storage_backend.finalize_session

        def finalize_after_abandon(*args):
            coordinator.abandon_video(uploaded.video_id, "cancelled by user")
            return real_finalize(*args)

        storage_backend.finalize_session = finalize_after_abandon

        with pytest.raises(ValidationError):
            complete_and_dispatch(upload_service, uploaded)

        assert job_launcher.dispatched == []
        assert video_repository.status_of(uploaded.video_id) == VideoStatus.FAILED


class TestVideoQueries:
    """Test video listing and lookup."""

    def test_list_completed_newest_first(self, upload_service, video_repository):
        older = create_video(status=VideoStatus.COMPLETED, created_at=datetime.utcnow() - timedelta(days=1))
        newer = create_video(status=VideoStatus.COMPLETED)
        video_repository.put(older)
        video_repository.put(newer)
        video_repository.put(create_video(status=VideoStatus.PROCESSING))

        videos = upload_service.list_completed_videos()

        assert [video.video_id for video in videos] == [newer.video_id, older.video_id]

    def test_get_video(self, upload_service, video_repository):
        video = create_video()
        video_repository.put(video)

        assert upload_service.get_video(video.video_id).video_id == video.video_id

    def test_get_unknown_video(self, upload_service):
        with pytest.raises(VideoNotFoundError):
            upload_service.get_video("missing")

    def test_list_completed_returns_the_newest(self, upload_service, video_repository):
        now = datetime.utcnow()
        videos = [
            create_video(status=VideoStatus.COMPLETED, created_at=now - timedelta(hours=n))
            for n in range(5)
        ]
        for video in reversed(videos):
            video_repository.put(video)

        newest = upload_service.list_completed_videos(limit=2)

        assert [video.video_id for video in newest] == [videos[0].video_id, videos[1].video_id]
