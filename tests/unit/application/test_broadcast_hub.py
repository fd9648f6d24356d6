"""
Unit tests for BroadcastHub.

Events are fed through handle_event() and the dispatcher is drained with
wait_idle() before asserting.
"""

from unittest.mock import MagicMock

import pytest

from tests.fixtures.domain_fixtures import create_video
from vidrelay.application.broadcast_hub import JOB_FAILURE_MESSAGE, BroadcastHub
from vidrelay.domain.events import JobStatusEvent, LogEvent
from vidrelay.domain.video_management import VideoStatus


def drain(dispatcher):
    assert dispatcher.wait_idle(timeout=5)


@pytest.fixture
def queued_video(video_repository):
    video = create_video(status=VideoStatus.QUEUED)
    video_repository.put(video)
    return video


class TestLogRelay:
    """Test relay of job log lines."""

    def test_log_lines_reach_subscribers_in_order(self, hub, registry, delivery, dispatcher):
        registry.join("sid-1", "v1")

        for index in range(20):
            hub.handle_event(LogEvent(video_id="v1", text=f"line {index}"))
        drain(dispatcher)

        assert [message["message"] for message in delivery.messages_for("sid-1")] == [
            f"line {index}" for index in range(20)
        ]

    def test_log_lines_only_reach_their_channel(self, hub, registry, delivery, dispatcher):
        registry.join("sid-1", "v1")
        registry.join("sid-2", "v2")

        hub.handle_event(LogEvent(video_id="v1", text="hello"))
        drain(dispatcher)

        assert delivery.messages_for("sid-1") == [{"type": "log-message", "message": "hello"}]
        assert delivery.messages_for("sid-2") == []

    def test_late_subscriber_gets_only_later_events(self, hub, registry, delivery, dispatcher):
        """A subscriber receives events processed after it joins, never earlier ones."""
        registry.join("sid-a", "v1")
        hub.handle_event(LogEvent(video_id="v1", text="x"))
        drain(dispatcher)

        registry.join("sid-b", "v1")
        hub.handle_event(LogEvent(video_id="v1", text="y"))
        drain(dispatcher)

        assert delivery.messages_for("sid-a") == [
            {"type": "log-message", "message": "x"},
            {"type": "log-message", "message": "y"},
        ]
        assert delivery.messages_for("sid-b") == [{"type": "log-message", "message": "y"}]

    def test_log_for_unknown_video_is_relayed_without_store(self, hub, registry, delivery, dispatcher, video_repository):
        registry.join("sid-1", "v1")

        hub.handle_event(LogEvent(video_id="v1", text="hello"))
        drain(dispatcher)

        assert len(delivery.messages_for("sid-1")) == 1
        assert video_repository.calls_to("transition_status") == []


class TestStatusRelay:
    """Test application and relay of job-reported statuses."""

    def test_status_applied_then_broadcast(self, hub, registry, delivery, dispatcher, video_repository, queued_video):
        registry.join("sid-1", queued_video.video_id)

        hub.handle_event(JobStatusEvent(video_id=queued_video.video_id, status="PROCESSING"))
        drain(dispatcher)

        assert video_repository.status_of(queued_video.video_id) == VideoStatus.PROCESSING
        assert delivery.messages_for("sid-1") == [{"type": "status-update", "status": "PROCESSING"}]

    def test_full_job_sequence(self, hub, registry, delivery, dispatcher, video_repository, queued_video):
        registry.join("sid-1", queued_video.video_id)

        for status in ("PROCESSING", "COMPLETED"):
            hub.handle_event(JobStatusEvent(video_id=queued_video.video_id, status=status))
        drain(dispatcher)

        assert video_repository.status_of(queued_video.video_id) == VideoStatus.COMPLETED
        assert [message["status"] for message in delivery.messages_for("sid-1")] == [
            "PROCESSING",
            "COMPLETED",
        ]

    def test_regression_not_broadcast(self, hub, registry, delivery, dispatcher, video_repository):
        video = create_video(status=VideoStatus.COMPLETED)
        video_repository.put(video)
        registry.join("sid-1", video.video_id)

        hub.handle_event(JobStatusEvent(video_id=video.video_id, status="PROCESSING"))
        drain(dispatcher)

        assert video_repository.status_of(video.video_id) == VideoStatus.COMPLETED
        assert delivery.messages_for("sid-1") == []

    def test_failed_status_records_message(self, hub, dispatcher, video_repository, queued_video):
        hub.handle_event(JobStatusEvent(video_id=queued_video.video_id, status="FAILED"))
        drain(dispatcher)

        video = video_repository.get(queued_video.video_id)
        assert video.status == VideoStatus.FAILED
        assert video.error_message == JOB_FAILURE_MESSAGE

    def test_status_for_unknown_video_dropped(self, hub, registry, delivery, dispatcher):
        registry.join("sid-1", "ghost")

        hub.handle_event(JobStatusEvent(video_id="ghost", status="PROCESSING"))
        drain(dispatcher)

        assert delivery.messages_for("sid-1") == []

    @pytest.mark.parametrize("status", ["UPLOADING", "QUEUED", "CREATED"])
    def test_statuses_not_owned_by_job_ignored(self, hub, registry, delivery, dispatcher, video_repository, status):
        video = create_video(status=VideoStatus.UPLOADING)
        video_repository.put(video)
        registry.join("sid-1", video.video_id)

        hub.handle_event(JobStatusEvent(video_id=video.video_id, status=status))
        drain(dispatcher)

        assert video_repository.status_of(video.video_id) == VideoStatus.UPLOADING
        assert delivery.messages_for("sid-1") == []

    def test_unknown_status_string_ignored(self, hub, dispatcher, video_repository, queued_video):
        hub.handle_event(JobStatusEvent(video_id=queued_video.video_id, status="EXPLODED"))
        drain(dispatcher)

        assert video_repository.status_of(queued_video.video_id) == VideoStatus.QUEUED

    def test_notify_status_broadcasts_without_store(self, hub, registry, delivery, dispatcher, video_repository):
        registry.join("sid-1", "v1")

        hub.notify_status("v1", VideoStatus.UPLOADING)
        drain(dispatcher)

        assert delivery.messages_for("sid-1") == [{"type": "status-update", "status": "UPLOADING"}]
        assert video_repository.calls_to("transition_status") == []

    def test_events_of_one_video_handled_in_order(self, hub, registry, delivery, dispatcher, video_repository, queued_video):
        registry.join("sid-1", queued_video.video_id)

        hub.handle_event(LogEvent(video_id=queued_video.video_id, text="starting"))
        hub.handle_event(JobStatusEvent(video_id=queued_video.video_id, status="PROCESSING"))
        hub.handle_event(LogEvent(video_id=queued_video.video_id, text="done"))
        hub.handle_event(JobStatusEvent(video_id=queued_video.video_id, status="COMPLETED"))
        drain(dispatcher)

        assert delivery.messages_for("sid-1") == [
            {"type": "log-message", "message": "starting"},
            {"type": "status-update", "status": "PROCESSING"},
            {"type": "log-message", "message": "done"},
            {"type": "status-update", "status": "COMPLETED"},
        ]


class TestListenerLifecycle:
    """Test start/stop around an event bus."""

    def test_start_requires_event_bus(self, hub):
        with pytest.raises(RuntimeError):
            hub.start()

    def test_start_listens_with_handle_event(self, video_manager, registry, dispatcher):
        event_bus = MagicMock()
        hub = BroadcastHub(video_manager, registry, dispatcher, event_bus=event_bus)

        hub.start()
        hub.stop()

        event_bus.listen.assert_called_once_with(hub.handle_event)
        event_bus.stop.assert_called_once()
