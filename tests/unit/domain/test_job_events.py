"""
Unit tests for job runtime events and transcoding job parameters.
"""

import pytest

from vidrelay.domain.events import JobStatusEvent, LogEvent, status_message
from vidrelay.domain.job_dispatch import TranscodeJobParameters
from vidrelay.domain.video_management import VideoStatus


class TestLogEvent:
    def test_to_message(self):
        event = LogEvent(video_id="v1", text="frame 10/100")

        assert event.to_message() == {"type": "log-message", "message": "frame 10/100"}

    def test_to_dict(self):
        data = LogEvent(video_id="v1", text="hello").to_dict()

        assert data["event_type"] == "LogEvent"
        assert data["video_id"] == "v1"
        assert data["text"] == "hello"
        assert "received_at" in data


class TestJobStatusEvent:
    @pytest.mark.parametrize("raw", ["PROCESSING", "processing", " Processing "])
    def test_video_status_is_case_insensitive(self, raw):
        event = JobStatusEvent(video_id="v1", status=raw)

        assert event.video_status() == VideoStatus.PROCESSING

    def test_unknown_status_raises_value_error(self):
        with pytest.raises(ValueError):
            JobStatusEvent(video_id="v1", status="EXPLODED").video_status()

    def test_events_are_immutable(self):
        event = JobStatusEvent(video_id="v1", status="COMPLETED")
        with pytest.raises(Exception):
            event.status = "FAILED"


def test_status_message():
    assert status_message(VideoStatus.COMPLETED) == {
        "type": "status-update",
        "status": "COMPLETED",
    }


class TestTranscodeJobParameters:
    def test_to_environment(self):
        parameters = TranscodeJobParameters(file_name="a.mp4", video_id="v1")

        assert parameters.to_environment() == {"FILENAME": "a.mp4", "VIDEO_ID": "v1"}

    def test_to_dict(self):
        parameters = TranscodeJobParameters(file_name="a.mp4", video_id="v1")

        assert parameters.to_dict() == {"fileName": "a.mp4", "videoId": "v1"}
