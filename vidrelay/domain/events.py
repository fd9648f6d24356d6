"""
Domain Events

Immutable records of messages received from the job runtime over the event bus.
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict

from .video_management.value_objects import VideoStatus


@dataclass(frozen=True)
class VideoEvent(ABC):
    """
    Base class for events concerning one video.

    Subclasses end with a defaulted received_at field recording when the
    event was taken off the bus.

    Attributes:
        video_id: Video the event belongs to
    """
    video_id: str

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert event to dictionary for serialization.

        Returns:
            Dictionary representation of the event
        """
        return {
            "event_type": self.__class__.__name__,
            "video_id": self.video_id,
            "received_at": self.received_at.isoformat(),
        }


@dataclass(frozen=True)
class LogEvent(VideoEvent):
    """
    A log line emitted by the job processing a video.

    Attributes:
        text: Log line
    """
    text: str
    received_at: datetime = field(default_factory=datetime.utcnow)

    def to_message(self) -> Dict[str, str]:
        """Message relayed to subscribers of the video's channel."""
        return {"type": "log-message", "message": self.text}

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict.update({"text": self.text})
        return base_dict


@dataclass(frozen=True)
class JobStatusEvent(VideoEvent):
    """
    A lifecycle status reported by the job processing a video.

    Attributes:
        status: Raw status string as published; not guaranteed to be a VideoStatus
    """
    status: str
    received_at: datetime = field(default_factory=datetime.utcnow)

    def video_status(self) -> VideoStatus:
        """
        Parse the reported status.

        Raises:
            ValueError: If the status is not a VideoStatus value
        """
        return VideoStatus(self.status.strip().upper())

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict.update({"status": self.status})
        return base_dict


def status_message(status: VideoStatus) -> Dict[str, str]:
    """Message relayed to subscribers when a video's status changes."""
    return {"type": "status-update", "status": status.value}
