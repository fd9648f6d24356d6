"""
Video Management Entities

Domain entity for an uploaded video and its lifecycle.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .value_objects import TransitionOutcome, VideoStatus, decide_transition


@dataclass
class Video:
    """
    Entity representing an uploaded video.

    Status only changes through apply_status(), which enforces the
    lifecycle state machine.
    """

    video_id: str
    title: str
    raw_file_name: str
    status: VideoStatus
    created_at: datetime
    updated_at: datetime
    error_message: Optional[str] = None

    @classmethod
    def create(cls, title: str, raw_file_name: str) -> "Video":
        """
        Factory method to create a new video in CREATED state.

        Args:
            title: Video title
            raw_file_name: Name of the file being uploaded

        Returns:
            New Video instance
        """
        now = datetime.utcnow()
        return cls(
            video_id=str(uuid.uuid4()),
            title=title,
            raw_file_name=raw_file_name,
            status=VideoStatus.CREATED,
            created_at=now,
            updated_at=now,
        )

    def apply_status(
        self, requested: VideoStatus, error_message: Optional[str] = None
    ) -> TransitionOutcome:
        """
        Apply a requested status following the state machine.

        Args:
            requested: Status to move to
            error_message: Stored when the video moves to FAILED

        Returns:
            TransitionOutcome; IGNORED leaves the entity untouched
        """
        outcome = decide_transition(self.status, requested)
        if outcome.written:
            self.status = requested
            self.updated_at = datetime.utcnow()
            if requested == VideoStatus.FAILED and error_message:
                self.error_message = error_message
        return outcome

    def is_terminal(self) -> bool:
        """Check if video is in terminal state (completed or failed)."""
        return self.status.is_terminal()

    def to_dict(self) -> dict:
        """Convert video to dictionary for serialization."""
        return {
            "video_id": self.video_id,
            "title": self.title,
            "raw_file_name": self.raw_file_name,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "error_message": self.error_message,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Video":
        """Create Video from dictionary."""
        return cls(
            video_id=data["video_id"],
            title=data["title"],
            raw_file_name=data["raw_file_name"],
            status=VideoStatus(data["status"]),
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
            error_message=data.get("error_message"),
        )
