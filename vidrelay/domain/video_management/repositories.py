"""
Video Management Repositories

Repository interface for video persistence.
Concrete implementations are in the infrastructure layer.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from .entities import Video
from .value_objects import TransitionOutcome, VideoStatus


class VideoRepository(ABC):
    """Abstract repository interface for video persistence."""

    @abstractmethod
    def save(self, video: Video) -> bool:
        """
        Save or overwrite a video.

        Args:
            video: Video to save

        Returns:
            True if successful, False otherwise
        """
        pass

    @abstractmethod
    def get(self, video_id: str) -> Optional[Video]:
        """
        Retrieve a video by ID.

        Args:
            video_id: Video identifier

        Returns:
            Video if found, None otherwise
        """
        pass

    @abstractmethod
    def transition_status(
        self,
        video_id: str,
        requested: VideoStatus,
        error_message: Optional[str] = None,
    ) -> Optional[TransitionOutcome]:
        """
        Atomically apply a requested status following the state machine.

        Implementations must decide and write in one step so that
        concurrent writers can never regress a status.

        Args:
            video_id: Video identifier
            requested: Status to move to
            error_message: Stored when the video moves to FAILED

        Returns:
            TransitionOutcome, or None if the video does not exist
        """
        pass

    @abstractmethod
    def find_by_status(
        self,
        status: VideoStatus,
        limit: Optional[int] = None,
        newest_first: bool = False,
    ) -> List[Video]:
        """
        Find videos by their current status.

        Matches are ordered by created_at before limit is applied.

        Args:
            status: The VideoStatus to filter by
            limit: Maximum number of videos to return, None for all
            newest_first: Order by descending created_at

        Returns:
            List of matching videos
        """
        pass
