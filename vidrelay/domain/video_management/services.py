"""
Video Management Services

Domain service for video lifecycle management.
"""

import logging
from typing import List, Optional

from ..errors import EntityCreationError, VideoNotFoundError
from .entities import Video
from .repositories import VideoRepository
from .value_objects import TransitionOutcome, VideoStatus

logger = logging.getLogger(__name__)


class VideoManager:
    """
    Domain service for managing video lifecycle.

    All status writes go through apply_status() so the state machine
    is the single gate on the stored status.
    """

    def __init__(self, video_repository: VideoRepository):
        """
        Initialize VideoManager with repository.

        Args:
            video_repository: Repository for video persistence
        """
        self.video_repo = video_repository

    def create_video(self, title: str, raw_file_name: str) -> Video:
        """
        Create and persist a new video in CREATED state.

        Raises:
            EntityCreationError: If the video cannot be saved
        """
        video = Video.create(title, raw_file_name)

        try:
            saved = self.video_repo.save(video)
        except Exception as e:
            raise EntityCreationError(f"Failed to save video: {e}", e) from e

        if not saved:
            raise EntityCreationError("Failed to save video to repository")

        return video

    def get_video(self, video_id: str) -> Video:
        """
        Retrieve a video by ID.

        Raises:
            VideoNotFoundError: If video doesn't exist
        """
        video = self.video_repo.get(video_id)

        if video is None:
            raise VideoNotFoundError(f"Video {video_id} not found")

        return video

    def apply_status(
        self,
        video_id: str,
        requested: VideoStatus,
        error_message: Optional[str] = None,
    ) -> TransitionOutcome:
        """
        Apply a requested status to a stored video.

        Invalid transitions are ignored, not raised.

        Raises:
            VideoNotFoundError: If video doesn't exist
        """
        outcome = self.video_repo.transition_status(video_id, requested, error_message)

        if outcome is None:
            raise VideoNotFoundError(f"Video {video_id} not found")

        if outcome is TransitionOutcome.IGNORED:
            logger.debug(f"Ignored status {requested.value} for video {video_id}")

        return outcome

    def list_by_status(
        self, status: VideoStatus, limit: Optional[int] = None, newest_first: bool = False
    ) -> List[Video]:
        """List videos currently in the given status, oldest first unless newest_first."""
        return self.video_repo.find_by_status(status, limit=limit, newest_first=newest_first)
