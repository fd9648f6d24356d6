"""
Upload Application Service

Coordinates the upload use cases exposed over HTTP: completion chained with
dispatch of the transcoding job, and video queries.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List

from vidrelay.domain.errors import DispatchError
from vidrelay.domain.job_dispatch import JobLauncher, TranscodeJobParameters
from vidrelay.domain.upload_session import CompletedPart
from vidrelay.domain.video_management import Video, VideoManager, VideoStatus

from .upload_coordinator import UploadCoordinator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchedJob:
    """Outcome of a completed upload whose transcoding job was started."""
    parameters: TranscodeJobParameters
    job_handle: str

    def to_dict(self) -> Dict[str, str]:
        """Convert to dictionary for API responses."""
        return {"message": "Added to queue", "video_id": self.parameters.video_id}


class UploadService:
    """Application service for upload completion and video queries."""

    def __init__(
        self,
        coordinator: UploadCoordinator,
        job_launcher: JobLauncher,
        video_manager: VideoManager,
    ):
        self.coordinator = coordinator
        self.job_launcher = job_launcher
        self.video_manager = video_manager

    def complete_and_dispatch(
        self,
        storage_key: str,
        upload_id: str,
        video_id: str,
        parts: Iterable[CompletedPart],
    ) -> DispatchedJob:
        """
        Complete the upload, then start its transcoding job.

        If the job cannot be started the video is failed with the dispatch
        error. The session stays completed, so the job is never dispatched
        twice through this path.

        Raises:
            DispatchError: If the job launcher fails
            Any error raised by UploadCoordinator.complete_upload
        """
        parameters = self.coordinator.complete_upload(storage_key, upload_id, video_id, parts)

        try:
            job_handle = self.job_launcher.dispatch(parameters.to_environment())
        except Exception as e:
            error = e if isinstance(e, DispatchError) else DispatchError(str(e), e)
            logger.error(f"Dispatch failed for video {video_id}: {error}")
            self.coordinator.abandon_video(video_id, f"Job dispatch failed: {error}")
            if error is e:
                raise
            raise error from e

        logger.info(f"Dispatched job {job_handle} for video {video_id}")
        return DispatchedJob(parameters=parameters, job_handle=job_handle)

    def list_completed_videos(self, limit: int = 100) -> List[Video]:
        """The newest limit videos whose transcoding completed."""
        return self.video_manager.list_by_status(
            VideoStatus.COMPLETED, limit=limit, newest_first=True
        )

    def get_video(self, video_id: str) -> Video:
        """
        Retrieve a video.

        Raises:
            VideoNotFoundError: If video doesn't exist
        """
        return self.video_manager.get_video(video_id)
