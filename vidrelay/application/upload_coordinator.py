"""
Upload Coordinator

Application service that drives the multipart upload of a video: session
creation, part URL issuance and completion, plus recovery of videos whose
session was never created.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional

from vidrelay.domain.errors import (
    EntityCreationError,
    FinalizationError,
    PartUrlError,
    SessionAlreadyFinalizedError,
    StorageSessionError,
    UploadSessionNotFoundError,
    ValidationError,
)
from vidrelay.domain.job_dispatch import TranscodeJobParameters
from vidrelay.domain.upload_session import (
    CompletedPart,
    PartUrl,
    SessionState,
    StorageBackend,
    UploadSession,
    UploadSessionRepository,
    derive_storage_key,
    normalize_completed_parts,
    normalize_part_numbers,
)
from vidrelay.domain.video_management import Video, VideoManager, VideoStatus

logger = logging.getLogger(__name__)

StatusListener = Callable[[str, VideoStatus], None]

ORPHAN_REASON = "Upload session was never created"


@dataclass(frozen=True)
class CreatedVideo:
    """Identifiers a client needs to upload the parts of a new video."""
    video_id: str
    upload_id: str
    storage_key: str
    bucket: str

    def to_dict(self) -> Dict[str, str]:
        """Convert to dictionary for API responses."""
        return {
            "upload_id": self.upload_id,
            "key": self.storage_key,
            "bucket": self.bucket,
            "video_id": self.video_id,
        }


def _require_text(value, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} must be a non-empty string")
    return value


def _validate_file_name(file_name) -> str:
    _require_text(file_name, "fileName")
    if "/" in file_name or "\\" in file_name or file_name in (".", ".."):
        raise ValidationError(f"fileName must not contain path separators: {file_name!r}")
    return file_name


class UploadCoordinator:
    """
    Coordinates multipart upload sessions for videos.

    No in-process lock is held across storage calls. Completion is made
    at-most-once by claiming the session with an atomic compare-and-set
    on its state (OPEN -> FINALIZING) before the storage backend is asked
    to assemble the object.
    """

    def __init__(
        self,
        video_manager: VideoManager,
        session_repository: UploadSessionRepository,
        storage_backend: StorageBackend,
        key_prefix: str = "__raw_uploads",
        url_ttl_seconds: int = 3600,
        max_parts_per_request: int = 1000,
        max_url_concurrency: int = 16,
        status_listener: Optional[StatusListener] = None,
    ):
        """
        Initialize the coordinator.

        Args:
            video_manager: Domain service owning video status
            session_repository: Upload session persistence
            storage_backend: Object storage hosting the multipart uploads
            key_prefix: Prefix of derived storage keys
            url_ttl_seconds: Lifetime of issued part URLs
            max_parts_per_request: Cap on distinct part numbers per URL request
            max_url_concurrency: Worker count for concurrent URL issuance
            status_listener: Called with (video_id, status) after each status
                change made here, e.g. to broadcast it
        """
        self.video_manager = video_manager
        self.session_repo = session_repository
        self.storage = storage_backend
        self.key_prefix = key_prefix
        self.url_ttl_seconds = url_ttl_seconds
        self.max_parts_per_request = max_parts_per_request
        self.max_url_concurrency = max_url_concurrency
        self.status_listener = status_listener

    def create_video(self, title: str, content_type: str, file_name: str) -> CreatedVideo:
        """
        Create a video and begin its multipart upload session.

        Raises:
            ValidationError: If any input is blank or file_name holds a path
            EntityCreationError: If the video or session record cannot be saved
            StorageSessionError: If storage refuses the session; the video
                stays in CREATED without a session
        """
        _require_text(title, "title")
        _require_text(content_type, "content_type")
        _validate_file_name(file_name)

        video = self.video_manager.create_video(title, file_name)
        logger.info(f"Created video {video.video_id} for {file_name}")

        return self._open_session(video, content_type)

    def reopen_session(self, video_id: str, content_type: str) -> CreatedVideo:
        """
        Begin a session for a video left in CREATED without one.

        Raises:
            VideoNotFoundError: If the video doesn't exist
            ValidationError: If the video has a session or left CREATED
            StorageSessionError: If storage refuses the session
        """
        _require_text(content_type, "content_type")
        video = self.video_manager.get_video(video_id)

        if self.session_repo.exists(video_id):
            raise ValidationError(f"Video {video_id} already has an upload session")
        if video.status != VideoStatus.CREATED:
            raise ValidationError(
                f"Video {video_id} is {video.status.value}; only CREATED videos can be reopened"
            )

        return self._open_session(video, content_type)

    def _open_session(self, video: Video, content_type: str) -> CreatedVideo:
        key = derive_storage_key(self.key_prefix, video.video_id, video.raw_file_name)

        try:
            storage_session = self.storage.begin_session(key, content_type)
        except Exception as e:
            logger.error(f"Storage refused upload session for video {video.video_id}: {e}")
            raise StorageSessionError(
                f"Failed to begin upload session for video {video.video_id}: {e}", e
            ) from e

        session = UploadSession.open(video.video_id, storage_session, content_type)

        try:
            created = self.session_repo.create(session)
        except Exception as e:
            self._abort_quietly(session)
            raise EntityCreationError(f"Failed to save upload session: {e}", e) from e

        if not created:
            self._abort_quietly(session)
            raise ValidationError(f"Video {video.video_id} already has an upload session")

        return CreatedVideo(
            video_id=video.video_id,
            upload_id=session.upload_id,
            storage_key=session.storage_key,
            bucket=session.bucket,
        )

    def _abort_quietly(self, session: UploadSession) -> None:
        try:
            self.storage.abort_session(session.bucket, session.storage_key, session.upload_id)
        except Exception as e:
            logger.warning(
                f"Could not abort storage session {session.upload_id} "
                f"for video {session.video_id}: {e}"
            )

    def _load_session(self, video_id: str, storage_key: str, upload_id: str) -> UploadSession:
        session = self.session_repo.get(video_id)
        if session is None:
            raise UploadSessionNotFoundError(f"No upload session for video {video_id}")
        session.ensure_matches(storage_key, upload_id)
        session.ensure_open()
        return session

    def issue_part_urls(
        self,
        storage_key: str,
        upload_id: str,
        video_id: str,
        part_numbers: Iterable[int],
    ) -> List[PartUrl]:
        """
        Issue one upload URL per requested part.

        The batch is all-or-nothing: if any URL cannot be issued, none are
        returned.

        Returns:
            PartUrls sorted by part number

        Raises:
            ValidationError: If part numbers are invalid
            UploadSessionNotFoundError / SessionMismatchError: If the session
                does not exist or does not match
            SessionAlreadyFinalizedError: If the session was finalized
            PartUrlError: If storage fails for any part
        """
        numbers = normalize_part_numbers(part_numbers, self.max_parts_per_request)
        session = self._load_session(video_id, storage_key, upload_id)

        self._apply_status(video_id, VideoStatus.UPLOADING)

        if not self.session_repo.add_issued_parts(video_id, numbers):
            raise PartUrlError(f"Failed to record issued parts for video {video_id}")

        urls = self._sign_parts(session, numbers)
        logger.info(f"Issued {len(urls)} part URL(s) for video {video_id}")
        return urls

    def _sign_parts(self, session: UploadSession, numbers: List[int]) -> List[PartUrl]:
        workers = max(1, min(self.max_url_concurrency, len(numbers)))
        urls = []

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="part-url") as executor:
            futures = {
                executor.submit(
                    self.storage.issue_part_upload_url,
                    session.bucket,
                    session.storage_key,
                    session.upload_id,
                    number,
                    self.url_ttl_seconds,
                ): number
                for number in numbers
            }

            for future in as_completed(futures):
                number = futures[future]
                try:
                    urls.append(PartUrl(part_number=number, url=future.result()))
                except Exception as e:
                    for pending in futures:
                        pending.cancel()
                    raise PartUrlError(
                        f"Failed to issue URL for part {number} of video {session.video_id}: {e}",
                        e,
                    ) from e

        return sorted(urls, key=lambda part_url: part_url.part_number)

    def complete_upload(
        self,
        storage_key: str,
        upload_id: str,
        video_id: str,
        parts: Iterable[CompletedPart],
    ) -> TranscodeJobParameters:
        """
        Finalize the multipart upload and queue the video.

        Raises:
            ValidationError: If parts are empty, repeated or never issued, or
                the video was abandoned while the upload was finalizing
            UploadSessionNotFoundError / SessionMismatchError: If the session
                does not exist or does not match
            SessionAlreadyFinalizedError: If the session is being or has been
                finalized
            FinalizationError: If storage rejects the parts; the session is
                reopened so the client may retry
        """
        ordered = normalize_completed_parts(parts)
        session = self._load_session(video_id, storage_key, upload_id)

        missing = session.missing_parts(ordered)
        if missing:
            raise ValidationError(
                f"Parts {missing} of video {video_id} were never issued an upload URL"
            )

        if not self.session_repo.compare_and_set_state(
            video_id, SessionState.OPEN, SessionState.FINALIZING
        ):
            raise SessionAlreadyFinalizedError(
                f"Upload session for video {video_id} is already being finalized"
            )

        try:
            self.storage.finalize_session(
                session.bucket, session.storage_key, session.upload_id, ordered
            )
        except Exception as e:
            self.session_repo.compare_and_set_state(
                video_id, SessionState.FINALIZING, SessionState.OPEN
            )
            logger.error(f"Storage rejected completion of video {video_id}: {e}")
            raise FinalizationError(
                f"Failed to finalize upload for video {video_id}: {e}", e
            ) from e

        if not self.session_repo.compare_and_set_state(
            video_id, SessionState.FINALIZING, SessionState.COMPLETED, parts=ordered
        ):
            logger.error(f"Upload session for video {video_id} left FINALIZING unexpectedly")

        outcome = self._apply_status(video_id, VideoStatus.QUEUED)
        video = self.video_manager.get_video(video_id)
        if not outcome.written:
            # Abandoned while finalizing; its job must not start
            raise ValidationError(
                f"Video {video_id} is {video.status.value} and left the upload flow"
            )

        logger.info(f"Upload of video {video_id} completed with {len(ordered)} part(s)")
        return TranscodeJobParameters(file_name=video.raw_file_name, video_id=video.video_id)

    def abandon_video(self, video_id: str, reason: str) -> Video:
        """
        Fail a video and abort its open upload session.

        Aborting the storage session is best effort. Calling this on a video
        that already failed changes nothing.

        Raises:
            VideoNotFoundError: If the video doesn't exist
        """
        self.video_manager.get_video(video_id)

        session = self.session_repo.get(video_id)
        if session is not None and session.state == SessionState.OPEN:
            if self.session_repo.compare_and_set_state(
                video_id, SessionState.OPEN, SessionState.ABORTED
            ):
                self._abort_quietly(session)

        self._apply_status(video_id, VideoStatus.FAILED, error_message=reason)
        logger.info(f"Abandoned video {video_id}: {reason}")
        return self.video_manager.get_video(video_id)

    def find_orphaned_videos(self, older_than: timedelta, limit: int = 100) -> List[Video]:
        """
        Videos still in CREATED without a session, created before now - older_than.

        Oldest first; limit applies to orphans, not to the CREATED videos scanned.
        """
        cutoff = datetime.utcnow() - older_than
        orphans = []
        for video in self.video_manager.list_by_status(VideoStatus.CREATED):
            if video.created_at >= cutoff:
                break
            if self.session_repo.exists(video.video_id):
                continue
            orphans.append(video)
            if len(orphans) >= limit:
                break
        return orphans

    def reconcile_orphans(self, older_than: timedelta, limit: int = 100) -> Dict[str, int]:
        """
        Abandon every orphaned video older than older_than.

        Returns:
            Counts of orphans found, abandoned and failed to abandon
        """
        stats = {"found": 0, "abandoned": 0, "errors": 0}

        for video in self.find_orphaned_videos(older_than, limit=limit):
            stats["found"] += 1
            try:
                self.abandon_video(video.video_id, ORPHAN_REASON)
                stats["abandoned"] += 1
            except Exception as e:
                stats["errors"] += 1
                logger.error(f"Could not abandon orphaned video {video.video_id}: {e}", exc_info=True)

        return stats

    def _apply_status(
        self, video_id: str, status: VideoStatus, error_message: Optional[str] = None
    ):
        outcome = self.video_manager.apply_status(video_id, status, error_message)
        if outcome.written and self.status_listener is not None:
            try:
                self.status_listener(video_id, status)
            except Exception as e:
                logger.warning(f"Status listener failed for video {video_id}: {e}")
        return outcome
