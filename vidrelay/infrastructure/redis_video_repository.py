"""
Redis Video Repository Implementation

Concrete Redis-based implementation of the VideoRepository interface.
Status transitions are applied atomically with a Lua compare-and-set.
"""

import logging
from datetime import datetime
from typing import List, Optional

from vidrelay.domain.video_management.entities import Video
from vidrelay.domain.video_management.repositories import VideoRepository
from vidrelay.domain.video_management.value_objects import (
    TransitionOutcome,
    VideoStatus,
    writable_from,
)

logger = logging.getLogger(__name__)

# Return codes of _TRANSITION_SCRIPT
_MISSING = -1
_IGNORED = 0
_APPLIED = 1
_REAFFIRMED = 2

_TRANSITION_SCRIPT = """
local data = redis.call('GET', KEYS[1])
if not data then
    return -1
end

local video = cjson.decode(data)
local requested = ARGV[1]
local allowed = false
for i = 4, #ARGV do
    if ARGV[i] == video['status'] then
        allowed = true
        break
    end
end
if not allowed then
    return 0
end

local code = 1
if video['status'] == requested then
    code = 2
end

video['status'] = requested
video['updated_at'] = ARGV[2]
if requested == 'FAILED' and ARGV[3] ~= '' then
    video['error_message'] = ARGV[3]
end
redis.call('SET', KEYS[1], cjson.encode(video))
return code
"""

_OUTCOMES = {
    _IGNORED: TransitionOutcome.IGNORED,
    _APPLIED: TransitionOutcome.APPLIED,
    _REAFFIRMED: TransitionOutcome.REAFFIRMED,
}


class RedisVideoRepository(VideoRepository):
    """
    Redis-based implementation of VideoRepository.

    Videos are stored as JSON documents under ``video:<video_id>``.
    """

    def __init__(self, redis_repository):
        """
        Initialize with Redis repository.

        Args:
            redis_repository: RedisRepository instance from infrastructure layer
        """
        self.redis_repo = redis_repository
        self.key_prefix = "video"

    def _key(self, video_id: str) -> str:
        return f"{self.key_prefix}:{video_id}"

    def save(self, video: Video) -> bool:
        """Save or overwrite a video in Redis."""
        return self.redis_repo.set_json(self._key(video.video_id), video.to_dict())

    def get(self, video_id: str) -> Optional[Video]:
        """Retrieve a video from Redis."""
        data = self.redis_repo.get_json(self._key(video_id))

        if data is None:
            return None

        try:
            return Video.from_dict(data)
        except (KeyError, ValueError) as e:
            logger.error(f"Error deserializing video {video_id}: {e}")
            return None

    def transition_status(
        self,
        video_id: str,
        requested: VideoStatus,
        error_message: Optional[str] = None,
    ) -> Optional[TransitionOutcome]:
        """
        Atomically apply a requested status.

        The script writes only when the stored status is one of
        writable_from(requested), which mirrors decide_transition.
        """
        allowed = sorted(status.value for status in writable_from(requested))
        result = self.redis_repo.run_script(
            _TRANSITION_SCRIPT,
            [self._key(video_id)],
            [requested.value, datetime.utcnow().isoformat(), error_message or "", *allowed],
        )

        if result == _MISSING:
            return None
        return _OUTCOMES[int(result)]

    def find_by_status(
        self,
        status: VideoStatus,
        limit: Optional[int] = None,
        newest_first: bool = False,
    ) -> List[Video]:
        """
        Find videos in the given status, ordered by created_at.

        Scans every stored video and sorts all matches before applying
        limit; intended for listings and periodic reconciliation, not for
        hot paths.
        """
        keys = list(self.redis_repo.scan_keys(f"{self.key_prefix}:*"))

        videos = []
        for data in self.redis_repo.get_many_json(keys):
            if data.get("status") != status.value:
                continue
            try:
                videos.append(Video.from_dict(data))
            except (KeyError, ValueError) as e:
                logger.error(f"Skipping malformed video record: {e}")

        videos.sort(key=lambda video: video.created_at, reverse=newest_first)
        return videos if limit is None else videos[:limit]
