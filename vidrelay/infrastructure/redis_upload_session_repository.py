"""
Redis Upload Session Repository Implementation

Concrete Redis-based implementation of the UploadSessionRepository interface.
"""

import json
import logging
from datetime import datetime
from typing import Iterable, List, Optional

from vidrelay.domain.upload_session.entities import UploadSession
from vidrelay.domain.upload_session.repositories import UploadSessionRepository
from vidrelay.domain.upload_session.value_objects import CompletedPart, SessionState

logger = logging.getLogger(__name__)

_COMPARE_AND_SET_SCRIPT = """
local data = redis.call('GET', KEYS[1])
if not data then
    return 0
end

local session = cjson.decode(data)
if session['state'] ~= ARGV[1] then
    return 0
end

session['state'] = ARGV[2]
if ARGV[3] ~= '' then
    session['finalized_at'] = ARGV[3]
end
if ARGV[4] ~= '' then
    session['parts'] = cjson.decode(ARGV[4])
end
redis.call('SET', KEYS[1], cjson.encode(session))
return 1
"""


class RedisUploadSessionRepository(UploadSessionRepository):
    """
    Redis-based implementation of UploadSessionRepository.

    The session document lives under ``upload_session:<video_id>`` and the
    issued part numbers in the set ``upload_session:<video_id>:issued``.
    """

    def __init__(self, redis_repository):
        """
        Initialize with Redis repository.

        Args:
            redis_repository: RedisRepository instance from infrastructure layer
        """
        self.redis_repo = redis_repository
        self.key_prefix = "upload_session"

    def _key(self, video_id: str) -> str:
        return f"{self.key_prefix}:{video_id}"

    def _issued_key(self, video_id: str) -> str:
        return f"{self.key_prefix}:{video_id}:issued"

    def create(self, session: UploadSession) -> bool:
        """Store a new session; refuses to overwrite an existing one."""
        created = self.redis_repo.set_json(
            self._key(session.video_id), session.to_dict(), only_if_absent=True
        )
        if created and session.issued_parts:
            self.redis_repo.add_to_set(
                self._issued_key(session.video_id), sorted(session.issued_parts)
            )
        return created

    def get(self, video_id: str) -> Optional[UploadSession]:
        """Retrieve a session with its issued part numbers."""
        data = self.redis_repo.get_json(self._key(video_id))

        if data is None:
            return None

        issued = self.redis_repo.get_set_members(self._issued_key(video_id))
        try:
            return UploadSession.from_dict(data, issued_parts=issued)
        except (KeyError, ValueError) as e:
            logger.error(f"Error deserializing upload session for video {video_id}: {e}")
            return None

    def exists(self, video_id: str) -> bool:
        """Check if the video has a session."""
        return self.redis_repo.exists(self._key(video_id))

    def add_issued_parts(self, video_id: str, part_numbers: Iterable[int]) -> bool:
        """Add part numbers to the issued set."""
        return self.redis_repo.add_to_set(self._issued_key(video_id), sorted(part_numbers))

    def compare_and_set_state(
        self,
        video_id: str,
        expected: SessionState,
        new: SessionState,
        parts: Optional[List[CompletedPart]] = None,
    ) -> bool:
        """Atomically move a session from expected to new using a Lua script."""
        finalized_at = ""
        if new in (SessionState.COMPLETED, SessionState.ABORTED):
            finalized_at = datetime.utcnow().isoformat()

        parts_json = ""
        if parts is not None:
            parts_json = json.dumps([part.to_dict() for part in parts])

        result = self.redis_repo.run_script(
            _COMPARE_AND_SET_SCRIPT,
            [self._key(video_id)],
            [expected.value, new.value, finalized_at, parts_json],
        )
        return result == 1
