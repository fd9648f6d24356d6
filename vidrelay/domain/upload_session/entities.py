"""
Upload Session Entities

Domain entity for the multipart upload session of a video.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, List, Optional

from ..errors import SessionAlreadyFinalizedError, SessionMismatchError
from .value_objects import CompletedPart, SessionState, StorageSession


def derive_storage_key(prefix: str, video_id: str, file_name: str) -> str:
    """Storage key for a video's raw upload; unique per video id."""
    return f"{prefix}/{video_id}/{file_name}"


@dataclass
class UploadSession:
    """
    Entity representing the one multipart upload session of a video.

    Identity is the (storage_key, upload_id) pair issued by the storage
    backend. A session is finalized exactly once, by completion or abort.
    """

    video_id: str
    storage_key: str
    upload_id: str
    bucket: str
    content_type: str
    state: SessionState
    created_at: datetime
    issued_parts: FrozenSet[int] = field(default_factory=frozenset)
    parts: List[CompletedPart] = field(default_factory=list)
    finalized_at: Optional[datetime] = None

    @classmethod
    def open(
        cls, video_id: str, storage_session: StorageSession, content_type: str
    ) -> "UploadSession":
        """
        Create an OPEN session from the handle returned by storage.

        Args:
            video_id: Video the session belongs to
            storage_session: Handle returned by the storage backend
            content_type: MIME type of the uploaded file
        """
        return cls(
            video_id=video_id,
            storage_key=storage_session.key,
            upload_id=storage_session.upload_id,
            bucket=storage_session.bucket,
            content_type=content_type,
            state=SessionState.OPEN,
            created_at=datetime.utcnow(),
        )

    def ensure_matches(self, storage_key: str, upload_id: str) -> None:
        """
        Check that a caller-supplied identity belongs to this session.

        Raises:
            SessionMismatchError: If key or upload id differ
        """
        if storage_key != self.storage_key or upload_id != self.upload_id:
            raise SessionMismatchError(
                f"Upload session for video {self.video_id} does not match "
                f"key={storage_key!r}, upload_id={upload_id!r}"
            )

    def ensure_open(self) -> None:
        """
        Check that the session still accepts parts and completion.

        Raises:
            SessionAlreadyFinalizedError: If the session left OPEN
        """
        if self.state.is_finalized():
            raise SessionAlreadyFinalizedError(
                f"Upload session for video {self.video_id} is {self.state.value}"
            )

    def missing_parts(self, parts: List[CompletedPart]) -> List[int]:
        """Part numbers in parts that were never issued an upload URL."""
        return [part.part_number for part in parts if part.part_number not in self.issued_parts]

    def to_dict(self) -> dict:
        """Convert session to dictionary for serialization (issued parts excluded)."""
        return {
            "video_id": self.video_id,
            "storage_key": self.storage_key,
            "upload_id": self.upload_id,
            "bucket": self.bucket,
            "content_type": self.content_type,
            "state": self.state.value,
            "created_at": self.created_at.isoformat(),
            "parts": [part.to_dict() for part in self.parts],
            "finalized_at": self.finalized_at.isoformat() if self.finalized_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict, issued_parts=()) -> "UploadSession":
        """Create UploadSession from dictionary and its issued part numbers."""
        return cls(
            video_id=data["video_id"],
            storage_key=data["storage_key"],
            upload_id=data["upload_id"],
            bucket=data["bucket"],
            content_type=data["content_type"],
            state=SessionState(data["state"]),
            created_at=datetime.fromisoformat(data["created_at"]),
            issued_parts=frozenset(int(number) for number in issued_parts),
            parts=[CompletedPart.from_dict(part) for part in data.get("parts") or []],
            finalized_at=(
                datetime.fromisoformat(data["finalized_at"])
                if data.get("finalized_at")
                else None
            ),
        )
