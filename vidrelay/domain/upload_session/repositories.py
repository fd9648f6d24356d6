"""
Upload Session Repositories

Repository interface for upload session persistence.
Concrete implementations are in the infrastructure layer.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from .entities import UploadSession
from .value_objects import CompletedPart, SessionState


class UploadSessionRepository(ABC):
    """Abstract repository interface for upload session persistence, keyed by video id."""

    @abstractmethod
    def create(self, session: UploadSession) -> bool:
        """
        Store a new session.

        Args:
            session: Session to store

        Returns:
            True if stored, False if the video already has a session
        """
        pass

    @abstractmethod
    def get(self, video_id: str) -> Optional[UploadSession]:
        """
        Retrieve the session of a video, including its issued part numbers.

        Returns:
            UploadSession if found, None otherwise
        """
        pass

    @abstractmethod
    def exists(self, video_id: str) -> bool:
        """Check if the video has a session."""
        pass

    @abstractmethod
    def add_issued_parts(self, video_id: str, part_numbers: Iterable[int]) -> bool:
        """
        Record part numbers an upload URL was issued for.

        Returns:
            True if successful, False otherwise
        """
        pass

    @abstractmethod
    def compare_and_set_state(
        self,
        video_id: str,
        expected: SessionState,
        new: SessionState,
        parts: Optional[List[CompletedPart]] = None,
    ) -> bool:
        """
        Atomically move a session from expected to new.

        Sets finalized_at when new is COMPLETED or ABORTED and stores
        parts when given.

        Returns:
            True if the session was in expected and has been updated,
            False otherwise (missing session or different state)
        """
        pass
