"""
Storage Backend Interface

Defines the abstract interface for the object storage service that hosts
multipart uploads. The coordinator depends on this interface, never on a
concrete cloud SDK.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from .value_objects import CompletedPart, StorageSession


class StorageBackend(ABC):
    """
    Abstract interface for multipart object uploads.

    Implementations raise their own exceptions on failure; the coordinator
    translates them into domain errors. Implementations must be safe to call
    from several threads at once, since part URLs are issued concurrently.
    """

    @abstractmethod
    def begin_session(self, key: str, content_type: str) -> StorageSession:
        """
        Begin a multipart upload session.

        Args:
            key: Object key the upload will be stored at
            content_type: MIME type of the object

        Returns:
            StorageSession with the upload id, key and bucket
        """
        pass

    @abstractmethod
    def issue_part_upload_url(
        self,
        bucket: str,
        key: str,
        upload_id: str,
        part_number: int,
        ttl_seconds: int,
    ) -> str:
        """
        Issue a time-limited URL the client can PUT one part to.

        Returns:
            Signed URL string
        """
        pass

    @abstractmethod
    def finalize_session(
        self,
        bucket: str,
        key: str,
        upload_id: str,
        parts: List[CompletedPart],
    ) -> Dict[str, Any]:
        """
        Assemble the uploaded parts into the final object.

        Args:
            parts: Parts ordered by part number

        Returns:
            Backend response describing the assembled object
        """
        pass

    @abstractmethod
    def abort_session(self, bucket: str, key: str, upload_id: str) -> None:
        """Abort a multipart upload and discard its uploaded parts."""
        pass
