"""
Upload Session Domain

Multipart upload sessions, their parts and the storage backend interface.
"""

from .entities import UploadSession, derive_storage_key
from .value_objects import (
    CompletedPart,
    PartUrl,
    SessionState,
    StorageSession,
    normalize_completed_parts,
    normalize_part_numbers,
)
from .repositories import UploadSessionRepository
from .storage_backend import StorageBackend

__all__ = [
    'UploadSession',
    'derive_storage_key',
    'CompletedPart',
    'PartUrl',
    'SessionState',
    'StorageSession',
    'normalize_completed_parts',
    'normalize_part_numbers',
    'UploadSessionRepository',
    'StorageBackend',
]
