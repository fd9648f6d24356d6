"""
Test fixtures package.

Provides factory functions and in-memory port implementations for testing.
"""

from .app_fixtures import build_test_app, build_test_container
from .domain_fixtures import (
    create_completed_parts,
    create_upload_session,
    create_video,
)
from .mock_repositories import (
    MockJobLauncher,
    MockStorageBackend,
    MockUploadSessionRepository,
    MockVideoRepository,
    RecordingDelivery,
)

__all__ = [
    # Application fixtures
    "build_test_app",
    "build_test_container",
    # Domain fixtures
    "create_completed_parts",
    "create_upload_session",
    "create_video",
    # Mock ports
    "MockJobLauncher",
    "MockStorageBackend",
    "MockUploadSessionRepository",
    "MockVideoRepository",
    "RecordingDelivery",
]
