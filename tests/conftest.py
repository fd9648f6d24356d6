"""
Shared pytest fixtures and configuration for the vidrelay test suite.

This module provides:
- Hypothesis configuration for property-based testing
- In-memory ports and the services built on them
- Markers assigned by test directory
"""

import pytest
from hypothesis import HealthCheck, Phase, settings

from tests.fixtures.mock_repositories import (
    MockJobLauncher,
    MockStorageBackend,
    MockUploadSessionRepository,
    MockVideoRepository,
    RecordingDelivery,
)
from vidrelay.application.broadcast_hub import BroadcastHub
from vidrelay.application.keyed_dispatcher import KeyedDispatcher
from vidrelay.application.subscriber_registry import SubscriberRegistry
from vidrelay.application.upload_coordinator import UploadCoordinator
from vidrelay.application.upload_service import UploadService
from vidrelay.domain.video_management import VideoManager

# Register Hypothesis profiles
settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
)
settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.load_profile("default")


# =============================================================================
# Port Fixtures
# =============================================================================

@pytest.fixture
def video_repository():
    """In-memory video store."""
    return MockVideoRepository()


@pytest.fixture
def session_repository():
    """In-memory upload session store."""
    return MockUploadSessionRepository()


@pytest.fixture
def storage_backend():
    """In-memory storage backend."""
    return MockStorageBackend()


@pytest.fixture
def job_launcher():
    """Recording job launcher."""
    return MockJobLauncher()


@pytest.fixture
def delivery():
    """Recording subscriber delivery."""
    return RecordingDelivery()


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def video_manager(video_repository):
    return VideoManager(video_repository)


@pytest.fixture
def status_changes():
    """List collecting (video_id, status) pairs reported by the coordinator."""
    return []


@pytest.fixture
def coordinator(video_manager, session_repository, storage_backend, status_changes):
    return UploadCoordinator(
        video_manager,
        session_repository,
        storage_backend,
        max_parts_per_request=50,
        max_url_concurrency=4,
        status_listener=lambda video_id, status: status_changes.append((video_id, status)),
    )


@pytest.fixture
def upload_service(coordinator, job_launcher, video_manager):
    return UploadService(coordinator, job_launcher, video_manager)


@pytest.fixture
def registry(delivery):
    return SubscriberRegistry(delivery)


@pytest.fixture
def dispatcher():
    dispatcher = KeyedDispatcher(max_workers=4)
    yield dispatcher
    dispatcher.shutdown(wait=True)


@pytest.fixture
def hub(video_manager, registry, dispatcher):
    return BroadcastHub(video_manager, registry, dispatcher)


# =============================================================================
# Pytest Configuration Hooks
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (require external services)"
    )
    config.addinivalue_line(
        "markers", "property: Property-based tests using Hypothesis"
    )


def pytest_collection_modifyitems(config, items):
    """
    Automatically mark tests based on their location.

    - tests/unit/* -> @pytest.mark.unit
    - tests/integration/* -> @pytest.mark.integration
    - tests/property/* -> @pytest.mark.property
    """
    for item in items:
        test_path = str(item.fspath)

        if "/unit/" in test_path or "\\unit\\" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path or "\\integration\\" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/property/" in test_path or "\\property\\" in test_path:
            item.add_marker(pytest.mark.property)
