"""
Application Fixtures

Builds Flask applications wired to in-memory services, so the HTTP and
Socket.IO bindings can be exercised without Redis, S3 or ECS.
"""

from vidrelay.app_factory import AppConfig, create_app
from vidrelay.application.broadcast_hub import BroadcastHub
from vidrelay.application.dependency_container import DependencyContainer
from vidrelay.application.subscriber_registry import SubscriberRegistry
from vidrelay.application.upload_coordinator import UploadCoordinator
from vidrelay.application.upload_service import UploadService
from vidrelay.config.socketio_config import SocketIOConfig
from vidrelay.domain.video_management import VideoManager


def build_test_container(
    coordinator: UploadCoordinator,
    upload_service: UploadService,
    registry: SubscriberRegistry,
    hub: BroadcastHub = None,
) -> DependencyContainer:
    """Register the given services the way the app factory does."""
    container = DependencyContainer()
    container.register_singleton(VideoManager, coordinator.video_manager)
    container.register_singleton(UploadCoordinator, coordinator)
    container.register_singleton(UploadService, upload_service)
    container.register_singleton(SubscriberRegistry, registry)
    if hub is not None:
        container.register_singleton(BroadcastHub, hub)
    return container


def build_test_app(container: DependencyContainer, socketio_enabled: bool = False):
    """Create the app in testing mode with a threading Socket.IO server."""
    config = AppConfig()
    config.socketio_enabled = socketio_enabled

    socketio_config = SocketIOConfig()
    socketio_config.async_mode = "threading"
    socketio_config.message_queue = None

    app = create_app(config, container=container, socketio_config=socketio_config)
    app.config["TESTING"] = True
    return app
