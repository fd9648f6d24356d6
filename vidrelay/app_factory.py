"""
Application Factory

Creates and configures the Flask application with all dependencies.
Passing a prepared DependencyContainer skips infrastructure wiring, which
lets tests run the HTTP and Socket.IO bindings against in-memory services.
"""

import logging
import os
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS

from vidrelay.api.websocket_events import deliver_to_client, register_socketio_events
from vidrelay.application.broadcast_hub import BroadcastHub
from vidrelay.application.dependency_container import DependencyContainer
from vidrelay.application.keyed_dispatcher import KeyedDispatcher
from vidrelay.application.subscriber_registry import SubscriberRegistry
from vidrelay.application.upload_coordinator import UploadCoordinator
from vidrelay.application.upload_service import UploadService
from vidrelay.config.celery_config import make_celery
from vidrelay.config.job_launcher_config import JobLauncherConfig
from vidrelay.config.redis_config import (
    get_pubsub_client,
    get_redis_repository,
    init_redis,
    redis_health_check,
)
from vidrelay.config.socketio_config import SocketIOConfig, init_socketio, is_socketio_enabled
from vidrelay.config.storage_config import StorageConfig
from vidrelay.domain.video_management import VideoManager
from vidrelay.infrastructure.ecs_job_launcher import EcsJobLauncher
from vidrelay.infrastructure.redis_event_bus import RedisEventBus
from vidrelay.infrastructure.redis_upload_session_repository import RedisUploadSessionRepository
from vidrelay.infrastructure.redis_video_repository import RedisVideoRepository
from vidrelay.infrastructure.s3_storage_backend import S3StorageBackend

logger = logging.getLogger(__name__)


class AppConfig:
    """Application configuration."""

    def __init__(self):
        self.api_version = os.getenv("API_VERSION", "v1")
        self.flask_env = os.getenv("FLASK_ENV", "development")
        self.is_production = self.flask_env == "production"

        # SocketIO configuration
        self.socketio_enabled = os.getenv("SOCKETIO_ENABLED", "true").lower() == "true"

        self.hub_max_workers = int(os.getenv("HUB_MAX_WORKERS", 8))


def create_app(
    config: Optional[AppConfig] = None,
    container: Optional[DependencyContainer] = None,
    socketio_config: Optional[SocketIOConfig] = None,
) -> Flask:
    """
    Create and configure Flask application.

    Args:
        config: Application configuration, uses default if None
        container: Pre-built container; when given, Redis, S3 and ECS are
            not wired
        socketio_config: SocketIO settings, uses default if None

    Returns:
        Configured Flask application
    """
    if config is None:
        config = AppConfig()

    app = Flask(__name__)

    CORS(
        app,
        resources={
            r"/*": {
                "origins": "*",
                "methods": ["GET", "POST", "OPTIONS"],
                "allow_headers": ["Content-Type", "Authorization"],
                "max_age": 3600,
            }
        },
    )

    app.celery = make_celery(app)

    if container is None:
        container = _build_container(config)
    app.container = container

    _initialize_socketio(app, config, socketio_config)
    _register_blueprints(app, config)
    _register_health_endpoint(app)

    return app


def _initialize_socketio(
    app: Flask, config: AppConfig, socketio_config: Optional[SocketIOConfig]
) -> None:
    app.socketio = None

    if not config.socketio_enabled:
        logger.info("SocketIO disabled")
        return

    app.socketio = init_socketio(app, socketio_config)
    register_socketio_events(app)


def _build_container(config: AppConfig) -> DependencyContainer:
    """
    Wire infrastructure adapters, domain services and application services.

    API handlers, websocket handlers and Celery tasks resolve services from
    the returned container.
    """
    container = DependencyContainer()
    storage_config = StorageConfig()

    init_redis()
    redis_repo = get_redis_repository()

    # Infrastructure adapters
    video_repository = RedisVideoRepository(redis_repo)
    session_repository = RedisUploadSessionRepository(redis_repo)
    storage_backend = S3StorageBackend(
        storage_config.bucket_name,
        region=storage_config.region,
        endpoint_url=storage_config.endpoint_url,
    )
    job_launcher = EcsJobLauncher(JobLauncherConfig())
    event_bus = RedisEventBus(get_pubsub_client())

    container.register_singleton(RedisVideoRepository, video_repository)
    container.register_singleton(RedisUploadSessionRepository, session_repository)
    container.register_singleton(S3StorageBackend, storage_backend)
    container.register_singleton(EcsJobLauncher, job_launcher)
    container.register_singleton(RedisEventBus, event_bus)

    # Domain services
    video_manager = VideoManager(video_repository)
    container.register_singleton(VideoManager, video_manager)

    # Application services
    registry = SubscriberRegistry(deliver_to_client)
    hub = BroadcastHub(
        video_manager,
        registry,
        KeyedDispatcher(max_workers=config.hub_max_workers, thread_name_prefix="hub"),
        event_bus,
    )
    coordinator = UploadCoordinator(
        video_manager,
        session_repository,
        storage_backend,
        key_prefix=storage_config.key_prefix,
        url_ttl_seconds=storage_config.url_ttl_seconds,
        max_parts_per_request=storage_config.max_parts_per_request,
        max_url_concurrency=storage_config.max_url_concurrency,
        status_listener=hub.notify_status,
    )
    upload_service = UploadService(coordinator, job_launcher, video_manager)

    container.register_singleton(SubscriberRegistry, registry)
    container.register_singleton(BroadcastHub, hub)
    container.register_singleton(UploadCoordinator, coordinator)
    container.register_singleton(UploadService, upload_service)
    container.register_singleton(StorageConfig, storage_config)

    logger.info("Application services initialized")
    return container


def _register_blueprints(app: Flask, config: AppConfig) -> None:
    """
    Register API blueprints.

    Args:
        app: Flask application
        config: Application configuration
    """
    from vidrelay.api.v1 import api_v1_bp

    app.register_blueprint(api_v1_bp)

    logger.info(
        f"API {config.api_version} registered at /api/{config.api_version} "
        f"with Swagger UI at /api/{config.api_version}/docs"
    )


def start_broadcast_hub(app: Flask) -> BroadcastHub:
    """Start relaying bus events to subscribers; call once per server process."""
    hub = app.container.resolve(BroadcastHub)
    hub.start()
    app.container.add_shutdown_hook(hub.stop)
    return hub


def _get_health_status(app: Flask) -> tuple[dict, int]:
    """
    Get health status of all system components.

    Returns:
        Tuple of (health_status_dict, http_status_code)
    """
    health_status = {
        "status": "ok",
        "message": "backend ready",
        "redis": "unknown",
        "celery": "unknown",
        "socketio": "unknown",
        "channels": 0,
    }

    try:
        if redis_health_check():
            health_status["redis"] = "connected"
        else:
            health_status["redis"] = "disconnected"
            health_status["status"] = "degraded"
    except Exception as e:
        health_status["redis"] = f"error: {str(e)}"
        health_status["status"] = "degraded"

    if getattr(app, "celery", None) is not None:
        health_status["celery"] = "available"
    else:
        health_status["celery"] = "unavailable"
        health_status["status"] = "degraded"

    if is_socketio_enabled():
        health_status["socketio"] = "available"
    else:
        health_status["socketio"] = "not_configured"

    if app.container.is_registered(SubscriberRegistry):
        health_status["channels"] = app.container.resolve(SubscriberRegistry).channel_count()

    status_code = 200 if health_status["status"] == "ok" else 503
    return health_status, status_code


def _register_health_endpoint(app: Flask) -> None:
    """
    Register health check endpoint.

    Args:
        app: Flask application
    """

    @app.route("/health", methods=["GET"])
    def health():
        """Overall health of the application and its dependencies."""
        health_status, status_code = _get_health_status(app)
        return jsonify(health_status), status_code
