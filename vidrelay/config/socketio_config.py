"""
SocketIO Configuration

Configures Flask-SocketIO for the real-time log and status channel.
"""

import logging
import os
from typing import Optional

from flask_socketio import SocketIO

logger = logging.getLogger(__name__)

# Global SocketIO instance
socketio: Optional[SocketIO] = None


class SocketIOConfig:
    """SocketIO configuration settings."""

    def __init__(self):
        self.async_mode = os.getenv("SOCKETIO_ASYNC_MODE", "gevent")
        # Redis message queue lets several server processes share rooms; unset for a single process
        self.message_queue = os.getenv("SOCKETIO_MESSAGE_QUEUE") or None
        self.cors_allowed_origins = os.getenv("SOCKETIO_CORS_ORIGINS", "*")


def init_socketio(app, config: Optional[SocketIOConfig] = None) -> SocketIO:
    """
    Initialize Flask-SocketIO.

    Args:
        app: Flask application instance
        config: SocketIO configuration, uses default if None

    Returns:
        SocketIO instance
    """
    global socketio

    if config is None:
        config = SocketIOConfig()

    try:
        socketio = SocketIO(
            app,
            cors_allowed_origins=config.cors_allowed_origins,
            message_queue=config.message_queue,
            async_mode=config.async_mode,
            logger=False,
            engineio_logger=False,
            ping_timeout=60,
            ping_interval=25,
        )

        logger.info(
            f"SocketIO initialized (async_mode={config.async_mode}, "
            f"message_queue={config.message_queue})"
        )
        return socketio

    except Exception as e:
        logger.error(f"Failed to initialize SocketIO: {e}")
        raise


def get_socketio() -> Optional[SocketIO]:
    """
    Get the global SocketIO instance.

    Returns:
        SocketIO instance or None if not initialized
    """
    return socketio


def is_socketio_enabled() -> bool:
    """
    Check if SocketIO is enabled and initialized.

    Returns:
        bool: True if SocketIO is available
    """
    socketio_enabled = os.getenv("SOCKETIO_ENABLED", "true").lower() == "true"
    return socketio_enabled and socketio is not None
