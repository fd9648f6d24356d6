"""
WebSocket Event Handlers

Ties Socket.IO connections to the SubscriberRegistry so log lines and
status updates of a video reach every client subscribed to it.
"""

import logging

from flask import current_app, request
from flask_socketio import emit

from vidrelay.application.subscriber_registry import SubscriberRegistry
from vidrelay.config.socketio_config import get_socketio

logger = logging.getLogger(__name__)

MESSAGE_EVENT = "message"


def _video_id_from(data):
    """Accept a bare video id or {"videoId": ...}."""
    if isinstance(data, dict):
        data = data.get("videoId")
    if isinstance(data, str) and data.strip():
        return data.strip()
    return None


def register_socketio_events(app):
    """
    Register WebSocket event handlers with the Flask-SocketIO instance.

    Args:
        app: Flask application instance
    """
    socketio = get_socketio()

    if socketio is None:
        logger.warning("SocketIO not initialized, skipping event registration")
        return

    @socketio.on("connect")
    def handle_connect():
        """Handle client connection."""
        logger.info(f"Client connected: {request.sid}")

    @socketio.on("disconnect")
    def handle_disconnect(*args):
        """Drop every subscription of the disconnecting client."""
        client_id = request.sid
        registry = current_app.container.resolve(SubscriberRegistry)
        left = registry.leave(client_id)
        logger.info(f"Client disconnected: {client_id} (left {left} channel(s))")

    @socketio.on("subscribe")
    def handle_subscribe(data):
        """
        Subscribe to the log and status stream of a video.

        Args:
            data: video id, or dict with 'videoId' field
        """
        video_id = _video_id_from(data)

        if video_id is None:
            emit("error", {"message": "Missing videoId"})
            return

        registry = current_app.container.resolve(SubscriberRegistry)
        registry.join(request.sid, video_id)

        logger.info(f"Client {request.sid} subscribed to video {video_id}")
        emit(MESSAGE_EVENT, f"Joined {video_id}")

    @socketio.on("unsubscribe")
    def handle_unsubscribe(data):
        """
        Unsubscribe from a video.

        Args:
            data: video id, or dict with 'videoId' field
        """
        video_id = _video_id_from(data)

        if video_id is None:
            emit("error", {"message": "Missing videoId"})
            return

        registry = current_app.container.resolve(SubscriberRegistry)
        registry.leave_channel(request.sid, video_id)

        logger.info(f"Client {request.sid} unsubscribed from video {video_id}")
        emit(MESSAGE_EVENT, f"Left {video_id}")

    logger.info("SocketIO event handlers registered")


def deliver_to_client(client_id, payload):
    """
    Send one message to one connected client.

    Used as the SubscriberRegistry delivery function.

    Raises:
        RuntimeError: If SocketIO is not initialized
    """
    socketio = get_socketio()

    if socketio is None:
        raise RuntimeError("SocketIO not initialized")

    socketio.emit(MESSAGE_EVENT, payload, to=client_id)
