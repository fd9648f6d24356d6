"""
main.py

Flask server for multipart video uploads with a Socket.IO channel relaying
transcoding logs and status updates.

Dependencies:
  - Infrastructure: Redis server, an S3 bucket, an ECS cluster running the
    transcoding task definition

Notes:
  - API v1 endpoints available at /api/v1/ with Swagger docs at /api/v1/docs
  - Celery worker and beat run the orphan reconciliation task
"""

import os

if os.getenv("SOCKETIO_ASYNC_MODE", "gevent") == "gevent":
    # Threads used by the hub and part URL fan-out must become greenlets
    from gevent import monkey

    monkey.patch_all()

import logging

from vidrelay.app_factory import create_app, start_broadcast_hub
from vidrelay.config.socketio_config import get_socketio, is_socketio_enabled

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()

if __name__ == "__main__":
    host = os.getenv("FLASK_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_PORT", 9000))
    debug = os.getenv("FLASK_DEBUG", "false").lower() == "true"

    start_broadcast_hub(app)

    try:
        if is_socketio_enabled():
            get_socketio().run(app, host=host, port=port, debug=debug, allow_unsafe_werkzeug=True)
        else:
            app.run(host=host, port=port, debug=debug)
    finally:
        app.container.shutdown()
