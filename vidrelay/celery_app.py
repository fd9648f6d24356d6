"""
Celery Application Instance

Creates the Celery app instance for use by workers and beat scheduler.
Uses the app factory to ensure all services are properly initialized.
"""

from vidrelay.app_factory import AppConfig, create_app

config = AppConfig()
# Workers never serve Socket.IO clients
config.socketio_enabled = False

flask_app = create_app(config)

celery_app = flask_app.celery

# Task modules are imported by name when the worker starts, after
# celery_app exists, so they can use it in their decorators.
celery_app.conf.imports = ("vidrelay.tasks.reconcile_task",)
