"""
Celery Configuration

The worker runs periodic maintenance only: the orphan reconciliation
task on a beat schedule. Uploads and job dispatch stay on the request path.
"""

import os

from celery import Celery
from kombu import Exchange, Queue

RECONCILE_TASK = "vidrelay.tasks.reconcile_orphaned_videos"
MAINTENANCE_QUEUE = "maintenance"


def _broker_url() -> str:
    return os.getenv("CELERY_BROKER_URL") or os.getenv("REDIS_URL", "redis://localhost:6379/0")


def celery_settings() -> dict:
    """Celery settings read from the environment at call time."""
    broker_url = _broker_url()
    maintenance = Exchange(MAINTENANCE_QUEUE, type="direct")

    return {
        "broker_url": broker_url,
        "result_backend": os.getenv("CELERY_RESULT_BACKEND", broker_url),
        "task_serializer": "json",
        "accept_content": ["json"],
        "result_serializer": "json",
        "timezone": "UTC",
        "enable_utc": True,
        # A reconcile run is idempotent; redeliver it if the worker dies
        "task_acks_late": True,
        "worker_prefetch_multiplier": 1,
        "task_queues": (Queue(MAINTENANCE_QUEUE, maintenance, routing_key=MAINTENANCE_QUEUE),),
        "task_default_queue": MAINTENANCE_QUEUE,
        "task_routes": {RECONCILE_TASK: {"queue": MAINTENANCE_QUEUE}},
        "beat_schedule": {
            "reconcile-orphaned-videos": {
                "task": RECONCILE_TASK,
                "schedule": float(os.getenv("RECONCILE_INTERVAL_SECONDS", 900)),
                "options": {"expires": float(os.getenv("RECONCILE_INTERVAL_SECONDS", 900))},
            },
        },
        "task_soft_time_limit": int(os.getenv("RECONCILE_SOFT_TIME_LIMIT", 240)),
        "task_time_limit": int(os.getenv("RECONCILE_TIME_LIMIT", 300)),
        "result_expires": 3600,
        "worker_concurrency": int(os.getenv("CELERY_WORKER_CONCURRENCY", 1)),
    }


def make_celery(app) -> Celery:
    """
    Create the Celery instance bound to a Flask app.

    Tasks run inside the app context so they can resolve services from
    app.container.

    Args:
        app: Flask application instance
    """
    celery = Celery(app.import_name)
    celery.conf.update(celery_settings())

    class AppContextTask(celery.Task):
        def __call__(self, *args, **kwargs):
            with app.app_context():
                return self.run(*args, **kwargs)

    celery.Task = AppContextTask
    return celery
