"""
Reconcile Task

Celery beat task that abandons videos whose upload session was never
created. Thin wrapper that delegates to UploadCoordinator.
"""

import logging
from datetime import timedelta

from vidrelay.celery_app import celery_app, flask_app
from vidrelay.application.upload_coordinator import UploadCoordinator
from vidrelay.config.celery_config import RECONCILE_TASK
from vidrelay.config.storage_config import StorageConfig

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name=RECONCILE_TASK)
def reconcile_orphaned_videos(self):
    """
    Abandon videos left in CREATED without an upload session.

    Runs every RECONCILE_INTERVAL_SECONDS (beat schedule) and only touches
    videos older than ORPHAN_MAX_AGE_SECONDS, so videos whose creation is
    still in flight are left alone.

    Returns:
        dict: Counts of orphans found, abandoned and failed
    """
    container = flask_app.container
    coordinator = container.resolve(UploadCoordinator)
    storage_config = container.resolve(StorageConfig)

    older_than = timedelta(seconds=storage_config.orphan_max_age_seconds)
    stats = coordinator.reconcile_orphans(older_than)

    logger.info(
        f"Reconciled orphaned videos - found: {stats['found']}, "
        f"abandoned: {stats['abandoned']}, errors: {stats['errors']}"
    )
    return stats
