"""
Celery Tasks

Periodic maintenance tasks run by the Celery worker and beat scheduler.
"""
