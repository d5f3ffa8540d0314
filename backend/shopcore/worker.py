"""
Celery Worker Configuration

Background maintenance for Shopcore:
- Ledger total reconciliation
- Completion of interrupted tenant deletions
"""
import logging

from celery import Celery
from celery.schedules import crontab

from shopcore.config import settings

logger = logging.getLogger(__name__)

# Create Celery app
celery_app = Celery(
    "shopcore",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=[
        "shopcore.tasks.maintenance_tasks",
    ],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=1800,
    task_soft_time_limit=1700,

    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=100,

    result_expires=86400,

    task_default_retry_delay=60,
    task_max_retries=3,

    task_routes={
        "shopcore.tasks.maintenance_tasks.*": {"queue": "maintenance"},
    },
    task_default_queue="default",
)

# Beat schedule for periodic tasks
celery_app.conf.beat_schedule = {
    # Repair drifted ledger totals nightly at 2 AM
    "reconcile-ledger-totals": {
        "task": "shopcore.tasks.maintenance_tasks.reconcile_ledger_totals",
        "schedule": crontab(hour=2, minute=0),
    },
}


class ShopcoreTask(celery_app.Task):
    """Base task class that logs failures and retries."""

    abstract = True

    def on_failure(self, exc, task_id, args, kwargs, einfo):
        logger.error(f"Task {self.name}[{task_id}] failed: {exc}")

    def on_retry(self, exc, task_id, args, kwargs, einfo):
        logger.warning(f"Task {self.name}[{task_id}] retrying: {exc}")


celery_app.Task = ShopcoreTask
