# hydroscan/celery_worker.py
from celery import Celery

from hydroscan.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    CELERY_TASK_ALWAYS_EAGER,
    ROLLOVER_INTERVAL_SECONDS,
)

celery_app = Celery(
    "hydroscan",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# import tasks explicitly so the worker registers them
celery_app.conf.imports = (
    "hydroscan.tasks.rollover",
    "hydroscan.services.notification_service",
)

celery_app.conf.beat_schedule = {
    "process-pending-daily-summaries": {
        "task": "hydroscan.tasks.rollover.process_pending_summaries_task",
        "schedule": float(ROLLOVER_INTERVAL_SECONDS),
    },
}

celery_app.conf.timezone = "UTC"
celery_app.conf.task_always_eager = CELERY_TASK_ALWAYS_EAGER
