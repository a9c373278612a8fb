"""Deferred booking jobs on top of Celery.

A booking carries at most one pending job at a time, referenced by
``Booking.active_scheduler_reference``. Jobs are plain Celery tasks sent by
name with an ETA, so the web process never imports the task code. Task ids
are generated up front so the reference can be stored before the task is sent.
"""

import logging
from datetime import datetime

from celery import Celery
from celery.utils import uuid

from shelfbook.worker import celery_app

logger = logging.getLogger(__name__)


class SchedulerKeys:
    CHECKOUT_REMINDER = "booking.checkout_reminder"
    CHECKIN_REMINDER = "booking.checkin_reminder"
    OVERDUE_HANDLER = "booking.overdue_handler"


class BookingScheduler:
    def __init__(self, app: Celery):
        self.app = app

    def new_job_id(self) -> str:
        return uuid()

    def send_after(self, key: str, data: dict, when: datetime, job_id: str | None = None) -> str:
        """Enqueue task ``key`` to run at ``when`` under ``job_id``. Returns the task id."""
        result = self.app.send_task(key, args=[data], eta=when, task_id=job_id)
        logger.info("Scheduled %s for booking %s at %s (task %s)", key, data.get("id"), when.isoformat(), result.id)
        return result.id

    def cancel(self, job_id: str) -> None:
        self.app.control.revoke(job_id)


scheduler = BookingScheduler(celery_app)
