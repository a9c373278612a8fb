"""Celery worker configuration.

Booking reminders are sent as one-off tasks with an ETA (see
``shelfbook.services.scheduler``); the task implementations live in
``shelfbook.tasks``.
"""

from celery import Celery

from shelfbook.core.config import settings

celery_app = Celery(
    "shelfbook",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["shelfbook.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
)
