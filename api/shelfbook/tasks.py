"""Celery tasks for scheduled booking jobs.

Tasks are synchronous; each one runs its async handler in a fresh event loop
with its own database session.
"""

import asyncio

from shelfbook.core.database import engine, session_scope
from shelfbook.services.booking_jobs import HANDLERS
from shelfbook.services.scheduler import SchedulerKeys
from shelfbook.worker import celery_app


async def run_job(key: str, data: dict, job_id: str | None = None) -> None:
    """Run the handler for ``key`` in its own session, committing on success."""
    handler = HANDLERS[key]
    try:
        async with session_scope() as session:
            await handler(session, data, job_id)
    finally:
        # Pooled connections are bound to this loop, which asyncio.run closes
        await engine.dispose()


@celery_app.task(name=SchedulerKeys.CHECKOUT_REMINDER, bind=True)
def checkout_reminder(self, data: dict) -> None:
    asyncio.run(run_job(SchedulerKeys.CHECKOUT_REMINDER, data, self.request.id))


@celery_app.task(name=SchedulerKeys.CHECKIN_REMINDER, bind=True)
def checkin_reminder(self, data: dict) -> None:
    asyncio.run(run_job(SchedulerKeys.CHECKIN_REMINDER, data, self.request.id))


@celery_app.task(name=SchedulerKeys.OVERDUE_HANDLER, bind=True)
def overdue_handler(self, data: dict) -> None:
    asyncio.run(run_job(SchedulerKeys.OVERDUE_HANDLER, data, self.request.id))
