"""Handlers for scheduled booking jobs.

A job can outlive the state it was scheduled for (a revoke may fail, or the
booking may change in between), so each handler reloads the booking and
re-checks it before acting:

- the booking must still exist,
- it must still be in the status the job expects,
- when the booking tracks an active job, it must be this one.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from shelfbook.models.booking import Booking, BookingStatus
from shelfbook.schemas import SchedulerData
from shelfbook.services.booking import as_utc, custodian_email, load_booking, schedule_next_booking_job
from shelfbook.services.booking_emails import send_checkin_reminder, send_checkout_reminder, send_overdue_email
from shelfbook.services.scheduler import SchedulerKeys

logger = logging.getLogger(__name__)


async def _load_for_job(
    db: AsyncSession,
    key: str,
    payload: SchedulerData,
    expected_status: BookingStatus,
    job_id: str | None,
) -> Booking | None:
    booking = await load_booking(db, payload.id)
    if booking is None:
        logger.warning("Skipping %s: booking %s no longer exists", key, payload.id)
        return None
    if booking.status != expected_status:
        logger.info("Skipping %s: booking %s is %s", key, booking.id, booking.status)
        return None
    if job_id and booking.active_scheduler_reference and booking.active_scheduler_reference != job_id:
        logger.info("Skipping %s: job %s was superseded for booking %s", key, job_id, booking.id)
        return None
    return booking


async def handle_checkout_reminder(db: AsyncSession, data: dict, job_id: str | None = None) -> None:
    """Remind the custodian to collect the assets of a reserved booking."""
    payload = SchedulerData.model_validate(data)
    booking = await _load_for_job(db, SchedulerKeys.CHECKOUT_REMINDER, payload, BookingStatus.RESERVED, job_id)
    if booking is None:
        return

    email = custodian_email(booking)
    if email:
        await send_checkout_reminder(booking, email, payload.hints)


async def handle_checkin_reminder(db: AsyncSession, data: dict, job_id: str | None = None) -> None:
    """Remind the custodian to return the assets, then queue the overdue handler for ``to``."""
    payload = SchedulerData.model_validate(data)
    booking = await _load_for_job(db, SchedulerKeys.CHECKIN_REMINDER, payload, BookingStatus.ONGOING, job_id)
    if booking is None:
        return

    email = custodian_email(booking)
    if email:
        await send_checkin_reminder(booking, email, payload.hints)

    if booking.to:
        await schedule_next_booking_job(db, payload, when=as_utc(booking.to), key=SchedulerKeys.OVERDUE_HANDLER)


async def handle_overdue(db: AsyncSession, data: dict, job_id: str | None = None) -> None:
    """Flag an ongoing booking whose window has ended as overdue."""
    payload = SchedulerData.model_validate(data)
    booking = await _load_for_job(db, SchedulerKeys.OVERDUE_HANDLER, payload, BookingStatus.ONGOING, job_id)
    if booking is None:
        return

    booking.status = BookingStatus.OVERDUE
    booking.active_scheduler_reference = None
    await db.commit()
    logger.info("Booking %s is overdue", booking.id)

    email = custodian_email(booking)
    if email:
        await send_overdue_email(booking, email, payload.hints)


HANDLERS = {
    SchedulerKeys.CHECKOUT_REMINDER: handle_checkout_reminder,
    SchedulerKeys.CHECKIN_REMINDER: handle_checkin_reminder,
    SchedulerKeys.OVERDUE_HANDLER: handle_overdue,
}
