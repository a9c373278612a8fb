"""Booking lifecycle: upsert, list, remove assets, delete.

Every status change can fan out into three side effects, applied in order:

1. asset statuses (CHECKED_OUT while a booking is ongoing, AVAILABLE once an
   active booking ends or disappears),
2. the booking's single pending scheduler job (cancelled, then replaced by
   the next reminder),
3. an email to the custodian user, when they have an address.

Jobs and emails go out only after the booking state is committed. A job whose
ETA has already passed runs at once and must see the new state.
"""

import logging
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from starlette.concurrency import run_in_threadpool

from shelfbook.core.config import settings
from shelfbook.models.asset import Asset, AssetStatus
from shelfbook.models.booking import ACTIVE_STATUSES, TERMINAL_STATUSES, Booking, BookingStatus
from shelfbook.models.organization import TeamMember
from shelfbook.schemas import BookingUpsert, ClientHint, SchedulerData
from shelfbook.services.booking_emails import (
    send_checkin_reminder,
    send_completed_email,
    send_deleted_email,
    send_reserved_email,
)
from shelfbook.services.scheduler import SchedulerKeys, scheduler

logger = logging.getLogger(__name__)

MAX_PER_PAGE = 100
FALLBACK_PER_PAGE = 20


class BookingError(Exception):
    """Base class for booking service failures."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class BookingNotFound(BookingError):
    pass


class TeamMemberNotFound(BookingError):
    pass


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes coming back from the database as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def reminder_lead() -> timedelta:
    return timedelta(hours=settings.reminder_lead_hours)


def custodian_email(booking: Booking) -> str | None:
    if booking.custodian_user is None:
        return None
    return booking.custodian_user.email


def _booking_options(detail: bool = False) -> tuple:
    assets = selectinload(Booking.assets)
    if detail:
        assets = assets.options(selectinload(Asset.custody), selectinload(Asset.category))
    else:
        assets = assets.selectinload(Asset.custody)
    return (
        selectinload(Booking.custodian_user),
        selectinload(Booking.custodian_team_member),
        assets,
    )


async def load_booking(db: AsyncSession, booking_id: int, detail: bool = False) -> Booking | None:
    """Fetch a booking with custodians and assets, refreshing anything already in the session."""
    result = await db.execute(
        select(Booking)
        .options(*_booking_options(detail))
        .where(Booking.id == booking_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Scheduler helpers
# ---------------------------------------------------------------------------


async def cancel_scheduler(booking: Booking | None) -> None:
    """Revoke the booking's pending job, if any. Failures are logged, never raised.

    Workers re-check the booking state before acting, so a job that survives
    a failed revoke is a no-op.
    """
    if booking is None or not booking.active_scheduler_reference:
        return
    try:
        await run_in_threadpool(scheduler.cancel, booking.active_scheduler_reference)
    except Exception:
        logger.warning("Failed to cancel the scheduler for booking %s", booking.id, exc_info=True)


async def schedule_next_booking_job(db: AsyncSession, data: SchedulerData, when: datetime, key: str) -> str:
    """Enqueue job ``key`` at ``when`` and remember it as the booking's active job.

    Commits the session, reference included, before the task is sent.
    """
    booking = await db.get(Booking, data.id)
    if booking is None:
        raise BookingNotFound(f"Booking {data.id} not found")
    job_id = scheduler.new_job_id()
    booking.active_scheduler_reference = job_id
    await db.commit()

    await run_in_threadpool(scheduler.send_after, key, data.model_dump(), when, job_id=job_id)
    return job_id


async def schedule_checkin(db: AsyncSession, booking: Booking, hints: ClientHint) -> None:
    """Queue the next job for a booking that just went out.

    More than the reminder lead time left: a checkin reminder at ``to - lead``.
    Otherwise that moment has already passed, so the reminder goes out now and
    the overdue handler is queued for ``to``.
    """
    await cancel_scheduler(booking)
    to = as_utc(booking.to)
    data = SchedulerData(id=booking.id, hints=hints)

    if to - datetime.now(UTC) < reminder_lead():
        email = custodian_email(booking)
        if email:
            await send_checkin_reminder(booking, email, hints)
        await schedule_next_booking_job(db, data, when=to, key=SchedulerKeys.OVERDUE_HANDLER)
    else:
        await schedule_next_booking_job(db, data, when=to - reminder_lead(), key=SchedulerKeys.CHECKIN_REMINDER)


async def _schedule_checkout_reminder(db: AsyncSession, booking: Booking, hints: ClientHint) -> None:
    await cancel_scheduler(booking)
    await schedule_next_booking_job(
        db,
        SchedulerData(id=booking.id, hints=hints),
        when=as_utc(booking.from_) - reminder_lead(),
        key=SchedulerKeys.CHECKOUT_REMINDER,
    )


# ---------------------------------------------------------------------------
# Asset helpers
# ---------------------------------------------------------------------------


async def update_asset_states(db: AsyncSession, asset_ids: Iterable[int], status: AssetStatus) -> None:
    """Set ``status`` on the given assets, skipping those already in it."""
    asset_ids = list(asset_ids)
    if not asset_ids:
        return
    await db.execute(
        update(Asset).where(Asset.id.in_(asset_ids), Asset.status != status).values(status=status)
    )


async def _connect_assets(db: AsyncSession, booking: Booking, asset_ids: list[int]) -> None:
    """Add assets of the booking's organization to it. Already linked assets are skipped."""
    linked = {asset.id for asset in booking.assets}
    result = await db.execute(
        select(Asset).where(Asset.id.in_(asset_ids), Asset.organization_id == booking.organization_id)
    )
    booking.assets.extend(asset for asset in result.scalars().all() if asset.id not in linked)


async def _resolve_custodian(
    db: AsyncSession,
    custodian_user_id: int | None,
    custodian_team_member_id: int | None,
) -> dict:
    """Custodian columns to write. A user custodian always replaces a team member one."""
    if custodian_user_id:
        return {"custodian_user_id": custodian_user_id, "custodian_team_member_id": None}

    if custodian_team_member_id:
        team_member = await db.get(TeamMember, custodian_team_member_id)
        if team_member is None:
            raise TeamMemberNotFound("Cannot find team member")
        # A team member without a login leaves no custodian user behind
        return {"custodian_team_member_id": team_member.id, "custodian_user_id": team_member.user_id}

    return {}


# ---------------------------------------------------------------------------
# Upsert
# ---------------------------------------------------------------------------


async def upsert_booking(db: AsyncSession, booking: BookingUpsert, hints: ClientHint) -> Booking:
    """Create a booking, or update it when ``booking.id`` is set.

    Only the fields explicitly set on ``booking`` are written. Creator and
    organization are applied on create only.
    """
    fields = booking.model_dump(exclude_unset=True)
    booking_id = fields.pop("id", None)
    asset_ids = fields.pop("asset_ids", None) or []
    creator_id = fields.pop("creator_id", None)
    organization_id = fields.pop("organization_id", None)
    custodian = await _resolve_custodian(
        db,
        fields.pop("custodian_user_id", None),
        fields.pop("custodian_team_member_id", None),
    )
    for key in ("name", "status"):
        if fields.get(key) is None:
            fields.pop(key, None)
    values = {**fields, **custodian}

    if booking_id is not None:
        return await _update_booking(db, booking_id, values, asset_ids, hints)

    record = Booking(**values, creator_id=creator_id, organization_id=organization_id)
    if asset_ids:
        result = await db.execute(
            select(Asset).where(Asset.id.in_(asset_ids), Asset.organization_id == organization_id)
        )
        record.assets = list(result.scalars().all())
    db.add(record)
    await db.flush()
    logger.info("Booking %s created in organization %s", record.id, organization_id)

    record = await load_booking(db, record.id)
    if record.from_ and values.get("status") == BookingStatus.RESERVED:
        await _schedule_checkout_reminder(db, record, hints)
    return record


async def _update_booking(
    db: AsyncSession,
    booking_id: int,
    values: dict,
    asset_ids: list[int],
    hints: ClientHint,
) -> Booking:
    status = values.get("status")
    new_asset_status: AssetStatus | None = None

    if status in TERMINAL_STATUSES:
        # The stored status is only needed when a booking ends
        previous = await db.get(Booking, booking_id)
        if previous is not None and previous.status in ACTIVE_STATUSES:
            new_asset_status = AssetStatus.AVAILABLE

    record = await load_booking(db, booking_id)
    if record is None:
        raise BookingNotFound(f"Booking {booking_id} not found")

    for key, value in values.items():
        setattr(record, key, value)
    if asset_ids:
        await _connect_assets(db, record, asset_ids)
    await db.flush()
    record = await load_booking(db, booking_id)

    if status == BookingStatus.ONGOING or (record.status == BookingStatus.ONGOING and asset_ids):
        # Overdue bookings are always ongoing first, so their assets are already out
        new_asset_status = AssetStatus.CHECKED_OUT

    if new_asset_status is not None:
        await update_asset_states(db, (asset.id for asset in record.assets), new_asset_status)
    await db.commit()

    if status in TERMINAL_STATUSES:
        await cancel_scheduler(record)

    if record.from_ and status == BookingStatus.RESERVED:
        await _schedule_checkout_reminder(db, record, hints)

    if status == BookingStatus.ONGOING and record.to:
        await schedule_checkin(db, record, hints)

    email = custodian_email(record)
    if email and status == BookingStatus.RESERVED:
        await send_reserved_email(record, email, hints)
    elif email and status == BookingStatus.COMPLETE:
        await send_completed_email(record, email, hints)

    logger.info("Booking %s updated (status=%s)", booking_id, status or record.status)
    return await load_booking(db, booking_id)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def get_bookings(
    db: AsyncSession,
    organization_id: int,
    page: int = 1,
    per_page: int = 8,
    search: str | None = None,
    statuses: list[BookingStatus] | None = None,
    custodian_user_id: int | None = None,
    custodian_team_member_id: int | None = None,
    asset_ids: list[int] | None = None,
    booking_from: datetime | None = None,
    booking_to: datetime | None = None,
    exclude_booking_ids: list[int] | None = None,
) -> tuple[list[Booking], int]:
    """Return one page of an organization's bookings and the total match count.

    Archived bookings are hidden unless ``statuses`` asks for them. Given both
    ``booking_from`` and ``booking_to``, only bookings overlapping or inside
    that window match.
    """
    skip = (page - 1) * per_page if page > 1 else 0
    take = per_page if 1 <= per_page <= MAX_PER_PAGE else FALLBACK_PER_PAGE

    conditions = [Booking.organization_id == organization_id]

    if search and search.strip():
        conditions.append(Booking.name.ilike(f"%{search.strip()}%"))
    if custodian_team_member_id:
        conditions.append(Booking.custodian_team_member_id == custodian_team_member_id)
    if custodian_user_id:
        conditions.append(Booking.custodian_user_id == custodian_user_id)

    if statuses:
        conditions.append(Booking.status.in_(statuses))
    else:
        conditions.append(Booking.status.not_in([BookingStatus.ARCHIVED]))

    if asset_ids:
        conditions.append(Booking.assets.any(Asset.id.in_(asset_ids)))
    if exclude_booking_ids:
        conditions.append(Booking.id.not_in(exclude_booking_ids))

    if booking_from and booking_to:
        conditions.append(
            or_(
                and_(Booking.from_ <= booking_to, Booking.to >= booking_from),
                and_(Booking.from_ >= booking_from, Booking.to <= booking_to),
            )
        )

    result = await db.execute(
        select(Booking)
        .options(*_booking_options())
        .where(*conditions)
        .order_by(Booking.from_.asc(), Booking.id.asc())
        .offset(skip)
        .limit(take)
    )
    bookings = list(result.scalars().all())

    count_result = await db.execute(select(func.count(Booking.id)).where(*conditions))
    return bookings, count_result.scalar_one()


async def get_booking(db: AsyncSession, booking_id: int) -> Booking | None:
    """Booking with custodians and assets, including each asset's category and custody."""
    return await load_booking(db, booking_id, detail=True)


# ---------------------------------------------------------------------------
# Removal
# ---------------------------------------------------------------------------


async def remove_assets(db: AsyncSession, booking_id: int, asset_ids: list[int]) -> Booking:
    """Unlink assets from a booking. Asset statuses are left as they are."""
    record = await load_booking(db, booking_id)
    if record is None:
        raise BookingNotFound(f"Booking {booking_id} not found")

    removed = set(asset_ids)
    record.assets = [asset for asset in record.assets if asset.id not in removed]
    await db.flush()
    return await load_booking(db, booking_id)


async def delete_booking(db: AsyncSession, booking_id: int, hints: ClientHint) -> Booking:
    """Delete a booking, notify the custodian and release its assets if they were out."""
    record = await load_booking(db, booking_id)
    if record is None:
        raise BookingNotFound(f"Booking {booking_id} not found")

    was_active = record.status in ACTIVE_STATUSES
    asset_ids = [asset.id for asset in record.assets]

    await db.delete(record)
    await db.flush()
    if was_active:
        await update_asset_states(db, asset_ids, AssetStatus.AVAILABLE)
    await db.commit()
    logger.info("Booking %s deleted", booking_id)

    await cancel_scheduler(record)
    email = custodian_email(record)
    if email:
        await send_deleted_email(record, email, hints)

    return record
