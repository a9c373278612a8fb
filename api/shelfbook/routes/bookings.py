"""Booking routes: list, create, read, update, remove assets, delete.

All routes are scoped to an organization the current user is a team member of.
Status changes go through PATCH; the service layer owns the side effects.
"""

import math
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from shelfbook.core.config import settings
from shelfbook.core.database import get_db
from shelfbook.core.dependencies import get_client_hints, get_current_user, get_org_team_member
from shelfbook.models.booking import Booking, BookingStatus
from shelfbook.models.organization import TeamMember, User
from shelfbook.schemas import (
    BookingCreate,
    BookingDetailOut,
    BookingListOut,
    BookingOut,
    BookingUpdate,
    BookingUpsert,
    ClientHint,
    RemoveAssetsRequest,
)
from shelfbook.services.booking import (
    BookingError,
    delete_booking,
    get_booking,
    get_bookings,
    remove_assets,
    upsert_booking,
)

router = APIRouter(prefix="/orgs/{org_id}/bookings", tags=["bookings"])


def _to_http(exc: BookingError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message)


async def _get_org_booking(db: AsyncSession, org_id: int, booking_id: int) -> Booking:
    booking = await get_booking(db, booking_id)
    if booking is None or booking.organization_id != org_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    return booking


@router.get("", response_model=BookingListOut)
async def list_bookings(
    org_id: int,
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.bookings_per_page, ge=1, le=100),
    s: str | None = Query(None, description="Case-insensitive search on booking name"),
    statuses: list[BookingStatus] | None = Query(None, alias="status"),
    custodian_user_id: int | None = None,
    custodian_team_member_id: int | None = None,
    asset_ids: list[int] | None = Query(None, alias="asset_id"),
    exclude_booking_ids: list[int] | None = Query(None, alias="exclude_id"),
    booking_from: datetime | None = None,
    booking_to: datetime | None = None,
    _member: TeamMember = Depends(get_org_team_member),
    db: AsyncSession = Depends(get_db),
):
    bookings, total = await get_bookings(
        db,
        organization_id=org_id,
        page=page,
        per_page=per_page,
        search=s,
        statuses=statuses,
        custodian_user_id=custodian_user_id,
        custodian_team_member_id=custodian_team_member_id,
        asset_ids=asset_ids,
        booking_from=booking_from,
        booking_to=booking_to,
        exclude_booking_ids=exclude_booking_ids,
    )
    return BookingListOut(
        bookings=[BookingOut.model_validate(b) for b in bookings],
        total=total,
        page=page,
        per_page=per_page,
        total_pages=math.ceil(total / per_page),
    )


@router.post("", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
async def create_booking(
    org_id: int,
    body: BookingCreate,
    user: User = Depends(get_current_user),
    _member: TeamMember = Depends(get_org_team_member),
    hints: ClientHint = Depends(get_client_hints),
    db: AsyncSession = Depends(get_db),
):
    data = BookingUpsert(**body.model_dump(), creator_id=user.id, organization_id=org_id)
    try:
        return await upsert_booking(db, data, hints)
    except BookingError as exc:
        raise _to_http(exc) from None


@router.get("/{booking_id}", response_model=BookingDetailOut)
async def read_booking(
    org_id: int,
    booking_id: int,
    _member: TeamMember = Depends(get_org_team_member),
    db: AsyncSession = Depends(get_db),
):
    return await _get_org_booking(db, org_id, booking_id)


@router.patch("/{booking_id}", response_model=BookingOut)
async def update_booking(
    org_id: int,
    booking_id: int,
    body: BookingUpdate,
    _member: TeamMember = Depends(get_org_team_member),
    hints: ClientHint = Depends(get_client_hints),
    db: AsyncSession = Depends(get_db),
):
    await _get_org_booking(db, org_id, booking_id)

    data = BookingUpsert(id=booking_id, **body.model_dump(exclude_unset=True))
    try:
        return await upsert_booking(db, data, hints)
    except BookingError as exc:
        raise _to_http(exc) from None


@router.post("/{booking_id}/remove-assets", response_model=BookingOut)
async def remove_booking_assets(
    org_id: int,
    booking_id: int,
    body: RemoveAssetsRequest,
    _member: TeamMember = Depends(get_org_team_member),
    db: AsyncSession = Depends(get_db),
):
    await _get_org_booking(db, org_id, booking_id)
    return await remove_assets(db, booking_id, body.asset_ids)


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_booking(
    org_id: int,
    booking_id: int,
    _member: TeamMember = Depends(get_org_team_member),
    hints: ClientHint = Depends(get_client_hints),
    db: AsyncSession = Depends(get_db),
):
    await _get_org_booking(db, org_id, booking_id)
    await delete_booking(db, booking_id, hints)
