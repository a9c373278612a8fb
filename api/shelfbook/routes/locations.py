"""Location routes."""

import logging

import httpx
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shelfbook.core.database import get_db
from shelfbook.core.dependencies import get_org_team_member
from shelfbook.models.asset import Location
from shelfbook.models.organization import TeamMember
from shelfbook.schemas import CoordinatesOut, LocationOut
from shelfbook.utils.geolocate import geolocate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orgs/{org_id}/locations", tags=["locations"])


@router.get("/{location_id}", response_model=LocationOut)
async def get_location(
    org_id: int,
    location_id: int,
    _member: TeamMember = Depends(get_org_team_member),
    db: AsyncSession = Depends(get_db),
):
    """Location details with map coordinates resolved from its address."""
    result = await db.execute(
        select(Location).where(Location.id == location_id, Location.organization_id == org_id)
    )
    location = result.scalar_one_or_none()
    if location is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location not found")

    out = LocationOut.model_validate(location)
    try:
        coordinates = await geolocate(location.address)
    except httpx.HTTPError:
        # The page still renders without a map
        logger.warning("Geocoding failed for location %s", location.id, exc_info=True)
        coordinates = None
    if coordinates:
        out.coordinates = CoordinatesOut(**coordinates)
    return out
