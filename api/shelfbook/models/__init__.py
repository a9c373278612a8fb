"""All models imported here so the mappers resolve and metadata is complete."""

from shelfbook.models.asset import Asset, AssetStatus, Category, Custody, Location
from shelfbook.models.base import Base
from shelfbook.models.booking import (
    ACTIVE_STATUSES,
    TERMINAL_STATUSES,
    Booking,
    BookingStatus,
    booking_assets,
)
from shelfbook.models.organization import Organization, TeamMember, User

__all__ = [
    "Base",
    "Organization",
    "User",
    "TeamMember",
    "Category",
    "Location",
    "Asset",
    "AssetStatus",
    "Custody",
    "Booking",
    "BookingStatus",
    "booking_assets",
    "TERMINAL_STATUSES",
    "ACTIVE_STATUSES",
]
