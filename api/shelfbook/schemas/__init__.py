"""Pydantic schemas for API serialisation and service inputs."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from shelfbook.models.asset import AssetStatus
from shelfbook.models.booking import BookingStatus

# --- Auth ---


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    first_name: str
    last_name: str


# --- Client hints ---


class ClientHint(BaseModel):
    """Browser time zone and locale, used to render dates in emails."""

    time_zone: str = "UTC"
    locale: str = "en-US"


class SchedulerData(BaseModel):
    """Payload carried by every scheduled booking job."""

    id: int
    hints: ClientHint


# --- Booking inputs ---


class BookingUpsert(BaseModel):
    """Partial booking record. Only fields that were explicitly set are applied."""

    model_config = ConfigDict(populate_by_name=True)

    id: int | None = None
    name: str | None = None
    description: str | None = None
    status: BookingStatus | None = None
    from_: datetime | None = Field(default=None, alias="from")
    to: datetime | None = None
    creator_id: int | None = None
    organization_id: int | None = None
    custodian_user_id: int | None = None
    custodian_team_member_id: int | None = None
    asset_ids: list[int] | None = None


class BookingCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    status: BookingStatus = BookingStatus.DRAFT
    from_: datetime | None = Field(default=None, alias="from")
    to: datetime | None = None
    custodian_user_id: int | None = None
    custodian_team_member_id: int | None = None
    asset_ids: list[int] = []


class BookingUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    status: BookingStatus | None = None
    from_: datetime | None = Field(default=None, alias="from")
    to: datetime | None = None
    custodian_user_id: int | None = None
    custodian_team_member_id: int | None = None
    asset_ids: list[int] | None = None


class RemoveAssetsRequest(BaseModel):
    asset_ids: list[int] = Field(min_length=1)


# --- Booking outputs ---


class TeamMemberOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    user_id: int | None


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    color: str


class CustodyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    team_member_id: int


class BookingAssetOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    status: AssetStatus
    available_to_book: bool
    custody: CustodyOut | None = None


class AssetDetailOut(BookingAssetOut):
    category: CategoryOut | None = None


class BookingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    name: str
    description: str | None
    status: BookingStatus
    from_: datetime | None = Field(serialization_alias="from")
    to: datetime | None
    organization_id: int
    creator_id: int
    custodian_user: UserOut | None
    custodian_team_member: TeamMemberOut | None
    assets: list[BookingAssetOut]
    created_at: datetime


class BookingDetailOut(BookingOut):
    assets: list[AssetDetailOut]


class BookingListOut(BaseModel):
    bookings: list[BookingOut]
    total: int
    page: int
    per_page: int
    total_pages: int


# --- Locations ---


class CoordinatesOut(BaseModel):
    lat: float
    lon: float


class LocationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    address: str | None
    description: str | None
    coordinates: CoordinatesOut | None = None
