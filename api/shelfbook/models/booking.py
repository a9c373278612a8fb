"""Booking model.

A booking reserves one or more assets for a custodian over a time window.
The custodian is either a user, a team member, or both when the team member
has a login.
"""

import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Index, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shelfbook.models.base import Base, TimestampMixin


class BookingStatus(enum.StrEnum):
    DRAFT = "draft"            # Being composed, nothing reserved yet
    RESERVED = "reserved"      # Assets held for the window
    ONGOING = "ongoing"        # Assets checked out to the custodian
    OVERDUE = "overdue"        # Window ended, assets not checked back in
    COMPLETE = "complete"      # Assets checked back in
    CANCELLED = "cancelled"
    ARCHIVED = "archived"      # Hidden from default listings


# Statuses a booking cannot leave through normal use
TERMINAL_STATUSES = (BookingStatus.ARCHIVED, BookingStatus.CANCELLED, BookingStatus.COMPLETE)

# Statuses in which the booking's assets are out with the custodian
ACTIVE_STATUSES = (BookingStatus.ONGOING, BookingStatus.OVERDUE)


booking_assets = Table(
    "booking_assets",
    Base.metadata,
    Column("booking_id", ForeignKey("bookings.id", ondelete="CASCADE"), primary_key=True),
    Column("asset_id", ForeignKey("assets.id", ondelete="CASCADE"), primary_key=True),
)


class Booking(TimestampMixin, Base):
    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    status: Mapped[BookingStatus] = mapped_column(
        Enum(BookingStatus, name="booking_status", values_callable=lambda e: [x.value for x in e]),
        default=BookingStatus.DRAFT,
        nullable=False,
    )

    # When
    from_: Mapped[datetime | None] = mapped_column("from", DateTime(timezone=True))
    to: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Ownership (set on create only)
    organization_id: Mapped[int] = mapped_column(ForeignKey("organizations.id"), nullable=False)
    creator_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)

    # Custodian
    custodian_user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"))
    custodian_team_member_id: Mapped[int | None] = mapped_column(ForeignKey("team_members.id"))

    # Celery task id of the next pending reminder/handler, if any
    active_scheduler_reference: Mapped[str | None] = mapped_column(String(155))

    # Relationships
    organization: Mapped["Organization"] = relationship()
    creator: Mapped["User"] = relationship(foreign_keys=[creator_id])
    custodian_user: Mapped["User | None"] = relationship(foreign_keys=[custodian_user_id])
    custodian_team_member: Mapped["TeamMember | None"] = relationship()
    assets: Mapped[list["Asset"]] = relationship(secondary=booking_assets, order_by="Asset.id")

    __table_args__ = (
        # Listing is always org-scoped, usually filtered by status
        Index("ix_bookings_org_status", "organization_id", "status"),
        Index("ix_bookings_custodian_user", "custodian_user_id"),
        Index("ix_bookings_custodian_team_member", "custodian_team_member_id"),
    )

    def __repr__(self) -> str:
        return f"<Booking {self.name} ({self.status}) {self.from_}-{self.to}>"


# Import for type hints
from shelfbook.models.asset import Asset  # noqa: E402
from shelfbook.models.organization import Organization, TeamMember, User  # noqa: E402
