"""Asset inventory models.

Asset = a physical item an organization tracks and lends out.
Custody = an asset handed to a team member outside of any booking.
Category and Location are descriptive groupings shown alongside assets.
"""

import enum
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shelfbook.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from shelfbook.models.organization import TeamMember


class AssetStatus(enum.StrEnum):
    AVAILABLE = "available"
    IN_CUSTODY = "in_custody"
    CHECKED_OUT = "checked_out"  # Out with the custodian of an ongoing booking


class Category(TimestampMixin, Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True)
    organization_id: Mapped[int] = mapped_column(ForeignKey("organizations.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    color: Mapped[str] = mapped_column(String(7), default="#808080", nullable=False)

    def __repr__(self) -> str:
        return f"<Category {self.name}>"


class Location(TimestampMixin, Base):
    __tablename__ = "locations"

    id: Mapped[int] = mapped_column(primary_key=True)
    organization_id: Mapped[int] = mapped_column(ForeignKey("organizations.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[str | None] = mapped_column(Text)
    description: Mapped[str | None] = mapped_column(Text)

    def __repr__(self) -> str:
        return f"<Location {self.name}>"


class Asset(TimestampMixin, Base):
    __tablename__ = "assets"

    id: Mapped[int] = mapped_column(primary_key=True)
    organization_id: Mapped[int] = mapped_column(ForeignKey("organizations.id"), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[AssetStatus] = mapped_column(
        Enum(AssetStatus, name="asset_status", values_callable=lambda e: [x.value for x in e]),
        default=AssetStatus.AVAILABLE,
        nullable=False,
    )
    available_to_book: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    category_id: Mapped[int | None] = mapped_column(ForeignKey("categories.id"))
    location_id: Mapped[int | None] = mapped_column(ForeignKey("locations.id"))

    # Relationships
    category: Mapped["Category | None"] = relationship()
    location: Mapped["Location | None"] = relationship()
    custody: Mapped["Custody | None"] = relationship(back_populates="asset", uselist=False)

    __table_args__ = (Index("ix_assets_org_status", "organization_id", "status"),)

    def __repr__(self) -> str:
        return f"<Asset {self.title} ({self.status})>"


class Custody(TimestampMixin, Base):
    __tablename__ = "custodies"

    id: Mapped[int] = mapped_column(primary_key=True)
    asset_id: Mapped[int] = mapped_column(ForeignKey("assets.id"), unique=True, nullable=False)
    team_member_id: Mapped[int] = mapped_column(ForeignKey("team_members.id"), nullable=False)

    # Relationships
    asset: Mapped["Asset"] = relationship(back_populates="custody")
    team_member: Mapped["TeamMember"] = relationship()

    def __repr__(self) -> str:
        return f"<Custody asset={self.asset_id} member={self.team_member_id}>"
