"""Organization and people models.

Organization = a workspace that owns assets and bookings.
User = a person with login credentials.
TeamMember = a person inside an organization. Team members can exist without
a login (e.g. a contractor who only ever receives assets), in which case
``user_id`` is empty.
"""

from sqlalchemy import Boolean, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shelfbook.models.base import Base, TimestampMixin


class Organization(TimestampMixin, Base):
    __tablename__ = "organizations"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    def __repr__(self) -> str:
        return f"<Organization {self.name}>"


class User(TimestampMixin, Base):
    """A person who can log in."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(254), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str | None] = mapped_column(String(200))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Profile
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<User {self.email}>"


class TeamMember(TimestampMixin, Base):
    """Links a person (with or without a user account) to an organization."""

    __tablename__ = "team_members"

    id: Mapped[int] = mapped_column(primary_key=True)
    organization_id: Mapped[int] = mapped_column(ForeignKey("organizations.id"), nullable=False)
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"))
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    # Relationships
    organization: Mapped["Organization"] = relationship()
    user: Mapped["User | None"] = relationship()

    __table_args__ = (Index("ix_team_members_org_user", "organization_id", "user_id"),)

    def __repr__(self) -> str:
        return f"<TeamMember {self.name} @ org {self.organization_id}>"
