"""FastAPI dependencies for injection into route handlers."""

from fastapi import Depends, HTTPException, Path, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shelfbook.core.auth import decode_token
from shelfbook.core.config import settings
from shelfbook.core.database import get_db
from shelfbook.models.organization import Organization, TeamMember, User
from shelfbook.schemas import ClientHint
from shelfbook.utils.timezones import load_zone

bearer_scheme = HTTPBearer(auto_error=False)


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Extract and validate the current user from the JWT bearer token."""
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    try:
        payload = decode_token(credentials.credentials)
        if payload.get("type") != "access":
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token type")
        user_id = int(payload["sub"])
    except (JWTError, KeyError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from None

    result = await db.execute(select(User).where(User.id == user_id, User.is_active.is_(True)))
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")

    return user


# ---------------------------------------------------------------------------
# Organization access
# ---------------------------------------------------------------------------

async def get_org_team_member(
    org_id: int = Path(...),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> TeamMember:
    """Resolve the authenticated user's team member record in the org from the URL.

    404 when the organization does not exist, 403 when the user is not part of it.
    """
    org = await db.get(Organization, org_id)
    if org is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Organization not found")

    result = await db.execute(
        select(TeamMember).where(TeamMember.organization_id == org_id, TeamMember.user_id == user.id)
    )
    team_member = result.scalars().first()
    if team_member is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not a member of this organization",
        )

    return team_member


# ---------------------------------------------------------------------------
# Client hints
# ---------------------------------------------------------------------------

def get_client_hints(request: Request) -> ClientHint:
    """Browser time zone and locale, from the client hint cookies or headers.

    Time zones that do not resolve are skipped, so a bad cookie falls through
    to the header and then to the configured default.
    """
    candidates = (request.cookies.get("CH-time-zone"), request.headers.get("X-Client-Time-Zone"))
    time_zone = next((name for name in candidates if load_zone(name)), settings.default_time_zone)
    locale = (
        request.cookies.get("CH-locale")
        or request.headers.get("Accept-Language", "").split(",")[0].strip()
        or settings.default_locale
    )
    return ClientHint(time_zone=time_zone, locale=locale)
