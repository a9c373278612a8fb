"""Plain-text email content for booking notifications.

Every message names the custodian, the booking and its window, rendered in
the client's time zone, and links back to the booking page.
"""

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from shelfbook.core.config import settings
from shelfbook.models.booking import Booking
from shelfbook.schemas import ClientHint
from shelfbook.services.email import send_email
from shelfbook.utils.timezones import load_zone


def _zone(hints: ClientHint) -> ZoneInfo:
    return load_zone(hints.time_zone) or ZoneInfo(settings.default_time_zone)


def format_booking_date(value: datetime | None, hints: ClientHint) -> str:
    """Render a booking boundary in the client's time zone, e.g. ``Mon, 02 Mar 2026 09:00 CET``."""
    if value is None:
        return "-"
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(_zone(hints)).strftime("%a, %d %b %Y %H:%M %Z")


def custodian_name(booking: Booking) -> str:
    """The custodian user's full name, falling back to the team member's name."""
    if booking.custodian_user is not None:
        return booking.custodian_user.full_name
    if booking.custodian_team_member is not None:
        return booking.custodian_team_member.name
    return "there"


def booking_url(booking_id: int) -> str:
    return f"{settings.frontend_url}/bookings/{booking_id}"


def _subject(action: str, booking_name: str) -> str:
    return f"{action} ({booking_name}) - {settings.app_name}"


def _assets_label(count: int) -> str:
    return f"{count} asset{'s' if count != 1 else ''}"


def _render(
    headline: str,
    *,
    booking_name: str,
    assets_count: int,
    custodian: str,
    from_: datetime | None,
    to: datetime | None,
    hints: ClientHint,
    booking_id: int,
    footer: str = "",
) -> str:
    sections = [
        f"Howdy {custodian},",
        headline,
        (
            f"Booking: {booking_name}\n"
            f"Custodian: {custodian}\n"
            f"Assets: {_assets_label(assets_count)}\n"
            f"From: {format_booking_date(from_, hints)}\n"
            f"To: {format_booking_date(to, hints)}"
        ),
    ]
    if footer:
        sections.append(footer)
    sections.append(f"View the booking: {booking_url(booking_id)}")
    sections.append(f"Thanks,\nThe {settings.app_name} team")
    return "\n\n".join(sections)


def asset_reserved_email_content(**kwargs) -> str:
    return _render("Your booking has been reserved.", **kwargs)


def completed_booking_email_content(**kwargs) -> str:
    return _render(
        "Your booking has been completed. All assets have been checked back in.",
        **kwargs,
    )


def deleted_booking_email_content(**kwargs) -> str:
    return _render(
        "Your booking has been deleted.",
        footer="The assets are no longer reserved for you.",
        **kwargs,
    )


def checkout_reminder_email_content(**kwargs) -> str:
    return _render(
        "Your booking starts soon.",
        footer="Please make sure to collect the assets at the start of the booking.",
        **kwargs,
    )


def checkin_reminder_email_content(**kwargs) -> str:
    return _render(
        "Your booking is due for check-in soon.",
        footer="Please make sure to return the assets before the end of the booking.",
        **kwargs,
    )


def overdue_booking_email_content(**kwargs) -> str:
    return _render(
        "Your booking is overdue.",
        footer="The booking period has ended. Please return the assets as soon as possible.",
        **kwargs,
    )


def _content_args(booking: Booking, hints: ClientHint) -> dict:
    return {
        "booking_name": booking.name,
        "assets_count": len(booking.assets),
        "custodian": custodian_name(booking),
        "from_": booking.from_,
        "to": booking.to,
        "hints": hints,
        "booking_id": booking.id,
    }


async def send_reserved_email(booking: Booking, email: str, hints: ClientHint) -> None:
    await send_email(
        email,
        _subject("Booking reserved", booking.name),
        asset_reserved_email_content(**_content_args(booking, hints)),
    )


async def send_completed_email(booking: Booking, email: str, hints: ClientHint) -> None:
    await send_email(
        email,
        _subject("Booking completed", booking.name),
        completed_booking_email_content(**_content_args(booking, hints)),
    )


async def send_deleted_email(booking: Booking, email: str, hints: ClientHint) -> None:
    await send_email(
        email,
        _subject("Booking deleted", booking.name),
        deleted_booking_email_content(**_content_args(booking, hints)),
    )


async def send_checkout_reminder(booking: Booking, email: str, hints: ClientHint) -> None:
    await send_email(
        email,
        _subject("Upcoming booking", booking.name),
        checkout_reminder_email_content(**_content_args(booking, hints)),
    )


async def send_checkin_reminder(booking: Booking, email: str, hints: ClientHint) -> None:
    await send_email(
        email,
        _subject("Booking check-in reminder", booking.name),
        checkin_reminder_email_content(**_content_args(booking, hints)),
    )


async def send_overdue_email(booking: Booking, email: str, hints: ClientHint) -> None:
    await send_email(
        email,
        _subject("Booking overdue", booking.name),
        overdue_booking_email_content(**_content_args(booking, hints)),
    )
