"""Unit tests for booking email content (pure functions, no DB)."""

from datetime import UTC, datetime
from types import SimpleNamespace

from shelfbook.core.config import settings
from shelfbook.schemas import ClientHint
from shelfbook.services.booking_emails import (
    asset_reserved_email_content,
    custodian_name,
    deleted_booking_email_content,
    format_booking_date,
    overdue_booking_email_content,
)

AMSTERDAM = ClientHint(time_zone="Europe/Amsterdam", locale="nl-NL")


def _content_args(**overrides) -> dict:
    args = {
        "booking_name": "Conference",
        "assets_count": 2,
        "custodian": "Bob Builder",
        "from_": datetime(2026, 3, 2, 8, 0, tzinfo=UTC),
        "to": datetime(2026, 3, 3, 17, 30, tzinfo=UTC),
        "hints": AMSTERDAM,
        "booking_id": 42,
    }
    args.update(overrides)
    return args


class TestFormatBookingDate:
    def test_renders_in_client_time_zone(self):
        value = datetime(2026, 3, 2, 8, 0, tzinfo=UTC)
        assert format_booking_date(value, AMSTERDAM) == "Mon, 02 Mar 2026 09:00 CET"

    def test_naive_values_are_utc(self):
        value = datetime(2026, 7, 1, 8, 0)
        assert format_booking_date(value, AMSTERDAM) == "Wed, 01 Jul 2026 10:00 CEST"

    def test_unknown_time_zone_falls_back_to_default(self):
        value = datetime(2026, 3, 2, 8, 0, tzinfo=UTC)
        assert format_booking_date(value, ClientHint(time_zone="Mars/Olympus_Mons")) == "Mon, 02 Mar 2026 08:00 UTC"

    def test_region_name_is_not_a_time_zone(self):
        value = datetime(2026, 3, 2, 8, 0, tzinfo=UTC)
        assert format_booking_date(value, ClientHint(time_zone="America")) == "Mon, 02 Mar 2026 08:00 UTC"

    def test_missing_value(self):
        assert format_booking_date(None, AMSTERDAM) == "-"


class TestCustodianName:
    def test_prefers_user_full_name(self):
        booking = SimpleNamespace(
            custodian_user=SimpleNamespace(full_name="Bob Builder"),
            custodian_team_member=SimpleNamespace(name="Bobby"),
        )
        assert custodian_name(booking) == "Bob Builder"

    def test_falls_back_to_team_member(self):
        booking = SimpleNamespace(custodian_user=None, custodian_team_member=SimpleNamespace(name="Carol Contractor"))
        assert custodian_name(booking) == "Carol Contractor"

    def test_no_custodian(self):
        assert custodian_name(SimpleNamespace(custodian_user=None, custodian_team_member=None)) == "there"


class TestContent:
    def test_reserved_content(self):
        body = asset_reserved_email_content(**_content_args())

        assert body.startswith("Howdy Bob Builder,\n\nYour booking has been reserved.")
        assert "Booking: Conference\n" in body
        assert "Assets: 2 assets\n" in body
        assert "From: Mon, 02 Mar 2026 09:00 CET\n" in body
        assert "To: Tue, 03 Mar 2026 18:30 CET" in body
        assert f"View the booking: {settings.frontend_url}/bookings/42" in body
        assert body.endswith(f"The {settings.app_name} team")

    def test_single_asset_is_singular(self):
        body = asset_reserved_email_content(**_content_args(assets_count=1))
        assert "Assets: 1 asset\n" in body

    def test_deleted_content_has_footer(self):
        body = deleted_booking_email_content(**_content_args())
        assert "Your booking has been deleted." in body
        assert "no longer reserved for you" in body

    def test_overdue_content(self):
        body = overdue_booking_email_content(**_content_args())
        assert "Your booking is overdue." in body
