"""IANA time zone lookup for client-supplied names."""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def load_zone(name: str | None) -> ZoneInfo | None:
    """Return the zone called ``name``, or None when it is not a usable IANA zone.

    Region directories such as ``America`` raise ``IsADirectoryError`` and
    malformed paths raise ``ValueError``; both count as unknown.
    """
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return None
