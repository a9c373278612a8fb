"""Client time zone lookup."""

import pytest

from shelfbook.utils.timezones import load_zone


def test_known_zone():
    assert str(load_zone("Europe/Amsterdam")) == "Europe/Amsterdam"


@pytest.mark.parametrize("name", [None, "", "America", "Mars/Olympus_Mons", "../etc/passwd", "/etc/localtime"])
def test_unusable_names(name):
    assert load_zone(name) is None
