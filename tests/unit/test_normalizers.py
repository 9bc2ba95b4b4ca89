import math

import pytest

from realty_crm.schemas.unit import UnitStatus
from realty_crm.services.unit_normalizer import (
    find_bedroom_source,
    normalize_bedrooms,
    normalize_floor,
    normalize_number,
    normalize_status,
)


@pytest.mark.parametrize("text, expected", [
    ("Studio", 0),
    ("sstudio", 0),
    ("STDUIO apartment", 0),
    ("2 BHK", 2),
    ("3BR", 3),
    ("1 Bedroom", 1),
    ("onebedroom", 1),
    ("Two Bed", 2),
    ("1B-E", 1),
    ("12 BR", 10),
    ("penthouse", None),
    ("2", None),
    ("", None),
    (None, None),
])
def test_normalize_bedrooms(text, expected):
    assert normalize_bedrooms(text) == expected


@pytest.mark.parametrize("text, expected", [
    ("AVAILABLE", UnitStatus.AVAILABLE),
    ("Sold Out", UnitStatus.SOLD),
    ("For Sale", UnitStatus.SOLD),
    ("Reserved", UnitStatus.RESERVED),
    ("booked", UnitStatus.RESERVED),
    ("On Hold", UnitStatus.BLOCKED),
    ("Blocked", UnitStatus.BLOCKED),
    ("", UnitStatus.UNKNOWN),
    (None, UnitStatus.UNKNOWN),
    ("n/a", UnitStatus.UNKNOWN),
])
def test_normalize_status(text, expected):
    assert normalize_status(text) == expected


def test_status_checks_available_before_sold():
    # "Available for sale" mentions both; availability is checked first
    assert normalize_status("Available for sale") == UnitStatus.AVAILABLE


@pytest.mark.parametrize("value, expected", [
    (7, 7),
    (3.9, 3),
    ("L04", 4),
    ("Level 12", 12),
    ("Ground", 0),
    (None, 0),
    (float("nan"), 0),
])
def test_normalize_floor(value, expected):
    assert normalize_floor(value) == expected


@pytest.mark.parametrize("value, expected", [
    ("1,250,000", 1250000.0),
    ("", 0.0),
    ("abc", 0.0),
    ("850.5 sqft", 850.5),
    (" 1 200 ", 1200.0),
    ("-500", 0.0),
    (1200, 1200.0),
    (None, 0.0),
])
def test_normalize_number(value, expected):
    assert normalize_number(value) == expected


def test_normalize_number_rejects_non_finite():
    assert normalize_number(float("inf")) == 0.0
    assert not math.isnan(normalize_number(float("nan")))


def test_bedroom_source_prefers_bedroom_like_keys():
    fields = {"Remarks": "2BR corner", "Unit Type": "1 BHK"}

    assert find_bedroom_source(fields, "Apartment") == "1 BHK"


def test_bedroom_source_falls_back_to_values_then_unit_type():
    assert find_bedroom_source({"Remarks": "2BR corner"}, "Apartment") == "2BR corner"
    assert find_bedroom_source({"Remarks": "corner"}, "Apartment") == "Apartment"
    assert find_bedroom_source(None, "Studio") == "Studio"
