import pytest

from product_pricing.engine.models import ProductAttribute
from product_pricing.engine.validation import (
    find_missing_required,
    find_out_of_range,
    is_blank,
)


def attr(**data):
    data.setdefault("type", "SELECT")
    return ProductAttribute.from_dict(data)


SIZE = attr(name="Size", isRequired=True)
COLOR = attr(name="Color", isRequired=True)
NOTE = attr(name="Note", type="TEXT")
WIDTH = attr(name="Width", type="NUMBER", isRequired=True, minValue=2, maxValue=10, unit="ft")


@pytest.mark.parametrize("value, expected", [
    (None, True),
    ("", True),
    ("   ", False),
    ([], True),
    ({}, True),
    (0, False),
    (False, False),
    ("M", False),
    (["Ribbon"], False),
])
def test_is_blank(value, expected):
    assert is_blank(value) is expected


def test_missing_required_listed_in_attribute_order():
    assert find_missing_required([SIZE, COLOR, NOTE], {}) == ["Size", "Color"]
    assert find_missing_required([SIZE, COLOR, NOTE], {"color": "Red"}) == ["Size"]
    assert find_missing_required([SIZE, COLOR], {"size": "M", "color": "Red"}) == []


def test_blank_selection_counts_as_missing():
    assert find_missing_required([SIZE], {"size": ""}) == ["Size"]
    assert find_missing_required([SIZE], {"size": None}) == ["Size"]


def test_zero_is_a_valid_selection():
    count = attr(name="Count", type="NUMBER", isRequired=True)
    assert find_missing_required([count], {"count": 0}) == []


def test_non_configurable_required_attribute_is_still_checked():
    fixed = attr(name="Voltage", isRequired=True, isConfigurable=False)
    assert find_missing_required([fixed], {}) == ["Voltage"]
    assert find_missing_required([fixed], {"voltage": "230V"}) == []


def test_whitespace_selection_counts_as_present():
    assert find_missing_required([SIZE], {"size": " "}) == []


def test_value_inside_bounds_is_fine():
    assert find_out_of_range([WIDTH], {"width": 2}) == []
    assert find_out_of_range([WIDTH], {"width": "10"}) == []


def test_value_outside_bounds_is_reported():
    assert find_out_of_range([WIDTH], {"width": 12}) == ["Width must be between 2 and 10 ft"]
    assert find_out_of_range([WIDTH], {"width": 1.5}) == ["Width must be between 2 and 10 ft"]


def test_single_bound_messages():
    low = attr(name="Hours", type="NUMBER", minValue=1)
    high = attr(name="Users", type="NUMBER", maxValue="2.5")
    assert find_out_of_range([low], {"hours": 0}) == ["Hours must be at least 1"]
    assert find_out_of_range([high], {"users": 3}) == ["Users must be at most 2.5"]


def test_dimension_sides_are_checked():
    size = attr(name="Size", type="DIMENSION", minValue=1, maxValue=6, unit="ft")
    assert find_out_of_range([size], {"size": {"width": 2, "height": 3}}) == []
    assert find_out_of_range([size], {"size": {"width": 2, "height": 7}}) == ["Size must be between 1 and 6 ft"]


def test_non_numeric_and_missing_values_are_skipped():
    assert find_out_of_range([WIDTH], {"width": "wide"}) == []
    assert find_out_of_range([WIDTH], {}) == []
    assert find_out_of_range([SIZE], {"size": "XL"}) == []
