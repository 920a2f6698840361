import pytest

from scim2_json import Path
from scim2_json import ResourceComparator
from scim2_json import SortOrder
from scim2_json import sort_resources

BABS = {
    "userName": "babs",
    "name": {"familyName": "Jensen"},
    "emails": [
        {"value": "z@x.com"},
        {"value": "b@x.com", "primary": True},
    ],
    "meta": {"created": "2012-01-01T00:00:00Z"},
}
JOHN = {
    "userName": "John",
    "name": {"familyName": "Smith"},
    "emails": [{"value": "a@x.com"}],
    "meta": {"created": "2011-01-01T00:00:00Z"},
}
NOBODY = {"userName": "nobody"}


def test_sort_by_attribute():
    assert sort_resources([JOHN, NOBODY, BABS], "userName") == [BABS, JOHN, NOBODY]
    assert sort_resources(
        [JOHN, NOBODY, BABS], "userName", SortOrder.descending
    ) == [NOBODY, JOHN, BABS]


def test_sort_by_date():
    assert sort_resources([BABS, JOHN], "meta.created") == [JOHN, BABS]


def test_missing_values_come_last_in_ascending_order():
    assert sort_resources([NOBODY, JOHN, BABS], "name.familyName") == [
        BABS,
        JOHN,
        NOBODY,
    ]
    assert sort_resources(
        [JOHN, BABS, NOBODY], "name.familyName", SortOrder.descending
    ) == [NOBODY, JOHN, BABS]


def test_multi_valued_attributes_sort_by_primary_or_first_value():
    """BABS primary email is b@x.com, so it comes after JOHN a@x.com."""
    assert sort_resources([BABS, JOHN], "emails") == [JOHN, BABS]
    assert sort_resources([JOHN, BABS], "emails", SortOrder.descending) == [
        BABS,
        JOHN,
    ]


def test_comparator():
    comparator = ResourceComparator(Path.from_string("userName"))
    assert comparator.sort_order == SortOrder.ascending
    assert comparator.compare(BABS, JOHN) == -1
    assert comparator.compare(JOHN, BABS) == 1
    assert comparator.compare(NOBODY, NOBODY) == 0
    assert comparator.compare({}, {}) == 0


@pytest.mark.parametrize("sort_order", ["ascending", SortOrder.ascending])
def test_comparator_sort_order(sort_order):
    assert ResourceComparator("userName", sort_order).sort_order == SortOrder.ascending
