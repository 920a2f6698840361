import pytest

from scim2_json.base import BaseModel
from scim2_json.urn import URN
from scim2_json.urn import is_urn


def test_urn_syntax_valid_urns():
    """Test that valid SCIM schema URNs are accepted."""
    valid_urns = [
        "urn:ietf:params:scim:schemas:core:2.0:User",
        "urn:ietf:params:scim:schemas:extension:enterprise:2.0:User",
        "urn:custom:namespace:schema:1.0:Resource",
        "URN:example:extension",
    ]

    for urn in valid_urns:
        URN(urn)


def test_urn_syntax_invalid_urns():
    """Test that invalid SCIM schema URNs are rejected."""
    invalid_urns = [
        "not_an_urn",  # Doesn't start with urn:
        "urn:invalid",  # Too short
        "urn:ietf::scim",  # Empty part
    ]

    for urn in invalid_urns:
        with pytest.raises(ValueError):
            URN(urn)


def test_is_urn():
    """is_urn only checks the prefix."""
    assert is_urn("urn:ietf:params:scim:schemas:core:2.0:User:userName")
    assert is_urn("URN:foo")
    assert not is_urn("urn:")
    assert not is_urn("userName")
    assert not is_urn("urnName")


def test_urn_as_a_type():
    class Foo(BaseModel):
        urn_schema: URN

    foo = Foo.model_validate({"urn_schema": "urn:valid:schema"})
    assert isinstance(foo.urn_schema, URN)
    assert foo.model_dump() == {"urnSchema": "urn:valid:schema"}

    with pytest.raises(ValueError):
        Foo.model_validate({"urn_schema": "invalid"})
