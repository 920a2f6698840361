import pytest
from pydantic import ValidationError

from scim2_json import EXTERNAL_ID
from scim2_json import ID
from scim2_json import META
from scim2_json import SCHEMAS
from scim2_json import Element
from scim2_json import Filter
from scim2_json import InvalidPathException
from scim2_json import Path
from scim2_json.base import BaseModel

ENTERPRISE = "urn:ietf:params:scim:schemas:extension:enterprise:2.0:User"


def test_root():
    """Root paths have no element."""
    root = Path.root()
    assert root.is_root
    assert len(root) == 0
    assert root.schema_urn is None
    assert str(root) == ""
    assert root.parent() is None


def test_root_with_invalid_urn():
    """Root paths reject malformed schema URNs."""
    with pytest.raises(ValueError):
        Path.root("urn:invalid")


def test_attribute_builder():
    """Elements are appended to new instances."""
    root = Path.root()
    path = root.attribute("name").attribute("givenName")
    assert root.is_root
    assert str(path) == "name.givenName"
    assert [element.attribute for element in path] == ["name", "givenName"]
    assert path[1] == Element("givenName")


def test_attribute_with_value_filter():
    path = Path.root().attribute("emails", Filter.eq("type", "work")).attribute("value")
    assert str(path) == 'emails[type eq "work"].value'
    assert path[0].value_filter == Filter.eq("type", "work")


def test_extension_path_rendering():
    path = Path.root(ENTERPRISE).attribute("manager").attribute("value")
    assert str(path) == f"{ENTERPRISE}:manager.value"
    assert str(Path.root(ENTERPRISE)) == f"{ENTERPRISE}:"


def test_case_insensitive_equality():
    """Attribute names and schema URNs compare case-insensitively, but keep their case."""
    first = Path.from_string(f"{ENTERPRISE}:employeeNumber")
    second = Path.from_string(f"{ENTERPRISE.upper()}:EMPLOYEENUMBER")
    assert first == second
    assert hash(first) == hash(second)
    assert str(second) == f"{ENTERPRISE.upper()}:EMPLOYEENUMBER"


def test_value_filters_are_part_of_equality():
    assert Path.from_string('emails[type eq "work"]') != Path.from_string("emails")
    assert Path.from_string('emails[type eq "work"]') == Path.from_string(
        'emails[TYPE eq "work"]'
    )


def test_schema_urn_is_part_of_equality():
    assert Path.from_string(f"{ENTERPRISE}:manager") != Path.from_string("manager")


def test_sub_path_and_parent():
    path = Path.from_string(f"{ENTERPRISE}:manager.displayName")
    assert path.sub_path(1) == Path.from_string(f"{ENTERPRISE}:manager")
    assert path.parent() == Path.from_string(f"{ENTERPRISE}:manager")
    assert path.parent().parent() == Path.root(ENTERPRISE)


def test_replace():
    path = Path.from_string("emails.value")
    replaced = path.replace(0, "emails", Filter.pr("primary"))
    assert str(replaced) == "emails[primary pr].value"
    assert str(path) == "emails.value"


def test_without_filters():
    path = Path.from_string('emails[type eq "work"].value')
    assert path.without_filters() == Path.from_string("emails.value")


@pytest.mark.parametrize(
    "prefix,path,expected",
    [
        ("emails", "emails.value", True),
        ("emails", "emails", False),
        ("emails", 'emails[type eq "work"].value', True),
        ('emails[type eq "work"]', 'emails[type eq "work"].value', True),
        ('emails[type eq "home"]', 'emails[type eq "work"].value', False),
        ("name", "emails.value", False),
        (f"{ENTERPRISE}:", f"{ENTERPRISE}:manager", True),
        (f"{ENTERPRISE}:", "manager", False),
    ],
)
def test_is_prefix_of(prefix, path, expected):
    assert Path.from_string(prefix).is_prefix_of(path) is expected
    assert Path.from_string(path).has_prefix(prefix) is expected


def test_constants():
    assert str(SCHEMAS) == "schemas"
    assert str(ID) == "id"
    assert str(EXTERNAL_ID) == "externalId"
    assert str(META) == "meta"


@pytest.mark.parametrize(
    "text",
    [
        "userName",
        "name.familyName",
        "$ref",
        'emails[type eq "work"]',
        'emails[type eq "work" and value ew "@example.com"].display',
        'addresses[not (primary eq true) or type co "me"]',
        "urn:ietf:params:scim:schemas:core:2.0:User:userName",
        f"{ENTERPRISE}:manager.value",
        f"{ENTERPRISE}:",
        'members[value eq "2819c223-7f76-453a-919d-413861904646"]',
        'x509Certificates[value eq "ZGF0YQ=="].value',
        "meta.lastModified",
    ],
)
def test_string_round_trip(text):
    """Rendering a parsed path gives back an equal path."""
    path = Path.from_string(text)
    assert Path.from_string(str(path)) == path


def test_path_as_a_type():
    class Foo(BaseModel):
        path: Path

    foo = Foo.model_validate({"path": 'emails[type eq "work"].value'})
    assert foo.path == Path.root().attribute("emails", Filter.eq("type", "work")).attribute(
        "value"
    )
    assert foo.model_dump() == {"path": 'emails[type eq "work"].value'}
    assert Foo(path=foo.path).path is foo.path


def test_path_as_a_type_invalid():
    class Foo(BaseModel):
        path: Path

    with pytest.raises(ValidationError, match="Attribute name expected"):
        Foo.model_validate({"path": "name..givenName"})

    with pytest.raises(ValidationError):
        Foo.model_validate({"path": 42})


def test_invalid_path_exception():
    with pytest.raises(InvalidPathException) as exc_info:
        Path.from_string("emails[type eq")
    assert exc_info.value.scim_type == "invalidPath"


def test_empty_attribute_name():
    with pytest.raises(ValueError):
        Element("")
