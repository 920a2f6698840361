import pytest
from pydantic import BaseModel
from pydantic import ValidationError
from pydantic import field_validator

from scim2_json import AmbiguousPathException
from scim2_json import Error
from scim2_json import Filter
from scim2_json import InvalidFilterException
from scim2_json import InvalidPathException
from scim2_json import InvalidSyntaxException
from scim2_json import InvalidValueException
from scim2_json import NoTargetException
from scim2_json import PatchOp
from scim2_json import Path
from scim2_json import SCIMException
from scim2_json import SearchRequest


def test_scim_exception_default_message():
    """SCIMException uses the default detail when none is given."""
    exc = SCIMException()
    assert str(exc) == "A SCIM error occurred"
    assert exc.detail == "A SCIM error occurred"
    assert exc.status == 400
    assert exc.scim_type == ""


def test_scim_exception_custom_detail():
    """SCIMException uses the custom detail when provided."""
    exc = SCIMException(detail="Something went wrong")
    assert str(exc) == "Something went wrong"
    assert exc.detail == "Something went wrong"


def test_scim_exception_context():
    """Extra keyword arguments are kept as context."""
    exc = SCIMException(detail="oops", request_id="42")
    assert exc.context == {"request_id": "42"}


def test_to_error():
    """to_error() builds an Error response carrying status, type and detail."""
    error = InvalidPathException(detail="Bad path").to_error()
    assert isinstance(error, Error)
    assert error.status == 400
    assert error.scim_type == "invalidPath"
    assert error.detail == "Bad path"
    assert error.model_dump() == {
        "schemas": ["urn:ietf:params:scim:api:messages:2.0:Error"],
        "status": "400",
        "scimType": "invalidPath",
        "detail": "Bad path",
    }


def test_to_error_without_scim_type():
    """Exceptions without scimType produce errors without scimType."""
    error = AmbiguousPathException(path="emails", count=2).to_error()
    assert error.scim_type is None
    assert error.status == 400


def test_invalid_filter_exception():
    """InvalidFilterException stores the filter and the error position."""
    exc = InvalidFilterException(
        detail="Unexpected end of filter string", filter="userName eq", position=11
    )
    assert exc.status == 400
    assert exc.scim_type == "invalidFilter"
    assert exc.filter == "userName eq"
    assert exc.position == 11


def test_invalid_syntax_exception():
    """InvalidSyntaxException has correct status and scim_type."""
    exc = InvalidSyntaxException()
    assert exc.status == 400
    assert exc.scim_type == "invalidSyntax"


def test_invalid_path_exception():
    """InvalidPathException stores the invalid path and position."""
    exc = InvalidPathException(path="invalid..path", position=8)
    assert exc.status == 400
    assert exc.scim_type == "invalidPath"
    assert exc.path == "invalid..path"
    assert exc.position == 8


def test_no_target_exception():
    """NoTargetException stores the path that yielded no target."""
    exc = NoTargetException(path='emails[type eq "work"]')
    assert exc.status == 400
    assert exc.scim_type == "noTarget"
    assert exc.path == 'emails[type eq "work"]'


def test_invalid_value_exception():
    """InvalidValueException stores attribute and reason."""
    exc = InvalidValueException(attribute="active", reason="must be boolean")
    assert exc.status == 400
    assert exc.scim_type == "invalidValue"
    assert exc.attribute == "active"
    assert exc.reason == "must be boolean"


def test_ambiguous_path_exception():
    """AmbiguousPathException is a ValueError carrying the number of values."""
    exc = AmbiguousPathException(path="emails.value", count=3)
    assert isinstance(exc, SCIMException)
    assert isinstance(exc, ValueError)
    assert exc.path == "emails.value"
    assert exc.count == 3


def test_scim_exceptions_are_not_value_errors():
    """Protocol exceptions inherit from SCIMException, not ValueError."""
    exceptions = [
        InvalidFilterException(),
        InvalidSyntaxException(),
        InvalidPathException(),
        NoTargetException(),
        InvalidValueException(),
    ]
    for exc in exceptions:
        assert isinstance(exc, SCIMException)
        assert not isinstance(exc, ValueError)
        assert isinstance(exc.to_error(), Error)


def test_exception_in_pydantic_validator():
    """SCIM exceptions can be raised in Pydantic validators via as_pydantic_error()."""

    class TestModel(BaseModel):
        value: str

        @field_validator("value")
        @classmethod
        def validate_value(cls, v: str) -> str:
            if v == "invalid":
                raise InvalidValueException(
                    detail="Value cannot be 'invalid'"
                ).as_pydantic_error()
            return v

    with pytest.raises(ValidationError) as exc_info:
        TestModel(value="invalid")

    errors = exc_info.value.errors()
    assert len(errors) == 1
    assert errors[0]["type"] == "scim_invalidValue"
    assert "Value cannot be 'invalid'" in errors[0]["msg"]

    assert TestModel(value="valid").value == "valid"


def test_invalid_path_field_raises_scim_error():
    """Path fields report parsing failures as invalidPath errors."""

    class TestModel(BaseModel):
        path: Path

    with pytest.raises(ValidationError) as exc_info:
        TestModel(path="name..familyName")

    assert exc_info.value.errors()[0]["type"] == "scim_invalidPath"


def test_invalid_filter_field_raises_scim_error():
    """Filter fields report parsing failures as invalidFilter errors."""

    class TestModel(BaseModel):
        filter: Filter

    with pytest.raises(ValidationError) as exc_info:
        TestModel(filter="userName eq")

    error = Error.from_validation_error(exc_info.value.errors()[0])
    assert error.scim_type == "invalidFilter"
    assert error.status == 400


def test_from_validation_error_with_scim_error():
    """from_validation_error() preserves scim_type from SCIM exceptions."""

    class TestModel(BaseModel):
        value: str

        @field_validator("value")
        @classmethod
        def validate_value(cls, v: str) -> str:
            if v == "bad":
                raise NoTargetException(detail="No target found").as_pydantic_error()
            return v

    with pytest.raises(ValidationError) as exc_info:
        TestModel(value="bad")

    error = Error.from_validation_error(exc_info.value.errors()[0])
    assert error.status == 400
    assert error.scim_type == "noTarget"
    assert error.detail == "No target found"


def test_from_validation_error_with_standard_pydantic_error():
    """from_validation_error() maps Pydantic type errors to invalidSyntax."""

    class TestModel(BaseModel):
        value: int

    with pytest.raises(ValidationError) as exc_info:
        TestModel(value="not_an_int")

    error = Error.from_validation_error(exc_info.value.errors()[0])
    assert error.status == 400
    assert error.scim_type == "invalidSyntax"
    assert "value" in error.detail


def test_from_validation_error_with_missing_field():
    """from_validation_error() maps missing required fields to invalidValue."""

    class TestModel(BaseModel):
        required_field: str

    with pytest.raises(ValidationError) as exc_info:
        TestModel()

    error = Error.from_validation_error(exc_info.value.errors()[0])
    assert error.scim_type == "invalidValue"
    assert "required_field" in error.detail


def test_from_validation_errors():
    """from_validation_errors() accepts a ValidationError or a list of error dicts."""

    class TestModel(BaseModel):
        a: int
        b: int

    with pytest.raises(ValidationError) as exc_info:
        TestModel(a="x", b="y")

    errors = Error.from_validation_errors(exc_info.value)
    assert len(errors) == 2
    assert all(e.scim_type == "invalidSyntax" for e in errors)

    errors = Error.from_validation_errors(exc_info.value.errors())
    assert len(errors) == 2
    assert all(isinstance(e, Error) for e in errors)


@pytest.mark.parametrize(
    "model,payload",
    [
        (PatchOp, ["not", "an", "object"]),
        (PatchOp, {"Operations": ["replace"]}),
        (SearchRequest, "filter=userName pr"),
    ],
)
def test_message_body_must_be_an_object(model, payload):
    """Message bodies that are not JSON objects are invalidSyntax errors."""
    with pytest.raises(ValidationError) as exc_info:
        model.model_validate(payload)

    error = Error.from_validation_errors(exc_info.value)[0]
    assert error.scim_type == "invalidSyntax"
    assert "must be a JSON object" in error.detail


def test_message_body_from_json_string():
    with pytest.raises(ValidationError) as exc_info:
        PatchOp.model_validate_json('[{"op": "add"}]')
    assert exc_info.value.errors()[0]["type"] == "scim_invalidSyntax"
