import pytest
from pydantic import ValidationError

from scim2_json import AndFilter
from scim2_json import ComplexValueFilter
from scim2_json import EqualFilter
from scim2_json import Filter
from scim2_json import FilterType
from scim2_json import NotFilter
from scim2_json import OrFilter
from scim2_json import Path
from scim2_json.base import BaseModel


def test_factories():
    """Factories accept path strings and Path objects."""
    assert Filter.eq("userName", "bjensen") == EqualFilter(
        Path.root().attribute("userName"), "bjensen"
    )
    assert Filter.eq(Path.root().attribute("userName"), "bjensen") == Filter.eq(
        "userName", "bjensen"
    )
    assert EqualFilter("userName", "bjensen").path == Path.root().attribute("userName")


@pytest.mark.parametrize(
    "filter,filter_type",
    [
        (Filter.eq("a", 1), FilterType.equal),
        (Filter.ne("a", 1), FilterType.not_equal),
        (Filter.co("a", "x"), FilterType.contains),
        (Filter.sw("a", "x"), FilterType.starts_with),
        (Filter.ew("a", "x"), FilterType.ends_with),
        (Filter.gt("a", 1), FilterType.greater_than),
        (Filter.ge("a", 1), FilterType.greater_or_equal),
        (Filter.lt("a", 1), FilterType.less_than),
        (Filter.le("a", 1), FilterType.less_or_equal),
        (Filter.pr("a"), FilterType.present),
        (Filter.and_(Filter.pr("a"), Filter.pr("b")), FilterType.and_),
        (Filter.or_(Filter.pr("a"), Filter.pr("b")), FilterType.or_),
        (Filter.not_(Filter.pr("a")), FilterType.not_),
        (Filter.has_complex_value("a", Filter.pr("b")), FilterType.complex_value),
    ],
)
def test_filter_types(filter, filter_type):
    assert filter.filter_type == filter_type


def test_string_rendering():
    assert str(Filter.eq("userName", "bjensen")) == 'userName eq "bjensen"'
    assert str(Filter.gt("age", 21)) == "age gt 21"
    assert str(Filter.eq("active", True)) == "active eq true"
    assert str(Filter.eq("nickName", None)) == "nickName eq null"
    assert str(Filter.eq("data", b"data")) == 'data eq "ZGF0YQ=="'
    assert str(Filter.co("title", 'say "hi"')) == 'title co "say \\"hi\\""'
    assert str(Filter.pr("title")) == "title pr"
    assert (
        str(Filter.and_(Filter.pr("a"), Filter.or_(Filter.pr("b"), Filter.pr("c"))))
        == "(a pr and (b pr or c pr))"
    )
    assert str(Filter.not_(Filter.pr("a"))) == "not (a pr)"
    assert (
        str(Filter.has_complex_value("emails", 'type eq "work"'))
        == 'emails[type eq "work"]'
    )


def test_and_or_flatten():
    """Nested filters of the same kind are flattened."""
    first = Filter.and_(Filter.pr("a"), Filter.pr("b"))
    combined = Filter.and_(first, Filter.pr("c"))
    assert combined.filters == (Filter.pr("a"), Filter.pr("b"), Filter.pr("c"))

    mixed = Filter.or_(first, Filter.pr("c"))
    assert mixed.filters == (first, Filter.pr("c"))


def test_combining_filters_need_components():
    with pytest.raises(ValueError):
        AndFilter(())

    with pytest.raises(ValueError):
        Filter.or_()

    with pytest.raises(ValueError):
        OrFilter(("a pr",))


def test_comparison_values_are_scalars():
    with pytest.raises(ValueError):
        Filter.eq("emails", ["a"])

    with pytest.raises(ValueError):
        Filter.eq("name", {"givenName": "Barbara"})


def test_filters_are_immutable_and_hashable():
    filter = Filter.eq("userName", "bjensen")
    with pytest.raises(AttributeError):
        filter.value = "other"

    filters = {
        Filter.eq("userName", "bjensen"),
        Filter.eq("USERNAME", "bjensen"),
        Filter.ne("userName", "bjensen"),
        NotFilter(Filter.pr("title")),
    }
    assert len(filters) == 3


def test_filters_of_different_kinds_are_not_equal():
    assert Filter.eq("a", 1) != Filter.ne("a", 1)
    assert Filter.and_(Filter.pr("a"), Filter.pr("b")) != Filter.or_(
        Filter.pr("a"), Filter.pr("b")
    )


def test_comparison_values_keep_their_json_type():
    """Booleans and numbers are distinct comparison values."""
    assert Filter.eq("x", 1) != Filter.eq("x", True)
    assert Filter.eq("x", 0) != Filter.eq("x", False)
    assert Filter.eq("x", 1) == Filter.eq("x", 1.0)
    assert Filter.eq("x", "A") != Filter.eq("x", "a")

    paths = {
        Path.from_string("emails[primary eq true]"): "boolean",
        Path.from_string("emails[primary eq 1]"): "number",
    }
    assert len(paths) == 2
    assert paths[Path.from_string("emails[primary eq true]")] == "boolean"


def test_from_string():
    assert Filter.from_string('emails[type eq "work"]') == ComplexValueFilter(
        Path.root().attribute("emails"), Filter.eq("type", "work")
    )


def test_matches():
    assert Filter.eq("userName", "BJensen").matches({"userName": "bjensen"})
    assert not Filter.pr("title").matches({"userName": "bjensen"})


def test_filter_as_a_type():
    class Foo(BaseModel):
        filter: Filter

    foo = Foo.model_validate({"filter": 'userName Eq "john"'})
    assert foo.filter == Filter.eq("userName", "john")
    assert foo.model_dump() == {"filter": 'userName eq "john"'}

    with pytest.raises(ValidationError, match="Unexpected end of filter string"):
        Foo.model_validate({"filter": 'userName eq "john" and'})
