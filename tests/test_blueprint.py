"""Test the reflection of composite types into blueprints."""
from datetime import datetime
from logging import Logger, NullHandler, getLogger
from typing import Any, Generic, Optional, TypeVar

import pytest

from dto import (
    Box,
    FrozenDto,
    IntBox,
    NonDefaultConstructorDto,
    NonPersistentFieldsDto,
    Point,
    PositionalOnlyDto,
    SimpleDto,
    T,
)
from surefill.blueprint import Blueprint, describe, substitute, type_var_bindings
from surefill.errors import GenerationError

_logger: Logger = getLogger(__name__)
_logger.addHandler(NullHandler())

U = TypeVar("U")


class Pair(Generic[T, U]):
    first: T
    second: U


class StrPair(Pair[str, U]):
    pass


class StrIntPair(StrPair[int]):
    pass


class Unresolvable:
    field: "Undefined"  # type: ignore  # noqa: F821


def test_default_constructor() -> None:
    """Test that a class with all defaults needs no constructor arguments."""
    blueprint: Blueprint = describe(SimpleDto)
    assert blueprint.parameters == ()
    assert blueprint.fields == (("name", Optional[str]), ("amount", Optional[int]))


def test_required_parameters_from_fields() -> None:
    """Test that required parameters take the type of the field of the same name."""
    assert describe(FrozenDto).parameters == (("name", str), ("count", int))


def test_required_parameters_from_init() -> None:
    """Test that required parameters of an unannotated class use the __init__ annotations."""
    blueprint: Blueprint = describe(NonDefaultConstructorDto)
    assert blueprint.parameters == (("string", str), ("when", datetime))
    assert blueprint.fields == ()


def test_non_persistent_fields() -> None:
    """Test that class variables and transient fields are not filled."""
    assert [name for name, _ in describe(NonPersistentFieldsDto).fields] == ["name"]


def test_positional_only_parameters() -> None:
    """Test that positional only parameters are listed in declared order."""
    blueprint: Blueprint = describe(PositionalOnlyDto)
    assert blueprint.parameters == (("x", int), ("label", str))
    assert blueprint.positional == ("x",)
    assert describe(FrozenDto).positional == ()


def test_buildable() -> None:
    """Test that a Buildable class provides its own blueprint."""
    assert describe(Point) == Blueprint(parameters=(("x", int), ("y", int)), fields=())


def test_bound_generic_fields() -> None:
    """Test that type variables are bound through a generic base."""
    fields: dict[str, Any] = dict(describe(IntBox).fields)
    assert fields["item"] == Optional[int]
    assert fields["items"] == Optional[list[int]]


def test_type_var_bindings() -> None:
    """Test that bindings pass through intermediate generic classes."""
    assert type_var_bindings(IntBox) == {T: int}
    assert type_var_bindings(StrIntPair) == {T: str, U: int}
    assert type_var_bindings(SimpleDto) == {}


def test_partially_bound_generic() -> None:
    """Test that a variable still free in the most derived class stays unbound."""
    assert dict(describe(StrPair).fields) == {"first": str, "second": U}


@pytest.mark.parametrize(
    "hint, expected",
    [
        (T, int),
        (U, U),
        (list[T], list[int]),
        (dict[T, U], dict[int, U]),
        (Optional[T], Optional[int]),
        (str, str),
        (Box, Box),
    ],
)
def test_substitute(hint: Any, expected: Any) -> None:
    """Test that type variables are replaced wherever they occur in a hint."""
    assert substitute(hint, {T: int}) == expected


def test_unresolvable_annotations() -> None:
    """Test that annotations naming undefined types fail to describe."""
    with pytest.raises(GenerationError, match="Cannot resolve the annotations"):
        describe(Unresolvable)
