"""Conditions on a field of an object, for assertions that keep the object in view.

    assert has(dto, non_null_in("name"), empty(lambda d: d.tags), positive("amount"))

Each condition takes a field accessor, either an attribute name or a callable
taking the object, and is a predicate on the owning object. A None owner
never satisfies a condition.
"""
from __future__ import annotations

from operator import attrgetter
from typing import Any, Callable


Accessor = Callable[[Any], Any]


class Condition:
    """A described predicate on an object."""

    def __init__(self, description: str, predicate: Callable[[Any], bool]) -> None:
        self.description: str = description
        self._predicate: Callable[[Any], bool] = predicate

    def __call__(self, actual: Any) -> bool:
        return bool(self._predicate(actual))

    def __repr__(self) -> str:
        return f"Condition({self.description})"


def _accessor(field: str | Accessor) -> tuple[str, Accessor]:
    """Return the name and getter of a field given as an attribute name or callable."""
    if isinstance(field, str):
        return field, attrgetter(field)
    return getattr(field, "__name__", repr(field)), field


def _on_field(description: str, field: str | Accessor, test: Callable[[Any], bool]) -> Condition:
    name, getter = _accessor(field)
    return Condition(
        f"{description} in '{name}'", lambda actual: actual is not None and test(getter(actual))
    )


def has(actual: Any, *conditions: Condition) -> bool:
    """True if actual satisfies every condition.

    Raises
    ------
    AssertionError naming every condition actual does not satisfy.
    """
    failed: list[str] = [condition.description for condition in conditions if not condition(actual)]
    if failed:
        raise AssertionError(f"{actual!r} does not have: {', '.join(failed)}")
    return True


def same_as(expected: Any, field: str | Accessor) -> Condition:
    """Field equal to the same field of expected. Never true if expected is None."""
    name, getter = _accessor(field)
    return Condition(
        f"same value as {expected!r} in '{name}'",
        lambda actual: actual is not None
        and expected is not None
        and getter(actual) == getter(expected),
    )


def non_null_in(field: str | Accessor) -> Condition:
    return _on_field("non null value", field, lambda value: value is not None)


def null_in(field: str | Accessor) -> Condition:
    return _on_field("null value", field, lambda value: value is None)


def equal_to(expected: Any, field: str | Accessor) -> Condition:
    return _on_field(f"value equal to {expected!r}", field, lambda value: value == expected)


def not_equal_to(expected: Any, field: str | Accessor) -> Condition:
    return _on_field(f"value not equal to {expected!r}", field, lambda value: value != expected)


def collection_containing(expected: Any, field: str | Accessor) -> Condition:
    return _on_field(
        f"collection containing {expected!r}",
        field,
        lambda value: value is not None and len(value) > 0 and expected in value,
    )


def empty(field: str | Accessor) -> Condition:
    return _on_field("empty collection", field, lambda value: value is not None and len(value) == 0)


def has_size(size: int, field: str | Accessor) -> Condition:
    return _on_field(
        f"collection of size {size}", field, lambda value: value is not None and len(value) == size
    )


def array_size(size: int, field: str | Accessor) -> Condition:
    """Array (any sized sequence including a numpy array) of length size."""
    return _on_field(
        f"array of size {size}", field, lambda value: value is not None and len(value) == size
    )


def empty_map(field: str | Accessor) -> Condition:
    return _on_field("empty map", field, lambda value: value is not None and len(value) == 0)


def positive(field: str | Accessor) -> Condition:
    return _on_field("positive number", field, lambda value: value is not None and float(value) > 0.0)


def not_empty(field: str | Accessor) -> Condition:
    return _on_field("non empty text", field, lambda value: value is not None and len(value) > 0)
