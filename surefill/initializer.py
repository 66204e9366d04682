"""Initializer generates fully populated unique instances of any type for tests.

Entry points return an InitContext to configure before calling generate():

    dto = unique_object(OrderDto).with_collection_size(3).generate()
    ids = unique_list(UUID).with_collection_size(5).generate()

Generation
----------
    1. numpy scalar types (primitive kinds) are unique values of that type.
    2. int, float, str, bool and the kinds Byte, Short, Long, Char, Float32 are
       unique values of that type.
    3. Anything else is None once the nesting depth is negative.
    4. Enums are their first member, Literals their first value.
    5. datetime, date, Instant, Decimal and UUID are unique values.
    6. Array[T] is a numpy array of collection size elements.
    7. Parametrized collections, tuples and maps are filled with collection
       size elements. Abstract origins are resolved through the mappings.
    8. Abstract classes are resolved through the mappings.
    9. object and Any are a unique Long.
    10. Any other class is instantiated and its fields are filled.

Limitations
-----------
    1. Maps with colliding keys (e.g. enum keys) have fewer entries than requested.
    2. Parametrized user generic classes are not supported; subclass them with
       the arguments bound instead.
    3. Constructor arguments are passed by keyword unless positional only.
"""
from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from logging import DEBUG, Logger, NullHandler, getLogger
from typing import Any, TypeVar, get_args, get_origin

from numpy import ndarray

from surefill.blueprint import Blueprint, describe
from surefill.containers import generate_array, generate_collection, generate_map, generate_tuple
from surefill.context import InitContext
from surefill.errors import GenerationError
from surefill.kinds import (
    BOXED_KINDS,
    PRIMITIVE_KINDS,
    VALUE_KINDS,
    Array,
    Long,
    Queue,
    Shape,
    classify,
    is_abstract,
    normalize,
)
from surefill.unique import Unique


_logger: Logger = getLogger(__name__)
_logger.addHandler(NullHandler())
_LOG_DEBUG: bool = _logger.isEnabledFor(DEBUG)

T = TypeVar("T")
K = TypeVar("K")
V = TypeVar("V")


def unique_object(context_type: type[T] | Any, unique: Unique | None = None) -> InitContext[T]:
    """Context generating an instance of context_type.

    Args
    ----
    context_type: A class or a parametrized type e.g. dict[str, list[int]].
    unique: Scalar value source. Defaults to the process wide one.
    """
    return InitContext(context_type, unique)


def unique_list(element_type: type[T] | Any, unique: Unique | None = None) -> InitContext[list[T]]:
    return InitContext(list[element_type], unique)  # type: ignore


def unique_set(element_type: type[T] | Any, unique: Unique | None = None) -> InitContext[set[T]]:
    return InitContext(set[element_type], unique)  # type: ignore


def unique_queue(element_type: type[T] | Any, unique: Unique | None = None) -> InitContext[Queue]:
    """Context generating a Queue[element_type], a collections.deque unless remapped."""
    return InitContext(Queue[element_type], unique)  # type: ignore


def unique_map(
    key_type: type[K] | Any, value_type: type[V] | Any, unique: Unique | None = None
) -> InitContext[dict[K, V]]:
    return InitContext(dict[key_type, value_type], unique)  # type: ignore


class Initializer:
    """Generates the value of one context, recursing into nested contexts."""

    def __init__(self, context: InitContext) -> None:
        self.context: InitContext = context

    def create(self) -> Any:
        """Classify the context type and generate a value for it."""
        context_type: Any = normalize(self.context.context_type)
        shape: Shape = classify(context_type, self.context.nesting_depth)
        if _LOG_DEBUG:
            _logger.debug(
                f"{context_type} is {shape.value} at nesting depth {self.context.nesting_depth}."
            )
        return SHAPE_GENERATION[shape](self, context_type)

    def _nested(self, nested_type: Any) -> Any:
        return Initializer(self.context.nested(nested_type)).create()

    def _generate_primitive(self, context_type: type) -> Any:
        return context_type(self.context.unique.of(PRIMITIVE_KINDS[context_type]))

    def _generate_scalar(self, context_type: type) -> Any:
        return context_type(self.context.unique.of(BOXED_KINDS[context_type]))

    def _generate_absent(self, _: Any) -> None:
        return None

    def _generate_enum(self, context_type: type[Enum]) -> Enum:
        try:
            return next(iter(context_type))
        except StopIteration:
            raise GenerationError(f"Enum {context_type!r} has no members.") from None

    def _generate_literal(self, context_type: Any) -> Any:
        return get_args(context_type)[0]

    def _generate_value(self, context_type: type) -> Any:
        return self.context.unique.of(VALUE_KINDS[context_type])

    def _generate_array(self, context_type: Any) -> ndarray:
        element_types: tuple[Any, ...] = get_args(context_type)
        element_type: Any = normalize(element_types[0]) if element_types else Any
        return generate_array(element_type, self.context.collection_size, self._nested)

    def _implementation(self, origin: type) -> type:
        """Concrete class to instantiate for origin."""
        return self.context.mapping_for(origin) if is_abstract(origin) else origin

    def _generate_collection(self, context_type: Any) -> Any:
        implementation: type = self._implementation(get_origin(context_type))
        element_types: tuple[Any, ...] = get_args(context_type)
        element_type: Any = element_types[0] if element_types else Any
        return generate_collection(
            implementation, element_type, self.context.collection_size, self._nested
        )

    def _generate_tuple(self, context_type: Any) -> tuple:
        return generate_tuple(get_args(context_type), self.context.collection_size, self._nested)

    def _generate_map(self, context_type: Any) -> Any:
        arguments: tuple[Any, ...] = get_args(context_type)
        key_type, value_type = arguments if len(arguments) == 2 else (Any, Any)
        mapping: Any = self._instantiate(self._implementation(get_origin(context_type)))
        return generate_map(mapping, key_type, value_type, self.context.collection_size, self._nested)

    def _generate_abstract(self, context_type: type) -> Any:
        concrete: type = self.context.mapping_for(context_type)
        if _LOG_DEBUG:
            _logger.debug(f"{context_type!r} is mapped to {concrete!r}.")
        return Initializer(self.context.resolved(concrete)).create()

    def _generate_any(self, _: Any) -> Long:
        return Long(self.context.unique.unique_long())

    def _generate_composite(self, context_type: type) -> Any:
        instance: Any = self._instantiate(context_type)
        self._fill_fields(instance, context_type)
        return instance

    def _instantiate(self, cls: type) -> Any:
        """Create an instance of cls, synthesizing any required constructor arguments.

        Abstract classes are resolved through the mappings first. Arguments for
        excluded fields are None. Positional only arguments are passed
        positionally, all others by keyword.
        """
        if is_abstract(cls):
            return self._instantiate(self.context.mapping_for(cls))
        blueprint: Blueprint = describe(cls)
        excluded: set[str] = self.context.excluded_fields_for(cls)
        arguments: dict[str, Any] = {
            name: None if name in excluded else self._nested(parameter_type)
            for name, parameter_type in blueprint.parameters
        }
        positional: list[Any] = [arguments.pop(name) for name in blueprint.positional]
        try:
            return cls(*positional, **arguments)
        except Exception as exc:
            raise GenerationError(f"Cannot instantiate {cls!r}: {exc}") from exc

    def _fill_fields(self, instance: Any, context_type: type) -> None:
        """Set every field of instance not excluded for context_type.

        Primitive fields are set directly and arrays are built at this depth;
        every other field is generated one level deeper.
        """
        excluded: set[str] = self.context.excluded_fields_for(context_type)
        for name, field_type in describe(context_type).fields:
            if name in excluded:
                if _LOG_DEBUG:
                    _logger.debug(f"Field '{name}' of {context_type.__qualname__} is excluded.")
                continue
            field_type = normalize(field_type)
            if field_type in PRIMITIVE_KINDS:
                value: Any = self._generate_primitive(field_type)
            elif field_type is Array or get_origin(field_type) is Array:
                value = self._generate_array(field_type)
            else:
                value = self._nested(field_type)
            _set_field(instance, name, value)


def _set_field(instance: Any, name: str, value: Any) -> None:
    """Set a field bypassing any __setattr__ override e.g. of a frozen dataclass."""
    try:
        object.__setattr__(instance, name, value)
    except (AttributeError, TypeError) as exc:
        raise GenerationError(
            f"Cannot set field '{name}' of {type(instance).__qualname__}: {exc}"
        ) from exc


SHAPE_GENERATION: dict[Shape, Callable[[Initializer, Any], Any]] = {
    Shape.PRIMITIVE: Initializer._generate_primitive,
    Shape.SCALAR: Initializer._generate_scalar,
    Shape.ABSENT: Initializer._generate_absent,
    Shape.ENUM: Initializer._generate_enum,
    Shape.LITERAL: Initializer._generate_literal,
    Shape.VALUE: Initializer._generate_value,
    Shape.ARRAY: Initializer._generate_array,
    Shape.TUPLE: Initializer._generate_tuple,
    Shape.COLLECTION: Initializer._generate_collection,
    Shape.MAP: Initializer._generate_map,
    Shape.ABSTRACT: Initializer._generate_abstract,
    Shape.ANY: Initializer._generate_any,
    Shape.COMPOSITE: Initializer._generate_composite,
}
