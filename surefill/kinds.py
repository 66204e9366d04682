"""Type model of surefill: scalar kinds, markers and shape classification.

Python has no primitive/boxed split so surefill uses numpy scalar types as the
primitive kinds and Python builtins plus a handful of int/str/float
subclasses as the boxed kinds:

    Kind        primitive     boxed
    ----        ---------     -----
    BYTE        numpy.int8    Byte
    SHORT       numpy.int16   Short
    INTEGER     numpy.int32   int
    LONG        numpy.int64   Long
    FLOAT       numpy.float32 Float32
    DOUBLE      numpy.float64 float
    BOOLEAN     numpy.bool_   bool
    CHARACTER   numpy.str_    Char
    STRING                    str

Classification turns any type descriptor into one of the Shape tags; the
generator dispatches on the tag.
"""
from __future__ import annotations

from collections import deque
from collections.abc import Collection, Iterable, Mapping, Sequence
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from inspect import isabstract, isclass
from numbers import Complex, Integral, Number, Rational, Real
from types import NoneType, UnionType
from typing import (
    Annotated,
    Any,
    Generic,
    Literal,
    TypeVar,
    Union,
    get_args,
    get_origin,
)
from uuid import UUID

from numpy import bool_, float32, float64, int8, int16, int32, int64, str_

from surefill.errors import GenerationError


T = TypeVar("T")


class Byte(int):
    """8 bit signed integer."""


class Short(int):
    """16 bit signed integer."""


class Long(int):
    """64 bit signed integer."""


class Float32(float):
    """Single precision float."""


class Char(str):
    """Single character string."""


class Instant(float):
    """Point on the time line as POSIX seconds."""


class Array(Generic[T]):
    """Fixed size array of T. Generated as a numpy.ndarray."""


class Queue(Collection):
    """Queue-like collection. Generated as a collections.deque by default."""


class Text(Sequence):
    """Text sequence. Generated as a str by default."""


class Transient:
    """Marks a field as not persistent: Annotated[T, Transient] is never filled."""


class Kind(Enum):
    """Scalar kinds with a unique value generator."""

    BYTE = "byte"
    SHORT = "short"
    INTEGER = "integer"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    CHARACTER = "character"
    STRING = "string"
    DATETIME = "datetime"
    DATE = "date"
    INSTANT = "instant"
    BIG_INTEGER = "big_integer"
    BIG_DECIMAL = "big_decimal"
    UUID = "uuid"


class Shape(Enum):
    """Tag produced by classify() for every type descriptor."""

    PRIMITIVE = "primitive"
    SCALAR = "scalar"
    ABSENT = "absent"
    ENUM = "enum"
    LITERAL = "literal"
    VALUE = "value"
    ARRAY = "array"
    TUPLE = "tuple"
    COLLECTION = "collection"
    MAP = "map"
    ABSTRACT = "abstract"
    ANY = "any"
    COMPOSITE = "composite"


Queue.register(deque)
Text.register(str)

PRIMITIVE_KINDS: dict[type, Kind] = {
    int8: Kind.BYTE,
    int16: Kind.SHORT,
    int32: Kind.INTEGER,
    int64: Kind.LONG,
    float32: Kind.FLOAT,
    float64: Kind.DOUBLE,
    bool_: Kind.BOOLEAN,
    str_: Kind.CHARACTER,
}

BOXED_KINDS: dict[type, Kind] = {
    Byte: Kind.BYTE,
    Short: Kind.SHORT,
    int: Kind.INTEGER,
    Long: Kind.LONG,
    Float32: Kind.FLOAT,
    float: Kind.DOUBLE,
    bool: Kind.BOOLEAN,
    Char: Kind.CHARACTER,
    str: Kind.STRING,
}

VALUE_KINDS: dict[type, Kind] = {
    datetime: Kind.DATETIME,
    date: Kind.DATE,
    Instant: Kind.INSTANT,
    Decimal: Kind.BIG_DECIMAL,
    UUID: Kind.UUID,
}

_NUMERIC_TOWER: frozenset[type] = frozenset((Number, Complex, Real, Rational, Integral))


def is_abstract(typ: Any) -> bool:
    """True if typ is a class that cannot be instantiated as is.

    That is an ABC with abstract methods, a Protocol or a numbers ABC.
    """
    if not isclass(typ) or get_origin(typ) is not None:
        return False
    return isabstract(typ) or bool(getattr(typ, "_is_protocol", False)) or typ in _NUMERIC_TOWER


def is_primitive(typ: Any) -> bool:
    """True if typ is one of the numpy scalar primitive kinds."""
    return isinstance(typ, type) and typ in PRIMITIVE_KINDS


def normalize(typ: Any) -> Any:
    """Strip descriptor wrappers that do not change the generated value.

    Annotated[T, ...] becomes T, unions (including Optional) become their
    first non None member and type variables become their bound, first
    constraint or Any.
    """
    while True:
        origin: Any = get_origin(typ)
        if origin is Annotated:
            typ = get_args(typ)[0]
        elif origin is Union or origin is UnionType:
            members: tuple[Any, ...] = tuple(arg for arg in get_args(typ) if arg is not NoneType)
            typ = members[0] if members else NoneType
        elif isinstance(typ, TypeVar):
            if typ.__bound__ is not None:
                typ = typ.__bound__
            elif typ.__constraints__:
                typ = typ.__constraints__[0]
            else:
                return Any
        else:
            return typ


def classify(typ: Any, nesting_depth: int) -> Shape:
    """Return the Shape of a normalized type descriptor.

    The checks are ordered: the first that matches wins. Scalars are generated
    regardless of the remaining nesting depth, everything else is absent once
    the depth is negative.

    Args
    ----
    typ: A normalized type descriptor.
    nesting_depth: Remaining nesting depth of the context.

    Returns
    -------
    The Shape tag to dispatch on.
    """
    if typ in PRIMITIVE_KINDS:
        return Shape.PRIMITIVE
    if typ in BOXED_KINDS:
        return Shape.SCALAR
    if nesting_depth < 0:
        return Shape.ABSENT
    origin: Any = get_origin(typ)
    if origin is None and isclass(typ) and issubclass(typ, Enum):
        return Shape.ENUM
    if origin is Literal:
        return Shape.LITERAL
    if typ in VALUE_KINDS:
        return Shape.VALUE
    if typ is Array or origin is Array:
        return Shape.ARRAY
    if origin is not None:
        if origin is tuple:
            return Shape.TUPLE
        if isclass(origin) and issubclass(origin, Mapping):
            return Shape.MAP
        if isclass(origin) and issubclass(origin, Iterable) and not issubclass(origin, (str, bytes)):
            return Shape.COLLECTION
        raise GenerationError(f"Unsupported parametrized type: {typ}")
    if is_abstract(typ):
        return Shape.ABSTRACT
    if typ is Any or typ is object:
        return Shape.ANY
    if not isclass(typ):
        raise GenerationError(f"Unsupported type descriptor: {typ!r}")
    return Shape.COMPOSITE
