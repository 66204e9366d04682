"""Generation context: what to generate and how deep, big and with which mappings.

A context is created by one of the unique_* entry points, configured with the
fluent with_* methods and materialized with generate(). Every recursive step
uses a nested() copy with one less level of nesting depth.
"""
from __future__ import annotations

from collections import deque
from collections.abc import (
    Collection,
    Hashable,
    Iterable,
    Mapping,
    MutableMapping,
    MutableSequence,
    MutableSet,
    Sequence,
    Set,
)
from logging import DEBUG, Logger, NullHandler, getLogger
from numbers import Number
from typing import Any, Generic, TypeVar

from surefill.config import DEFAULTS, validate_settings
from surefill.errors import GenerationError
from surefill.kinds import Long, Queue, Text, is_abstract, is_primitive
from surefill.unique import UNIQUE, Unique


_logger: Logger = getLogger(__name__)
_logger.addHandler(NullHandler())
_LOG_DEBUG: bool = _logger.isEnabledFor(DEBUG)

T = TypeVar("T")


def validate_mapping(abstract: Any, concrete: Any) -> None:
    """Raise GenerationError unless abstract is abstract and concrete can be instantiated."""
    if not is_abstract(abstract):
        raise GenerationError(f"Provided key is not an interface or abstract class: {abstract!r}")
    if not isinstance(concrete, type) or is_abstract(concrete) or is_primitive(concrete):
        raise GenerationError(f"Cannot use as implementation for {abstract!r}: {concrete!r}")


class Mappings:
    """Registry of the concrete class generated for each abstract class.

    Registrations are validated when made so a bad mapping fails before any
    generation runs.
    """

    def __init__(self, mappings: Mapping[type, type] | None = None) -> None:
        self._mappings: dict[type, type] = {}
        if mappings is not None:
            self.update(mappings)

    def register(self, abstract: type, concrete: type) -> None:
        validate_mapping(abstract, concrete)
        self._mappings[abstract] = concrete

    def update(self, mappings: Mapping[type, type]) -> None:
        """Register all of mappings or, if any is invalid, none of them."""
        for abstract, concrete in mappings.items():
            validate_mapping(abstract, concrete)
        self._mappings.update(mappings)

    def resolve(self, abstract: type) -> type:
        """Return the concrete class mapped to abstract."""
        try:
            return self._mappings[abstract]
        except KeyError:
            raise GenerationError(f"There is no mapping for: {abstract!r}") from None

    def copy(self) -> Mappings:
        return Mappings(self._mappings)

    def as_dict(self) -> dict[type, type]:
        return dict(self._mappings)


DEFAULT_MAPPINGS: Mappings = Mappings(
    {
        Sequence: list,
        MutableSequence: list,
        Collection: list,
        Iterable: list,
        Set: set,
        MutableSet: set,
        Mapping: dict,
        MutableMapping: dict,
        Queue: deque,
        Text: str,
        Hashable: str,
        Number: Long,
    }
)


class InitContext(Generic[T]):
    """Configuration of one generation call and its recursive descendants.

    Args
    ----
    context_type: The type descriptor to generate.
    unique: Scalar value source. Defaults to the process wide one.
    """

    def __init__(self, context_type: Any, unique: Unique | None = None) -> None:
        self.context_type: Any = context_type
        self.collection_size: int = DEFAULTS["collection_size"]
        self.nesting_depth: int = DEFAULTS["nesting_depth"]
        self.excluded_fields: dict[Any, set[str]] = {}
        self.mappings: Mappings = DEFAULT_MAPPINGS.copy()
        self.unique: Unique = UNIQUE if unique is None else unique

    def __repr__(self) -> str:
        return (
            f"InitContext({self.context_type!r}, collection_size={self.collection_size}, "
            f"nesting_depth={self.nesting_depth})"
        )

    def with_collection_size(self, size: int) -> InitContext[T]:
        """Number of elements in every generated array, collection and map."""
        validate_settings(collection_size=size)
        self.collection_size = size
        return self

    def with_nesting_depth(self, depth: int) -> InitContext[T]:
        """Levels of composite fields to fill below this one. Negative generates None."""
        validate_settings(nesting_depth=depth)
        self.nesting_depth = depth
        return self

    def with_excluded_fields_for(self, owner: Any, *field_names: str) -> InitContext[T]:
        """Leave field_names of owner instances at their default value."""
        self.excluded_fields.setdefault(owner, set()).update(field_names)
        return self

    def with_excluded_fields(self, excluded_fields: Mapping[Any, Iterable[str]]) -> InitContext[T]:
        for owner, field_names in excluded_fields.items():
            self.with_excluded_fields_for(owner, *field_names)
        return self

    def with_mapping(self, abstract: type, concrete: type) -> InitContext[T]:
        """Generate concrete wherever abstract is requested."""
        self.mappings.register(abstract, concrete)
        return self

    def with_mappings(self, mappings: Mapping[type, type]) -> InitContext[T]:
        self.mappings.update(mappings)
        return self

    def with_unique(self, unique: Unique) -> InitContext[T]:
        """Draw scalar values from unique e.g. to isolate a test from the process wide counter."""
        self.unique = unique
        return self

    def mapping_for(self, abstract: type) -> type:
        return self.mappings.resolve(abstract)

    def excluded_fields_for(self, owner: Any) -> set[str]:
        return self.excluded_fields.get(owner, set())

    def nested(self, nested_type: Any) -> InitContext:
        """Context for a value one level below this one."""
        context: InitContext = InitContext(nested_type, self.unique)
        context.collection_size = self.collection_size
        context.nesting_depth = self.nesting_depth - 1
        context.mappings = self.mappings
        context.excluded_fields = self.excluded_fields
        return context

    def resolved(self, concrete: type) -> InitContext:
        """Copy of this context generating concrete at the same depth."""
        context: InitContext = self.nested(concrete)
        context.nesting_depth = self.nesting_depth
        return context

    def generate(self) -> T:
        """Materialize one instance of the context type."""
        # Import here: the initializer depends on this module.
        from surefill.initializer import Initializer

        if _LOG_DEBUG:
            _logger.debug(f"Generating {self!r}.")
        return Initializer(self).create()
