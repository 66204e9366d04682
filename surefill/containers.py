"""Arrays, collections, tuples and maps of generated values.

Every element is produced by a callback taking the element type, normally one
that recurses into a nested generation context.
"""
from __future__ import annotations

from logging import DEBUG, Logger, NullHandler, getLogger
from typing import Any, Callable, MutableMapping

from numpy import dtype, empty, ndarray, str_

from surefill.errors import GenerationError
from surefill.kinds import is_primitive


_logger: Logger = getLogger(__name__)
_logger.addHandler(NullHandler())
_LOG_DEBUG: bool = _logger.isEnabledFor(DEBUG)

ValueProvider = Callable[[Any], Any]


def element_dtype(element_type: Any) -> dtype:
    """numpy dtype storing element_type: native for primitive kinds, object otherwise."""
    if element_type is str_:
        # numpy.dtype(str_) has zero length.
        return dtype("U1")
    if is_primitive(element_type):
        return dtype(element_type)
    return dtype(object)


def generate_array(element_type: Any, size: int, provider: ValueProvider) -> ndarray:
    """Create an array of size elements of element_type.

    Args
    ----
    element_type: Type of each element.
    size: Length of the array.
    provider: Generates a value for element_type.

    Returns
    -------
    A numpy array with every slot filled.
    """
    if _LOG_DEBUG:
        _logger.debug(f"Generating array of {size} {element_type} elements.")
    array: ndarray = empty(size, dtype=element_dtype(element_type))
    for index in range(size):
        array[index] = provider(element_type)
    return array


def generate_collection(
    implementation: type, element_type: Any, size: int, provider: ValueProvider
) -> Any:
    """Create an implementation collection of size generated elements.

    Args
    ----
    implementation: Concrete collection class, built from an iterable of its elements.
    element_type: Type of each element.
    size: Number of elements generated.
    provider: Generates a value for element_type.

    Returns
    -------
    The collection. A set may hold fewer elements if generated values collide.
    """
    if _LOG_DEBUG:
        _logger.debug(f"Generating {implementation.__qualname__} of {size} {element_type} elements.")
    elements: list[Any] = [provider(element_type) for _ in range(size)]
    try:
        return implementation(elements)
    except TypeError as exc:
        raise GenerationError(
            f"Cannot build a {implementation.__qualname__} from its elements: {exc}"
        ) from exc


def generate_tuple(element_types: tuple[Any, ...], size: int, provider: ValueProvider) -> tuple:
    """Create a tuple for the arguments of a tuple type.

    tuple[T, ...] has size elements of T, tuple[A, B] has one element of each
    type and tuple[()] is empty.
    """
    if len(element_types) == 2 and element_types[1] is Ellipsis:
        element_types = (element_types[0],) * size
    elif element_types == ((),):
        element_types = ()
    return tuple(provider(element_type) for element_type in element_types)


def generate_map(
    mapping: MutableMapping,
    key_type: Any,
    value_type: Any,
    size: int,
    provider: ValueProvider,
) -> MutableMapping:
    """Insert size generated key/value pairs into mapping.

    A generated key equal to an earlier one replaces its entry so the mapping
    may end up with fewer than size entries e.g. for enum keys.
    """
    if _LOG_DEBUG:
        _logger.debug(f"Generating {size} {key_type}: {value_type} entries.")
    for _ in range(size):
        key: Any = provider(key_type)
        value: Any = provider(value_type)
        try:
            mapping[key] = value
        except TypeError as exc:
            raise GenerationError(f"Cannot use a generated {key_type} as a map key: {exc}") from exc
    if len(mapping) < size:
        _logger.debug(f"Key collisions reduced the map to {len(mapping)} of {size} entries.")
    return mapping
