"""Describe how to construct and fill a composite type.

A Blueprint lists the constructor parameters that must be synthesized and the
fields that are filled after construction. It is read from the class by
reflection unless the class is Buildable, i.e. it provides its own blueprint
from a __buildable__ classmethod.
"""
from __future__ import annotations

from dataclasses import InitVar
from inspect import Parameter, isfunction, signature
from logging import DEBUG, Logger, NullHandler, getLogger
from typing import (
    Annotated,
    Any,
    ClassVar,
    NamedTuple,
    Protocol,
    TypeVar,
    get_args,
    get_origin,
    get_type_hints,
)

from surefill.errors import GenerationError
from surefill.kinds import Transient


_logger: Logger = getLogger(__name__)
_logger.addHandler(NullHandler())
_LOG_DEBUG: bool = _logger.isEnabledFor(DEBUG)

_SYNTHESIZED_KINDS: frozenset = frozenset(
    (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD, Parameter.KEYWORD_ONLY)
)


class Blueprint(NamedTuple):
    """Construction recipe of a composite type.

    parameters: (name, type) of each required constructor argument in declared order.
    fields: (name, type) of each field filled after construction.
    positional: names of the leading parameters that must be passed positionally.
    """

    parameters: tuple[tuple[str, Any], ...]
    fields: tuple[tuple[str, Any], ...]
    positional: tuple[str, ...] = ()


class Buildable(Protocol):
    """A composite type that describes its own construction."""

    @classmethod
    def __buildable__(cls) -> Blueprint:
        ...


def _is_transient(hint: Any) -> bool:
    return get_origin(hint) is Annotated and Transient in hint.__metadata__


def _is_persistent(hint: Any) -> bool:
    """False for hints that do not describe an instance field."""
    return not (
        hint is ClassVar
        or get_origin(hint) is ClassVar
        or isinstance(hint, InitVar)
        or _is_transient(hint)
    )


def _type_hints(obj: Any) -> dict[str, Any]:
    try:
        return get_type_hints(obj, include_extras=True)
    except (NameError, TypeError) as exc:
        raise GenerationError(f"Cannot resolve the annotations of {obj!r}: {exc}") from exc


def type_var_bindings(cls: type) -> dict[TypeVar, Any]:
    """Map the type variables of every generic base of cls to their arguments.

    e.g. for class IntBox(Box[int]) where class Box(Generic[T]), {T: int}.
    Bindings are collected from the most derived class down so variables
    passed through intermediate generic classes are resolved.
    """
    bindings: dict[TypeVar, Any] = {}
    for klass in cls.__mro__:
        for base in klass.__dict__.get("__orig_bases__", ()):
            origin: Any = get_origin(base)
            parameters: tuple[Any, ...] = getattr(origin, "__parameters__", ())
            for parameter, argument in zip(parameters, get_args(base)):
                if isinstance(argument, TypeVar):
                    argument = bindings.get(argument, argument)
                bindings.setdefault(parameter, argument)
    return bindings


def substitute(hint: Any, bindings: dict[TypeVar, Any]) -> Any:
    """Replace the type variables in hint with their bound arguments."""
    if isinstance(hint, TypeVar):
        return bindings.get(hint, hint)
    parameters: tuple[Any, ...] = getattr(hint, "__parameters__", ())
    if parameters and get_origin(hint) is not None:
        return hint[tuple(bindings.get(parameter, parameter) for parameter in parameters)]
    return hint


def describe(cls: type) -> Blueprint:
    """Return the Blueprint of cls.

    Fields are all annotated attributes of cls and its bases except class
    variables, InitVars and Annotated[T, Transient] fields. Constructor
    parameters are the __init__ parameters without a default; their types come
    from the field of the same name, else the __init__ annotation, else Any.
    A class implementing the Buildable protocol, i.e. defining a __buildable__
    classmethod, is not reflected: its own Blueprint is returned.

    Args
    ----
    cls: A concrete class.

    Returns
    -------
    The Blueprint of cls with type variables bound through its generic bases.
    """
    if hasattr(cls, "__buildable__"):
        if _LOG_DEBUG:
            _logger.debug(f"{cls.__qualname__} is Buildable.")
        return cls.__buildable__()  # type: ignore

    bindings: dict[TypeVar, Any] = type_var_bindings(cls)
    hints: dict[str, Any] = _type_hints(cls)
    fields: tuple[tuple[str, Any], ...] = tuple(
        (name, substitute(hint, bindings)) for name, hint in hints.items() if _is_persistent(hint)
    )

    try:
        required: list[Parameter] = [
            parameter
            for parameter in signature(cls).parameters.values()
            if parameter.kind in _SYNTHESIZED_KINDS and parameter.default is Parameter.empty
        ]
    except (TypeError, ValueError):
        # Builtins without an introspectable signature are called without arguments.
        required = []

    init_hints: dict[str, Any] | None = None
    parameters: list[tuple[str, Any]] = []
    for parameter in required:
        if parameter.name in hints:
            hint: Any = hints[parameter.name]
        else:
            if init_hints is None:
                init_hints = _type_hints(cls.__init__) if isfunction(cls.__init__) else {}
            hint = init_hints.get(parameter.name, Any)
        parameters.append((parameter.name, substitute(hint, bindings)))

    if _LOG_DEBUG:
        _logger.debug(
            f"{cls.__qualname__} blueprint: parameters {[name for name, _ in parameters]}, "
            f"fields {[name for name, _ in fields]}."
        )
    positional: tuple[str, ...] = tuple(
        parameter.name for parameter in required if parameter.kind is Parameter.POSITIONAL_ONLY
    )
    return Blueprint(tuple(parameters), fields, positional)
