"""Default generation settings and their validation.

DEFAULTS is read whenever a new context is created so tests may adjust it
(via configure()) for a whole session. Values are validated with Cerberus.
"""
from __future__ import annotations

from logging import DEBUG, Logger, NullHandler, getLogger
from typing import Any, TypedDict

from cerberus import Validator

from surefill.errors import GenerationError


_logger: Logger = getLogger(__name__)
_logger.addHandler(NullHandler())
_LOG_DEBUG: bool = _logger.isEnabledFor(DEBUG)


class Defaults(TypedDict):
    """Settings applied to every new generation context."""

    collection_size: int
    nesting_depth: int
    string_prefix: str


# DEFAULTS defines the settings of an unconfigured context.
#   'collection_size': Number of elements in generated arrays, collections & maps.
#   'nesting_depth': Levels of composite fields filled below the requested object.
#   'string_prefix': Constant prefix of every unique string.
DEFAULTS: Defaults = {
    "collection_size": 1,
    "nesting_depth": 1,
    "string_prefix": "testValue",
}

SETTINGS_SCHEMA: dict[str, dict[str, Any]] = {
    "collection_size": {"type": "integer", "min": 0},
    "nesting_depth": {"type": "integer"},
    "string_prefix": {"type": "string", "empty": False},
}


def validate_settings(**settings: Any) -> None:
    """Raise GenerationError if any of settings breaks SETTINGS_SCHEMA."""
    validator: Validator = Validator(SETTINGS_SCHEMA)
    if not validator.validate(settings):
        raise GenerationError(f"Invalid generation settings: {validator.errors}")


def configure(**settings: Any) -> None:
    """Validate settings and merge them into DEFAULTS.

    Args
    ----
    settings: Any subset of the Defaults keys.
    """
    validate_settings(**settings)
    if _LOG_DEBUG:
        _logger.debug(f"Updating generation defaults with {settings}.")
    DEFAULTS.update(settings)  # type: ignore
