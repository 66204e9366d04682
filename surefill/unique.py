"""Unique scalar values for tests.

Tests want values that are the same every run but never collide with each
other, not random ones. Every value here is derived from the output of a
Sequencer so it is globally unique for the whole run (within the range of the
kind) and reproducible.

Derivations
-----------
    integer: 64 bit hash fold (v ^ (v >> 32)) truncated to 32 bits.
    short: v ^ (v >> 48) truncated to 16 bits.
    byte: the same fold applied to a unique short, truncated to 8 bits.
    long: v.
    double: "<v>.<v>" with a "1" appended to the fraction if it ends in "0".
    float: the double narrowed to single precision.
    string: prefix + v.
    character: next character of a cycle over [a-zA-Z0-9].
    boolean: v is odd.
    millis: start of the process in epoch millis + v * 1000.
    datetime: UTC datetime of unique millis.
    instant: POSIX timestamp of a unique datetime.
    date: start of the process as a date + v days.
    big integer / big decimal: v.
    uuid: digits of v right aligned in 32 hex digits.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from itertools import cycle
from logging import DEBUG, Logger, NullHandler, getLogger
from time import time
from typing import Any, Callable, Iterator
from uuid import UUID

from exrex import generate
from numpy import float32, int8, int16, int32, uint64

from surefill.config import DEFAULTS
from surefill.kinds import Instant, Kind
from surefill.sequencer import SEQUENCER, Sequencer


_logger: Logger = getLogger(__name__)
_logger.addHandler(NullHandler())
_LOG_DEBUG: bool = _logger.isEnabledFor(DEBUG)

CHARACTER_REGEX: str = "[a-zA-Z0-9]"
ALPHABET: str = "".join(generate(CHARACTER_REGEX))

_MASK_64: int = 2**64 - 1
_EPOCH: datetime = datetime(1970, 1, 1, tzinfo=timezone.utc)
_INIT_MILLIS: int = int(time() * 1000)
_INIT_DATE: date = date.today()


def _truncate(value: int, dtype: type) -> int:
    """Reinterpret the low bits of value as the signed integer numpy dtype."""
    return int(uint64(value & _MASK_64).astype(dtype))


class Unique:
    """Unique value generators drawing from one sequencer.

    Args
    ----
    sequencer: Source of uniqueness. Defaults to the process wide sequencer.
    """

    def __init__(self, sequencer: Sequencer | None = None) -> None:
        self.sequencer: Sequencer = SEQUENCER if sequencer is None else sequencer
        self._characters: Iterator[str] = cycle(ALPHABET)
        self._generators: dict[Kind, Callable[[], Any]] = {
            Kind.BYTE: self.unique_byte,
            Kind.SHORT: self.unique_short,
            Kind.INTEGER: self.unique_integer,
            Kind.LONG: self.unique_long,
            Kind.FLOAT: self.unique_float,
            Kind.DOUBLE: self.unique_double,
            Kind.BOOLEAN: self.unique_boolean,
            Kind.CHARACTER: self.unique_character,
            Kind.STRING: self.unique_string,
            Kind.DATETIME: self.unique_datetime,
            Kind.DATE: self.unique_date,
            Kind.INSTANT: self.unique_instant,
            Kind.BIG_INTEGER: self.unique_big_integer,
            Kind.BIG_DECIMAL: self.unique_big_decimal,
            Kind.UUID: self.unique_uuid,
        }

    def of(self, kind: Kind) -> Any:
        """Return a unique value of kind."""
        if _LOG_DEBUG:
            _logger.debug(f"Generating unique {kind.value} value.")
        return self._generators[kind]()

    def unique_long(self) -> int:
        """Plain output of the sequencer. Always greater than 0."""
        return self.sequencer.next_long()

    def unique_integer(self) -> int:
        """Fold the high half of a unique long onto the low half to reduce collisions."""
        value: int = self.unique_long()
        return _truncate(value ^ (value >> 32), int32)

    def unique_short(self) -> int:
        value: int = self.unique_long()
        return _truncate(value ^ (value >> 48), int16)

    def unique_byte(self) -> int:
        value: int = self.unique_short() & 0xFFFF
        return _truncate(value ^ (value >> 8), int8)

    def unique_double(self) -> float:
        """Unique long as both the integral and fractional part. Always positive.

        A fraction ending in 0 gets a 1 appended so the parsed value keeps all
        of its digits e.g. 10 -> 10.101.
        """
        value: int = self.unique_long()
        fraction: str = str(value)
        if fraction.endswith("0"):
            fraction += "1"
        return float(f"{value}.{fraction}")

    def unique_float(self) -> float:
        return float(float32(self.unique_double()))

    def unique_string(self) -> str:
        return f"{DEFAULTS['string_prefix']}{self.unique_long()}"

    def unique_character(self) -> str:
        """Next character of the [a-zA-Z0-9] cycle. Wraps after 62 characters."""
        return next(self._characters)

    def unique_boolean(self) -> bool:
        """True if a unique long is odd so consecutive calls alternate."""
        return self.unique_long() % 2 == 1

    def unique_millis(self) -> int:
        return _INIT_MILLIS + self.unique_long() * 1000

    def unique_datetime(self) -> datetime:
        return _EPOCH + timedelta(milliseconds=self.unique_millis())

    def unique_instant(self) -> Instant:
        return Instant(self.unique_datetime().timestamp())

    def unique_date(self) -> date:
        return _INIT_DATE + timedelta(days=self.unique_long())

    def unique_big_integer(self) -> int:
        return self.unique_long()

    def unique_big_decimal(self) -> Decimal:
        return Decimal(self.unique_long())

    def unique_uuid(self) -> UUID:
        """Digits of a unique long right aligned in an all zero UUID."""
        return UUID(hex=str(self.unique_long()).rjust(32, "0"))


# Generators bound to the process wide sequencer.
UNIQUE: Unique = Unique()

unique_byte: Callable[[], int] = UNIQUE.unique_byte
unique_short: Callable[[], int] = UNIQUE.unique_short
unique_integer: Callable[[], int] = UNIQUE.unique_integer
unique_long: Callable[[], int] = UNIQUE.unique_long
unique_float: Callable[[], float] = UNIQUE.unique_float
unique_double: Callable[[], float] = UNIQUE.unique_double
unique_boolean: Callable[[], bool] = UNIQUE.unique_boolean
unique_character: Callable[[], str] = UNIQUE.unique_character
unique_string: Callable[[], str] = UNIQUE.unique_string
unique_millis: Callable[[], int] = UNIQUE.unique_millis
unique_datetime: Callable[[], datetime] = UNIQUE.unique_datetime
unique_instant: Callable[[], Instant] = UNIQUE.unique_instant
unique_date: Callable[[], date] = UNIQUE.unique_date
unique_big_integer: Callable[[], int] = UNIQUE.unique_big_integer
unique_big_decimal: Callable[[], Decimal] = UNIQUE.unique_big_decimal
unique_uuid: Callable[[], UUID] = UNIQUE.unique_uuid
