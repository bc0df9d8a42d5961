"""
Month-granularity dates.

Subscriptions are billed per month, so every date the API accepts is a
``MM-YYYY`` string such as ``"03-2024"``.  ``MonthDate`` is the parsed
form.  Instances order by ``(year, month)``; comparing the raw strings
would put ``"02-2024"`` after ``"01-2025"``.

For storage a ``MonthDate`` is converted to an integer *period
ordinal* (``year * 12 + month - 1``).  Ordinals preserve the ordering,
which lets the SQL layer compare periods with plain ``<=`` and ``>=``.
"""

import re
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional, Union

from .errors import InvalidDateFormatError, InvalidDateRangeError

MIN_YEAR = 2000
# Years accepted after the current one.
MAX_YEARS_AHEAD = 10

_MONTH_DATE_RE = re.compile(r"(0[1-9]|1[0-2])-([0-9]{4})")


class Ordering(Enum):
    BEFORE = -1
    EQUAL = 0
    AFTER = 1


@dataclass(frozen=True, order=True)
class MonthDate:
    """A calendar month of a specific year.

    Field order matters: ``order=True`` compares ``year`` first and
    then ``month``.
    """

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise InvalidDateFormatError(f"month out of range: {self.month}")

    def __str__(self) -> str:
        return f"{self.month:02d}-{self.year:04d}"

    @property
    def ordinal(self) -> int:
        return self.year * 12 + self.month - 1

    @classmethod
    def from_ordinal(cls, value: int) -> "MonthDate":
        year, month_index = divmod(value, 12)
        return cls(year=year, month=month_index + 1)


def parse(value: str, current_year: Optional[int] = None) -> MonthDate:
    """Parse a ``MM-YYYY`` string.

    The month must be zero-padded (``01``..``12``) and the year must
    lie in ``[2000, current_year + 10]``.  Anything else, including
    surrounding whitespace, raises ``InvalidDateFormatError``.
    ``current_year`` defaults to the current calendar year.
    """
    if not isinstance(value, str):
        raise InvalidDateFormatError()
    match = _MONTH_DATE_RE.fullmatch(value)
    if match is None:
        raise InvalidDateFormatError()

    month = int(match.group(1))
    year = int(match.group(2))
    if current_year is None:
        current_year = date.today().year
    if year < MIN_YEAR or year > current_year + MAX_YEARS_AHEAD:
        raise InvalidDateFormatError()
    return MonthDate(year=year, month=month)


def _coerce(value: Union[MonthDate, str]) -> MonthDate:
    if isinstance(value, MonthDate):
        return value
    return parse(value)


def compare(a: Union[MonthDate, str], b: Union[MonthDate, str]) -> Ordering:
    """Compare two month dates by year, then month."""
    left, right = _coerce(a), _coerce(b)
    if left < right:
        return Ordering.BEFORE
    if left > right:
        return Ordering.AFTER
    return Ordering.EQUAL


def validate_range(
    start: Union[MonthDate, str], end: Union[MonthDate, str]
) -> tuple[MonthDate, MonthDate]:
    """Check that ``start`` is not after ``end`` and return both parsed.

    Strings are parsed first, so a malformed value raises
    ``InvalidDateFormatError`` before any range check.
    """
    start_date, end_date = _coerce(start), _coerce(end)
    if compare(start_date, end_date) is Ordering.AFTER:
        raise InvalidDateRangeError()
    return start_date, end_date
