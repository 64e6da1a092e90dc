"""Date handling for stays: normalization, night counts, and overlap.

Stays are half-open intervals ``[check_in, check_out)``: the check-out day is
free for the next guest, so back-to-back bookings never overlap.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timezone

from dateutil import parser as dateparser

from paxbnb.services.exceptions import InvalidDateError, InvalidRangeError

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Default year for a second parse when "Feb 29" has no year of its own
_LEAP_YEAR = 2000


def utc_today() -> date:
    """Today's date in UTC, the calendar every booking rule uses."""
    return datetime.now(timezone.utc).date()


def _with_year(value: date, year: int) -> date:
    try:
        return value.replace(year=year)
    except ValueError:
        # Feb 29 moved into a non-leap year
        return value.replace(year=year, day=28)


def _parse_loose(text: str, reference_year: int) -> date:
    try:
        return dateparser.parse(text, default=datetime(reference_year, 1, 1), fuzzy=True).date()
    except ValueError:
        # A year-less "Feb 29" cannot be built in a common reference year;
        # the leap default parses it and the caller moves the year forward.
        return dateparser.parse(text, default=datetime(_LEAP_YEAR, 1, 1), fuzzy=True).date()


def normalize_date(
    value: str | date,
    reference_year: int | None = None,
    today: date | None = None,
) -> str:
    """Normalize a loosely written date to ``YYYY-MM-DD``.

    Strict ISO strings are returned unchanged. Anything else ("oct 12",
    "12 October", "10/12") is parsed fuzzily; when the year is missing or
    earlier than ``reference_year`` it becomes ``reference_year``, and if the
    result is already behind ``today`` it moves to the following year, so a
    conversational date never silently lands in the past.

    Raises:
        InvalidDateError: If the value cannot be parsed as a date.
    """
    if isinstance(value, date):
        return value.isoformat()

    text = value.strip()
    if ISO_DATE_RE.match(text):
        return text

    today = today or utc_today()
    reference_year = reference_year or today.year

    try:
        parsed = _parse_loose(text, reference_year)
    except (ValueError, OverflowError):
        raise InvalidDateError(f"Could not understand the date '{value}'.", value=value) from None

    result = _with_year(parsed, reference_year) if parsed.year < reference_year else parsed
    if result < today:
        # Shift from the parsed day so Feb 29 survives into a leap year
        result = _with_year(parsed, reference_year + 1)

    return result.isoformat()


def parse_date(
    value: str | date,
    reference_year: int | None = None,
    today: date | None = None,
) -> date:
    """Normalize ``value`` and return it as a ``date``."""
    normalized = normalize_date(value, reference_year=reference_year, today=today)
    try:
        return date.fromisoformat(normalized)
    except ValueError:
        raise InvalidDateError(f"'{value}' is not a valid calendar date.", value=value) from None


def nights(check_in: date, check_out: date) -> int:
    """Number of nights in a stay; at least one.

    Raises:
        InvalidRangeError: If check-out is not strictly after check-in.
    """
    count = (check_out - check_in).days
    if count < 1:
        raise InvalidRangeError(
            "Check-out date must be after check-in date.",
            check_in=check_in.isoformat(),
            check_out=check_out.isoformat(),
        )
    return count


def overlaps(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Half-open interval overlap test."""
    return a_start < b_end and b_start < a_end


@dataclass(frozen=True)
class DateRange:
    """A validated stay with ``check_in < check_out``."""

    check_in: date
    check_out: date

    def __post_init__(self) -> None:
        nights(self.check_in, self.check_out)

    @classmethod
    def parse(
        cls,
        check_in: str | date,
        check_out: str | date,
        today: date | None = None,
    ) -> "DateRange":
        """Build a range from user-supplied values, normalizing both ends."""
        return cls(parse_date(check_in, today=today), parse_date(check_out, today=today))

    @property
    def nights(self) -> int:
        return nights(self.check_in, self.check_out)

    def overlaps(self, other: "DateRange") -> bool:
        return overlaps(self.check_in, self.check_out, other.check_in, other.check_out)

    def as_dict(self) -> dict[str, str]:
        return {"check_in": self.check_in.isoformat(), "check_out": self.check_out.isoformat()}
