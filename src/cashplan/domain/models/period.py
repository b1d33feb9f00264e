"""Calendar month value type."""

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
import re

from cashplan.domain.errors import ValidationError

_PERIOD_PATTERN = re.compile(r"^(\d{4})-(\d{1,2})$")


@dataclass(frozen=True, order=True)
class Period:
    """A validated calendar month.

    Attributes:
        year: Four digit year.
        month: Month number, 1 to 12.
    """

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValidationError(
                f"Month must be between 1 and 12, got {self.month}"
            )
        if not 1 <= self.year <= 9999:
            raise ValidationError(f"Invalid year: {self.year}")

    @classmethod
    def from_date(cls, value: date) -> "Period":
        return cls(value.year, value.month)

    @classmethod
    def parse(cls, raw: str) -> "Period":
        """Parse a ``YYYY-MM`` string.

        Args:
            raw: Period string such as ``2024-02``.

        Returns:
            Period: Parsed period.

        Raises:
            ValidationError: If the string is not a valid period.
        """
        match = _PERIOD_PATTERN.match(raw.strip())
        if not match:
            raise ValidationError(
                f"Invalid period '{raw}'. Expected format YYYY-MM."
            )
        return cls(int(match.group(1)), int(match.group(2)))

    @classmethod
    def range(cls, start: "Period", end: "Period") -> list["Period"]:
        """Return every period from start to end, both included."""
        periods = []
        current = start
        while current <= end:
            periods.append(current)
            current = current.next()
        return periods

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def days_in_month(self) -> int:
        return calendar.monthrange(self.year, self.month)[1]

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return date(self.year, self.month, self.days_in_month)

    def clamp_day(self, day: int) -> date:
        """Return the given day in this month, clamped to the last day."""
        return date(self.year, self.month, min(day, self.days_in_month))

    def contains(self, value: date) -> bool:
        return value.year == self.year and value.month == self.month

    def overlaps(self, start: date, end: date | None) -> bool:
        """Whether ``[start, end]`` intersects this month."""
        if start > self.last_day:
            return False
        return end is None or end >= self.first_day

    def shift(self, months: int) -> "Period":
        index = self.year * 12 + (self.month - 1) + months
        return Period(index // 12, index % 12 + 1)

    def next(self) -> "Period":
        return self.shift(1)

    def previous(self) -> "Period":
        return self.shift(-1)

    def day_before(self) -> date:
        return self.first_day - timedelta(days=1)

    def __str__(self) -> str:
        return self.key


__all__ = ["Period"]
