# src/things3_query/core/dates.py

"""
Packed date codec.

The host stores calendar dates as one integer:

    (year << 16) | (day_of_year * 128)

where day_of_year is 0-indexed. A value of 0 (or NULL) means "not set", not the epoch.

Two calendar regimes are involved:
- decode() evaluates "Jan 1 of year + day_of_year" on the UTC calendar and returns a plain `date`.
- encode() takes a *local* calendar date. Callers holding an instant go through
  local_today() / encode_instant() so "today" tracks the caller's local midnight.

decode(encode(d)) == d for every date d. The reverse only holds for values this codec produced:
packed values read from the store may carry bits we do not interpret.

Some builds of the host appear to shift the day field by 33 days. The shift is not confirmed,
so it is a parameter (offset_days, default 0) rather than a constant baked into the math.
"""

from __future__ import annotations

import calendar
import warnings
from dataclasses import dataclass
from datetime import date, datetime, timedelta

YEAR_SHIFT = 16
DAY_MASK = 0xFFFF
DAY_UNIT = 128

# Shift seen in one code path of the host integration; verify against live data before using it.
OBSERVED_HOST_OFFSET_DAYS = 33

# day_of_year + offset must stay inside the 16-bit day field: (366 + offset) * 128 <= 0xFFFF
MAX_OFFSET_DAYS = DAY_MASK // DAY_UNIT - 366

PLAUSIBLE_YEARS = range(1970, 2200)

PackedDate = int


class AmbiguousEncodingWarning(UserWarning):
    """A packed value does not look like anything encode() would produce."""


def local_today(now: datetime) -> date:
    """Calendar date of `now` on the local wall clock (naive datetimes are taken as local)."""
    if now.tzinfo is not None:
        now = now.astimezone()
    return now.date()


@dataclass(frozen=True, slots=True)
class DateCodec:
    offset_days: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.offset_days <= MAX_OFFSET_DAYS:
            raise ValueError(f"offset_days must be within 0..{MAX_OFFSET_DAYS}, got {self.offset_days}")

    # ---- decode ----

    def is_plausible(self, packed: int) -> bool:
        """True if `packed` is a value encode() could have produced."""
        year = packed >> YEAR_SHIFT
        low = packed & DAY_MASK
        if year not in PLAUSIBLE_YEARS or low % DAY_UNIT:
            return False
        day_of_year = low // DAY_UNIT - self.offset_days
        days_in_year = 366 if calendar.isleap(year) else 365
        return 0 <= day_of_year < days_in_year

    def decode(self, packed: int | None) -> date | None:
        if not packed:
            return None
        packed = int(packed)

        year = packed >> YEAR_SHIFT
        day_of_year = (packed & DAY_MASK) // DAY_UNIT - self.offset_days

        if not self.is_plausible(packed):
            warnings.warn(
                f"packed date {packed} (year={year}, day={day_of_year}) is outside the known encoding",
                AmbiguousEncodingWarning,
                stacklevel=2,
            )

        # Best effort: clamp the year into what `date` can hold, let day overflow roll forward.
        year = min(max(year, date.min.year), date.max.year)
        try:
            return date(year, 1, 1) + timedelta(days=day_of_year)
        except OverflowError:
            return date.max if day_of_year > 0 else date.min

    # ---- encode ----

    def encode(self, day: date) -> PackedDate:
        if isinstance(day, datetime):
            day = local_today(day)
        day_of_year = (day - date(day.year, 1, 1)).days
        return (day.year << YEAR_SHIFT) | ((day_of_year + self.offset_days) * DAY_UNIT)

    def encode_instant(self, moment: datetime) -> PackedDate:
        """Encode the local calendar day containing `moment`."""
        return self.encode(local_today(moment))

    def day_span(self, start: date, end: date | None = None) -> tuple[PackedDate, PackedDate]:
        """
        Half-open packed interval [lo, hi) covering the local days start..end inclusive.

        Every value the host writes for a day d lies in [encode(d), encode(d) + DAY_UNIT),
        so the upper bound never needs encode(end + 1 day) and survives year rollover.
        """
        if end is None:
            end = start
        return self.encode(start), self.encode(end) + DAY_UNIT


_DEFAULT = DateCodec()


def decode(packed: int | None, *, offset_days: int = 0) -> date | None:
    codec = _DEFAULT if offset_days == 0 else DateCodec(offset_days)
    return codec.decode(packed)


def encode(day: date, *, offset_days: int = 0) -> PackedDate:
    codec = _DEFAULT if offset_days == 0 else DateCodec(offset_days)
    return codec.encode(day)
