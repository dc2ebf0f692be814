# Copyright 2024 inuex35
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Instants and calendar-day arithmetic.

An instant is a naive ``datetime`` on the GPS time scale. Broadcast files
are partitioned by GPS calendar day, so the day an instant belongs to is
its (year, day-of-year) in that scale.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Tuple, Union

import numpy as np

from .constants import GPST0

__all__ = [
    'GPS_EPOCH', 'gtime_to_instant', 'to_instant', 'instant_to_seconds',
    'year_doy', 'doy_to_date', 'shift_day', 'day_start', 'is_leap_year',
]

GPS_EPOCH = datetime(*GPST0)
UNIX_EPOCH = datetime(1970, 1, 1)


def gtime_to_instant(t) -> datetime:
    """Convert a cssrlib ``gtime_t`` (unix seconds + fraction) to an instant"""
    return UNIX_EPOCH + timedelta(seconds=int(t.time)) + timedelta(seconds=float(t.sec))


def to_instant(value) -> datetime:
    """Normalise a time value to a naive GPST datetime.

    Parameters
    ----------
    value : datetime, float, int, numpy datetime64 or gtime_t
        - naive datetime: taken as GPST
        - aware datetime: converted to UTC, tzinfo dropped
        - float/int: GPS seconds since 1980-01-06
        - object with ``time`` and ``sec`` attributes: cssrlib gtime_t

    Returns
    -------
    datetime
        Naive datetime

    Raises
    ------
    TypeError
        If the value cannot be interpreted as a time
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, np.datetime64):
        micros = value.astype('datetime64[us]').astype(np.int64)
        return UNIX_EPOCH + timedelta(microseconds=int(micros))
    if isinstance(value, (int, float, np.integer, np.floating)) and not isinstance(value, bool):
        return GPS_EPOCH + timedelta(seconds=float(value))
    if hasattr(value, 'time') and hasattr(value, 'sec'):
        return gtime_to_instant(value)
    raise TypeError(f"Unsupported time value: {value!r}")


def instant_to_seconds(t: datetime) -> float:
    """Seconds since the GPS epoch, used as the interpolation time axis"""
    return (t - GPS_EPOCH).total_seconds()


def year_doy(t: Union[datetime, date]) -> Tuple[int, int]:
    """Return (year, day-of-year) of an instant"""
    return t.year, t.timetuple().tm_yday


def doy_to_date(year: int, doy: int) -> date:
    """Calendar date of a (year, day-of-year) pair"""
    days_in_year = 366 if is_leap_year(year) else 365
    if not 1 <= doy <= days_in_year:
        raise ValueError(f"Day of year {doy} out of range for {year}")
    return date(year, 1, 1) + timedelta(days=doy - 1)


def shift_day(year: int, doy: int, days: int) -> Tuple[int, int]:
    """Step a (year, day-of-year) pair by whole days.

    Crosses year boundaries with the correct leap-year length:

    >>> shift_day(2020, 366, 1)
    (2021, 1)
    >>> shift_day(2021, 1, -1)
    (2020, 366)
    """
    return year_doy(doy_to_date(year, doy) + timedelta(days=days))


def day_start(year: int, doy: int) -> datetime:
    """Instant at 00:00:00 of a (year, day-of-year)"""
    d = doy_to_date(year, doy)
    return datetime(d.year, d.month, d.day)


def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)
