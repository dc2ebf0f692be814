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

"""Nearest ephemeris points around a query instant.

Broadcast files hold one calendar day each and a satellite only publishes
a few records per day, so the three points around a query instant may span
two files. The finder locates the record closest to the query (the anchor)
in the query's own day, then completes the bracket:

- anchor strictly inside the day: its predecessor and successor
- anchor is the day's first record: previous day's last record + successor
- anchor is the day's last record: predecessor + next day's first record
- anchor is the day's only record: previous day's last + next day's first

If any required neighbour is missing the query yields no bracket at all.
"""

import logging
from typing import Optional, Sequence, Tuple, Union

from ..core.constants import NAV_CACHE_CAPACITY
from ..core.data_structures import Bracket, BracketPosition, NavPoint
from ..core.satellite import SatelliteId, parse_satellite
from ..core.time import shift_day, to_instant, year_doy
from .day_cache import DayFileCache, DayLoader

logger = logging.getLogger(__name__)


def nearest_index(points: Sequence[NavPoint], time) -> int:
    """Index of the point closest to ``time``.

    Points must be chronological; on equal distance the earlier point wins.
    """
    best = 0
    best_dt = None
    for i, point in enumerate(points):
        dt = abs((point.time - time).total_seconds())
        if best_dt is None or dt < best_dt:
            best, best_dt = i, dt
    return best


def classify_anchor(index: int, count: int) -> BracketPosition:
    """Position of the anchor within its satellite's day sequence"""
    if count == 1:
        return BracketPosition.ONLY
    if index == 0:
        return BracketPosition.FIRST
    if index == count - 1:
        return BracketPosition.LAST
    return BracketPosition.MIDDLE


class NearestPointsFinder:
    """Find the ephemeris bracket of a satellite around an instant.

    Parameters
    ----------
    base_path : str, optional
        Root of the navigation tree (``<base>/<year>/brdmDDD0.YYp``); builds
        a :class:`~pynav.io.rinex.RinexDayLoader`
    loader : callable, optional
        Custom ``loader(year, doy) -> DayFile or None``
    capacity : int
        Day cache capacity (default 4)
    cache : DayFileCache, optional
        Ready cache to share between finders; overrides loader/capacity

    Examples
    --------
    >>> finder = NearestPointsFinder('/data/nav')
    >>> bracket = finder.find_nearest_points('G01', datetime(2020, 1, 1, 4))
    >>> [p.time.hour for p in bracket]
    [2, 4, 6]
    """

    def __init__(self, base_path: Optional[str] = None, loader: Optional[DayLoader] = None,
                 capacity: int = NAV_CACHE_CAPACITY, cache: Optional[DayFileCache] = None):
        if cache is None:
            if loader is None:
                if base_path is None:
                    raise ValueError("One of base_path, loader or cache is required")
                from ..io.rinex import RinexDayLoader
                loader = RinexDayLoader(base_path)
            cache = DayFileCache(loader, capacity)
        self.cache = cache

    def find_nearest_points(self, sat: Union[SatelliteId, str], time) -> Optional[Bracket]:
        """Bracket of ``sat`` around ``time``.

        Parameters
        ----------
        sat : SatelliteId or str
            Satellite, e.g. ``"G01"``
        time : datetime, float or gtime_t
            Query instant (GPST)

        Returns
        -------
        Bracket or None
            Three chronological points, or None when the day, the satellite
            or a required neighbour is missing
        """
        sat = parse_satellite(sat)
        time = to_instant(time)
        year, doy = year_doy(time)

        day_file = self.cache.resolve(year, doy).day_file
        if day_file is None:
            logger.debug(f"{sat} @ {time}: no navigation data for {year}-{doy:03d}")
            return None

        points = day_file.points(sat)
        if not points:
            logger.debug(f"{sat} @ {time}: satellite absent on {year}-{doy:03d}")
            return None

        index = nearest_index(points, time)
        anchor = points[index]
        position = classify_anchor(index, len(points))

        if position is BracketPosition.MIDDLE:
            selected = points[index - 1:index + 2]
        elif position is BracketPosition.FIRST:
            prev_point = self._previous_day_last(sat, year, doy, anchor)
            if prev_point is None:
                return None
            selected = (prev_point, anchor, points[index + 1])
        elif position is BracketPosition.LAST:
            next_point = self._next_day_first(sat, year, doy, anchor)
            if next_point is None:
                return None
            selected = (points[index - 1], anchor, next_point)
        else:
            next_point = self._next_day_first(sat, year, doy, anchor)
            if next_point is None:
                return None
            prev_point = self._previous_day_last(sat, year, doy, anchor)
            if prev_point is None:
                return None
            selected = (prev_point, anchor, next_point)

        logger.trace(f"{sat} @ {time}: {position.value} bracket "
                     f"{[p.time.isoformat() for p in selected]}")
        return Bracket(sat, time, tuple(selected), position)

    def _previous_day_last(self, sat: SatelliteId, year: int, doy: int,
                           anchor: NavPoint) -> Optional[NavPoint]:
        prev_day = shift_day(year, doy, -1)
        day_file = self.cache.resolve(*prev_day).day_file
        point = day_file.last(sat) if day_file is not None else None
        return self._neighbour(sat, prev_day, point, anchor, before=True)

    def _next_day_first(self, sat: SatelliteId, year: int, doy: int,
                        anchor: NavPoint) -> Optional[NavPoint]:
        next_day = shift_day(year, doy, 1)
        day_file = self.cache.resolve(*next_day).day_file
        point = day_file.first(sat) if day_file is not None else None
        return self._neighbour(sat, next_day, point, anchor, before=False)

    @staticmethod
    def _neighbour(sat: SatelliteId, day: Tuple[int, int], point: Optional[NavPoint],
                   anchor: NavPoint, before: bool) -> Optional[NavPoint]:
        if point is None:
            logger.debug(f"{sat}: no neighbour on {day[0]}-{day[1]:03d}")
            return None
        if type(point.record) is not type(anchor.record):
            logger.warning(f"{sat}: record class changes across {day[0]}-{day[1]:03d}")
            return None
        # Daily files overlap a little; the neighbour must stay on its side
        if (before and point.time >= anchor.time) or (not before and point.time <= anchor.time):
            logger.debug(f"{sat}: neighbour on {day[0]}-{day[1]:03d} is not "
                         f"{'before' if before else 'after'} {anchor.time}")
            return None
        return point
