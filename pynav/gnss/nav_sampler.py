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

"""Interpolated broadcast ephemerides for arbitrary satellites and instants"""

import logging
from typing import Iterable, Optional, Union

import numpy as np
import pandas as pd

from ..config import NavConfig
from ..core.constants import MAX_NAV_FIELDS, NAV_CACHE_CAPACITY
from ..core.data_structures import EphemerisRecord
from ..core.satellite import SatelliteId, parse_satellite, sys2char
from ..core.time import to_instant
from ..logger import setup_logger_from_config
from .day_cache import DayFileCache
from .interpolation import interpolate
from .nearest_points import NearestPointsFinder

logger = logging.getLogger(__name__)

VECTOR_COLUMNS = [f"f{i:02d}" for i in range(MAX_NAV_FIELDS)]


class NavSampler:
    """Sample interpolated ephemeris records from a navigation file tree.

    Chains :class:`NearestPointsFinder` and :func:`interpolate`. A query
    that cannot be bracketed yields None; it is never an error.

    Parameters
    ----------
    finder : NearestPointsFinder
        Bracket source
    method : str
        Field interpolation method

    Examples
    --------
    >>> sampler = NavSampler.from_path('/data/nav')
    >>> record = sampler.sample('G01', datetime(2020, 1, 1, 4, 30))
    >>> vec = sampler.sample_vector('C01', datetime(2020, 1, 1, 23))
    """

    def __init__(self, finder: NearestPointsFinder, method: str = 'neville'):
        self.finder = finder
        self.method = method

    @classmethod
    def from_path(cls, nav_path: str, capacity: int = NAV_CACHE_CAPACITY,
                  method: str = 'neville') -> 'NavSampler':
        return cls(NearestPointsFinder(nav_path, capacity=capacity), method)

    @classmethod
    def from_config(cls, config: Union[NavConfig, dict], setup_logging: bool = True) -> 'NavSampler':
        """Build the sampler (and optionally the loggers) from a configuration"""
        if isinstance(config, dict):
            config = NavConfig.from_dict(config)
        else:
            config.validate()
        if setup_logging:
            setup_logger_from_config(config.logging_dict())
        finder = NearestPointsFinder(config.nav_path, capacity=config.cache_capacity)
        logger.info(f"Navigation sampler on {config.nav_path} "
                    f"(cache {config.cache_capacity} days, {config.method})")
        return cls(finder, config.method)

    @property
    def cache(self) -> DayFileCache:
        return self.finder.cache

    def sample(self, sat: Union[SatelliteId, str], time) -> Optional[EphemerisRecord]:
        """
        Interpolated ephemeris of a satellite at an instant

        Parameters
        ----------
        sat : SatelliteId or str
            Satellite, e.g. ``"E11"``
        time : datetime, float or gtime_t
            Query instant (GPST)

        Returns
        -------
        EphemerisRecord or None
            None when no bracket can be formed
        """
        bracket = self.finder.find_nearest_points(sat, time)
        if bracket is None:
            return None
        return interpolate(bracket, self.method)

    def sample_vector(self, sat: Union[SatelliteId, str], time) -> Optional[np.ndarray]:
        """Interpolated record flattened to MAX_NAV_FIELDS values (zero padded)"""
        record = self.sample(sat, time)
        return record.to_vector() if record is not None else None

    def sample_frame(self, sats: Iterable[Union[SatelliteId, str]],
                     times: Iterable) -> pd.DataFrame:
        """
        Sample every (time, satellite) pair into a DataFrame

        Parameters
        ----------
        sats : iterable
            Satellites to sample
        times : iterable
            Query instants

        Returns
        -------
        pd.DataFrame
            Columns ``time, sat, system, position, f00 .. f18``; one row per
            pair that could be bracketed
        """
        sats = [parse_satellite(s) for s in sats]
        rows = []
        skipped = 0

        for t in times:
            t = to_instant(t)
            for sat in sats:
                bracket = self.finder.find_nearest_points(sat, t)
                if bracket is None:
                    skipped += 1
                    continue
                record = interpolate(bracket, self.method)
                row = {
                    'time': t,
                    'sat': str(sat),
                    'system': sys2char(sat.system),
                    'position': bracket.position.value,
                }
                row.update(zip(VECTOR_COLUMNS, record.to_vector()))
                rows.append(row)

        if skipped:
            logger.debug(f"{skipped} (time, satellite) pairs had no bracket")
        return pd.DataFrame(rows, columns=['time', 'sat', 'system', 'position'] + VECTOR_COLUMNS)
