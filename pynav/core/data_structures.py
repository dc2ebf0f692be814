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

"""Core data structures for broadcast ephemeris sampling"""

import logging
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import ClassVar, Dict, Iterable, Iterator, Mapping, NamedTuple, Optional, Tuple

import numpy as np

from .constants import (MAX_NAV_FIELDS, SYS_BDS, SYS_GAL, SYS_GLO, SYS_GPS, SYS_IRN,
                        SYS_NONE, SYS_QZS, SYS_SBS)
from .satellite import SatelliteId, sys2char

__all__ = [
    'EphemerisRecord', 'GPSEphemeris', 'QZSSEphemeris', 'GalileoEphemeris',
    'BeiDouEphemeris', 'IRNSSEphemeris', 'GlonassEphemeris', 'SBASEphemeris',
    'RECORD_CLASSES', 'record_class_for', 'NavPoint', 'BracketPosition',
    'Bracket', 'DayFile',
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EphemerisRecord:
    """Broadcast ephemeris of one satellite at one reference epoch.

    This is the base of a closed family of seven record classes, one per
    satellite system. Every case carries the clock polynomial terms plus a
    fixed, system specific list of scalar orbit parameters. All fields are
    floats; fields missing from the source file are 0.0.

    Attributes
    ----------
    clock_bias : float
        SV clock bias (s)
    clock_drift : float
        SV clock drift (s/s)

    Notes
    -----
    Records of different classes are never combined. ``NON_INTERPOLATED``
    lists status-like fields that the interpolator does not fit.
    """
    SYSTEM: ClassVar[int] = SYS_NONE
    NON_INTERPOLATED: ClassVar[Tuple[str, ...]] = ()

    clock_bias: float = 0.0
    clock_drift: float = 0.0

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        """Ordered scalar field names of this record class"""
        return tuple(f.name for f in fields(cls))

    @property
    def system(self) -> int:
        return self.SYSTEM

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    def to_vector(self, width: int = MAX_NAV_FIELDS) -> np.ndarray:
        """Flatten the record in field order, zero padded to ``width``.

        Parameters
        ----------
        width : int
            Output length; must be at least the number of fields

        Returns
        -------
        np.ndarray
            Float vector of shape (width,)
        """
        names = self.field_names()
        if width < len(names):
            raise ValueError(
                f"{type(self).__name__} has {len(names)} fields, cannot fit in {width}")
        vec = np.zeros(width)
        vec[:len(names)] = [getattr(self, name) for name in names]
        return vec

    @classmethod
    def from_vector(cls, values) -> 'EphemerisRecord':
        """Build a record from a flat vector (trailing padding is ignored)"""
        names = cls.field_names()
        values = np.asarray(values, dtype=float)
        if values.shape[0] < len(names):
            raise ValueError(
                f"{cls.__name__} needs {len(names)} values, got {values.shape[0]}")
        return cls(**{name: float(v) for name, v in zip(names, values)})


@dataclass(frozen=True)
class GPSEphemeris(EphemerisRecord):
    """GPS LNAV Keplerian parameters"""
    SYSTEM: ClassVar[int] = SYS_GPS

    iode: float = 0.0        # issue of data, ephemeris
    crs: float = 0.0
    delta_n: float = 0.0
    m0: float = 0.0
    cuc: float = 0.0
    e: float = 0.0
    cus: float = 0.0
    sqrt_a: float = 0.0
    toe: float = 0.0         # time of ephemeris (s of week)
    cic: float = 0.0
    omega_0: float = 0.0
    cis: float = 0.0
    i0: float = 0.0
    crc: float = 0.0
    omega: float = 0.0
    omega_dot: float = 0.0


@dataclass(frozen=True)
class QZSSEphemeris(EphemerisRecord):
    """QZSS parameters (GPS layout)"""
    SYSTEM: ClassVar[int] = SYS_QZS

    iode: float = 0.0
    crs: float = 0.0
    delta_n: float = 0.0
    m0: float = 0.0
    cuc: float = 0.0
    e: float = 0.0
    cus: float = 0.0
    sqrt_a: float = 0.0
    toe: float = 0.0
    cic: float = 0.0
    omega_0: float = 0.0
    cis: float = 0.0
    i0: float = 0.0
    crc: float = 0.0
    omega: float = 0.0
    omega_dot: float = 0.0


@dataclass(frozen=True)
class GalileoEphemeris(EphemerisRecord):
    """Galileo I/NAV or F/NAV parameters"""
    SYSTEM: ClassVar[int] = SYS_GAL

    iodnav: float = 0.0      # issue of data, navigation
    crs: float = 0.0
    delta_n: float = 0.0
    m0: float = 0.0
    cuc: float = 0.0
    e: float = 0.0
    cus: float = 0.0
    sqrt_a: float = 0.0
    toe: float = 0.0
    cic: float = 0.0
    omega_0: float = 0.0
    cis: float = 0.0
    i0: float = 0.0
    crc: float = 0.0
    omega: float = 0.0
    omega_dot: float = 0.0
    i_dot: float = 0.0


@dataclass(frozen=True)
class BeiDouEphemeris(EphemerisRecord):
    """BeiDou D1/D2 parameters"""
    SYSTEM: ClassVar[int] = SYS_BDS

    aode: float = 0.0        # age of data, ephemeris
    crs: float = 0.0
    delta_n: float = 0.0
    m0: float = 0.0
    cuc: float = 0.0
    e: float = 0.0
    cus: float = 0.0
    sqrt_a: float = 0.0
    toe: float = 0.0
    cic: float = 0.0
    omega_0: float = 0.0
    cis: float = 0.0
    i0: float = 0.0
    crc: float = 0.0
    omega: float = 0.0
    omega_dot: float = 0.0


@dataclass(frozen=True)
class IRNSSEphemeris(EphemerisRecord):
    """IRNSS/NavIC parameters"""
    SYSTEM: ClassVar[int] = SYS_IRN

    iodec: float = 0.0       # issue of data, ephemeris and clock
    crs: float = 0.0
    delta_n: float = 0.0
    m0: float = 0.0
    cuc: float = 0.0
    e: float = 0.0
    cus: float = 0.0
    sqrt_a: float = 0.0
    toe: float = 0.0
    cic: float = 0.0
    omega_0: float = 0.0
    cis: float = 0.0
    i0: float = 0.0
    crc: float = 0.0
    omega: float = 0.0
    omega_dot: float = 0.0
    i_dot: float = 0.0


@dataclass(frozen=True)
class GlonassEphemeris(EphemerisRecord):
    """GLONASS state-vector parameters (PZ-90; km, km/s, km/s^2)"""
    SYSTEM: ClassVar[int] = SYS_GLO
    NON_INTERPOLATED: ClassVar[Tuple[str, ...]] = ('health',)

    mrt: float = 0.0         # message frame time (s of UTC week)
    x: float = 0.0
    vel_x: float = 0.0
    accel_x: float = 0.0
    health: float = 0.0
    y: float = 0.0
    vel_y: float = 0.0
    accel_y: float = 0.0
    z: float = 0.0
    vel_z: float = 0.0
    accel_z: float = 0.0
    age: float = 0.0         # age of operation information (days)


@dataclass(frozen=True)
class SBASEphemeris(EphemerisRecord):
    """SBAS GEO state-vector parameters (km, km/s, km/s^2)"""
    SYSTEM: ClassVar[int] = SYS_SBS
    NON_INTERPOLATED: ClassVar[Tuple[str, ...]] = ('health',)

    tom: float = 0.0         # transmission time of message (s of GPS week)
    x: float = 0.0
    vel_x: float = 0.0
    accel_x: float = 0.0
    health: float = 0.0
    y: float = 0.0
    vel_y: float = 0.0
    accel_y: float = 0.0
    ura: float = 0.0
    z: float = 0.0
    vel_z: float = 0.0
    accel_z: float = 0.0
    iodn: float = 0.0        # issue of data, navigation


RECORD_CLASSES = {
    SYS_GPS: GPSEphemeris,
    SYS_GLO: GlonassEphemeris,
    SYS_GAL: GalileoEphemeris,
    SYS_BDS: BeiDouEphemeris,
    SYS_QZS: QZSSEphemeris,
    SYS_IRN: IRNSSEphemeris,
    SYS_SBS: SBASEphemeris,
}


def record_class_for(system: int) -> type:
    """Record class of a satellite system.

    Raises
    ------
    ValueError
        If the system has no ephemeris record class
    """
    try:
        return RECORD_CLASSES[system]
    except KeyError:
        raise ValueError(f"No ephemeris record class for system {system!r}") from None


class NavPoint(NamedTuple):
    """A timestamped ephemeris record"""
    time: datetime
    record: EphemerisRecord


class BracketPosition(Enum):
    """Where the anchor sits in its satellite's day sequence"""
    MIDDLE = "middle"
    FIRST = "first"
    LAST = "last"
    ONLY = "only"


@dataclass
class Bracket:
    """Chronologically ordered ephemeris points surrounding a query instant.

    Attributes
    ----------
    satellite : SatelliteId
        Satellite the points belong to
    time : datetime
        Query instant
    points : tuple of NavPoint
        Two or three points, strictly increasing in time
    position : BracketPosition, optional
        Classification of the anchor that produced the bracket
    """
    satellite: SatelliteId
    time: datetime
    points: Tuple[NavPoint, ...] = field(default_factory=tuple)
    position: Optional[BracketPosition] = None

    def __post_init__(self):
        self.points = tuple(self.points)

    def __len__(self):
        return len(self.points)

    def __iter__(self) -> Iterator[NavPoint]:
        return iter(self.points)

    def __getitem__(self, index) -> NavPoint:
        return self.points[index]

    @property
    def times(self) -> Tuple[datetime, ...]:
        return tuple(p.time for p in self.points)

    @property
    def anchor(self) -> NavPoint:
        """Point closest to the query instant (earlier point on ties)"""
        if not self.points:
            raise ValueError("Empty bracket has no anchor")
        return min(self.points, key=lambda p: abs((p.time - self.time).total_seconds()))


def _normalize_points(sat: SatelliteId, points: Iterable[NavPoint]) -> Tuple[NavPoint, ...]:
    # stable sort keeps the first of several records sharing an instant
    ordered = sorted((NavPoint(*p) for p in points), key=lambda p: p.time)
    unique = []
    for point in ordered:
        if unique and point.time == unique[-1].time:
            logger.debug(f"Dropping duplicate record for {sat} at {point.time}")
            continue
        unique.append(point)
    return tuple(unique)


class DayFile:
    """Parsed broadcast ephemerides of one (year, day-of-year).

    Per satellite, points are kept strictly increasing in time: the
    constructor sorts them and drops duplicate instants, keeping the first
    occurrence. Instances are read-only after construction.

    Parameters
    ----------
    year : int
        Calendar year
    doy : int
        Day of year (1-366)
    points : mapping
        SatelliteId -> iterable of NavPoint (or (time, record) pairs)
    """

    def __init__(self, year: int, doy: int,
                 points: Mapping[SatelliteId, Iterable[NavPoint]]):
        self.year = int(year)
        self.doy = int(doy)
        table = {}
        for sat, sat_points in points.items():
            normalized = _normalize_points(sat, sat_points)
            if normalized:
                table[sat] = normalized
        self._points: Dict[SatelliteId, Tuple[NavPoint, ...]] = table

    def __len__(self):
        return len(self._points)

    def __contains__(self, sat) -> bool:
        return sat in self._points

    def __repr__(self):
        return f"DayFile({self.year}, {self.doy:03d}, satellites={len(self._points)})"

    @property
    def key(self) -> Tuple[int, int]:
        return self.year, self.doy

    def satellites(self) -> Tuple[SatelliteId, ...]:
        return tuple(sorted(self._points))

    def points(self, sat: SatelliteId) -> Tuple[NavPoint, ...]:
        """Chronological points of a satellite (empty tuple if absent)"""
        return self._points.get(sat, ())

    def first(self, sat: SatelliteId) -> Optional[NavPoint]:
        pts = self._points.get(sat)
        return pts[0] if pts else None

    def last(self, sat: SatelliteId) -> Optional[NavPoint]:
        pts = self._points.get(sat)
        return pts[-1] if pts else None

    def systems(self) -> Dict[str, int]:
        """Number of satellites per system character, for logging"""
        counts: Dict[str, int] = {}
        for sat in self._points:
            key = sys2char(sat.system)
            counts[key] = counts.get(key, 0) + 1
        return counts
