"""Daily broadcast navigation files backed by cssrlib.rinex."""

from __future__ import annotations

import logging
import math
import os
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from cssrlib.gnss import Nav, gpst2utc, sat2id, time2gpst
from cssrlib.rinex import rnxdec

from ..core.data_structures import (BeiDouEphemeris, DayFile, GalileoEphemeris,
                                    GlonassEphemeris, GPSEphemeris, IRNSSEphemeris,
                                    NavPoint, QZSSEphemeris, SBASEphemeris)
from ..core.satellite import SatelliteId, parse_satellite
from ..core.constants import SYS_BDS, SYS_GAL, SYS_GLO, SYS_GPS, SYS_IRN, SYS_QZS, SYS_SBS
from ..core.time import to_instant

logger = logging.getLogger(__name__)

METRES_PER_KM = 1e3


def read_nav(filename: str) -> Nav:
    """Decode a RINEX navigation file into a cssrlib Nav object."""

    if not os.path.isfile(filename):
        raise FileNotFoundError(f"Navigation file not found: {filename}")
    nav = Nav()
    decoder = rnxdec()
    decoder.decode_nav(filename, nav, append=False)
    return nav


def nav_file_path(base_path, year: int, doy: int) -> Path:
    """Path of the merged broadcast file of a day: ``<base>/<year>/brdmDDD0.YYp``"""
    return Path(base_path) / f"{year}" / f"brdm{doy:03d}0.{year % 100:02d}p"


def scan_nav_tree(base_path) -> Dict[Tuple[int, int], Path]:
    """Index the navigation files available under ``base_path``.

    The tree is ``<base>/<year>/<name>`` where characters 4-6 of the file
    name hold the day of year (``brdm0010.20p`` -> day 1). Entries that do
    not follow the layout are ignored.

    Returns
    -------
    dict
        (year, doy) -> file path
    """
    index: Dict[Tuple[int, int], Path] = {}
    root = Path(base_path)
    if not root.is_dir():
        logger.warning(f"Navigation directory not found: {root}")
        return index

    for year_dir in sorted(root.iterdir()):
        if not year_dir.is_dir():
            continue
        try:
            year = int(year_dir.name)
        except ValueError:
            continue
        for nav_file in sorted(year_dir.iterdir()):
            if not nav_file.is_file():
                continue
            try:
                doy = int(nav_file.name[4:7])
            except ValueError:
                continue
            index.setdefault((year, doy), nav_file)

    logger.debug(f"Indexed {len(index)} navigation days under {root}")
    return index


def _value(obj, name: str) -> float:
    value = getattr(obj, name, 0.0)
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _epoch(obj, *names):
    for name in names:
        t = getattr(obj, name, None)
        if t is not None:
            return to_instant(t)
    raise ValueError(f"Ephemeris {obj!r} carries no reference epoch")


def _keplerian_fields(eph) -> dict:
    sqrt_a = math.sqrt(_value(eph, 'A')) if _value(eph, 'A') > 0 else 0.0
    return {
        'clock_bias': _value(eph, 'af0'),
        'clock_drift': _value(eph, 'af1'),
        'crs': _value(eph, 'crs'),
        'delta_n': _value(eph, 'deln'),
        'm0': _value(eph, 'M0'),
        'cuc': _value(eph, 'cuc'),
        'e': _value(eph, 'e'),
        'cus': _value(eph, 'cus'),
        'sqrt_a': sqrt_a,
        'toe': _value(eph, 'toes'),
        'cic': _value(eph, 'cic'),
        'omega_0': _value(eph, 'OMG0'),
        'cis': _value(eph, 'cis'),
        'i0': _value(eph, 'i0'),
        'crc': _value(eph, 'crc'),
        'omega': _value(eph, 'omg'),
        'omega_dot': _value(eph, 'OMGd'),
    }


def _eph_record(sat: SatelliteId, eph):
    """Convert a cssrlib Eph (Keplerian systems) to a record"""
    base = _keplerian_fields(eph)
    iode = _value(eph, 'iode')
    if sat.system == SYS_GPS:
        return GPSEphemeris(iode=iode, **base)
    if sat.system == SYS_QZS:
        return QZSSEphemeris(iode=iode, **base)
    if sat.system == SYS_GAL:
        return GalileoEphemeris(iodnav=iode, i_dot=_value(eph, 'idot'), **base)
    if sat.system == SYS_BDS:
        return BeiDouEphemeris(aode=iode, **base)
    if sat.system == SYS_IRN:
        return IRNSSEphemeris(iodec=iode, i_dot=_value(eph, 'idot'), **base)
    return None


def _vector(obj, name: str) -> List[float]:
    values = getattr(obj, name, None)
    if values is None:
        return [0.0, 0.0, 0.0]
    # cssrlib scales the file's km, km/s and km/s^2 to metres
    return [float(v) / METRES_PER_KM for v in values][:3]


def _state_vector_fields(eph) -> dict:
    """Position, velocity and acceleration in the file's units (km, km/s, km/s^2)"""
    pos, vel, acc = _vector(eph, 'pos'), _vector(eph, 'vel'), _vector(eph, 'acc')
    return {
        'x': pos[0], 'vel_x': vel[0], 'accel_x': acc[0],
        'y': pos[1], 'vel_y': vel[1], 'accel_y': acc[1],
        'z': pos[2], 'vel_z': vel[2], 'accel_z': acc[2],
        'health': _value(eph, 'svh'),
    }


def _geph_record(eph) -> GlonassEphemeris:
    """Convert a cssrlib Geph to a record.

    cssrlib stores tau_n with the ICD sign; the file (and the record)
    carries -tau_n as the clock bias. ``tof`` is shifted to GPST on decoding,
    so ``mrt`` undoes the shift to get back the file's message frame time
    in seconds of the UTC week.
    """
    tof = getattr(eph, 'tof', None)
    mrt = time2gpst(gpst2utc(tof))[1] if tof is not None else 0.0
    return GlonassEphemeris(
        clock_bias=-_value(eph, 'taun'),
        clock_drift=_value(eph, 'gamn'),
        mrt=float(mrt),
        age=_value(eph, 'age'),
        **_state_vector_fields(eph),
    )


def _seph_record(eph) -> SBASEphemeris:
    """Convert a cssrlib Seph to a record (``tom`` is the transmission time of week)"""
    return SBASEphemeris(
        clock_bias=_value(eph, 'af0'),
        clock_drift=_value(eph, 'af1'),
        tom=_value(eph, 'tot'),
        ura=_value(eph, 'sva'),
        iodn=_value(eph, 'iodn'),
        **_state_vector_fields(eph),
    )


def _satellite(sat_no) -> Optional[SatelliteId]:
    try:
        return parse_satellite(sat2id(sat_no))
    except (ValueError, TypeError):
        return None


def nav_to_day_file(nav: Nav, year: int, doy: int) -> DayFile:
    """Group the ephemerides of a cssrlib Nav per satellite into a DayFile.

    Parameters
    ----------
    nav : Nav
        Decoded navigation data
    year, doy : int
        Day the file belongs to

    Returns
    -------
    DayFile
        Satellites of systems without a record class are skipped
    """
    table: Dict[SatelliteId, List[NavPoint]] = {}
    skipped = 0

    for eph in getattr(nav, 'eph', None) or []:
        sat = _satellite(eph.sat)
        record = _eph_record(sat, eph) if sat is not None else None
        if record is None:
            skipped += 1
            continue
        table.setdefault(sat, []).append(NavPoint(_epoch(eph, 'toc', 'toe'), record))

    for eph in getattr(nav, 'geph', None) or []:
        sat = _satellite(eph.sat)
        if sat is None or sat.system != SYS_GLO:
            skipped += 1
            continue
        table.setdefault(sat, []).append(NavPoint(_epoch(eph, 'toe'), _geph_record(eph)))

    for eph in getattr(nav, 'seph', None) or []:
        sat = _satellite(eph.sat)
        if sat is None or sat.system != SYS_SBS:
            skipped += 1
            continue
        table.setdefault(sat, []).append(NavPoint(_epoch(eph, 'toc'), _seph_record(eph)))

    if skipped:
        logger.debug(f"{year}-{doy:03d}: skipped {skipped} ephemerides without a record class")
    return DayFile(year, doy, table)


class RinexDayLoader:
    """Load the DayFile of a (year, doy) from a navigation file tree.

    Days missing from the directory index return None without touching the
    disk. A file that decodes to no ephemerides is treated as absent.
    Decoding errors propagate to the caller.
    """

    def __init__(self, base_path: str):
        self.base_path = Path(base_path)
        self.index = scan_nav_tree(self.base_path)

    def refresh(self):
        """Rescan the directory tree"""
        self.index = scan_nav_tree(self.base_path)

    def available_days(self) -> List[Tuple[int, int]]:
        return sorted(self.index)

    def path_for(self, year: int, doy: int) -> Optional[Path]:
        if (year, doy) not in self.index:
            return None
        expected = nav_file_path(self.base_path, year, doy)
        return expected if expected.is_file() else self.index[(year, doy)]

    def __call__(self, year: int, doy: int) -> Optional[DayFile]:
        path = self.path_for(year, doy)
        if path is None:
            logger.debug(f"No navigation file for {year}-{doy:03d}")
            return None

        logger.info(f"Reading navigation file: {path}")
        day_file = nav_to_day_file(read_nav(str(path)), year, doy)
        if len(day_file) == 0:
            logger.warning(f"No usable ephemerides in {path}")
            return None
        logger.debug(f"Loaded {path.name}: {day_file.systems()}")
        return day_file


class RinexNavReader:
    """Reader returning the DayFile of a single navigation file."""

    def __init__(self, filename: str, year: int, doy: int):
        self.filename = Path(filename)
        self.year = year
        self.doy = doy

    def read(self) -> DayFile:
        return nav_to_day_file(read_nav(str(self.filename)), self.year, self.doy)
