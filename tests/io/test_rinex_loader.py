"""Tests for the cssrlib-backed navigation day loader."""

import os
import tempfile
import unittest
from datetime import datetime, timedelta
from pathlib import Path
from types import SimpleNamespace
from unittest import mock

from cssrlib.gnss import gtime_t

from pynav.core.constants import SYS_GAL, SYS_GLO, SYS_GPS, SYS_SBS
from pynav.core.data_structures import (GalileoEphemeris, GlonassEphemeris, GPSEphemeris,
                                        SBASEphemeris)
from pynav.core.satellite import SatelliteId
from pynav.gnss.nav_sampler import NavSampler
from pynav.gnss.nearest_points import NearestPointsFinder
from pynav.io.rinex import (RinexDayLoader, RinexNavReader, nav_file_path, nav_to_day_file,
                            read_nav, scan_nav_tree)

# cssrlib satellite numbers used by the fake Nav objects
SAT_NAMES = {1: "G01", 2: "G02", 40: "R05", 70: "E11", 120: "S34", 150: "C01"}

UNIX_2020_001 = 1577836800
# 2020-01-01 00:00 is GPS week 2086, second 259200
TOW_2020_001 = 259200.0


def gtime(hours):
    """gtime_t at 2020-01-01 + hours"""
    return gtime_t(UNIX_2020_001 + int(round(hours * 3600)), 0.0)


def keplerian(sat, hours, **kwargs):
    values = dict(sat=sat, toc=gtime(hours), toe=gtime(hours), af0=1e-4, af1=1e-12,
                  A=26560e3 ** 2, e=0.01, iode=10, toes=hours * 3600.0, idot=1e-10)
    values.update(kwargs)
    return SimpleNamespace(**values)


def make_nav(eph=(), geph=(), seph=()):
    return SimpleNamespace(eph=list(eph), geph=list(geph), seph=list(seph))


class TestNavTree(unittest.TestCase):
    """Test file naming and directory indexing"""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def _touch(self, *parts):
        path = self.root.joinpath(*parts)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("")
        return path

    def test_nav_file_path(self):
        self.assertEqual(nav_file_path("/data", 2020, 1), Path("/data/2020/brdm0010.20p"))
        self.assertEqual(nav_file_path("/data", 2009, 123), Path("/data/2009/brdm1230.09p"))

    def test_scan(self):
        self._touch("2020", "brdm0010.20p")
        self._touch("2020", "brdm3660.20p")
        self._touch("2021", "brdm0010.21p")
        self._touch("2021", "README")
        self._touch("misc", "brdm0050.21p")
        self._touch("notes.txt")

        index = scan_nav_tree(self.root)
        self.assertEqual(sorted(index), [(2020, 1), (2020, 366), (2021, 1)])
        self.assertEqual(index[(2020, 366)].name, "brdm3660.20p")

    def test_scan_missing_directory(self):
        with self.assertLogs('pynav.io.rinex', level='WARNING'):
            index = scan_nav_tree(self.root / "missing")
        self.assertEqual(index, {})

    def test_read_nav_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            read_nav(os.path.join(self.tmp.name, "brdm0010.20p"))


@mock.patch('pynav.io.rinex.sat2id', side_effect=SAT_NAMES.get)
class TestNavToDayFile(unittest.TestCase):
    """Test conversion of decoded ephemerides to records"""

    def test_keplerian_records(self, _sat2id):
        nav = make_nav(eph=[
            keplerian(1, 4.0),
            keplerian(1, 2.0, af0=2e-4, af1=3e-12),
            keplerian(70, 1.0, iode=77),
        ])
        day = nav_to_day_file(nav, 2020, 1)

        g01 = SatelliteId(SYS_GPS, 1)
        points = day.points(g01)
        self.assertEqual([p.time for p in points], [datetime(2020, 1, 1, 2), datetime(2020, 1, 1, 4)])
        record = points[0].record
        self.assertIsInstance(record, GPSEphemeris)
        self.assertEqual(record.clock_bias, 2e-4)
        self.assertEqual(record.clock_drift, 3e-12)
        self.assertAlmostEqual(record.sqrt_a, 26560e3)
        self.assertEqual(record.toe, 7200.0)
        self.assertEqual(points[1].record.clock_bias, 1e-4)

        gal = day.points(SatelliteId(SYS_GAL, 11))[0].record
        self.assertIsInstance(gal, GalileoEphemeris)
        self.assertEqual(gal.iodnav, 77.0)
        self.assertEqual(gal.i_dot, 1e-10)

    def test_glonass_record(self, _sat2id):
        # decoded values: tau_n with the ICD sign, state vector in metres,
        # epochs already shifted to GPST (18 s ahead of UTC in 2020)
        geph = SimpleNamespace(sat=40, toe=gtime(0.25 + 18 / 3600), tof=gtime(0.2 + 18 / 3600),
                               taun=-5e-5, gamn=1e-12,
                               pos=[1.5e7, 2e7, 3e7], vel=[1000.0, 2000.0, 3000.0],
                               acc=[0.0, 0.0, 1e-3], svh=0, age=2)
        day = nav_to_day_file(make_nav(geph=[geph]), 2020, 1)

        glo = day.first(SatelliteId(SYS_GLO, 5))
        self.assertEqual(glo.time, datetime(2020, 1, 1, 0, 15, 18))
        self.assertIsInstance(glo.record, GlonassEphemeris)
        self.assertEqual(glo.record.clock_bias, 5e-5)
        self.assertEqual(glo.record.clock_drift, 1e-12)
        self.assertEqual((glo.record.x, glo.record.y, glo.record.z), (15000.0, 20000.0, 30000.0))
        self.assertEqual(glo.record.vel_y, 2.0)
        self.assertAlmostEqual(glo.record.accel_z, 1e-6)
        self.assertEqual(glo.record.age, 2.0)
        # 00:12 UTC on a Wednesday
        self.assertEqual(glo.record.mrt, TOW_2020_001 + 720.0)

    def test_sbas_record(self, _sat2id):
        seph = SimpleNamespace(sat=120, toc=gtime(0.5), af0=1e-8, af1=2e-12, tot=TOW_2020_001 + 1740.0,
                               pos=[4e7, 5e5, -2e3], vel=[1.0, 0.0, 0.0], acc=[0.0, 0.0, 0.0],
                               svh=1, sva=2.0, iodn=8)
        day = nav_to_day_file(make_nav(seph=[seph]), 2020, 1)

        sbas = day.first(SatelliteId(SYS_SBS, 34))
        self.assertEqual(sbas.time, datetime(2020, 1, 1, 0, 30))
        self.assertIsInstance(sbas.record, SBASEphemeris)
        self.assertEqual(sbas.record.clock_bias, 1e-8)
        self.assertEqual(sbas.record.clock_drift, 2e-12)
        self.assertEqual(sbas.record.tom, TOW_2020_001 + 1740.0)
        self.assertEqual((sbas.record.x, sbas.record.y, sbas.record.z), (40000.0, 500.0, -2.0))
        self.assertEqual(sbas.record.vel_x, 1e-3)
        self.assertEqual(sbas.record.health, 1.0)
        self.assertEqual(sbas.record.ura, 2.0)
        self.assertEqual(sbas.record.iodn, 8.0)

    def test_unknown_satellites_skipped(self, _sat2id):
        nav = make_nav(eph=[keplerian(999, 1.0), keplerian(2, 1.0)])
        day = nav_to_day_file(nav, 2020, 1)
        self.assertEqual(day.satellites(), (SatelliteId(SYS_GPS, 2),))


@mock.patch('pynav.io.rinex.sat2id', side_effect=SAT_NAMES.get)
class TestRinexDayLoader(unittest.TestCase):
    """Test the directory backed loader"""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)
        (self.root / "2020").mkdir()
        (self.root / "2020" / "brdm0010.20p").write_text("")
        (self.root / "2020" / "brdc0020.20n").write_text("")

    def tearDown(self):
        self.tmp.cleanup()

    def test_available_days(self, _sat2id):
        loader = RinexDayLoader(self.root)
        self.assertEqual(loader.available_days(), [(2020, 1), (2020, 2)])
        self.assertEqual(loader.path_for(2020, 1), self.root / "2020" / "brdm0010.20p")
        self.assertEqual(loader.path_for(2020, 2), self.root / "2020" / "brdc0020.20n")
        self.assertIsNone(loader.path_for(2020, 3))

    def test_load(self, _sat2id):
        loader = RinexDayLoader(self.root)
        nav = make_nav(eph=[keplerian(1, 2.0), keplerian(1, 4.0)])
        with mock.patch('pynav.io.rinex.read_nav', return_value=nav) as read:
            day = loader(2020, 1)
        read.assert_called_once_with(str(self.root / "2020" / "brdm0010.20p"))
        self.assertEqual(day.key, (2020, 1))
        self.assertEqual(len(day.points(SatelliteId(SYS_GPS, 1))), 2)

    def test_missing_day_not_read(self, _sat2id):
        loader = RinexDayLoader(self.root)
        with mock.patch('pynav.io.rinex.read_nav') as read:
            self.assertIsNone(loader(2020, 100))
        read.assert_not_called()

    def test_empty_file_is_absent(self, _sat2id):
        loader = RinexDayLoader(self.root)
        with mock.patch('pynav.io.rinex.read_nav', return_value=make_nav()):
            self.assertIsNone(loader(2020, 1))

    def test_refresh(self, _sat2id):
        loader = RinexDayLoader(self.root)
        (self.root / "2020" / "brdm0030.20p").write_text("")
        self.assertNotIn((2020, 3), loader.available_days())
        loader.refresh()
        self.assertIn((2020, 3), loader.available_days())

    def test_single_file_reader(self, _sat2id):
        nav = make_nav(eph=[keplerian(2, 1.0)])
        with mock.patch('pynav.io.rinex.read_nav', return_value=nav):
            day = RinexNavReader(self.root / "2020" / "brdm0010.20p", 2020, 1).read()
        self.assertIn(SatelliteId(SYS_GPS, 2), day)


def _fields(values):
    return "".join(f"{v:19.12E}" for v in values)


def _record(sat, epoch, first, rows):
    """One RINEX 3 navigation record: epoch line plus continuation lines"""
    lines = [f"{sat} {epoch:%Y %m %d %H %M %S}" + _fields(first)]
    lines.extend("    " + _fields(row) for row in rows)
    return lines


def _gps_record(hour, af0, iode, sqrt_a):
    toes = TOW_2020_001 + hour * 3600.0
    return _record("G01", datetime(2020, 1, 1, hour), [af0, -1e-11, 0.0], [
        [iode, 42.5, 4.5e-9, 1.25],
        [2.0e-6, 0.0125, 8.0e-6, sqrt_a],
        [toes, 1.0e-7, -2.0, 5.0e-8],
        [0.96, 210.0, 0.75, -8.0e-9],
        [1.0e-10, 1.0, 2086.0, 0.0],
        [2.0, 0.0, -1.0e-8, iode],
        [toes - 30.0, 4.0],
    ])


def _glonass_record(epoch, tau, x, tk):
    return _record("R05", epoch, [tau, 0.0, tk], [
        [x, -2.5, 0.0, 0.0],
        [-9000.0, 0.5, 0.0, 1.0],
        [20000.0, 1.25, 0.0, 0.0],
    ])


def _sbas_record(hour, iodn, x):
    tot = TOW_2020_001 + hour * 3600.0 - 60.0
    return _record("S20", datetime(2020, 1, 1, hour), [2.5e-8, 0.0, tot], [
        [x, 0.0, 0.0, 0.0],
        [-34000.0, 0.0, 0.0, 4.0],
        [12.5, 0.0, 0.0, iodn],
    ])


class TestRinexFile(unittest.TestCase):
    """Test a RINEX 3.04 navigation file through the real decoder"""

    GPS_AF0 = (1.1e-4, 1.2e-4, 1.4e-4)

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)
        lines = [
            f"{'3.04':>9}{'':11}{'N: GNSS NAV DATA':<20}{'M: MIXED':<20}RINEX VERSION / TYPE",
            f"{'':60}END OF HEADER",
        ]
        for hour, af0, iode in zip((2, 4, 6), self.GPS_AF0, (11.0, 12.0, 13.0)):
            lines.extend(_gps_record(hour, af0, iode, 5153.5))
        # the frame time lags each epoch by 30 s
        for minute, tau, x in ((15, 1.0e-5, 11000.0), (45, 2.0e-5, 11500.0), (75, 3.0e-5, 12000.0)):
            epoch = datetime(2020, 1, 1) + timedelta(minutes=minute)
            lines.extend(_glonass_record(epoch, tau, x, TOW_2020_001 + minute * 60.0 - 30.0))
        for hour, iodn, x in ((1, 5.0, 40000.0), (2, 6.0, 40000.5), (3, 7.0, 40001.0)):
            lines.extend(_sbas_record(hour, iodn, x))

        path = nav_file_path(self.root, 2020, 1)
        path.parent.mkdir(parents=True)
        path.write_text("\n".join(lines) + "\n")
        self.day = RinexDayLoader(self.root)(2020, 1)
        self.sampler = NavSampler(NearestPointsFinder(self.root))

    def tearDown(self):
        self.tmp.cleanup()

    def test_satellites(self):
        self.assertEqual(set(self.day.satellites()), {
            SatelliteId(SYS_GPS, 1), SatelliteId(SYS_GLO, 5), SatelliteId(SYS_SBS, 20)})

    def test_gps_records(self):
        points = self.day.points(SatelliteId(SYS_GPS, 1))
        self.assertEqual([p.time for p in points],
                         [datetime(2020, 1, 1, h) for h in (2, 4, 6)])
        self.assertEqual([p.record.clock_bias for p in points], list(self.GPS_AF0))
        self.assertEqual([p.record.toe for p in points], [266400.0, 273600.0, 280800.0])
        record = points[1].record
        self.assertIsInstance(record, GPSEphemeris)
        self.assertEqual(record.clock_drift, -1e-11)
        self.assertEqual(record.iode, 12.0)
        self.assertAlmostEqual(record.sqrt_a, 5153.5)
        self.assertEqual(record.e, 0.0125)
        self.assertEqual(record.m0, 1.25)

    def test_gps_sample(self):
        record = self.sampler.sample('G01', datetime(2020, 1, 1, 4))
        self.assertIsNotNone(record)
        self.assertEqual(record.clock_bias, 1.2e-4)
        between = self.sampler.sample('G01', datetime(2020, 1, 1, 4, 30))
        self.assertTrue(1.2e-4 < between.clock_bias < 1.4e-4)

    def test_glonass_records(self):
        points = self.day.points(SatelliteId(SYS_GLO, 5))
        # UTC epochs in the file, GPST in the day file
        self.assertEqual([p.time for p in points], [
            datetime(2020, 1, 1, 0, 15, 18),
            datetime(2020, 1, 1, 0, 45, 18),
            datetime(2020, 1, 1, 1, 15, 18),
        ])
        record = points[1].record
        self.assertIsInstance(record, GlonassEphemeris)
        self.assertEqual(record.clock_bias, 2.0e-5)
        self.assertEqual(record.mrt, 261870.0)
        self.assertAlmostEqual(record.x, 11500.0)
        self.assertAlmostEqual(record.vel_x, -2.5)
        self.assertAlmostEqual(record.y, -9000.0)
        self.assertAlmostEqual(record.z, 20000.0)

    def test_glonass_sample(self):
        record = self.sampler.sample('R05', datetime(2020, 1, 1, 0, 45, 18))
        self.assertIsNotNone(record)
        self.assertAlmostEqual(record.x, 11500.0)
        self.assertEqual(record.mrt, 261870.0)
        self.assertEqual(record.health, 0.0)

    def test_sbas_records(self):
        points = self.day.points(SatelliteId(SYS_SBS, 20))
        self.assertEqual([p.time for p in points],
                         [datetime(2020, 1, 1, h) for h in (1, 2, 3)])
        self.assertEqual([p.record.iodn for p in points], [5.0, 6.0, 7.0])
        self.assertEqual([p.record.tom for p in points], [262740.0, 266340.0, 269940.0])
        record = points[0].record
        self.assertIsInstance(record, SBASEphemeris)
        self.assertEqual(record.clock_bias, 2.5e-8)
        self.assertEqual(record.ura, 4.0)
        self.assertAlmostEqual(record.x, 40000.0)
        self.assertAlmostEqual(record.y, -34000.0)
        self.assertAlmostEqual(record.z, 12.5)

    def test_sbas_sample(self):
        record = self.sampler.sample('S20', datetime(2020, 1, 1, 2))
        self.assertIsNotNone(record)
        self.assertEqual(record.iodn, 6.0)
        self.assertAlmostEqual(record.x, 40000.5)


if __name__ == '__main__':
    unittest.main()
