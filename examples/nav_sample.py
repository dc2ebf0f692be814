#!/usr/bin/env python3
"""
Broadcast Ephemeris Sampling Example using PyNav

This example demonstrates:
1. Pointing a sampler at a daily navigation file tree
2. Interpolating ephemerides of several satellites on a regular time grid
3. Watching the day cache while queries cross midnight
4. Exporting the samples as a feature table (CSV)
"""

import logging
from datetime import datetime, timedelta
from pathlib import Path

import numpy as np

from pynav import (DayFile, GPSEphemeris, NavPoint, NavSampler, NearestPointsFinder,
                   SatelliteId, SYS_GPS)
from pynav.logger import setup_logger


def time_grid(start, hours, step_s):
    """Regular grid of query instants"""
    n = int(hours * 3600 / step_s) + 1
    return [start + timedelta(seconds=i * step_s) for i in range(n)]


def synthetic_loader():
    """In-memory loader serving three consecutive days of G01 records every 2 hours"""
    sat = SatelliteId(SYS_GPS, 1)
    days = {}
    for doy in (1, 2, 3):
        day0 = datetime(2020, 1, 1) + timedelta(days=doy - 1)
        points = []
        for h in range(0, 24, 2):
            t = day0 + timedelta(hours=h)
            x = (t - datetime(2020, 1, 1)).total_seconds()
            points.append(NavPoint(t, GPSEphemeris(clock_bias=1e-4 + 1e-10 * x,
                                                   clock_drift=1e-12,
                                                   m0=np.sin(x / 43082.0),
                                                   toe=x % 604800.0)))
        days[(2020, doy)] = DayFile(2020, doy, {sat: points})
    return lambda year, doy: days.get((year, doy))


def demo_mode():
    """Sample a synthetic satellite across a day boundary"""
    sampler = NavSampler(NearestPointsFinder(loader=synthetic_loader()))
    times = time_grid(datetime(2020, 1, 1, 20), hours=8, step_s=1800)
    frame = sampler.sample_frame(['G01'], times)

    print(f"\nSampled {len(frame)} of {len(times)} instants for G01")
    print(frame[['time', 'position', 'f00', 'f05']].to_string(index=False))
    print(f"\nDays loaded: {sampler.cache.load_count}, resident: {sampler.cache.keys()}")


def process_nav_tree(nav_path, sats, start, hours, step_s, output_file=None):
    """
    Sample ephemerides of a satellite list from a navigation tree

    Parameters
    ----------
    nav_path : str
        Root of the tree (``<nav_path>/<year>/brdmDDD0.YYp``)
    sats : list of str
        Satellites, e.g. ['G01', 'E11']
    start : datetime
        First query instant (GPST)
    hours : float
        Length of the time grid
    step_s : float
        Grid spacing in seconds
    output_file : str, optional
        CSV output path

    Returns
    -------
    pd.DataFrame
        One row per (time, satellite) that could be bracketed
    """
    logger = logging.getLogger(__name__)
    sampler = NavSampler.from_path(nav_path)

    times = time_grid(start, hours, step_s)
    logger.info(f"Sampling {len(sats)} satellites at {len(times)} instants")
    frame = sampler.sample_frame(sats, times)

    missing = len(sats) * len(times) - len(frame)
    if missing:
        logger.warning(f"{missing} queries could not be bracketed")

    if output_file:
        frame.to_csv(output_file, index=False)
        logger.info(f"Results saved to {output_file}")
    return frame


def main():
    """Main function"""
    print("PyNav Ephemeris Sampling Example")
    print("=" * 60)

    import argparse
    parser = argparse.ArgumentParser(description='Sample broadcast ephemerides')
    parser.add_argument('--nav-path', type=str, help='Root of the navigation file tree')
    parser.add_argument('--sats', type=str, default='G01,G02,E11,R05',
                        help='Comma separated satellite list')
    parser.add_argument('--start', type=str, default='2020-01-01T00:00:00',
                        help='First instant (ISO format, GPST)')
    parser.add_argument('--hours', type=float, default=24.0, help='Grid length in hours')
    parser.add_argument('--step', type=float, default=300.0, help='Grid spacing in seconds')
    parser.add_argument('--output', type=str, help='Output CSV file')
    parser.add_argument('--log-level', type=str, default='INFO', help='Log level')
    parser.add_argument('--demo', action='store_true', help='Run in demo mode')

    args = parser.parse_args()
    setup_logger('pynav', args.log_level)
    setup_logger(__name__, args.log_level)

    if args.demo or not args.nav_path:
        print("\n[Demo Mode] Sampling synthetic ephemerides")
        demo_mode()
        print("\n\nTo process actual data, use:")
        print("  python nav_sample.py --nav-path /data/nav --sats G01,E11 --output samples.csv")
        return

    if not Path(args.nav_path).is_dir():
        print(f"Error: Navigation directory not found: {args.nav_path}")
        return

    sats = [s.strip() for s in args.sats.split(',') if s.strip()]
    frame = process_nav_tree(args.nav_path, sats, datetime.fromisoformat(args.start),
                             args.hours, args.step, args.output)

    print("\n" + "=" * 60)
    print("SAMPLING SUMMARY")
    print("=" * 60)
    print(f"Rows: {len(frame)}")
    if not frame.empty:
        print(frame.groupby('sat')['position'].value_counts().unstack(fill_value=0))


if __name__ == '__main__':
    main()
