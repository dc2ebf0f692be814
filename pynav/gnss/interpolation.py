#!/usr/bin/env python3
"""
Polynomial interpolation of broadcast ephemeris records

Every scalar field of a record is fitted independently through the
bracket's (time, value) pairs with the interpolating polynomial of degree
``len(bracket) - 1`` and evaluated at the query instant. Neville's algorithm
(as in RTKLIB's interppol) is the default; the Lagrange form and scipy's
barycentric interpolator are available for comparison.
"""

from typing import Sequence

import numpy as np
from scipy.interpolate import BarycentricInterpolator

from ..core.constants import INTERP_METHODS, NON_INTERPOLATED_DEFAULT
from ..core.data_structures import RECORD_CLASSES, Bracket, EphemerisRecord
from ..core.time import instant_to_seconds


def neville_interpolation(x: np.ndarray, y: np.ndarray, x0: float) -> float:
    """
    Neville's algorithm for polynomial interpolation (RTKLIB compatible)

    Parameters
    ----------
    x : np.ndarray
        Array of x values (time points)
    y : np.ndarray
        Array of y values
    x0 : float
        Point at which to interpolate

    Returns
    -------
    float
        Interpolated value at x0
    """
    n = len(x)
    if n == 0:
        return np.nan
    if n == 1:
        return float(y[0])

    p = np.array(y, dtype=float)

    for j in range(1, n):
        for i in range(n - j):
            p[i] = ((x0 - x[i]) * p[i + 1] - (x0 - x[i + j]) * p[i]) / (x[i + j] - x[i])

    return float(p[0])


def lagrange_interpolation(x: np.ndarray, y: np.ndarray, x0: float) -> float:
    """
    Lagrange form of the interpolating polynomial through all points

    Parameters
    ----------
    x : np.ndarray
        Array of x values (time points)
    y : np.ndarray
        Array of y values
    x0 : float
        Point at which to interpolate

    Returns
    -------
    float
        Interpolated value at x0
    """
    result = 0.0
    n = len(x)

    for i in range(n):
        term = float(y[i])
        for j in range(n):
            if i != j:
                term *= (x0 - x[j]) / (x[i] - x[j])
        result += term

    return result


def barycentric_interpolation(x: np.ndarray, y: np.ndarray, x0: float) -> float:
    """Barycentric interpolation using scipy"""
    return float(BarycentricInterpolator(x, y)(x0))


_METHODS = {
    'neville': neville_interpolation,
    'lagrange': lagrange_interpolation,
    'barycentric': barycentric_interpolation,
}


def interpolate_field(x: Sequence[float], y: Sequence[float], x0: float,
                      method: str = 'neville') -> float:
    """
    Evaluate the interpolating polynomial of one field at x0

    Parameters
    ----------
    x : sequence of float
        Distinct node times (seconds)
    y : sequence of float
        Field values at the nodes
    x0 : float
        Evaluation time (seconds)
    method : str
        Interpolation method: 'neville', 'lagrange', 'barycentric'

    Returns
    -------
    float
        Interpolated value; the stored value when x0 is one of the nodes
    """
    try:
        func = _METHODS[method]
    except KeyError:
        raise ValueError(f"Unknown interpolation method: {method}. "
                         f"Must be one of {INTERP_METHODS}") from None

    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if x.shape != y.shape or x.ndim != 1 or len(x) == 0:
        raise ValueError("x and y must be non-empty 1-D arrays of equal length")

    # Return node values untouched so the fit reproduces them bit for bit
    hit = np.flatnonzero(x == x0)
    if hit.size:
        return float(y[hit[0]])

    return func(x, y, x0)


def _check_bracket(bracket: Bracket) -> type:
    """Validate a bracket and return its record class"""
    points = bracket.points
    if not points:
        raise ValueError("Cannot interpolate an empty bracket")
    if len(points) < 2:
        raise ValueError(f"Interpolation needs at least 2 points, got {len(points)}")

    record_cls = type(points[0].record)
    if any(type(p.record) is not record_cls for p in points[1:]):
        classes = sorted({type(p.record).__name__ for p in points})
        raise ValueError(f"Cannot interpolate a bracket mixing {', '.join(classes)}")
    if record_cls not in RECORD_CLASSES.values():
        raise TypeError(f"Unsupported ephemeris record class: {record_cls.__name__}")

    times = [p.time for p in points]
    if any(t1 >= t2 for t1, t2 in zip(times, times[1:])):
        raise ValueError("Bracket points must be strictly increasing in time")
    return record_cls


def interpolate(bracket: Bracket, method: str = 'neville') -> EphemerisRecord:
    """
    Interpolate a bracket of ephemeris records at its query instant

    Parameters
    ----------
    bracket : Bracket
        Two or more chronological points of one record class
    method : str
        Interpolation method: 'neville', 'lagrange', 'barycentric'

    Returns
    -------
    EphemerisRecord
        Record of the bracket's class holding the fitted field values

    Raises
    ------
    ValueError
        If the bracket is empty, has a single point, mixes record classes
        or is not strictly increasing in time
    TypeError
        If the record class is not one of the registered systems

    Notes
    -----
    Times are measured in GPS seconds relative to the first point to keep
    the polynomial well conditioned. Fields listed in the record class's
    ``NON_INTERPOLATED`` (GLONASS/SBAS health) are set to 0.0 instead of
    being fitted.
    """
    record_cls = _check_bracket(bracket)

    t_ref = instant_to_seconds(bracket.points[0].time)
    x = np.array([instant_to_seconds(p.time) - t_ref for p in bracket.points])
    x0 = instant_to_seconds(bracket.time) - t_ref

    values = {}
    for name in record_cls.field_names():
        if name in record_cls.NON_INTERPOLATED:
            values[name] = NON_INTERPOLATED_DEFAULT
            continue
        y = [getattr(p.record, name) for p in bracket.points]
        values[name] = interpolate_field(x, y, x0, method)

    return record_cls(**values)
