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

"""Satellite identification.

A satellite is identified by its constellation and its PRN, written the
RINEX 3 way: one system character followed by a two digit PRN.

- GPS (G), GLONASS (R), Galileo (E), BeiDou (C), QZSS (J), IRNSS (I), SBAS (S)

SBAS PRNs are kept as written in the file (``S34`` rather than PRN 134),
which is also how cssrlib reports them.
"""

from dataclasses import dataclass
from typing import Union

from .constants import (SYS_BDS, SYS_GAL, SYS_GLO, SYS_GPS, SYS_IRN, SYS_NONE,
                        SYS_QZS, SYS_SBS)

__all__ = [
    'SYS_TO_CHAR', 'CHAR_TO_SYS', 'SYS_NAMES', 'sys2char', 'char2sys',
    'SatelliteId', 'parse_satellite',
]

# System ID to character mapping
SYS_TO_CHAR = {
    SYS_GPS: 'G',
    SYS_GLO: 'R',
    SYS_GAL: 'E',
    SYS_BDS: 'C',
    SYS_QZS: 'J',
    SYS_SBS: 'S',
    SYS_IRN: 'I',
}

# Character to system ID mapping
CHAR_TO_SYS = {v: k for k, v in SYS_TO_CHAR.items()}

SYS_NAMES = {
    SYS_GPS: 'GPS',
    SYS_GLO: 'GLONASS',
    SYS_GAL: 'Galileo',
    SYS_BDS: 'BeiDou',
    SYS_QZS: 'QZSS',
    SYS_SBS: 'SBAS',
    SYS_IRN: 'IRNSS',
}


def sys2char(system: int) -> str:
    """Convert a ``SYS_*`` id to its RINEX character ('?' if unknown)"""
    return SYS_TO_CHAR.get(system, '?')


def char2sys(char: str) -> int:
    """Convert a RINEX system character to its ``SYS_*`` id (SYS_NONE if unknown)"""
    return CHAR_TO_SYS.get(char.upper(), SYS_NONE)


@dataclass(frozen=True, order=True)
class SatelliteId:
    """Immutable (system, PRN) satellite key.

    Attributes
    ----------
    system : int
        Satellite system ID (SYS_GPS, SYS_GLO, ...)
    prn : int
        PRN number within the constellation
    """
    system: int
    prn: int

    def __post_init__(self):
        if self.system not in SYS_TO_CHAR:
            raise ValueError(f"Unknown satellite system id: {self.system!r}")
        if self.prn < 1:
            raise ValueError(f"PRN must be positive, got {self.prn}")

    @property
    def char(self) -> str:
        return SYS_TO_CHAR[self.system]

    def __str__(self):
        return f"{self.char}{self.prn:02d}"


def parse_satellite(value: Union[str, SatelliteId]) -> SatelliteId:
    """Parse a satellite designator such as ``"G01"`` or ``"R 5"``.

    Parameters
    ----------
    value : str or SatelliteId
        RINEX style designator; a SatelliteId is returned unchanged

    Returns
    -------
    SatelliteId

    Raises
    ------
    ValueError
        If the string is not a valid designator

    Examples
    --------
    >>> parse_satellite('E05')
    SatelliteId(system=4, prn=5)
    """
    if isinstance(value, SatelliteId):
        return value
    text = str(value).strip()
    if len(text) < 2:
        raise ValueError(f"Invalid satellite designator: {value!r}")
    system = char2sys(text[0])
    if system == SYS_NONE:
        raise ValueError(f"Unknown satellite system in {value!r}")
    try:
        prn = int(text[1:].strip())
    except ValueError:
        raise ValueError(f"Invalid PRN in satellite designator {value!r}") from None
    return SatelliteId(system, prn)
