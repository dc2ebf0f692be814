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

"""GNSS system identifiers and engine parameters"""

# GNSS System IDs
SYS_NONE = 0x00   # unknown
SYS_GPS = 0x01    # GPS
SYS_GLO = 0x02    # GLONASS
SYS_GAL = 0x04    # Galileo
SYS_BDS = 0x08    # BeiDou
SYS_QZS = 0x10    # QZSS
SYS_SBS = 0x20    # SBAS
SYS_IRN = 0x40    # IRNSS
SYS_ALL = 0xFF    # All systems

# Time System Parameters
GPST0 = [1980, 1, 6, 0, 0, 0]  # GPS time reference epoch

SECONDS_PER_DAY = 86400.0

# Day-file cache
NAV_CACHE_CAPACITY = 4         # resident parsed day files

# Width of a flattened ephemeris vector (largest record: Galileo/IRNSS)
MAX_NAV_FIELDS = 19

# Value emitted for fields that are not interpolated (status flags)
NON_INTERPOLATED_DEFAULT = 0.0

# Interpolation methods accepted by pynav.gnss.interpolation
INTERP_METHODS = ('neville', 'lagrange', 'barycentric')
