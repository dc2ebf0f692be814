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

"""Core types for broadcast ephemeris sampling.

- **Constants**: satellite system ids, cache capacity, vector width
- **Satellites**: the immutable (system, PRN) key and its RINEX spelling
- **Time**: GPST instants and calendar-day arithmetic across year boundaries
- **Data Structures**: the seven per-system ephemeris record classes,
  day files, and interpolation brackets

Example Usage:
    >>> from pynav.core import *
    >>>
    >>> sat = parse_satellite('G01')
    >>> shift_day(2020, 366, 1)
    (2021, 1)
"""

from .constants import *
from .data_structures import *
from .satellite import *
from .time import *
