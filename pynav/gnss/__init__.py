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

"""Broadcast ephemeris sampling.

Key Components:
- Bounded FIFO cache of parsed navigation day files
- Nearest-point search with day-boundary handling
- Per-field polynomial interpolation of ephemeris records
- Sampler chaining the two for arbitrary (satellite, instant) queries

Examples:
    >>> from pynav.gnss import NavSampler
    >>> sampler = NavSampler.from_path('/data/nav')
    >>> record = sampler.sample('G01', datetime(2020, 1, 1, 4))
"""

from .day_cache import CacheSlot, DayFileCache
from .interpolation import interpolate, interpolate_field
from .nav_sampler import NavSampler
from .nearest_points import NearestPointsFinder

__all__ = [
    'CacheSlot', 'DayFileCache', 'NearestPointsFinder', 'NavSampler',
    'interpolate', 'interpolate_field',
]
