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

"""
pynav - Broadcast ephemeris sampling for GNSS feature extraction

Reads daily RINEX navigation files, keeps a few of them parsed in memory,
and interpolates the ephemeris of any satellite at any instant from the
records around it, crossing day boundaries where needed.
"""

__version__ = "0.1.0"
__author__ = "PyNav Development Team"
__title__ = "pynav"
__description__ = "Broadcast ephemeris sampling for GNSS feature extraction"

from . import logger  # registers the TRACE level before the library modules log
from .config import NavConfig
from .core import *
from .gnss import *
