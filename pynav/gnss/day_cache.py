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

"""Bounded cache of parsed navigation day files"""

import logging
import threading
from collections import OrderedDict
from datetime import datetime
from typing import Callable, List, NamedTuple, Optional, Tuple

from ..core.constants import NAV_CACHE_CAPACITY
from ..core.data_structures import DayFile
from ..core.time import to_instant, year_doy

logger = logging.getLogger(__name__)

DayLoader = Callable[[int, int], Optional[DayFile]]


class CacheSlot(NamedTuple):
    """A resident day. ``day_file`` is None when the day was looked up but absent"""
    year: int
    doy: int
    day_file: Optional[DayFile]

    @property
    def available(self) -> bool:
        return self.day_file is not None


class DayFileCache:
    """FIFO cache holding at most ``capacity`` parsed day files.

    ``resolve`` returns the resident slot of a day or loads it through the
    loader, evicting the oldest inserted slot when the cache is full. Hits
    do not refresh a slot's position. Absent or unreadable days are cached
    as ``None`` slots and never loaded again while resident.

    All mutation happens under a lock, so one cache can serve several
    threads; a day is loaded at most once while it stays resident.

    Parameters
    ----------
    loader : callable
        ``loader(year, doy) -> DayFile or None``
    capacity : int
        Maximum number of resident slots (default 4)
    on_load : callable, optional
        ``on_load(slot)`` hook invoked after every load
    """

    def __init__(self, loader: DayLoader, capacity: int = NAV_CACHE_CAPACITY,
                 on_load: Optional[Callable[[CacheSlot], None]] = None):
        if capacity < 1:
            raise ValueError(f"Cache capacity must be at least 1, got {capacity}")
        self.loader = loader
        self.capacity = int(capacity)
        self.on_load = on_load
        self.load_count = 0
        self._slots: "OrderedDict[Tuple[int, int], CacheSlot]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self):
        return len(self._slots)

    def __contains__(self, key) -> bool:
        return tuple(key) in self._slots

    def keys(self) -> List[Tuple[int, int]]:
        """Resident (year, doy) keys, oldest first"""
        with self._lock:
            return list(self._slots)

    def clear(self):
        with self._lock:
            self._slots.clear()

    def resolve(self, year: int, doy: int) -> CacheSlot:
        """Return the slot of a day, loading it on a miss.

        Parameters
        ----------
        year : int
            Calendar year
        doy : int
            Day of year

        Returns
        -------
        CacheSlot
            The slot; ``slot.day_file`` is None if the day is unavailable
        """
        key = (int(year), int(doy))
        with self._lock:
            slot = self._slots.get(key)
            if slot is not None:
                logger.trace(f"Cache hit {key[0]}-{key[1]:03d}")
                return slot

            slot = CacheSlot(key[0], key[1], self._load(*key))
            if len(self._slots) >= self.capacity:
                evicted, _ = self._slots.popitem(last=False)
                logger.debug(f"Evicted {evicted[0]}-{evicted[1]:03d} from day cache")
            self._slots[key] = slot
            self.load_count += 1

        if self.on_load is not None:
            self.on_load(slot)
        return slot

    def resolve_instant(self, time) -> CacheSlot:
        """Resolve the day an instant belongs to"""
        t: datetime = to_instant(time)
        return self.resolve(*year_doy(t))

    def _load(self, year: int, doy: int) -> Optional[DayFile]:
        try:
            day_file = self.loader(year, doy)
        except (OSError, ValueError, RuntimeError, IndexError, KeyError) as e:
            logger.warning(f"Failed to load navigation day {year}-{doy:03d}: {e}")
            return None
        if day_file is None:
            logger.debug(f"Navigation day {year}-{doy:03d} unavailable")
        else:
            logger.debug(f"Loaded navigation day {year}-{doy:03d} ({len(day_file)} satellites)")
        return day_file
