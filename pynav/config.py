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

"""Configuration of the navigation sampler"""

import logging
from dataclasses import dataclass, field, fields
from typing import Any, Optional

from .core.constants import INTERP_METHODS, NAV_CACHE_CAPACITY
from .logger import LogLevel

logger = logging.getLogger(__name__)


@dataclass
class NavConfig:
    """Navigation sampler configuration.

    Attributes
    ----------
    nav_path : str
        Root of the navigation tree (``<nav_path>/<year>/brdmDDD0.YYp``)
    cache_capacity : int
        Number of parsed day files kept in memory
    method : str
        Field interpolation method ('neville', 'lagrange', 'barycentric')
    log_level : str
        Level of the ``pynav`` logger
    log_file : str, optional
        Additional log file
    module_levels : dict
        Per-module log levels, e.g. ``{'pynav.gnss.day_cache': 'TRACE'}``
    """
    nav_path: str = "."
    cache_capacity: int = NAV_CACHE_CAPACITY
    method: str = "neville"
    log_level: str = "INFO"
    log_file: Optional[str] = None
    module_levels: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> 'NavConfig':
        """Build a configuration from a dictionary; unknown keys are ignored"""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config) - known)
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {unknown}")
        cfg = cls(**{k: v for k, v in config.items() if k in known})
        cfg.validate()
        return cfg

    def validate(self):
        """Raise ValueError on an inconsistent configuration"""
        if int(self.cache_capacity) < 1:
            raise ValueError(f"cache_capacity must be at least 1, got {self.cache_capacity}")
        if self.method not in INTERP_METHODS:
            raise ValueError(f"Unknown interpolation method: {self.method}. "
                             f"Must be one of {INTERP_METHODS}")
        for level in [self.log_level, *self.module_levels.values()]:
            if level.upper() not in LogLevel.__members__:
                raise ValueError(f"Unknown log level: {level}")

    def logging_dict(self) -> dict[str, Any]:
        """Dictionary accepted by :func:`pynav.logger.setup_logger_from_config`"""
        return {
            'default_level': self.log_level,
            'log_file': self.log_file,
            'console': True,
            'module_levels': dict(self.module_levels),
        }
