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

"""Logging configuration for the navigation sampling engine"""

import logging
import sys
from enum import Enum
from typing import Optional

ROOT_LOGGER = "pynav"


class LogLevel(Enum):
    """Log levels understood by :func:`setup_logger`"""
    TRACE = 5
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


logging.addLevelName(LogLevel.TRACE.value, "TRACE")


def trace(self, message, *args, **kwargs):
    """Emit a TRACE record (used for per-query cache chatter)"""
    if self.isEnabledFor(LogLevel.TRACE.value):
        self._log(LogLevel.TRACE.value, message, args, **kwargs)


logging.Logger.trace = trace


def _level_value(level: str) -> int:
    try:
        return LogLevel[level.upper()].value
    except KeyError:
        raise ValueError(f"Unknown log level: {level}") from None


class ColoredFormatter(logging.Formatter):
    """Console formatter that colours the level name"""

    COLORS = {
        'TRACE': '\033[36m',     # Cyan
        'DEBUG': '\033[34m',     # Blue
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        # Work on a copy so file handlers sharing the record stay uncoloured
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, self.RESET)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def setup_logger(name: str = ROOT_LOGGER,
                 level: str = "INFO",
                 log_file: Optional[str] = None,
                 console: bool = True) -> logging.Logger:
    """
    Configure a logger of the pynav hierarchy

    Parameters:
    -----------
    name : str
        Logger name (``"pynav"`` configures every library module)
    level : str
        Log level (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_file : Optional[str]
        Log file path (if None, no file logging)
    console : bool
        Enable console output

    Returns:
    --------
    logging.Logger
        Configured logger
    """
    value = _level_value(level)
    logger = logging.getLogger(name)
    logger.setLevel(value)
    logger.handlers = []

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(value)
        console_handler.setFormatter(ColoredFormatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        ))
        logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(value)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(file_handler)

    return logger


class LogContext:
    """Context manager for a temporary log level change"""

    def __init__(self, logger: logging.Logger, level: str):
        self.logger = logger
        self.new_level = _level_value(level)
        self.old_level = None

    def __enter__(self):
        self.old_level = self.logger.level
        self.logger.setLevel(self.new_level)
        return self.logger

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.logger.setLevel(self.old_level)


class LoggerConfig:
    """Per-module log levels layered over the ``pynav`` root logger"""

    def __init__(self):
        self.module_levels = {}
        self.default_level = "INFO"
        self.log_file = None
        self.console = True

    def set_module_level(self, module_name: str, level: str):
        """Set log level for a specific module, e.g. ``pynav.gnss.day_cache``"""
        self.module_levels[module_name] = level
        logger = logging.getLogger(module_name)
        if logger.handlers:
            logger.setLevel(_level_value(level))
            for handler in logger.handlers:
                handler.setLevel(_level_value(level))

    def configure_from_dict(self, config: dict):
        """Configure from dictionary"""
        if 'default_level' in config:
            self.default_level = config['default_level']
        if 'log_file' in config:
            self.log_file = config['log_file']
        if 'console' in config:
            self.console = config['console']
        for module, level in config.get('module_levels', {}).items():
            self.set_module_level(module, level)

    def setup_all_loggers(self):
        """Setup the root pynav logger and every configured module logger"""
        setup_logger(ROOT_LOGGER, self.default_level, self.log_file, self.console)
        for module, level in self.module_levels.items():
            # Module loggers propagate to the root handler; only the level differs
            logging.getLogger(module).setLevel(_level_value(level))


logger_config = LoggerConfig()


def setup_logger_from_config(config: dict):
    """Setup loggers from a configuration dictionary

    Example config:
    {
        'default_level': 'INFO',
        'log_file': 'nav.log',
        'console': True,
        'module_levels': {
            'pynav.gnss.day_cache': 'TRACE',
            'pynav.io.rinex': 'WARNING'
        }
    }

    Each call replaces the previous configuration; module loggers configured
    earlier but absent from ``config`` fall back to the root level.
    """
    global logger_config
    previous = logger_config.module_levels
    logger_config = LoggerConfig()
    logger_config.configure_from_dict(config)
    for module in set(previous) - set(logger_config.module_levels):
        logging.getLogger(module).setLevel(logging.NOTSET)
    logger_config.setup_all_loggers()
