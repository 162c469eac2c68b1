#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-02-13 19:20:36 krylon>
#
# /data/code/python/pyhound/common.py
# created on 12. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the PyHound network scanner. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
pyhound.common

(c) 2026 Benjamin Walkenhorst
"""

import logging
import logging.handlers
import os
import pathlib
import sys
from datetime import timedelta
from threading import Lock
from typing import Final, Union

AppName: Final[str] = "PyHound"
AppVersion: Final[str] = "0.1.0"
Debug: Final[bool] = False
TimeFmt: Final[str] = "%Y-%m-%d %H:%M:%S"

log_level_tty: int = logging.DEBUG if Debug else logging.WARNING


def fmt_duration(d: timedelta) -> str:
    """Format a duration as HH:MM:SS."""
    secs: Final[int] = int(d.total_seconds())
    return f"{secs // 3600:02d}:{(secs % 3600) // 60:02d}:{secs % 60:02d}"


class HoundError(Exception):
    """Base class for application-specific Exceptions."""


class ConfigurationError(HoundError):
    """ConfigurationError indicates invalid settings. It aborts a run before any work is done."""


class Path:
    """Holds the paths of folders and files used by the application"""

    __base: str

    def __init__(self, root: str = os.path.expanduser(f"~/.{AppName.lower()}.d")) -> None:  # noqa
        self.__base = root

    def base(self, folder: str = "") -> pathlib.Path:
        """
        Return the base directory for application specific files.

        If path is a non-empty string, set the base directory to its value.
        """
        if folder != "":
            self.__base = folder
        return pathlib.Path(self.__base)

    @property
    def db(self) -> pathlib.Path:  # pylint: disable-msg=C0103
        """Return the path to the database"""
        return pathlib.Path(os.path.join(self.__base, f"{AppName.lower()}.db"))

    @property
    def log(self) -> pathlib.Path:
        """Return the path to the log file"""
        return pathlib.Path(os.path.join(self.__base, f"{AppName.lower()}.log"))

    @property
    def cache(self) -> pathlib.Path:
        """Return the path of the cache directory."""
        return pathlib.Path(os.path.join(self.__base, "cache"))

    @property
    def lmdb(self) -> pathlib.Path:
        """Return the path of the LMDB environment holding the hostname cache."""
        return pathlib.Path(os.path.join(self.__base, "cache", "lmdb"))

    @property
    def config(self) -> pathlib.Path:
        """Return the path of the configuration file"""
        return pathlib.Path(os.path.join(self.__base, f"{AppName.lower()}.toml"))


path: Path = Path(os.path.expanduser(f"~/.{AppName.lower()}.d"))

_lock: Final[Lock] = Lock()  # pylint: disable-msg=C0103
_cache: Final[dict[str, logging.Logger]] = {}  # pylint: disable-msg=C0103
_console: Final[list[logging.Handler]] = []  # pylint: disable-msg=C0103


def set_basedir(folder: Union[str, pathlib.Path]) -> None:
    """Set the base dir to the specified path."""
    path.base(str(folder))
    init_app()


def init_app() -> None:
    """Initialize the application environment"""
    if not os.path.isdir(path.base()):
        print(f"Create base directory {path.base()}")
        os.makedirs(path.base())
    if not os.path.isdir(path.cache):
        os.mkdir(path.cache)


def set_log_level_tty(level: int) -> None:
    """Set the level of messages printed to the terminal, for new and existing loggers."""
    global log_level_tty  # pylint: disable-msg=W0603
    with _lock:
        log_level_tty = level
        for h in _console:
            h.setLevel(level)


def get_logger(name: str, terminal: bool = True) -> logging.Logger:
    """Create and return a logger with the given name"""
    with _lock:
        init_app()

        if name in _cache:
            return _cache[name]

        log_format = "%(asctime)s (%(name)-16s / line %(lineno)-4d) " + \
            "- %(levelname)-8s %(message)s"
        max_log_size = 4 * 2**20  # 4 MiB
        max_log_count = 10

        log_obj = logging.getLogger(name)
        log_obj.setLevel(logging.DEBUG)
        log_file_handler = logging.handlers.RotatingFileHandler(path.log,
                                                                'a',
                                                                max_log_size,
                                                                max_log_count)

        log_fmt = logging.Formatter(log_format)
        log_file_handler.setFormatter(log_fmt)
        log_obj.addHandler(log_file_handler)

        if terminal:
            log_console_handler = logging.StreamHandler(sys.stdout)
            log_console_handler.setFormatter(log_fmt)
            log_console_handler.setLevel(log_level_tty)
            log_obj.addHandler(log_console_handler)
            _console.append(log_console_handler)

        _cache[name] = log_obj
        return log_obj


# Local Variables: #
# python-indent: 4 #
# End: #
