#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-02-02 19:11:58 krylon>
#
# /data/code/python/pyhound/config.py
# created on 18. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the PyHound network scanner. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
pyhound.config

(c) 2026 Benjamin Walkenhorst

Settings for scans and crawls. Defaults can be overridden in the [scan] and
[crawl] tables of the configuration file, e.g.

    [scan]
    batch_size = 250
    workers = 32
    collect_metadata = true

    [crawl]
    max_pages = 200
    excluded_extensions = ["pdf", "zip"]
"""

import tomllib
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Final, Optional, Union

from pyhound import common
from pyhound.common import ConfigurationError
from pyhound.words import stop_words

default_excluded: Final[frozenset[str]] = frozenset({
    "jpg",
    "jpeg",
    "png",
    "gif",
    "pdf",
    "doc",
    "docx",
    "zip",
    "rar",
    "exe",
    "css",
    "js",
})


@dataclass(kw_only=True, slots=True)
class ScanConfig:
    """ScanConfig holds the settings for an address scan."""

    start: str = "0.0.0.0"
    end: str = "255.255.255.255"
    batch_size: int = 100
    delay_ms: int = 0
    workers: int = 10
    timeout: float = 3.0
    collect_metadata: bool = False
    save_file: Path = Path("results.csv")
    resume_file: Optional[Path] = None
    quiet: bool = False
    random: bool = False
    max_count: int = 0
    use_db: bool = True
    verify_tls: bool = False
    cache_ttl: float = 0

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ConfigurationError(f"Batch size must be positive, not {self.batch_size}")
        if self.workers < 1:
            raise ConfigurationError(f"Need at least one worker, not {self.workers}")
        if self.delay_ms < 0:
            raise ConfigurationError(f"Delay must not be negative ({self.delay_ms})")
        if self.timeout <= 0:
            raise ConfigurationError(f"Timeout must be positive, not {self.timeout}")
        if self.max_count < 0:
            raise ConfigurationError(f"Maximum count must not be negative ({self.max_count})")
        self.save_file = Path(self.save_file)
        if self.resume_file is not None:
            self.resume_file = Path(self.resume_file)

    @property
    def progress_interval(self) -> int:
        """Return the number of addresses between two progress reports."""
        return self.batch_size * 10


@dataclass(kw_only=True, slots=True)
class CrawlConfig:
    """CrawlConfig holds the settings for a site crawl."""

    seed: str = ""
    max_pages: int = 50
    same_domain_only: bool = True
    excluded_extensions: frozenset[str] = default_excluded
    stop_words: frozenset[str] = stop_words
    workers: int = 4
    timeout: float = 30.0
    user_agent: str = f"{common.AppName} Crawler/{common.AppVersion}"

    def __post_init__(self) -> None:
        if self.max_pages < 1:
            raise ConfigurationError(f"max_pages must be positive, not {self.max_pages}")
        if self.workers < 1:
            raise ConfigurationError(f"Need at least one worker, not {self.workers}")
        self.excluded_extensions = frozenset(x.lower().lstrip(".")
                                             for x in self.excluded_extensions)
        self.stop_words = frozenset(x.lower() for x in self.stop_words)


def _apply(cfg: Any, values: dict[str, Any], table: str) -> Any:
    """Return a copy of <cfg> with <values> applied."""
    known: Final[set[str]] = {f.name for f in fields(cfg)}
    unknown: Final[set[str]] = set(values) - known
    if unknown:
        raise ConfigurationError(f"Unknown key(s) in [{table}]: {', '.join(sorted(unknown))}")
    try:
        return replace(cfg, **values)
    except TypeError as err:
        raise ConfigurationError(f"Invalid value in [{table}]: {err}") from err


@dataclass(kw_only=True, slots=True)
class Config:
    """Config bundles the scan and crawl settings."""

    scan: ScanConfig = field(default_factory=ScanConfig)
    crawl: CrawlConfig = field(default_factory=CrawlConfig)


def load(path: Optional[Union[str, Path]] = None) -> Config:
    """Read the configuration file at <path>.

    If no path is given, the default location in the application directory is used.
    A missing file is not an error, we just use the defaults.
    """
    if path is None:
        path = common.path.config
    path = Path(path)

    log = common.get_logger("config")
    cfg: Config = Config()

    if not path.is_file():
        log.debug("Configuration file %s does not exist, using defaults.", path)
        return cfg

    try:
        with open(path, "rb") as fh:
            raw: dict[str, Any] = tomllib.load(fh)
    except tomllib.TOMLDecodeError as err:
        raise ConfigurationError(f"Cannot parse {path}: {err}") from err

    for table in raw:
        if table not in ("scan", "crawl"):
            raise ConfigurationError(f"Unknown table [{table}] in {path}")

    scan: dict[str, Any] = raw.get("scan", {})
    crawl: dict[str, Any] = dict(raw.get("crawl", {}))
    for key in ("excluded_extensions", "stop_words"):
        if key in crawl:
            crawl[key] = frozenset(crawl[key])

    cfg.scan = _apply(cfg.scan, scan, "scan")
    cfg.crawl = _apply(cfg.crawl, crawl, "crawl")
    log.debug("Read configuration from %s", path)
    return cfg


# Local Variables: #
# python-indent: 4 #
# End: #
