#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-01-21 17:02:33 krylon>
#
# /data/code/python/pyhound/model.py
# created on 12. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the PyHound network scanner. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
pyhound.model

(c) 2026 Benjamin Walkenhorst
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from ipaddress import IPv4Address
from typing import Final, Optional

from pyhound.common import ConfigurationError

addr_max: Final[int] = 2**32 - 1


class InvalidRangeError(ConfigurationError):
    """InvalidRangeError indicates an address range that cannot be scanned."""


@dataclass(slots=True, kw_only=True, frozen=True)
class AddressRange:
    """AddressRange is an inclusive range of IPv4 addresses, stored as unsigned integers."""

    start: int
    end: int

    def __post_init__(self) -> None:
        for n in (self.start, self.end):
            if not 0 <= n <= addr_max:
                raise InvalidRangeError(f"{n} is not a valid IPv4 address")
        if self.start > self.end:
            raise InvalidRangeError(
                f"Start of range ({IPv4Address(self.start)}) lies after its end ({IPv4Address(self.end)})")  # noqa: E501

    def __len__(self) -> int:
        return self.end - self.start + 1

    def __contains__(self, n: int) -> bool:
        return self.start <= n <= self.end

    def __str__(self) -> str:
        return f"{IPv4Address(self.start)}-{IPv4Address(self.end)}"


@dataclass(slots=True, kw_only=True)
class ScanCheckpoint:
    """ScanCheckpoint is the position of a scan and its counters."""

    last_address: Optional[int] = None
    processed: int = 0
    found: int = 0

    def advance(self, addr: int, found: bool) -> None:
        """Record the processing of <addr>."""
        self.last_address = addr
        self.processed += 1
        if found:
            self.found += 1


@dataclass(slots=True, kw_only=True)
class Lookup:
    """Lookup is the outcome of a reverse lookup of a single address."""

    addr: str
    name: Optional[str] = None
    latency_ms: int = 0
    stamp: datetime = field(default_factory=datetime.now)

    @property
    def found(self) -> bool:
        """Return True if the lookup produced a hostname."""
        return self.name is not None


@dataclass(slots=True, kw_only=True)
class HostnameRecord:
    """HostnameRecord is a hostname we found for an address."""

    host_id: int = -1
    ip: str
    hostname: Optional[str]
    found_at: datetime
    lookup_ms: int = 0
    visit_count: int = 1
    first_seen: Optional[datetime] = None


@dataclass(slots=True, kw_only=True)
class SiteMetadata:
    """SiteMetadata describes the web site served under a hostname."""

    title: Optional[str] = None
    description: Optional[str] = None
    keywords: Optional[str] = None
    snippet: Optional[str] = None
    http_status: int = 0
    content_type: Optional[str] = None
    size_bytes: int = 0
    final_url: str = ""

    @property
    def ok(self) -> bool:
        """Return True if the server answered with a 2xx status."""
        return 200 <= self.http_status < 300


@dataclass(slots=True, kw_only=True)
class ScanResult:
    """ScanResult bundles everything we learned about one address."""

    lookup: Lookup
    metadata: Optional[SiteMetadata] = None

    @property
    def addr(self) -> str:
        """Return the address the result belongs to."""
        return self.lookup.addr


@dataclass(slots=True, kw_only=True)
class ScanSummary:
    """ScanSummary is the final account of a scan."""

    arange: AddressRange
    processed: int
    found: int
    started: datetime
    finished: datetime

    @property
    def duration(self) -> timedelta:
        """Return the wall-clock duration of the scan."""
        return self.finished - self.started

    @property
    def rate(self) -> float:
        """Return the number of addresses processed per second."""
        secs: Final[float] = self.duration.total_seconds()
        if secs <= 0:
            return 0.0
        return self.processed / secs

    @property
    def resolution_rate(self) -> float:
        """Return the percentage of addresses that resolved to a hostname."""
        if self.processed == 0:
            return 0.0
        return self.found * 100.0 / self.processed


@dataclass(slots=True, kw_only=True)
class PageRecord:
    """PageRecord is a page indexed during a crawl."""

    url: str
    title: str = ""
    text_length: int = 0
    content_hash: str = ""


@dataclass(slots=True, kw_only=True)
class CrawlResult:
    """CrawlResult is what a crawl produces."""

    words: list[tuple[str, int]] = field(default_factory=list)
    pages: list[PageRecord] = field(default_factory=list)
    total_words: int = 0

    @property
    def frequency(self) -> dict[str, int]:
        """Return the word frequencies as a dict."""
        return dict(self.words)


# Local Variables: #
# python-indent: 4 #
# End: #
