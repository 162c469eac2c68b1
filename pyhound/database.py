#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-01-28 18:22:04 krylon>
#
# /data/code/python/pyhound/database.py
# created on 12. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the PyHound network scanner. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
pyhound.database

(c) 2026 Benjamin Walkenhorst
"""

import sqlite3
from datetime import datetime
from enum import Enum, auto
from ipaddress import IPv4Address
from pathlib import Path
from threading import Lock
from typing import Final, Optional, Sequence, Union

import krylib

from pyhound import common
from pyhound.common import HoundError
from pyhound.model import (HostnameRecord, Lookup, PageRecord, ScanSummary,
                           SiteMetadata)


class DBError(HoundError):
    """Base class for database-related exceptions."""


qinit: Final[list[str]] = [
    """
CREATE TABLE hostname (
    id INTEGER PRIMARY KEY,
    addr TEXT UNIQUE NOT NULL,
    name TEXT NOT NULL,
    first_seen INTEGER NOT NULL,
    last_seen INTEGER NOT NULL,
    visit_count INTEGER NOT NULL DEFAULT 1,
    lookup_ms INTEGER
) STRICT
    """,
    "CREATE INDEX hostname_name_idx ON hostname (name)",
    "CREATE INDEX hostname_last_seen_idx ON hostname (last_seen)",
    """
CREATE TABLE metadata (
    id INTEGER PRIMARY KEY,
    hostname_id INTEGER UNIQUE NOT NULL,
    title TEXT,
    description TEXT,
    keywords TEXT,
    snippet TEXT,
    fetched INTEGER NOT NULL,
    http_status INTEGER NOT NULL DEFAULT 0,
    content_type TEXT,
    size_bytes INTEGER NOT NULL DEFAULT 0,
    url TEXT NOT NULL,
    FOREIGN KEY (hostname_id) REFERENCES hostname (id)
        ON UPDATE RESTRICT
        ON DELETE CASCADE
) STRICT
    """,
    """
CREATE TABLE scan_history (
    id INTEGER PRIMARY KEY,
    start_addr TEXT NOT NULL,
    end_addr TEXT NOT NULL,
    processed INTEGER NOT NULL,
    found INTEGER NOT NULL,
    started INTEGER NOT NULL,
    finished INTEGER NOT NULL,
    duration INTEGER NOT NULL
) STRICT
    """,
    "CREATE INDEX scan_history_started_idx ON scan_history (started)",
    """
CREATE TABLE site (
    id INTEGER PRIMARY KEY,
    url TEXT UNIQUE NOT NULL,
    title TEXT NOT NULL DEFAULT '',
    registered INTEGER NOT NULL,
    last_crawl INTEGER
) STRICT
    """,
    """
CREATE TABLE page (
    id INTEGER PRIMARY KEY,
    site_id INTEGER NOT NULL,
    url TEXT NOT NULL,
    title TEXT NOT NULL DEFAULT '',
    content_hash TEXT NOT NULL DEFAULT '',
    text_length INTEGER NOT NULL DEFAULT 0,
    last_crawl INTEGER NOT NULL,
    FOREIGN KEY (site_id) REFERENCES site (id)
        ON UPDATE RESTRICT
        ON DELETE CASCADE,
    UNIQUE (site_id, url)
) STRICT
    """,
    "CREATE INDEX page_site_idx ON page (site_id)",
    """
CREATE TABLE word (
    id INTEGER PRIMARY KEY,
    site_id INTEGER NOT NULL,
    word TEXT NOT NULL,
    frequency INTEGER NOT NULL DEFAULT 1,
    FOREIGN KEY (site_id) REFERENCES site (id)
        ON UPDATE RESTRICT
        ON DELETE CASCADE,
    UNIQUE (word, site_id)
) STRICT
    """,
    "CREATE INDEX word_word_idx ON word (word)",
]


class Query(Enum):
    """Query identifies a particular operation on the database."""

    HostnameUpsert = auto()
    HostnameGetByAddr = auto()
    HostnameCount = auto()
    MetadataUpsert = auto()
    MetadataGetByHostname = auto()
    ScanHistoryAdd = auto()
    ScanHistoryGetRecent = auto()
    SiteAdd = auto()
    SiteGetByURL = auto()
    SiteUpdateCrawl = auto()
    PageUpsert = auto()
    PageGetBySite = auto()
    WordDeleteBySite = auto()
    WordAdd = auto()
    WordGetBySite = auto()
    WordSearch = auto()


qdb: Final[dict[Query, str]] = {
    Query.HostnameUpsert: """
INSERT INTO hostname (addr, name, first_seen, last_seen, lookup_ms)
VALUES (?, ?, ?, ?, ?)
ON CONFLICT (addr) DO UPDATE
SET name = excluded.name,
    last_seen = excluded.last_seen,
    lookup_ms = excluded.lookup_ms,
    visit_count = visit_count + 1
RETURNING id, first_seen, visit_count
    """,
    Query.HostnameGetByAddr: """
SELECT
    id,
    name,
    first_seen,
    last_seen,
    visit_count,
    lookup_ms
FROM hostname
WHERE addr = ?
    """,
    Query.HostnameCount: "SELECT COUNT(id) FROM hostname",
    Query.MetadataUpsert: """
INSERT INTO metadata (hostname_id,
                      title,
                      description,
                      keywords,
                      snippet,
                      fetched,
                      http_status,
                      content_type,
                      size_bytes,
                      url)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
ON CONFLICT (hostname_id) DO UPDATE
SET title = excluded.title,
    description = excluded.description,
    keywords = excluded.keywords,
    snippet = excluded.snippet,
    fetched = excluded.fetched,
    http_status = excluded.http_status,
    content_type = excluded.content_type,
    size_bytes = excluded.size_bytes,
    url = excluded.url
    """,
    Query.MetadataGetByHostname: """
SELECT
    title,
    description,
    keywords,
    snippet,
    http_status,
    content_type,
    size_bytes,
    url
FROM metadata
WHERE hostname_id = ?
    """,
    Query.ScanHistoryAdd: """
INSERT INTO scan_history (start_addr, end_addr, processed, found, started, finished, duration)
VALUES (?, ?, ?, ?, ?, ?, ?)
RETURNING id
    """,
    Query.ScanHistoryGetRecent: """
SELECT
    id,
    start_addr,
    end_addr,
    processed,
    found,
    started,
    finished,
    duration
FROM scan_history
ORDER BY started DESC
LIMIT ?
    """,
    Query.SiteAdd: """
INSERT INTO site (url, title, registered) VALUES (?, ?, ?)
ON CONFLICT (url) DO UPDATE SET title = excluded.title
RETURNING id
    """,
    Query.SiteGetByURL: "SELECT id, title, registered, last_crawl FROM site WHERE url = ?",
    Query.SiteUpdateCrawl: "UPDATE site SET last_crawl = ? WHERE id = ?",
    Query.PageUpsert: """
INSERT INTO page (site_id, url, title, content_hash, text_length, last_crawl)
VALUES (?, ?, ?, ?, ?, ?)
ON CONFLICT (site_id, url) DO UPDATE
SET title = excluded.title,
    content_hash = excluded.content_hash,
    text_length = excluded.text_length,
    last_crawl = excluded.last_crawl
    """,
    Query.PageGetBySite: """
SELECT
    url,
    title,
    text_length,
    content_hash
FROM page
WHERE site_id = ?
ORDER BY url
    """,
    Query.WordDeleteBySite: "DELETE FROM word WHERE site_id = ?",
    Query.WordAdd: "INSERT INTO word (site_id, word, frequency) VALUES (?, ?, ?)",
    Query.WordGetBySite: """
SELECT
    word,
    frequency
FROM word
WHERE site_id = ?
ORDER BY frequency DESC, id
    """,
    Query.WordSearch: """
SELECT
    s.url,
    w.frequency
FROM word w
INNER JOIN site s ON w.site_id = s.id
WHERE w.word = ?
ORDER BY w.frequency DESC
    """,
}


open_lock: Final[Lock] = Lock()


class Database:
    """Database is the persistent store for hostnames, scans, and crawled sites.

    A connection must only be used by the thread that opened it.
    """

    __slots__ = [
        "db",
        "log",
        "path",
    ]

    def __init__(self, path: Optional[Union[Path, str]] = None) -> None:
        if path is None:
            self.path = common.path.db
        else:
            match path:
                case x if isinstance(x, Path):
                    self.path = x
                case x if isinstance(x, str):
                    self.path = Path(x)

        self.log = common.get_logger("database")
        self.log.debug("Open database at %s", self.path)

        with open_lock:
            exist: Final[bool] = krylib.fexist(str(self.path))
            self.db = sqlite3.connect(str(self.path))
            self.db.isolation_level = None

            cur: Final[sqlite3.Cursor] = self.db.cursor()
            cur.execute("PRAGMA foreign_keys = true")
            cur.execute("PRAGMA journal_mode = WAL")

            if not exist:
                self.__create_db()

    def __create_db(self) -> None:
        """Initialize a freshly created database"""
        self.log.debug("Initialize fresh database at %s", self.path)
        with self.db:
            for query in qinit:
                try:
                    cur: sqlite3.Cursor = self.db.cursor()
                    cur.execute(query)
                except sqlite3.OperationalError as operr:
                    self.log.debug("%s executing init query: %s\n%s\n",
                                   operr.__class__.__name__,
                                   operr,
                                   query)
                    raise
        self.log.debug("Database initialized successfully.")

    def close(self) -> None:
        """Close the database connection."""
        self.db.close()
        del self.db

    def __enter__(self) -> None:
        self.db.__enter__()

    def __exit__(self, ex_type, ex_val, tb):
        return self.db.__exit__(ex_type, ex_val, tb)

    def hostname_upsert(self, lookup: Lookup) -> HostnameRecord:
        """Store the hostname found for an address.

        If the address is already known, its name, latency, and timestamp are
        replaced, and its visit counter is incremented.
        """
        if lookup.name is None:
            msg = f"Cannot store {lookup.addr} without a hostname"
            self.log.error(msg)
            raise DBError(msg)

        stamp: Final[int] = int(lookup.stamp.timestamp())
        cur: Final[sqlite3.Cursor] = self.db.cursor()
        cur.execute(qdb[Query.HostnameUpsert], (lookup.addr,
                                                lookup.name,
                                                stamp,
                                                stamp,
                                                lookup.latency_ms))
        row = cur.fetchone()
        if row is None:
            msg = f"Adding hostname {lookup.addr}/{lookup.name} did not return an ID"
            self.log.error(msg)
            raise DBError(msg)

        return HostnameRecord(host_id=row[0],
                              ip=lookup.addr,
                              hostname=lookup.name,
                              found_at=lookup.stamp,
                              lookup_ms=lookup.latency_ms,
                              visit_count=row[2],
                              first_seen=datetime.fromtimestamp(row[1]))

    def hostname_get_by_addr(self, addr: str) -> Optional[HostnameRecord]:
        """Look up a HostnameRecord by its address."""
        cur: Final[sqlite3.Cursor] = self.db.cursor()
        cur.execute(qdb[Query.HostnameGetByAddr], (addr, ))
        row = cur.fetchone()

        if row is None:
            return None

        return HostnameRecord(host_id=row[0],
                              ip=addr,
                              hostname=row[1],
                              first_seen=datetime.fromtimestamp(row[2]),
                              found_at=datetime.fromtimestamp(row[3]),
                              visit_count=row[4],
                              lookup_ms=row[5] or 0)

    def hostname_count(self) -> int:
        """Return the number of known hostnames."""
        cur: Final[sqlite3.Cursor] = self.db.cursor()
        cur.execute(qdb[Query.HostnameCount])
        return cur.fetchone()[0]

    def metadata_upsert(self, rec: HostnameRecord, meta: SiteMetadata) -> None:
        """Store the SiteMetadata for a hostname, replacing what we had before."""
        if rec.host_id < 1:
            msg = f"HostnameRecord for {rec.ip} has no ID"
            self.log.error(msg)
            raise ValueError(msg)

        cur: Final[sqlite3.Cursor] = self.db.cursor()
        cur.execute(qdb[Query.MetadataUpsert], (rec.host_id,
                                                meta.title,
                                                meta.description,
                                                meta.keywords,
                                                meta.snippet,
                                                int(datetime.now().timestamp()),
                                                meta.http_status,
                                                meta.content_type,
                                                meta.size_bytes,
                                                meta.final_url))

    def metadata_get(self, rec: HostnameRecord) -> Optional[SiteMetadata]:
        """Load the SiteMetadata for a hostname."""
        cur: Final[sqlite3.Cursor] = self.db.cursor()
        cur.execute(qdb[Query.MetadataGetByHostname], (rec.host_id, ))
        row = cur.fetchone()
        if row is None:
            return None

        return SiteMetadata(title=row[0],
                            description=row[1],
                            keywords=row[2],
                            snippet=row[3],
                            http_status=row[4],
                            content_type=row[5],
                            size_bytes=row[6],
                            final_url=row[7])

    def scan_history_add(self, summary: ScanSummary) -> int:
        """Record a completed scan. Returns the ID of the new row."""
        cur: Final[sqlite3.Cursor] = self.db.cursor()
        cur.execute(qdb[Query.ScanHistoryAdd], (str(IPv4Address(summary.arange.start)),
                                                str(IPv4Address(summary.arange.end)),
                                                summary.processed,
                                                summary.found,
                                                int(summary.started.timestamp()),
                                                int(summary.finished.timestamp()),
                                                int(summary.duration.total_seconds())))
        row = cur.fetchone()
        if row is None:
            msg = f"Adding scan history for {summary.arange} did not return an ID"
            self.log.error(msg)
            raise DBError(msg)
        return row[0]

    def scan_history_get_recent(self, cnt: int = 10) -> list[dict]:
        """Return the <cnt> most recent scans, newest first."""
        cur: Final[sqlite3.Cursor] = self.db.cursor()
        cur.execute(qdb[Query.ScanHistoryGetRecent], (cnt, ))
        return [{
            "id": row[0],
            "start": row[1],
            "end": row[2],
            "processed": row[3],
            "found": row[4],
            "started": datetime.fromtimestamp(row[5]),
            "finished": datetime.fromtimestamp(row[6]),
            "duration": row[7],
        } for row in cur]

    def site_add(self, url: str, title: str = "") -> int:
        """Register a site, or update the title of a known one. Returns the site's ID."""
        cur: Final[sqlite3.Cursor] = self.db.cursor()
        cur.execute(qdb[Query.SiteAdd], (url, title, int(datetime.now().timestamp())))
        row = cur.fetchone()
        if row is None:
            msg = f"Adding site {url} did not return an ID"
            self.log.error(msg)
            raise DBError(msg)
        return row[0]

    def site_get_id(self, url: str) -> Optional[int]:
        """Look up the ID of a site by its URL."""
        cur: Final[sqlite3.Cursor] = self.db.cursor()
        cur.execute(qdb[Query.SiteGetByURL], (url, ))
        row = cur.fetchone()
        if row is None:
            return None
        return row[0]

    def site_update_crawl(self, site_id: int, stamp: Optional[datetime] = None) -> None:
        """Set a site's last_crawl timestamp.

        If no timestamp is given, use the current time.
        """
        if stamp is None:
            stamp = datetime.now()
        cur: Final[sqlite3.Cursor] = self.db.cursor()
        cur.execute(qdb[Query.SiteUpdateCrawl], (int(stamp.timestamp()), site_id))

    def page_upsert(self, site_id: int, page: PageRecord) -> None:
        """Store an indexed page."""
        cur: Final[sqlite3.Cursor] = self.db.cursor()
        cur.execute(qdb[Query.PageUpsert], (site_id,
                                            page.url,
                                            page.title,
                                            page.content_hash,
                                            page.text_length,
                                            int(datetime.now().timestamp())))

    def page_get_by_site(self, site_id: int) -> list[PageRecord]:
        """Load all pages of a site."""
        cur: Final[sqlite3.Cursor] = self.db.cursor()
        cur.execute(qdb[Query.PageGetBySite], (site_id, ))
        return [PageRecord(url=row[0],
                           title=row[1],
                           text_length=row[2],
                           content_hash=row[3]) for row in cur]

    def word_replace(self, site_id: int, words: Sequence[tuple[str, int]]) -> None:
        """Replace the word frequencies of a site."""
        cur: Final[sqlite3.Cursor] = self.db.cursor()
        cur.execute(qdb[Query.WordDeleteBySite], (site_id, ))
        cur.executemany(qdb[Query.WordAdd], [(site_id, w, n) for w, n in words])

    def word_get_by_site(self, site_id: int) -> list[tuple[str, int]]:
        """Return the word frequencies of a site, most frequent first."""
        cur: Final[sqlite3.Cursor] = self.db.cursor()
        cur.execute(qdb[Query.WordGetBySite], (site_id, ))
        return [(row[0], row[1]) for row in cur]

    def word_search(self, word: str) -> list[tuple[str, int]]:
        """Return the sites containing <word> with its frequency there."""
        cur: Final[sqlite3.Cursor] = self.db.cursor()
        cur.execute(qdb[Query.WordSearch], (word.lower(), ))
        return [(row[0], row[1]) for row in cur]


# Local Variables: #
# python-indent: 4 #
# End: #
