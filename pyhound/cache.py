#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-02-13 19:02:51 krylon>
#
# /data/code/python/pyhound/cache.py
# created on 14. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the PyHound network scanner. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
pyhound.cache

(c) 2026 Benjamin Walkenhorst

The cache remembers the hostnames we found for addresses, so scanning the same
range again does not have to bother the DNS. Entries are keyed by the packed
address, which keeps them sorted in address order.
"""

import logging
import os
import pickle
import traceback
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum, auto
from ipaddress import AddressValueError, IPv4Address
from typing import Final, Iterator, Optional, Union

import lmdb
from krylib import Singleton

from pyhound import common
from pyhound.common import HoundError


class CacheError(HoundError):
    """Exception class to indicate errors in the caching layer"""


class TxError(CacheError):
    """TxError indicates an error related to transaction-handling."""


class CacheType(Enum):
    """CacheType identifies the databases within the cache."""

    PTR = auto()


def addr_key(addr: str) -> bytes:
    """Return the key the entry for <addr> is stored under."""
    try:
        return IPv4Address(addr).packed
    except AddressValueError as err:
        raise CacheError(f"Cannot use {addr!r} as a cache key: {err}") from err


@dataclass(kw_only=True, slots=True)
class CachedName:
    """CachedName is the hostname of an address, plus an expiration timestamp."""

    name: str
    stored: datetime = field(default_factory=datetime.now)
    expires: Optional[datetime] = None

    @property
    def valid(self) -> bool:
        """Return True if the entry's expiration time has not passed, yet."""
        return self.expires is None or self.expires > datetime.now()


@dataclass(kw_only=True, slots=True)
class Tx:
    """Tx wraps a transaction on one of the cache's databases.

    It behaves like a dict mapping addresses to hostnames, except that looking up
    a missing or expired address returns None instead of raising KeyError.
    """

    tx: lmdb.Transaction
    rw: bool
    ttl: Optional[timedelta]

    def _check_rw(self) -> None:
        if not self.rw:
            raise TxError("Cannot change the cache in a readonly transaction!")

    def lookup(self, addr: str) -> Optional[CachedName]:
        """Return the entry for <addr>, unless it is missing or expired.

        In a writable transaction, an expired entry is removed on the way.
        """
        key: Final[bytes] = addr_key(addr)
        raw = self.tx.get(key)
        if raw is None:
            return None

        entry: CachedName = pickle.loads(raw)
        if entry.valid:
            return entry
        if self.rw:
            self.tx.delete(key)
        return None

    def __getitem__(self, addr: str) -> Optional[str]:
        entry: Final[Optional[CachedName]] = self.lookup(addr)
        if entry is None:
            return None
        return entry.name

    def __setitem__(self, addr: str, name: str) -> None:
        self._check_rw()
        entry: Final[CachedName] = CachedName(name=name)
        if self.ttl is not None:
            entry.expires = entry.stored + self.ttl
        self.tx.put(addr_key(addr), pickle.dumps(entry), overwrite=True)

    def __delitem__(self, addr: str) -> None:
        self._check_rw()
        self.tx.delete(addr_key(addr))

    def __contains__(self, addr: str) -> bool:
        return self.lookup(addr) is not None


@dataclass(kw_only=True, slots=True)
class CacheDB:
    """CacheDB is one database within the LMDB environment."""

    name: CacheType
    env: lmdb.Environment
    db: 'lmdb._Database'
    log: logging.Logger = field(init=False)
    ttl: Optional[timedelta] = None

    def __post_init__(self) -> None:
        self.log = common.get_logger(f"cache.{self.name.name}")

    def __len__(self) -> int:
        """Return the number of entries, expired ones included."""
        with self.env.begin(db=self.db) as tx:
            return tx.stat(self.db)["entries"]

    @contextmanager
    def tx(self, rw: bool = False) -> Iterator[Tx]:
        """Perform a transaction. Unless rw is True, no changes are permitted."""
        tx: lmdb.Transaction = self.env.begin(write=rw, db=self.db)
        try:
            yield Tx(tx=tx, rw=rw, ttl=self.ttl)
        except Exception as err:
            cname: Final[str] = err.__class__.__name__
            self.log.error("Abort transaction due to %s: %s\n%s",
                           cname,
                           err,
                           "\n".join(traceback.format_exception(err)))
            tx.abort()
            raise
        else:
            tx.commit()

    def get(self, addr: str) -> Optional[str]:
        """Return the cached hostname of <addr>, if any."""
        with self.tx() as tx:
            return tx[addr]

    def put(self, addr: str, name: str) -> None:
        """Remember <name> as the hostname of <addr>."""
        with self.tx(True) as tx:
            tx[addr] = name

    def purge(self, complete: bool = False) -> int:
        """Remove expired entries. If <complete> is True, remove ALL entries.

        Returns the number of entries removed.
        """
        cnt: int = 0
        with self.env.begin(write=True, db=self.db) as tx:
            cur: lmdb.Cursor = tx.cursor()
            ok: bool = cur.first()

            while ok:
                try:
                    entry: CachedName = pickle.loads(cur.value())
                except pickle.PickleError as err:
                    self.log.error("PickleError trying to de-serialize cache entry %s: %s",
                                   cur.key().hex(),
                                   err)
                    ok = cur.next()
                    continue

                if complete or not entry.valid:
                    cnt += 1
                    # delete() moves the cursor to the following record, if any.
                    cur.delete()
                    ok = cur.key() != b""
                else:
                    ok = cur.next()

        self.log.debug("Removed %d entries from %s cache", cnt, self.name.name)
        return cnt


class Cache(metaclass=Singleton):
    """Cache provides the LMDB environment."""

    __slots__ = [
        "log",
        "env",
        "path",
    ]

    log: logging.Logger
    env: lmdb.Environment
    path: str

    def __init__(self, cache_root: str = "") -> None:
        """Open the cache environment, creating it if needed."""
        map_size: Final[int] = 1 << (36 if os.uname().machine == 'x86_64' else 30)
        self.log = common.get_logger("cache")
        if cache_root == "":
            cache_root = str(common.path.lmdb)
        self.path = cache_root
        self.log.debug("Open Cache environment in %s", cache_root)
        self.env = lmdb.Environment(cache_root,
                                    subdir=True,
                                    map_size=map_size,
                                    metasync=False,
                                    create=True,
                                    max_dbs=len(CacheType),
                                    )

    def get_db(self,
               name: CacheType,
               ttl: Optional[Union[int, float, timedelta]] = None) -> CacheDB:
        """Return the specified database.

        A ttl given as a number is taken to be in seconds. Entries stored
        without a ttl never expire.
        """
        ettl: Optional[timedelta] = None

        if isinstance(ttl, timedelta):
            ettl = ttl
        elif isinstance(ttl, (int, float)):
            ettl = timedelta(seconds=ttl)

        self.log.debug("Open %s cache, ttl = %s", name.name, ettl)
        db: 'lmdb._Database' = self.env.open_db(name.name.encode())
        return CacheDB(name=name, env=self.env, db=db, ttl=ettl)


# Local Variables: #
# python-indent: 4 #
# End: #
