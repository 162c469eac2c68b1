#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-02-11 21:14:09 krylon>
#
# /data/code/python/pyhound/test_cache.py
# created on 14. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the PyHound network scanner. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
pyhound.test_cache

(c) 2026 Benjamin Walkenhorst
"""

import os
import shutil
import time
import unittest
from datetime import datetime
from typing import Final

from pyhound import common
from pyhound.cache import Cache, CacheDB, CacheError, CacheType, TxError

test_dir: Final[str] = os.path.join(
    "/tmp",
    datetime.now().strftime(f"{common.AppName.lower()}_test_cache_%Y%m%d_%H%M%S"))


class TestCache(unittest.TestCase):
    """Test the LMDB-backed cache."""

    @classmethod
    def setUpClass(cls) -> None:
        """Prepare the testing environment."""
        common.set_basedir(test_dir)

    @classmethod
    def tearDownClass(cls) -> None:
        """Clean up afterwards."""
        shutil.rmtree(test_dir, ignore_errors=True)

    def setUp(self) -> None:
        Cache().get_db(CacheType.PTR).purge(True)

    def test_01_put_get(self) -> None:
        """Test storing and retrieving a few items."""
        db: Final[CacheDB] = Cache().get_db(CacheType.PTR, 3600)

        with db.tx(True) as tx:
            for i in range(10):
                tx[f"10.0.0.{i}"] = f"host{i:02d}.example.com"

        with db.tx() as tx:
            for i in range(10):
                self.assertIn(f"10.0.0.{i}", tx)
                self.assertEqual(tx[f"10.0.0.{i}"], f"host{i:02d}.example.com")
            self.assertNotIn("10.0.0.10", tx)

        self.assertEqual(db.get("10.0.0.3"), "host03.example.com")
        db.put("10.0.0.3", "renamed.example.com")
        self.assertEqual(db.get("10.0.0.3"), "renamed.example.com")

        with db.tx(True) as tx:
            del tx["10.0.0.3"]
        self.assertIsNone(db.get("10.0.0.3"))

    def test_02_readonly(self) -> None:
        """Test that a readonly transaction refuses to change anything."""
        db: Final[CacheDB] = Cache().get_db(CacheType.PTR)

        with self.assertRaises(TxError):
            with db.tx() as tx:
                tx["10.0.0.1"] = "nope.example.com"
        self.assertIsNone(db.get("10.0.0.1"))

    def test_03_expire(self) -> None:
        """Test that items are gone once their time is up."""
        short: Final[CacheDB] = Cache().get_db(CacheType.PTR, 0.05)
        short.put("10.0.0.1", "brief.example.com")
        self.assertEqual(short.get("10.0.0.1"), "brief.example.com")
        time.sleep(0.1)
        self.assertIsNone(short.get("10.0.0.1"))

    def test_04_purge(self) -> None:
        """Test removing stale items."""
        keep: Final[CacheDB] = Cache().get_db(CacheType.PTR)
        short: Final[CacheDB] = Cache().get_db(CacheType.PTR, 0.05)

        for i in range(2):
            keep.put(f"10.1.0.{i}", f"keep{i}.example.com")
        for i in range(3):
            short.put(f"10.2.0.{i}", f"short{i}.example.com")

        time.sleep(0.1)
        self.assertEqual(keep.purge(), 3)
        self.assertEqual(keep.get("10.1.0.0"), "keep0.example.com")
        self.assertEqual(len(keep), 2)
        self.assertEqual(keep.purge(complete=True), 2)
        self.assertIsNone(keep.get("10.1.0.1"))
        self.assertEqual(len(keep), 0)

    def test_05_bad_key(self) -> None:
        """Test that only IPv4 addresses can be used as keys."""
        db: Final[CacheDB] = Cache().get_db(CacheType.PTR)
        for key in ("www.example.com", "10.0.0.256", "::1"):
            with self.assertRaises(CacheError):
                db.put(key, "host.example.com")
            with self.assertRaises(CacheError):
                db.get(key)
        self.assertEqual(len(db), 0)


# Local Variables: #
# python-indent: 4 #
# End: #
