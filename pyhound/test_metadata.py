#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-02-16 18:51:22 krylon>
#
# /data/code/python/pyhound/test_metadata.py
# created on 15. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the PyHound network scanner. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
pyhound.test_metadata

(c) 2026 Benjamin Walkenhorst
"""

import os
import shutil
import unittest
from datetime import datetime
from types import SimpleNamespace
from typing import Final, Optional
from unittest.mock import patch

import requests
from bs4.builder import ParserRejectedMarkup

from pyhound import common
from pyhound.metadata import (MetadataFetcher, extract_snippet, find_meta,
                              parse_metadata)
from pyhound.model import SiteMetadata

test_dir: Final[str] = os.path.join(
    "/tmp",
    datetime.now().strftime(f"{common.AppName.lower()}_test_metadata_%Y%m%d_%H%M%S"))

sample: Final[str] = """<!DOCTYPE html>
<html>
<head>
  <TITLE lang="en">  Example Host  </TITLE>
  <meta content="router, firmware" name="keywords">
  <meta name="description" content="The gateway of the example network">
</head>
<body class="main">
  <h1>Hello</h1>
  <p>This   is
     a <b>test</b> page.</p>
</body>
</html>
"""


class FakeSession:
    """FakeSession hands out canned responses instead of talking to the network."""

    def __init__(self, responses: dict[str, SimpleNamespace]) -> None:
        self.responses = responses
        self.calls: list[tuple[str, dict]] = []

    def get(self, url: str, **kwargs) -> SimpleNamespace:
        """Pretend to fetch <url>."""
        self.calls.append((url, kwargs))
        res: Final[Optional[SimpleNamespace]] = self.responses.get(url)
        if res is None:
            raise requests.ConnectionError(f"Cannot connect to {url}")
        return res


def response(status: int, body: str, url: str, ctype: str = "text/html; charset=utf-8") -> SimpleNamespace:  # noqa: E501
    """Build a fake response."""
    return SimpleNamespace(status_code=status,
                           headers={"Content-Type": ctype},
                           content=body.encode(),
                           text=body,
                           url=url)


class TestParse(unittest.TestCase):
    """Test extracting metadata from HTML."""

    def test_01_parse(self) -> None:
        """Test parsing a complete page."""
        meta: Final[SiteMetadata] = parse_metadata(sample, SiteMetadata())
        self.assertEqual(meta.title, "Example Host")
        self.assertEqual(meta.description, "The gateway of the example network")
        self.assertEqual(meta.keywords, "router, firmware")
        self.assertEqual(meta.snippet, "Hello This is a test page.")

    def test_02_missing(self) -> None:
        """Test a page that has none of what we are looking for."""
        meta: Final[SiteMetadata] = parse_metadata("<p>bare</p>", SiteMetadata())
        self.assertIsNone(meta.title)
        self.assertIsNone(meta.description)
        self.assertIsNone(find_meta("<p>bare</p>", "keywords"))
        self.assertEqual(meta.snippet, "")

    def test_03_snippet_length(self) -> None:
        """Test that long bodies are truncated."""
        html: Final[str] = "<body>" + "word " * 1000 + "</body>"
        snippet: Final[str] = extract_snippet(html)
        self.assertLessEqual(len(snippet), 500)
        self.assertTrue(snippet.startswith("word word"))


class TestFetch(unittest.TestCase):
    """Test fetching metadata."""

    @classmethod
    def setUpClass(cls) -> None:
        """Prepare the testing environment."""
        common.set_basedir(test_dir)

    @classmethod
    def tearDownClass(cls) -> None:
        """Clean up afterwards."""
        shutil.rmtree(test_dir, ignore_errors=True)

    def fetcher(self, responses: dict[str, SimpleNamespace]) -> tuple[MetadataFetcher, FakeSession]:  # noqa: E501
        """Create a MetadataFetcher that uses a FakeSession."""
        mf = MetadataFetcher(timeout=2.0)
        sess = FakeSession(responses)
        mf.pool.session = sess
        return mf, sess

    def test_01_ok(self) -> None:
        """Test fetching a page that exists."""
        mf, sess = self.fetcher({
            "http://www.example.com": response(200, sample, "http://www.example.com/"),
        })
        meta: Final[SiteMetadata] = mf.fetch("www.example.com")

        self.assertTrue(meta.ok)
        self.assertEqual(meta.http_status, 200)
        self.assertEqual(meta.title, "Example Host")
        self.assertEqual(meta.content_type, "text/html; charset=utf-8")
        self.assertEqual(meta.size_bytes, len(sample.encode()))
        self.assertEqual(meta.final_url, "http://www.example.com/")

        url, kwargs = sess.calls[0]
        self.assertEqual(url, "http://www.example.com")
        self.assertEqual(kwargs["timeout"], 2.0)
        self.assertFalse(kwargs["verify"])

    def test_02_not_found(self) -> None:
        """Test a server that answers with an error status."""
        mf, _ = self.fetcher({
            "http://www.example.com": response(404, sample, "http://www.example.com/"),
        })
        meta: Final[SiteMetadata] = mf.fetch("www.example.com", 1.0)

        self.assertFalse(meta.ok)
        self.assertEqual(meta.http_status, 404)
        self.assertIsNone(meta.title)
        self.assertIsNone(meta.snippet)

    def test_03_unreachable(self) -> None:
        """Test a host that cannot be reached."""
        mf, sess = self.fetcher({})
        meta: Final[SiteMetadata] = mf.fetch("nowhere.example.com", 0.5)

        self.assertFalse(meta.ok)
        self.assertEqual(meta.http_status, 0)
        self.assertIsNone(meta.title)
        self.assertEqual(meta.final_url, "http://nowhere.example.com")
        self.assertEqual(sess.calls[0][1]["timeout"], 0.5)

    def test_04_rejected_markup(self) -> None:
        """Test a page the HTML parser refuses to deal with."""
        mf, _ = self.fetcher({
            "http://www.example.com": response(200, sample, "http://www.example.com/"),
        })
        with patch("pyhound.metadata.BeautifulSoup",
                   side_effect=ParserRejectedMarkup("garbage")):
            meta: Final[SiteMetadata] = mf.fetch("www.example.com")

        self.assertEqual(meta.http_status, 200)
        self.assertEqual(meta.final_url, "http://www.example.com/")
        self.assertIsNone(meta.title)
        self.assertIsNone(meta.description)
        self.assertIsNone(meta.snippet)


# Local Variables: #
# python-indent: 4 #
# End: #
