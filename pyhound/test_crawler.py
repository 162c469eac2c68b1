#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-02-16 19:14:55 krylon>
#
# /data/code/python/pyhound/test_crawler.py
# created on 20. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the PyHound network scanner. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
pyhound.test_crawler

(c) 2026 Benjamin Walkenhorst
"""

import os
import shutil
import unittest
from datetime import datetime
from threading import Lock
from types import SimpleNamespace
from typing import Callable, Final, Optional

from pyhound import common
from pyhound.common import ConfigurationError
from pyhound.config import CrawlConfig
from pyhound.crawler import (SiteCrawler, extension, normalize_url,
                             resolve_url, store_crawl)
from pyhound.database import Database
from pyhound.model import CrawlResult

test_dir: Final[str] = os.path.join(
    "/tmp",
    datetime.now().strftime(f"{common.AppName.lower()}_test_crawler_%Y%m%d_%H%M%S"))


def page(title: str, body: str, *links: str) -> str:
    """Assemble a small HTML document."""
    anchors: Final[str] = "".join(f'<a href="{x}"></a>' for x in links)
    return f"<html><head><title>{title}</title></head><body>{body}{anchors}</body></html>"


class FakeSite:
    """FakeSite serves pages from a dict and remembers what was requested.

    <redirects> maps URLs to the URL they are redirected to. If <hook> is set, it
    is called after every request.
    """

    def __init__(self,
                 pages: dict[str, str],
                 redirects: Optional[dict[str, str]] = None,
                 hook: Optional[Callable[[], None]] = None) -> None:
        self.pages = pages
        self.redirects = redirects or {}
        self.hook = hook
        self.requested: list[str] = []
        self.lock = Lock()

    def __call__(self, url: str) -> Optional[tuple[str, str]]:
        with self.lock:
            self.requested.append(url)
        if self.hook is not None:
            self.hook()
        final: Final[str] = self.redirects.get(url, url)
        html: Final[Optional[str]] = self.pages.get(final)
        if html is None:
            return None
        return final, html


class TestURL(unittest.TestCase):
    """Test resolving and normalizing URLs."""

    def test_01_resolve(self) -> None:
        """Test resolving links relative to the page they appear on."""
        base: Final[str] = "http://example.com/dir/page.html"
        test_cases: Final[list[tuple[str, Optional[str]]]] = [
            ("/x", "http://example.com/x"),
            ("//cdn.example.com/y", "http://cdn.example.com/y"),
            ("z.html", "http://example.com/dir/z.html"),
            ("#frag", None),
            ("", None),
            ("?q=1", "http://example.com/dir/page.html?q=1"),
            ("https://other.example.org/a", "https://other.example.org/a"),
            ("mailto:root@example.com", None),
            ("javascript:void(0)", None),
            ("../up.html", "http://example.com/up.html"),
            ("./z.html", "http://example.com/dir/z.html"),
            ("../../../top.html", "http://example.com/top.html"),
        ]

        for c in test_cases:
            self.assertEqual(resolve_url(c[0], base), c[1], c[0])

        self.assertEqual(resolve_url("//cdn.example.com/y", "https://example.com/"),
                         "https://cdn.example.com/y")
        self.assertEqual(resolve_url("/x", "http://example.com:8080/a/b"),
                         "http://example.com:8080/x")

    def test_02_normalize(self) -> None:
        """Test that different spellings of a URL end up the same."""
        test_cases: Final[list[tuple[str, str]]] = [
            ("HTTP://Example.COM:80//a//b/?z=1&a=2#frag", "http://example.com/a/b?a=2&z=1"),
            ("http://example.com/", "http://example.com"),
            ("http://example.com", "http://example.com"),
            ("https://example.com:443/x", "https://example.com/x"),
            ("https://example.com:8443/x/", "https://example.com:8443/x"),
            ("http://example.com/page.html#top", "http://example.com/page.html"),
            ("http://example.com/dir/../b.html", "http://example.com/b.html"),
            ("http://example.com/a/./b/", "http://example.com/a/b"),
        ]

        for c in test_cases:
            self.assertEqual(normalize_url(c[0]), c[1], c[0])

    def test_03_extension(self) -> None:
        """Test extracting file extensions."""
        test_cases: Final[list[tuple[str, str]]] = [
            ("http://example.com/a/b.PDF?x=1", "pdf"),
            ("http://example.com/img.tar.gz", "gz"),
            ("http://example.com/dir/", ""),
            ("http://example.com", ""),
            ("http://example.com/v1.2/index", ""),
        ]

        for c in test_cases:
            self.assertEqual(extension(c[0]), c[1], c[0])


class TestCrawler(unittest.TestCase):
    """Test crawling (fake) sites."""

    @classmethod
    def setUpClass(cls) -> None:
        """Prepare the testing environment."""
        common.set_basedir(test_dir)

    @classmethod
    def tearDownClass(cls) -> None:
        """Clean up afterwards."""
        shutil.rmtree(test_dir, ignore_errors=True)

    def test_01_bad_seed(self) -> None:
        """Test that a seed that is not an absolute HTTP URL is rejected."""
        for seed in ("", "example.com", "ftp://example.com/", "/index.html"):
            with self.assertRaises(ConfigurationError):
                SiteCrawler(cfg=CrawlConfig(seed=seed))

    def test_02_crawl(self) -> None:
        """Test crawling a small site."""
        site = FakeSite({
            "http://example.com/": page("Home",
                                        "Welcome hound hound",
                                        "/a.html",
                                        "b.html",
                                        "/doc.pdf",
                                        "http://other.example.org/x",
                                        "mailto:root@example.com",
                                        "#top"),
            "http://example.com/a.html": page("A", "hound alpha", "/", "b.html"),
            "http://example.com/b.html": page("B",
                                              "alpha beta<script>var hidden = 1;</script>",
                                              "a.html",
                                              "/missing.html"),
            "http://example.com/doc.pdf": page("PDF", "should never be fetched"),
            "http://other.example.org/x": page("Other", "should never be fetched"),
        })

        crawler = SiteCrawler(cfg=CrawlConfig(seed="http://example.com/", workers=3),
                              fetch_page=site)
        result: Final[CrawlResult] = crawler.crawl()

        self.assertEqual(len(result.pages), 3)
        self.assertEqual(len(crawler.visited), 4)
        self.assertIn("http://example.com/missing.html", site.requested)
        self.assertNotIn("http://example.com/doc.pdf", site.requested)
        self.assertNotIn("http://other.example.org/x", site.requested)
        self.assertEqual(len(site.requested), len(set(site.requested)))

        self.assertEqual(result.frequency, {"welcome": 1, "hound": 3, "alpha": 2, "beta": 1})
        self.assertEqual(result.total_words, 7)
        self.assertEqual(result.words[0], ("hound", 3))
        self.assertEqual(result.words[1], ("alpha", 2))
        self.assertEqual({p.title for p in result.pages}, {"Home", "A", "B"})
        for p in result.pages:
            self.assertEqual(len(p.content_hash), 32)

    def test_03_cycle(self) -> None:
        """Test that pages linking to each other do not keep us busy forever."""
        site = FakeSite({
            "http://example.com/a": page("A", "ping", "/b", "/a", "/a#again"),
            "http://example.com/b": page("B", "pong", "/a", "/b/", "//example.com/b"),
        })

        crawler = SiteCrawler(cfg=CrawlConfig(seed="http://example.com/a", workers=2),
                              fetch_page=site)
        result: Final[CrawlResult] = crawler.crawl()

        self.assertEqual(len(result.pages), 2)
        self.assertEqual(result.frequency, {"ping": 1, "pong": 1})

    def test_04_max_pages(self) -> None:
        """Test that the crawl stops after max_pages pages."""
        pages: dict[str, str] = {}
        for i in range(20):
            pages[f"http://example.com/p{i}"] = page(f"Page {i}",
                                                     f"page number {i}",
                                                     f"/p{i+1}",
                                                     f"/p{i+2}",
                                                     "/p0")
        site = FakeSite(pages)

        crawler = SiteCrawler(cfg=CrawlConfig(seed="http://example.com/p0",
                                              max_pages=5,
                                              workers=4),
                              fetch_page=site)
        result: Final[CrawlResult] = crawler.crawl()

        self.assertEqual(len(crawler.visited), 5)
        self.assertEqual(len(result.pages), 5)
        self.assertEqual(len(site.requested), 5)
        self.assertEqual(result.frequency["page"], 5)
        self.assertEqual(result.frequency["number"], 5)

    def test_05_all_domains(self) -> None:
        """Test following links to other hosts if we are allowed to."""
        site = FakeSite({
            "http://example.com/": page("Home", "home", "http://other.example.org/"),
            "http://other.example.org/": page("Other", "elsewhere"),
        })

        crawler = SiteCrawler(cfg=CrawlConfig(seed="http://example.com/",
                                              same_domain_only=False,
                                              workers=1),
                              fetch_page=site)
        result: Final[CrawlResult] = crawler.crawl()
        self.assertEqual(len(result.pages), 2)
        self.assertEqual(result.frequency, {"home": 1, "elsewhere": 1})

    def test_06_store(self) -> None:
        """Test saving the outcome of a crawl in the database."""
        site = FakeSite({
            "http://example.com/": page("Home", "hound hound hound", "/a"),
            "http://example.com/a": page("A", "alpha hound"),
        })
        seed: Final[str] = "http://example.com/"
        crawler = SiteCrawler(cfg=CrawlConfig(seed=seed, workers=1), fetch_page=site)
        result: Final[CrawlResult] = crawler.crawl()

        db: Final[Database] = Database(os.path.join(test_dir, "crawl.db"))
        try:
            site_id: int = store_crawl(db, seed, result)
            self.assertGreater(site_id, 0)
            self.assertEqual(db.site_get_id(seed), site_id)
            self.assertEqual(db.word_get_by_site(site_id), [("hound", 4), ("alpha", 1)])
            self.assertEqual(len(db.page_get_by_site(site_id)), 2)

            # A second crawl replaces the index instead of adding to it.
            self.assertEqual(store_crawl(db, seed, result), site_id)
            self.assertEqual(db.word_get_by_site(site_id), [("hound", 4), ("alpha", 1)])
            self.assertEqual(db.word_search("hound"), [(seed, 4)])
        finally:
            db.close()

    def test_07_no_body(self) -> None:
        """Test indexing a page that does not bother with a <body> tag."""
        site = FakeSite({
            "http://example.com/": "<html><title>T</title><p>hound hound kennel</p></html>",
        })
        crawler = SiteCrawler(cfg=CrawlConfig(seed="http://example.com/", workers=1),
                              fetch_page=site)
        result: Final[CrawlResult] = crawler.crawl()

        self.assertEqual(len(result.pages), 1)
        self.assertEqual(result.pages[0].title, "T")
        self.assertEqual(result.words, [("hound", 2), ("kennel", 1)])
        self.assertEqual(result.total_words, 3)

    def test_08_dot_segments(self) -> None:
        """Test that links climbing up the directory tree do not revisit pages."""
        site = FakeSite({
            "http://example.com/b.html": page("B", "bravo", "dir/a.html"),
            "http://example.com/dir/a.html": page("A", "alpha", "../b.html", "./a.html"),
        })
        crawler = SiteCrawler(cfg=CrawlConfig(seed="http://example.com/b.html", workers=2),
                              fetch_page=site)
        result: Final[CrawlResult] = crawler.crawl()

        self.assertEqual(sorted(site.requested),
                         ["http://example.com/b.html", "http://example.com/dir/a.html"])
        self.assertEqual(len(result.pages), 2)
        self.assertEqual(result.frequency, {"bravo": 1, "alpha": 1})

    def test_09_redirect(self) -> None:
        """Test that links are resolved against the URL a page was redirected to."""
        site = FakeSite({
            "http://example.com/": page("Home", "home", "/dir"),
            "http://example.com/dir/": page("Dir", "index", "sub.html"),
            "http://example.com/dir/sub.html": page("Sub", "leaf"),
        }, redirects={"http://example.com/dir": "http://example.com/dir/"})
        crawler = SiteCrawler(cfg=CrawlConfig(seed="http://example.com/", workers=1),
                              fetch_page=site)
        result: Final[CrawlResult] = crawler.crawl()

        self.assertIn("http://example.com/dir/sub.html", site.requested)
        self.assertNotIn("http://example.com/sub.html", site.requested)
        self.assertEqual(result.frequency, {"home": 1, "index": 1, "leaf": 1})

    def test_10_fetch(self) -> None:
        """Test fetching a page over (fake) HTTP."""
        crawler = SiteCrawler(cfg=CrawlConfig(seed="http://example.com/"))
        html: Final[str] = page("Dir", "index")
        crawler.pool.session = SimpleNamespace(
            get=lambda url, **kwargs: SimpleNamespace(
                status_code=200,
                headers={"Content-Type": "text/html"},
                content=html.encode(),
                text=html,
                url=url + "/"))

        self.assertEqual(crawler._fetch("http://example.com/dir"),  # pylint: disable-msg=W0212
                         ("http://example.com/dir/", html))

    def test_11_stop(self) -> None:
        """Test that a crawl that was stopped does not claim any more pages."""
        pages: dict[str, str] = {}
        for i in range(10):
            pages[f"http://example.com/p{i}"] = page(f"Page {i}",
                                                     f"page number {i}",
                                                     f"/p{i+1}",
                                                     f"/p{i+2}")
        site = FakeSite(pages)
        crawler = SiteCrawler(cfg=CrawlConfig(seed="http://example.com/p0", workers=1),
                              fetch_page=site)
        site.hook = crawler.stop
        result: Final[CrawlResult] = crawler.crawl()

        self.assertEqual(site.requested, ["http://example.com/p0"])
        self.assertEqual(crawler.visited, {"http://example.com/p0"})
        self.assertEqual([p.url for p in result.pages], ["http://example.com/p0"])
        self.assertEqual(result.frequency, {"page": 1, "number": 1})
        self.assertEqual(crawler.frontier.unfinished_tasks, 0)
        crawler.frontier.join()


# Local Variables: #
# python-indent: 4 #
# End: #
