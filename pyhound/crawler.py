#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-02-16 18:30:51 krylon>
#
# /data/code/python/pyhound/crawler.py
# created on 20. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the PyHound network scanner. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
pyhound.crawler

(c) 2026 Benjamin Walkenhorst

Crawl a web site, starting from a single page, and count the words we find on it.
"""

import hashlib
import logging
import posixpath
import re
from dataclasses import dataclass, field
from queue import Queue
from threading import Event, Lock, Thread, local
from typing import Callable, Final, Optional
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit

import requests
from bs4 import BeautifulSoup

from pyhound import common
from pyhound.common import ConfigurationError
from pyhound.config import CrawlConfig
from pyhound.control import Cmd, Message, stop_msg
from pyhound.database import Database
from pyhound.model import CrawlResult, PageRecord
from pyhound.words import WordIndex

abs_pat: Final[re.Pattern] = re.compile("^(?:f|ht)tps?://", re.I)
scheme_pat: Final[re.Pattern] = re.compile("^[a-z][a-z0-9+.-]*:", re.I)
slash_pat: Final[re.Pattern] = re.compile("/+")

default_ports: Final[dict[str, int]] = {
    "http": 80,
    "https": 443,
}

# Elements whose text is not part of what a reader sees on the page
invisible_tags: Final[list[str]] = ["script", "style", "noscript", "template"]


def resolve_url(href: str, base: str) -> Optional[str]:
    """Turn the link target <href> found on the page <base> into an absolute URL.

    Returns None for links to a fragment of the same page, for links with a
    scheme we do not crawl (mailto:, javascript:, ...), and if <base> itself is
    not absolute.
    """
    href = href.strip()
    if href == "" or href.startswith("#"):
        return None
    if abs_pat.match(href):
        return href

    parts = urlsplit(base)
    if href.startswith("//"):
        return f"{parts.scheme or 'http'}:{href}"
    if scheme_pat.match(href):
        return None
    if not parts.scheme or not parts.netloc:
        return None
    # Root-relative, query-only and document-relative links, dot segments resolved
    return urljoin(base, href)


def normalize_url(url: str) -> str:
    """Return a canonical form of <url>, so different spellings of a URL compare equal.

    The scheme defaults to http, default ports are dropped, runs of slashes in the
    path are collapsed and dot segments resolved, a trailing slash is removed,
    query parameters are sorted, and the fragment is discarded.
    """
    parts = urlsplit(url.strip())
    scheme: Final[str] = (parts.scheme or "http").lower()
    host: str = parts.hostname or ""
    if ":" in host:
        host = f"[{host}]"

    port: str = ""
    try:
        if parts.port is not None and parts.port != default_ports.get(scheme):
            port = f":{parts.port}"
    except ValueError:
        pass

    path: str = slash_pat.sub("/", parts.path)
    if path:
        path = posixpath.normpath(path)
    path = path.rstrip("/")
    query: str = ""
    if parts.query:
        query = "?" + urlencode(sorted(parse_qsl(parts.query, keep_blank_values=True)))

    return f"{scheme}://{host}{port}{path}{query}"


def extension(url: str) -> str:
    """Return the lowercase file extension of the path of <url>, without the dot."""
    return posixpath.splitext(urlsplit(url).path)[1].lower().lstrip(".")


@dataclass(kw_only=True, slots=True)
class SiteCrawler:
    """SiteCrawler crawls a site and builds a word index from its pages.

    Pages are fetched by a pool of worker threads from a shared frontier. A page
    is claimed by adding its normalized URL to the visited set, which never grows
    beyond cfg.max_pages. Pages that cannot be fetched or parsed count as visited
    but contribute nothing.
    """

    cfg: CrawlConfig
    fetch_page: Optional[Callable[[str], Optional[tuple[str, str]]]] = None
    log: logging.Logger = field(default_factory=lambda: common.get_logger("crawler"))
    lock: Lock = field(default_factory=Lock)
    host: str = field(init=False)
    frontier: Queue[Message] = field(init=False)
    visited: set[str] = field(default_factory=set)
    pages: list[PageRecord] = field(default_factory=list)
    index: WordIndex = field(init=False)
    pool: local = field(default_factory=local)
    _stop: Event = field(default_factory=Event)

    def __post_init__(self) -> None:
        parts = urlsplit(self.cfg.seed)
        if parts.scheme.lower() not in default_ports or not parts.hostname:
            raise ConfigurationError(f"Seed {self.cfg.seed!r} is not an absolute HTTP(S) URL")
        self.host = parts.hostname
        self.frontier = Queue()
        self.index = WordIndex(stop=self.cfg.stop_words)

    @property
    def session(self) -> requests.Session:
        """Return the calling thread's HTTP session."""
        try:
            return self.pool.session
        except AttributeError:
            self.pool.session = requests.Session()
            self.pool.session.headers["User-Agent"] = self.cfg.user_agent
            return self.pool.session

    def stop(self) -> None:
        """Ask the crawl to stop. Pages being fetched right now are finished."""
        self.log.info("Stop was requested.")
        self._stop.set()

    def claim(self, url: str) -> bool:
        """Mark <url> as visited. Return False if it was visited already or we are full."""
        key: Final[str] = normalize_url(url)
        with self.lock:
            if key in self.visited or len(self.visited) >= self.cfg.max_pages:
                return False
            self.visited.add(key)
            return True

    def _should_follow(self, url: str) -> bool:
        """Return True if <url> is a candidate for crawling."""
        parts = urlsplit(url)
        if parts.scheme.lower() not in default_ports:
            return False
        if self.cfg.same_domain_only and parts.hostname != self.host:
            return False
        if extension(url) in self.cfg.excluded_extensions:
            return False

        key: Final[str] = normalize_url(url)
        with self.lock:
            return key not in self.visited and len(self.visited) < self.cfg.max_pages

    def _fetch(self, url: str) -> Optional[tuple[str, str]]:
        """Fetch the page at <url>.

        Return the URL the page was finally served from, after redirects, and its
        content, or None if that failed.
        """
        if self.fetch_page is not None:
            return self.fetch_page(url)

        try:
            res = self.session.get(url, timeout=self.cfg.timeout, allow_redirects=True)
        except requests.RequestException as err:
            self.log.debug("%s fetching %s: %s",
                           err.__class__.__name__,
                           url,
                           err)
            return None

        ctype: Final[str] = res.headers.get("Content-Type", "").lower()
        if res.status_code != 200 or not res.content:
            self.log.debug("Fetching %s returned status %d", url, res.status_code)
            return None
        if ctype and "html" not in ctype:
            self.log.debug("Skip %s, content type is %s", url, ctype)
            return None

        return res.url or url, res.text

    def _visit(self, url: str) -> None:
        """Fetch, index, and harvest links from the page at <url>."""
        fetched: Final[Optional[tuple[str, str]]] = self._fetch(url)
        if fetched is None or not fetched[1]:
            return

        base, html = fetched
        soup = BeautifulSoup(html, "html.parser")
        for tag in soup(invisible_tags):
            tag.decompose()

        title: str = ""
        if soup.title is not None:
            title = soup.title.get_text().strip()

        text: str
        if soup.body is not None:
            text = soup.body.get_text(" ")
        else:
            # No <body> tag, everything outside the head is the body.
            for tag in soup(["head", "title"]):
                tag.decompose()
            text = soup.get_text(" ")

        self.index.add_text(text)
        page: Final[PageRecord] = PageRecord(url=url,
                                             title=title,
                                             text_length=len(text),
                                             content_hash=hashlib.md5(html.encode()).hexdigest())
        with self.lock:
            self.pages.append(page)

        for a in soup.find_all("a", href=True):
            link: Optional[str] = resolve_url(a["href"], base)
            if link is not None and self._should_follow(link):
                self.frontier.put(Message(Tag=Cmd.Crawl, Payload=link))

    def _crawl_worker(self, wid: int) -> None:
        """Take URLs from the frontier and crawl them."""
        self.log.debug("crawl_worker #%02d reporting for work.", wid)
        try:
            while True:
                msg: Message = self.frontier.get()
                try:
                    match msg:
                        case Message(Tag=Cmd.Stop):
                            return
                        case Message(Tag=Cmd.Crawl, Payload=str() as url):
                            if not self._stop.is_set() and self.claim(url):
                                self.log.debug("crawl_worker #%02d visits %s", wid, url)
                                self._visit(url)
                        case _:
                            self.log.error("crawl_worker #%02d received an invalid message: %s",
                                           wid,
                                           msg)
                except Exception as err:  # pylint: disable-msg=W0718
                    self.log.error("%s crawling %s: %s",
                                   err.__class__.__name__,
                                   msg.Payload,
                                   err)
                finally:
                    self.frontier.task_done()
        finally:
            self.log.debug("crawl_worker #%02d is finished.", wid)

    def crawl(self) -> CrawlResult:
        """Crawl the site, return the word index and the list of pages."""
        self.log.info("Crawl %s, at most %d pages",
                      self.cfg.seed,
                      self.cfg.max_pages)

        with self.lock:
            self.visited.clear()
            self.pages.clear()
        self.index = WordIndex(stop=self.cfg.stop_words)
        self.frontier.put(Message(Tag=Cmd.Crawl, Payload=self.cfg.seed))

        workers: list[Thread] = []
        for i in range(self.cfg.workers):
            w: Thread = Thread(target=self._crawl_worker,
                               name=f"crawl_worker_{i+1:02d}",
                               args=(i+1, ),
                               daemon=False)
            w.start()
            workers.append(w)

        try:
            self.frontier.join()
        finally:
            for _ in workers:
                self.frontier.put(stop_msg)
            for w in workers:
                w.join()

        result: Final[CrawlResult] = CrawlResult(words=self.index.ranked(),
                                                 pages=list(self.pages),
                                                 total_words=self.index.total)
        self.log.info("Crawl of %s finished: %d pages, %d words, %d distinct",
                      self.cfg.seed,
                      len(result.pages),
                      result.total_words,
                      len(result.words))
        return result


def store_crawl(db: Database, seed: str, result: CrawlResult) -> int:
    """Save the outcome of a crawl, replacing the word index of the site.

    Returns the site's ID.
    """
    title: Final[str] = result.pages[0].title if result.pages else ""
    with db:
        site_id: Final[int] = db.site_add(seed, title)
        for page in result.pages:
            db.page_upsert(site_id, page)
        db.word_replace(site_id, result.words)
        db.site_update_crawl(site_id)
    return site_id


# Local Variables: #
# python-indent: 4 #
# End: #
