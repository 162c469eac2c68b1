#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-02-16 18:51:22 krylon>
#
# /data/code/python/pyhound/metadata.py
# created on 15. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the PyHound network scanner. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
pyhound.metadata

(c) 2026 Benjamin Walkenhorst

Fetch the front page of a host and extract a few bits of information from it.
"""

import logging
import re
from dataclasses import dataclass, field
from threading import local
from typing import Final, Optional

import requests
import urllib3
from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from urllib3.exceptions import InsecureRequestWarning

from pyhound import common
from pyhound.model import SiteMetadata

user_agent: Final[str] = "Mozilla/5.0 (X11; Linux x86_64; rv:128.0) Gecko/20100101 Firefox/128.0"
snippet_len: Final[int] = 500

title_pat: Final[re.Pattern] = re.compile("<title[^>]*>(.*?)</title>", re.I | re.S)
body_pat: Final[re.Pattern] = re.compile("<body[^>]*>(.*?)</body>", re.I | re.S)
space_pat: Final[re.Pattern] = re.compile("\\s+")


def _meta_patterns(name: str) -> tuple[re.Pattern, re.Pattern]:
    """Return patterns for a meta tag with name before and after the content attribute."""
    return (
        re.compile(f"<meta[^>]*name=[\"']{name}[\"'][^>]*content=[\"']([^\"']*)[\"'][^>]*>",
                   re.I | re.S),
        re.compile(f"<meta[^>]*content=[\"']([^\"']*)[\"'][^>]*name=[\"']{name}[\"'][^>]*>",
                   re.I | re.S),
    )


meta_pat: Final[dict[str, tuple[re.Pattern, re.Pattern]]] = {
    "description": _meta_patterns("description"),
    "keywords": _meta_patterns("keywords"),
}


def find_meta(html: str, name: str) -> Optional[str]:
    """Return the content of the first meta tag called <name>, or None."""
    for pat in meta_pat[name]:
        m = pat.search(html)
        if m is not None:
            return m[1].strip()
    return None


def extract_snippet(html: str) -> str:
    """Return the text of the document body, whitespace collapsed and truncated."""
    m = body_pat.search(html)
    if m is None:
        return ""

    soup = BeautifulSoup(m[1], "html.parser")
    text: Final[str] = space_pat.sub(" ", soup.get_text())
    return text.strip()[:snippet_len].strip()


def parse_metadata(html: str, meta: SiteMetadata) -> SiteMetadata:
    """Fill in the text fields of <meta> from the document <html>."""
    m = title_pat.search(html)
    if m is not None:
        meta.title = m[1].strip()
    meta.description = find_meta(html, "description")
    meta.keywords = find_meta(html, "keywords")
    meta.snippet = extract_snippet(html)
    return meta


@dataclass(kw_only=True, slots=True)
class MetadataFetcher:
    """MetadataFetcher retrieves SiteMetadata for hostnames.

    Certificates are not checked unless verify_tls is set. We only want a glimpse at
    what is running on a host, not to trust it with anything.
    """

    log: logging.Logger = field(default_factory=lambda: common.get_logger("metadata"))
    timeout: float = 3.0
    verify_tls: bool = False
    pool: local = field(default_factory=local)

    def __post_init__(self) -> None:
        if not self.verify_tls:
            urllib3.disable_warnings(InsecureRequestWarning)

    @property
    def session(self) -> requests.Session:
        """Return the calling thread's HTTP session."""
        try:
            return self.pool.session
        except AttributeError:
            self.pool.session = requests.Session()
            self.pool.session.headers["User-Agent"] = user_agent
            return self.pool.session

    def fetch(self, hostname: str, timeout: Optional[float] = None) -> SiteMetadata:
        """Fetch the front page of <hostname> via plain HTTP."""
        if timeout is None:
            timeout = self.timeout

        url: Final[str] = f"http://{hostname}"
        meta: SiteMetadata = SiteMetadata(final_url=url)

        try:
            res = self.session.get(url,
                                   timeout=timeout,
                                   allow_redirects=True,
                                   verify=self.verify_tls)
        except requests.RequestException as err:
            self.log.debug("%s fetching %s: %s",
                           err.__class__.__name__,
                           url,
                           err)
            return meta

        meta.http_status = res.status_code
        meta.content_type = res.headers.get("Content-Type")
        meta.size_bytes = len(res.content)
        meta.final_url = res.url or url

        if meta.ok and res.content:
            try:
                parse_metadata(res.text, meta)
            except ParserRejectedMarkup as err:
                self.log.error("Failed to parse page from %s: %s", meta.final_url, err)
                meta.title = meta.description = meta.keywords = meta.snippet = None

        return meta


# Local Variables: #
# python-indent: 4 #
# End: #
