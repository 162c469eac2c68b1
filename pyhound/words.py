#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-01-30 15:45:26 krylon>
#
# /data/code/python/pyhound/words.py
# created on 17. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the PyHound network scanner. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
pyhound.words

(c) 2026 Benjamin Walkenhorst
"""

import re
from dataclasses import dataclass, field
from threading import Lock
from typing import Final, Iterable, Optional

min_word_len: Final[int] = 3

stop_words: Final[frozenset[str]] = frozenset({
    "a",
    "an",
    "the",
    "and",
    "or",
    "but",
    "if",
    "then",
    "else",
    "when",
    "at",
    "from",
    "by",
    "on",
    "off",
    "for",
    "in",
    "out",
    "over",
    "to",
    "into",
    "with",
})

tag_pat: Final[re.Pattern] = re.compile("<[^>]*>")
# \w minus the underscore is as close as re gets to [\p{L}\p{N}].
junk_pat: Final[re.Pattern] = re.compile("[^\\w\\s]|_")


def tokenize(text: str) -> list[str]:
    """Split <text> into lowercase words consisting of letters and digits only."""
    text = tag_pat.sub(" ", text.lower())
    text = junk_pat.sub(" ", text)
    return text.split()


def is_indexable(token: str, stop: Optional[frozenset[str]] = None) -> bool:
    """Return True if <token> is long enough and not a stop word."""
    if stop is None:
        stop = stop_words
    return len(token) >= min_word_len and token not in stop


@dataclass(kw_only=True, slots=True)
class WordIndex:
    """WordIndex counts how often words occur across a number of texts.

    It is safe to feed a WordIndex from several threads at once.
    """

    stop: frozenset[str] = stop_words
    freq: dict[str, int] = field(default_factory=dict)
    total: int = 0
    lock: Lock = field(default_factory=Lock)

    def add_text(self, text: str) -> int:
        """Tokenize <text> and count its indexable words. Returns the number of tokens."""
        tokens: Final[list[str]] = tokenize(text)
        self.add_tokens(tokens)
        return len(tokens)

    def add_tokens(self, tokens: Iterable[str]) -> None:
        """Count the indexable ones among <tokens>."""
        with self.lock:
            for t in tokens:
                self.total += 1
                if is_indexable(t, self.stop):
                    self.freq[t] = self.freq.get(t, 0) + 1

    def ranked(self) -> list[tuple[str, int]]:
        """Return all words, most frequent first.

        Words of equal frequency stay in the order they were first seen.
        """
        with self.lock:
            return sorted(self.freq.items(), key=lambda x: x[1], reverse=True)


# Local Variables: #
# python-indent: 4 #
# End: #
