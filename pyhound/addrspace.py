#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-01-22 20:15:48 krylon>
#
# /data/code/python/pyhound/addrspace.py
# created on 13. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the PyHound network scanner. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
pyhound.addrspace

(c) 2026 Benjamin Walkenhorst

Traversal of (parts of) the IPv4 address space, in order or at random.
Addresses are handled as unsigned 32 bit integers throughout.
"""

import logging
import random
from dataclasses import dataclass, field
from enum import Enum, auto
from ipaddress import AddressValueError, IPv4Address
from typing import Final, Iterator, Optional

from pyhound import common
from pyhound.model import AddressRange, InvalidRangeError

full_space: Final[tuple[str, str]] = ("0.0.0.0", "255.255.255.255")


def addr_to_int(addr: str) -> int:
    """Convert a dotted-quad address into an integer."""
    try:
        return int(IPv4Address(addr.strip()))
    except (AddressValueError, ValueError) as err:
        raise InvalidRangeError(f"'{addr}' is not a valid IPv4 address: {err}") from err


def int_to_addr(n: int) -> str:
    """Convert an integer into a dotted-quad address."""
    try:
        return str(IPv4Address(n))
    except (AddressValueError, ValueError) as err:
        raise InvalidRangeError(f"{n} is not a valid IPv4 address: {err}") from err


def make_range(start: str = full_space[0], end: str = full_space[1]) -> AddressRange:
    """Create an AddressRange from a pair of dotted-quad addresses."""
    return AddressRange(start=addr_to_int(start), end=addr_to_int(end))


def parse_range(expr: str) -> AddressRange:
    """Parse a range expression of the form A.B.C.D-E.F.G.H"""
    parts: Final[list[str]] = expr.split("-")
    if len(parts) != 2:
        raise InvalidRangeError(f"Invalid range format '{expr}', expected start-end")
    return make_range(parts[0], parts[1])


class Mode(Enum):
    """Mode determines the order in which addresses are visited."""

    Sequential = auto()
    Random = auto()


@dataclass(kw_only=True, slots=True)
class AddressSpaceIterator:
    """AddressSpaceIterator produces batches of addresses from an AddressRange.

    In sequential mode, every address in the range is produced exactly once, in
    ascending order, and the iterator is exhausted once the cursor passes the end of
    the range. In random mode, addresses are drawn uniformly from the whole range
    with replacement, so duplicates are possible and the iterator never runs out.
    """

    arange: AddressRange
    batch_size: int = 100
    mode: Mode = Mode.Sequential
    resume_from: Optional[int] = None
    rng: random.Random = field(default_factory=random.Random)
    log: logging.Logger = field(default_factory=lambda: common.get_logger("addrspace"))
    _cursor: int = field(init=False)

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise InvalidRangeError(f"Batch size must be positive, not {self.batch_size}")

        self._cursor = self.arange.start
        if self.resume_from is None:
            return

        if self.mode == Mode.Random:
            self.log.info("Resume position is ignored in random mode.")
        elif self.arange.start <= self.resume_from < self.arange.end:
            self._cursor = self.resume_from + 1
            self.log.info("Resuming scan at %s", int_to_addr(self._cursor))
        else:
            self.log.info("Resume position %s lies outside of %s, starting from the beginning.",
                          int_to_addr(self.resume_from),
                          self.arange)

    @property
    def cursor(self) -> int:
        """Return the next address a sequential batch would begin with."""
        return self._cursor

    @property
    def exhausted(self) -> bool:
        """Return True if no further batches can be produced."""
        return self.mode == Mode.Sequential and self._cursor > self.arange.end

    def next_batch(self, size: Optional[int] = None) -> list[int]:
        """Return the next batch of addresses as integers.

        If <size> is given, it overrides the configured batch size for this one batch.
        An exhausted iterator returns an empty list.
        """
        cnt: Final[int] = self.batch_size if size is None else min(size, self.batch_size)

        if self.mode == Mode.Random:
            return [self.rng.randint(self.arange.start, self.arange.end) for _ in range(cnt)]

        if self.exhausted:
            return []

        last: Final[int] = min(self._cursor + cnt - 1, self.arange.end)
        batch: Final[list[int]] = list(range(self._cursor, last + 1))
        self._cursor += len(batch)
        return batch

    def __iter__(self) -> Iterator[list[str]]:
        while not self.exhausted:
            batch = self.next_batch()
            if not batch:
                return
            yield [int_to_addr(x) for x in batch]


# Local Variables: #
# python-indent: 4 #
# End: #
