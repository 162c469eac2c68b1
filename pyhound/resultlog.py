#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-02-16 19:02:40 krylon>
#
# /data/code/python/pyhound/resultlog.py
# created on 16. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the PyHound network scanner. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
pyhound.resultlog

(c) 2026 Benjamin Walkenhorst

The result log is an append-only CSV file with one row per processed address.
Its last row is all we need to resume an interrupted scan.
"""

import csv
import logging
import os
from dataclasses import dataclass, field
from ipaddress import AddressValueError, IPv4Address
from pathlib import Path
from typing import Any, Final, Optional, TextIO, Union

from pyhound import common
from pyhound.common import ConfigurationError
from pyhound.model import ScanResult

base_columns: Final[list[str]] = ["IP", "Hostname", "Found", "Lookup Time (ms)", "Timestamp"]
meta_columns: Final[list[str]] = ["Title", "Description", "Status", "Content Type", "URL"]

tail_chunk: Final[int] = 4096


def _flat(s: Optional[str]) -> str:
    """Fold line breaks, so every row of the log occupies exactly one line."""
    if not s:
        return ""
    return " ".join(s.splitlines())


def _tail_line(fh) -> bytes:
    """Return the last non-blank line of the binary file <fh>, without reading all of it."""
    fh.seek(0, os.SEEK_END)
    pos: int = fh.tell()
    buf: bytes = b""

    while pos > 0:
        step: int = min(tail_chunk, pos)
        pos -= step
        fh.seek(pos)
        buf = fh.read(step) + buf
        stripped: bytes = buf.rstrip(b"\r\n \t")
        idx: int = stripped.rfind(b"\n")
        if idx >= 0:
            return stripped[idx+1:]

    return buf.strip()


def last_address(path: Union[str, Path]) -> Optional[int]:
    """Return the address in the first column of the last row of the log at <path>.

    Returns None if the file does not exist, is empty, contains only the header, or
    if the last row does not start with a valid IPv4 address.
    """
    log: Final[logging.Logger] = common.get_logger("resultlog")
    if not os.path.isfile(path):
        log.info("Resume file %s does not exist", path)
        return None

    with open(path, "rb") as fh:
        line: Final[bytes] = _tail_line(fh)

    if not line:
        return None

    row: Final[list[str]] = next(csv.reader([line.decode("utf-8", errors="replace")]), [])
    if not row or row[0] == base_columns[0]:
        return None

    try:
        return int(IPv4Address(row[0].strip()))
    except AddressValueError:
        log.error("Last row of %s does not start with an IP address: %s",
                  path,
                  row[0])
        return None


@dataclass(kw_only=True, slots=True)
class ResultLog:
    """ResultLog writes scan results to a CSV file.

    Unless <append> is set, an existing file is truncated. A header row is written
    whenever the file is empty.
    """

    path: Path
    metadata: bool = False
    append: bool = False
    log: logging.Logger = field(default_factory=lambda: common.get_logger("resultlog"))
    fh: Optional[TextIO] = field(init=False, default=None)
    writer: Optional[Any] = field(init=False, default=None)
    rows: int = field(init=False, default=0)

    @property
    def columns(self) -> list[str]:
        """Return the column names of the log."""
        if self.metadata:
            return base_columns + meta_columns
        return base_columns

    def open(self) -> None:
        """Open the log file for writing.

        Raises ConfigurationError if the file cannot be opened.
        """
        mode: Final[str] = "a" if self.append else "w"
        self.log.debug("Open result log %s (mode %s)", self.path, mode)
        try:
            self.fh = open(self.path, mode, encoding="utf-8", newline="")
        except OSError as err:
            self.log.error("Cannot open result log %s: %s", self.path, err)
            raise ConfigurationError(f"Cannot write results to {self.path}: {err}") from err
        self.writer = csv.writer(self.fh)
        if self.fh.tell() == 0:
            self.writer.writerow(self.columns)
            self.fh.flush()

    def close(self) -> None:
        """Close the log file."""
        if self.fh is not None:
            self.fh.close()
            self.fh = None
            self.writer = None

    def __enter__(self) -> 'ResultLog':
        self.open()
        return self

    def __exit__(self, ex_type, ex_val, tb) -> None:
        self.close()

    def write(self, result: ScanResult) -> None:
        """Append one row to the log."""
        if self.writer is None or self.fh is None:
            raise ValueError("Result log is not open")

        lk = result.lookup
        row: list = [
            lk.addr,
            lk.name or "",
            "Yes" if lk.found else "No",
            lk.latency_ms,
            lk.stamp.strftime(common.TimeFmt),
        ]

        if self.metadata:
            md = result.metadata
            if md is None:
                row.extend([""] * len(meta_columns))
            else:
                row.extend([
                    _flat(md.title),
                    _flat(md.description),
                    md.http_status or "",
                    md.content_type or "",
                    md.final_url,
                ])

        self.writer.writerow(row)
        self.fh.flush()
        self.rows += 1


# Local Variables: #
# python-indent: 4 #
# End: #
