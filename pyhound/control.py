#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-02-13 18:12:09 krylon>
#
# /data/code/python/pyhound/control.py
# created on 18. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the PyHound network scanner. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
pyhound.control

(c) 2026 Benjamin Walkenhorst

Worker threads in the scanner and the crawler are fed through queues of Messages.
A Message either carries a unit of work or tells the worker to quit.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Final, Optional, Union


class Cmd(Enum):
    """Cmd represents a command to a worker thread."""

    Stop = auto()
    Lookup = auto()
    Crawl = auto()


# Lookup: (position in batch, address), Crawl: URL
WorkPayload = Union[str, tuple[int, str]]


@dataclass(kw_only=True, slots=True, frozen=True)
class Message:
    """Message is a message to be sent to a worker thread."""

    Tag: Cmd
    Payload: Optional[WorkPayload] = None


stop_msg: Final[Message] = Message(Tag=Cmd.Stop)


# Local Variables: #
# python-indent: 4 #
# End: #
