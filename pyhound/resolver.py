#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-01-24 16:52:40 krylon>
#
# /data/code/python/pyhound/resolver.py
# created on 14. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the PyHound network scanner. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
pyhound.resolver

(c) 2026 Benjamin Walkenhorst
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Final, Optional

from dns.exception import DNSException, Timeout
from dns.rcode import Rcode
from dns.resolver import (NXDOMAIN, Answer, LifetimeTimeout, NoAnswer,
                          NoNameservers, Resolver)

from pyhound import common
from pyhound.cache import Cache, CacheDB, CacheType
from pyhound.model import Lookup

default_timeout: Final[float] = 3.0


@dataclass(kw_only=True, slots=True)
class HostnameResolver:
    """HostnameResolver turns IP addresses into hostnames via reverse DNS.

    A lookup never raises, all failures are reported as a miss. If cache_ttl is
    positive, successful lookups are kept in the PTR cache for that many seconds.
    """

    log: logging.Logger = field(default_factory=lambda: common.get_logger("resolver"))
    timeout: float = default_timeout
    cache_ttl: float = 0
    res: Resolver = field(init=False)
    ptrcache: Optional[CacheDB] = field(init=False, default=None)

    def __post_init__(self) -> None:
        self.res = Resolver()
        self.res.timeout = self.timeout
        self.res.lifetime = self.timeout
        if self.cache_ttl > 0:
            cache: Cache = Cache()
            self.ptrcache = cache.get_db(CacheType.PTR, self.cache_ttl)

    def _query(self, addr: str, timeout: float) -> Optional[str]:
        """Ask the DNS for the PTR record of <addr>."""
        try:
            answer: Answer = self.res.resolve_address(addr, lifetime=timeout)
            match answer.response.rcode():
                case Rcode.NOERROR if answer.rrset is not None:
                    return answer.rrset[0].to_text().rstrip(".")
                case _:
                    self.log.debug("Unexpected response code %s for %s",
                                   answer.response.rcode(),
                                   addr)
        except NXDOMAIN:
            pass
        except NoNameservers as fail:
            self.log.debug("Failed to get a response for %s from upstream resolver(s): %s",
                           addr,
                           fail)
        except (LifetimeTimeout, Timeout):
            self.log.debug("Lookup of %s timed out", addr)
        except NoAnswer:
            pass
        except DNSException as err:
            self.log.debug("%s looking up %s: %s",
                           err.__class__.__name__,
                           addr,
                           err)
        return None

    def resolve(self, addr: str, timeout: Optional[float] = None) -> Lookup:
        """Attempt to resolve an IP address into a hostname.

        A name that is identical to the address we asked about counts as a miss.
        """
        if timeout is None:
            timeout = self.timeout

        stamp: Final[datetime] = datetime.now()
        t1: Final[float] = time.monotonic()
        name: Optional[str] = None

        if self.ptrcache is not None:
            name = self.ptrcache.get(addr)

        if name is None:
            name = self._query(addr, timeout)
            if name == addr or name == "":
                name = None
            elif name is not None and self.ptrcache is not None:
                self.ptrcache.put(addr, name)

        t2: Final[float] = time.monotonic()

        return Lookup(addr=addr,
                      name=name,
                      latency_ms=round((t2 - t1) * 1000),
                      stamp=stamp)


# Local Variables: #
# python-indent: 4 #
# End: #
