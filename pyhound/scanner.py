#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-02-16 19:06:13 krylon>
#
# /data/code/python/pyhound/scanner.py
# created on 19. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the PyHound network scanner. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
pyhound.scanner

(c) 2026 Benjamin Walkenhorst

The ScanOrchestrator walks an address range in batches. The addresses of a batch
are handed to a pool of worker threads that look up hostnames (and, optionally,
fetch metadata), while the orchestrator itself is the only one writing to the
result log and the database. Results are written in the order of the batch, so the
last row of the log always tells us where to pick up again.
"""

import logging
import random
import sqlite3
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum, auto
from queue import Queue
from threading import Event, RLock, Thread
from typing import Callable, Final, Optional

from pyhound import common, resultlog
from pyhound.addrspace import AddressSpaceIterator, Mode, int_to_addr, make_range
from pyhound.config import ScanConfig
from pyhound.control import Cmd, Message, stop_msg
from pyhound.database import Database, DBError
from pyhound.metadata import MetadataFetcher
from pyhound.model import (AddressRange, Lookup, ScanCheckpoint, ScanResult,
                           ScanSummary)
from pyhound.resolver import HostnameResolver
from pyhound.resultlog import ResultLog


class ScanState(Enum):
    """ScanState is the stage a scan is in."""

    Init = auto()
    Resuming = auto()
    Scanning = auto()
    Completed = auto()


@dataclass(kw_only=True, slots=True)
class Progress:
    """Progress is a snapshot of a running scan."""

    processed: int
    found: int
    elapsed: timedelta
    position: str
    percent: Optional[float] = None

    @property
    def rate(self) -> float:
        """Return the number of addresses processed per second so far."""
        secs: Final[float] = self.elapsed.total_seconds()
        if secs <= 0:
            return 0.0
        return self.processed / secs


@dataclass(kw_only=True, slots=True)
class ScanOrchestrator:
    """ScanOrchestrator drives a scan from start to finish."""

    cfg: ScanConfig
    resolver: Optional[HostnameResolver] = None
    fetcher: Optional[MetadataFetcher] = None
    db: Optional[Database] = None
    rng: random.Random = field(default_factory=random.Random)
    on_result: Optional[Callable[[ScanResult], None]] = None
    on_progress: Optional[Callable[[Progress], None]] = None
    log: logging.Logger = field(default_factory=lambda: common.get_logger("scanner"))
    lock: RLock = field(default_factory=RLock)
    arange: AddressRange = field(init=False)
    checkpoint: ScanCheckpoint = field(default_factory=ScanCheckpoint)
    workQ: Queue[Message] = field(init=False)
    resQ: Queue[tuple[int, ScanResult]] = field(init=False)
    _state: ScanState = ScanState.Init
    _stop: Event = field(default_factory=Event)
    _workers: list[Thread] = field(default_factory=list)
    _started: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        self.arange = make_range(self.cfg.start, self.cfg.end)
        self.workQ = Queue()
        self.resQ = Queue()
        if self.resolver is None:
            self.resolver = HostnameResolver(timeout=self.cfg.timeout,
                                             cache_ttl=self.cfg.cache_ttl)
        if self.fetcher is None and self.cfg.collect_metadata:
            self.fetcher = MetadataFetcher(timeout=self.cfg.timeout,
                                           verify_tls=self.cfg.verify_tls)

    @property
    def state(self) -> ScanState:
        """Return the state of the scan."""
        with self.lock:
            return self._state

    def _set_state(self, state: ScanState) -> None:
        with self.lock:
            self.log.debug("Scan of %s: %s -> %s",
                           self.arange,
                           self._state.name,
                           state.name)
            self._state = state

    def stop(self) -> None:
        """Ask the scan to stop after the current batch."""
        self.log.info("Stop was requested.")
        self._stop.set()

    def _start_workers(self) -> None:
        with self.lock:
            for i in range(self.cfg.workers):
                w: Thread = Thread(target=self._lookup_worker,
                                   name=f"lookup_worker_{i+1:02d}",
                                   args=(i+1, ),
                                   daemon=False)
                w.start()
                self._workers.append(w)

    def _stop_workers(self) -> None:
        with self.lock:
            workers: Final[list[Thread]] = self._workers
            self._workers = []

        for _ in workers:
            self.workQ.put(stop_msg)
        for w in workers:
            w.join()

    def _lookup_worker(self, wid: int) -> None:
        """Take addresses from the work queue and process them."""
        self.log.debug("lookup_worker #%02d reporting for work.", wid)
        try:
            while True:
                msg: Message = self.workQ.get()
                match msg:
                    case Message(Tag=Cmd.Stop):
                        return
                    case Message(Tag=Cmd.Lookup, Payload=(int() as idx, str() as addr)):
                        self.resQ.put((idx, self._process(addr)))
                    case _:
                        self.log.error("lookup_worker #%02d received an invalid message: %s",
                                       wid,
                                       msg)
        finally:
            self.log.debug("lookup_worker #%02d is finished.", wid)

    def _process(self, addr: str) -> ScanResult:
        """Look up <addr> and, if it has a name and we are asked to, fetch its metadata."""
        assert self.resolver is not None
        res: ScanResult
        try:
            lookup: Lookup = self.resolver.resolve(addr, self.cfg.timeout)
            res = ScanResult(lookup=lookup)
            if lookup.found and self.fetcher is not None:
                assert lookup.name is not None
                res.metadata = self.fetcher.fetch(lookup.name, self.cfg.timeout)
        except Exception as err:  # pylint: disable-msg=W0718
            self.log.error("%s processing %s: %s",
                           err.__class__.__name__,
                           addr,
                           err)
            res = ScanResult(lookup=Lookup(addr=addr))

        if self.cfg.delay_ms > 0:
            time.sleep(self.cfg.delay_ms / 1000)

        return res

    def _process_batch(self, batch: list[int]) -> list[ScanResult]:
        """Let the workers process a batch, return the results in the order of the batch."""
        for idx, n in enumerate(batch):
            self.workQ.put(Message(Tag=Cmd.Lookup, Payload=(idx, int_to_addr(n))))

        results: list[Optional[ScanResult]] = [None] * len(batch)
        for _ in batch:
            idx, res = self.resQ.get()
            results[idx] = res

        return [x for x in results if x is not None]

    def _record(self, rlog: ResultLog, db: Optional[Database], n: int, res: ScanResult) -> None:
        """Persist a result and advance the checkpoint."""
        try:
            rlog.write(res)
        except OSError as err:
            self.log.error("Cannot write %s to result log %s: %s",
                           res.addr,
                           rlog.path,
                           err)

        if db is not None and res.lookup.found:
            try:
                with db:
                    rec = db.hostname_upsert(res.lookup)
                    if res.metadata is not None:
                        db.metadata_upsert(rec, res.metadata)
            except (DBError, sqlite3.Error) as err:
                self.log.error("%s saving %s/%s to database: %s",
                               err.__class__.__name__,
                               res.addr,
                               res.lookup.name,
                               err)

        self.checkpoint.advance(n, res.lookup.found)

        if self.on_result is not None:
            self.on_result(res)

    def _progress(self, it: AddressSpaceIterator) -> Progress:
        pct: Optional[float] = None
        if it.mode == Mode.Sequential:
            pct = min(it.cursor - self.arange.start, len(self.arange)) * 100.0 / len(self.arange)
        elif self.cfg.max_count > 0:
            pct = self.checkpoint.processed * 100.0 / self.cfg.max_count

        last: Final[Optional[int]] = self.checkpoint.last_address
        return Progress(processed=self.checkpoint.processed,
                        found=self.checkpoint.found,
                        elapsed=datetime.now() - self._started,
                        position=int_to_addr(last) if last is not None else "",
                        percent=pct)

    def _report(self, it: AddressSpaceIterator) -> None:
        prog: Final[Progress] = self._progress(it)
        self.log.info("Processed %d addresses, found %d hostnames, %.2f addresses/s, at %s",
                      prog.processed,
                      prog.found,
                      prog.rate,
                      prog.position)
        if self.on_progress is not None:
            self.on_progress(prog)

    def _scan(self, it: AddressSpaceIterator, rlog: ResultLog, db: Optional[Database]) -> None:
        interval: Final[int] = self.cfg.progress_interval
        next_report: int = interval

        while not self._stop.is_set():
            size: int = self.cfg.batch_size
            if self.cfg.max_count > 0:
                remaining: int = self.cfg.max_count - self.checkpoint.processed
                if remaining <= 0:
                    self.log.info("Reached maximum of %d addresses.", self.cfg.max_count)
                    break
                size = min(size, remaining)

            batch: list[int] = it.next_batch(size)
            if not batch:
                break

            for n, res in zip(batch, self._process_batch(batch)):
                self._record(rlog, db, n, res)

            if self.checkpoint.processed >= next_report:
                self._report(it)
                next_report += interval

    def _finish(self, summary: ScanSummary, db: Optional[Database]) -> None:
        self.log.info("Scan of %s complete: %d addresses processed, %d hostnames found in %s (%.2f addresses/s, %.2f%% resolved)",  # noqa: E501
                      summary.arange,
                      summary.processed,
                      summary.found,
                      common.fmt_duration(summary.duration),
                      summary.rate,
                      summary.resolution_rate)

        if db is None:
            return

        try:
            with db:
                db.scan_history_add(summary)
        except (DBError, sqlite3.Error) as err:
            self.log.error("Could not save scan history: %s", err)

    def run(self) -> ScanSummary:
        """Perform the scan, return a summary once it is done or was stopped."""
        self._started = datetime.now()
        resume_from: Optional[int] = None

        if self.cfg.resume_file is not None:
            self._set_state(ScanState.Resuming)
            resume_from = resultlog.last_address(self.cfg.resume_file)

        it: Final[AddressSpaceIterator] = AddressSpaceIterator(
            arange=self.arange,
            batch_size=self.cfg.batch_size,
            mode=Mode.Random if self.cfg.random else Mode.Sequential,
            resume_from=resume_from,
            rng=self.rng,
        )

        db: Optional[Database] = self.db
        own_db: Final[bool] = db is None and self.cfg.use_db
        if own_db:
            try:
                db = Database()
            except sqlite3.Error as err:
                self.log.error("Cannot open database, results go to the log file only: %s", err)
                db = None

        self._set_state(ScanState.Scanning)
        try:
            self._start_workers()
            try:
                with ResultLog(path=self.cfg.save_file,
                               metadata=self.cfg.collect_metadata,
                               append=self.cfg.resume_file is not None) as rlog:
                    self._scan(it, rlog, db)
            finally:
                self._stop_workers()

            summary: Final[ScanSummary] = ScanSummary(arange=self.arange,
                                                      processed=self.checkpoint.processed,
                                                      found=self.checkpoint.found,
                                                      started=self._started,
                                                      finished=datetime.now())
            self._set_state(ScanState.Completed)
            self._finish(summary, db)
        finally:
            if own_db and db is not None:
                db.close()

        return summary


# Local Variables: #
# python-indent: 4 #
# End: #
