#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-02-13 19:24:10 krylon>
#
# /data/code/python/pyhound/main.py
# created on 21. 01. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the PyHound network scanner. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
pyhound.main

(c) 2026 Benjamin Walkenhorst
"""


import argparse
import logging
import pathlib
import signal
import sys
from dataclasses import replace
from typing import Any, Final, Optional

from pyhound import common, config
from pyhound.addrspace import parse_range
from pyhound.common import ConfigurationError
from pyhound.crawler import SiteCrawler, store_crawl
from pyhound.database import Database
from pyhound.model import CrawlResult, ScanResult, ScanSummary
from pyhound.scanner import Progress, ScanOrchestrator

title_width: Final[int] = 60


def build_parser() -> argparse.ArgumentParser:
    """Create the command line parser."""
    argp: argparse.ArgumentParser = argparse.ArgumentParser(prog=common.AppName.lower())
    argp.add_argument("-b", "--basedir",
                      type=pathlib.Path,
                      default=common.path.base(),
                      help="Directory to store application data in")
    argp.add_argument("-c", "--config",
                      type=pathlib.Path,
                      help="Configuration file to read instead of the default one")
    argp.add_argument("-v", "--verbose",
                      action="count",
                      default=0,
                      help="Print log messages to the terminal, give twice for debug messages")

    sub = argp.add_subparsers(dest="cmd", required=True)

    scan = sub.add_parser("scan", help="Look up hostnames for a range of IP addresses")
    scan.add_argument("--range",
                      help="The range of addresses to scan, as START-END")
    scan.add_argument("--start", help="First address to scan")
    scan.add_argument("--end", help="Last address to scan")
    scan.add_argument("--batch", type=int, dest="batch_size",
                      help="Number of addresses per batch")
    scan.add_argument("--delay", type=int, dest="delay_ms",
                      help="Milliseconds to wait after each lookup")
    scan.add_argument("-w", "--workers", type=int,
                      help="The number of lookup threads to run in parallel")
    scan.add_argument("--timeout", type=float,
                      help="Timeout in seconds for DNS and HTTP requests")
    scan.add_argument("--metadata", action="store_true", default=None, dest="collect_metadata",
                      help="Fetch the front page of every host with a name")
    scan.add_argument("--save-file", type=pathlib.Path, dest="save_file",
                      help="CSV file to write results to")
    scan.add_argument("--resume", type=pathlib.Path, dest="resume_file",
                      help="Resume after the last address in this result file")
    scan.add_argument("--quiet", action="store_true", default=None,
                      help="Only print addresses that have a hostname")
    scan.add_argument("--random", action="store_true", default=None,
                      help="Pick addresses at random instead of in order")
    scan.add_argument("--max", type=int, dest="max_count",
                      help="Stop after this many addresses")
    scan.add_argument("--no-db", action="store_false", default=None, dest="use_db",
                      help="Do not store results in the database")
    scan.add_argument("--verify-tls", action="store_true", default=None, dest="verify_tls",
                      help="Check certificates when fetching metadata")
    scan.add_argument("--cache-ttl", type=float, dest="cache_ttl",
                      help="Cache hostnames for this many seconds")

    crawl = sub.add_parser("crawl", help="Crawl a web site and index its words")
    crawl.add_argument("seed", help="The URL to start crawling from")
    crawl.add_argument("--max-pages", type=int, dest="max_pages",
                       help="Maximum number of pages to crawl")
    crawl.add_argument("-w", "--workers", type=int,
                       help="The number of crawler threads to run in parallel")
    crawl.add_argument("--timeout", type=float,
                       help="Timeout in seconds for HTTP requests")
    crawl.add_argument("--exclude", nargs="+", dest="excluded_extensions",
                       help="File extensions not to crawl")
    crawl.add_argument("--all-domains", action="store_false", default=None,
                       dest="same_domain_only",
                       help="Follow links to other hosts, too")
    crawl.add_argument("--no-db", action="store_false", dest="use_db",
                       help="Do not store the index in the database")
    crawl.add_argument("--top", type=int, default=25,
                       help="Number of words to display")

    return argp


def _overrides(args: argparse.Namespace, keys: list[str]) -> dict[str, Any]:
    """Return the options the user actually gave on the command line."""
    vals: dict[str, Any] = {}
    for k in keys:
        v = getattr(args, k, None)
        if v is not None:
            vals[k] = v
    return vals


def print_result(res: ScanResult, quiet: bool) -> None:
    """Print a single scan result to the terminal."""
    lk = res.lookup
    if not lk.found:
        if not quiet:
            print(f"{lk.addr:<15}  No hostname")
        return

    print(f"{lk.addr:<15}  {lk.name} ({lk.latency_ms} ms)")
    if res.metadata is not None and res.metadata.title:
        title: str = res.metadata.title
        if len(title) > title_width:
            title = title[:title_width] + "..."
        print(f"{'':<15}  Title: {title}")


def print_progress(prog: Progress) -> None:
    """Print a progress report."""
    pct: Final[str] = f"{prog.percent:.2f}%" if prog.percent is not None else "n/a"
    print("-" * 52)
    print(f"Progress: {pct} | Processed: {prog.processed} | Found: {prog.found}")
    print(f"Speed: {prog.rate:.2f} addresses/s | Elapsed: {common.fmt_duration(prog.elapsed)}")
    print(f"Current address: {prog.position}")
    print("-" * 52)


def print_summary(summary: ScanSummary, save_file: pathlib.Path) -> None:
    """Print the final account of a scan."""
    print()
    print("========== SCAN COMPLETE ==========")
    print(f"Range: {summary.arange}")
    print(f"Processed: {summary.processed:,} addresses")
    print(f"Found: {summary.found:,} hostnames")
    print(f"Duration: {common.fmt_duration(summary.duration)}")
    print(f"Speed: {summary.rate:.2f} addresses/s")
    print(f"Resolution Rate: {summary.resolution_rate:.2f}%")
    print(f"Results saved to: {save_file}")
    print("===================================")


def run_scan(cfg: config.Config, args: argparse.Namespace) -> int:
    """Perform a scan as requested on the command line."""
    scfg = cfg.scan
    vals: dict[str, Any] = _overrides(args, [
        "start", "end", "batch_size", "delay_ms", "workers", "timeout",
        "collect_metadata", "save_file", "resume_file", "quiet", "random",
        "max_count", "use_db", "verify_tls", "cache_ttl",
    ])

    if args.range is not None:
        arange = parse_range(args.range)
        vals["start"], vals["end"] = str(arange).split("-")

    scfg = replace(scfg, **vals)

    orch: ScanOrchestrator = ScanOrchestrator(
        cfg=scfg,
        on_result=lambda r: print_result(r, scfg.quiet),
        on_progress=None if scfg.quiet else print_progress)

    if not scfg.quiet:
        print(f"{common.AppName} scanner")
        print("-" * 20)
        print(f"Range: {orch.arange}")
        print(f"Batch size: {scfg.batch_size}")
        print(f"Delay: {scfg.delay_ms}ms")
        print(f"Workers: {scfg.workers}")
        print(f"Collect metadata: {'Yes' if scfg.collect_metadata else 'No'}")
        print(f"Save file: {scfg.save_file}")
        print(f"Random sampling: {'Yes' if scfg.random else 'No'}")
        if scfg.max_count > 0:
            print(f"Max addresses: {scfg.max_count}")
        print("-" * 20)

    signal.signal(signal.SIGINT, lambda *_: orch.stop())
    summary: Final[ScanSummary] = orch.run()
    if not scfg.quiet:
        print_summary(summary, scfg.save_file)
    return 0


def print_crawl(result: CrawlResult, top: int) -> None:
    """Print the outcome of a crawl."""
    print(f"Indexed {len(result.pages)} pages, {result.total_words} words, "
          f"{len(result.words)} distinct")
    for page in result.pages:
        print(f"  {page.url}  {page.title}")
    print()
    for word, cnt in result.words[:top]:
        print(f"{word:<24} {cnt:>8}")


def run_crawl(cfg: config.Config, args: argparse.Namespace) -> int:
    """Perform a crawl as requested on the command line."""
    vals: dict[str, Any] = _overrides(args, [
        "seed", "max_pages", "workers", "timeout", "excluded_extensions", "same_domain_only",
    ])
    if "excluded_extensions" in vals:
        vals["excluded_extensions"] = frozenset(vals["excluded_extensions"])

    ccfg = replace(cfg.crawl, **vals)
    crawler: Final[SiteCrawler] = SiteCrawler(cfg=ccfg)
    signal.signal(signal.SIGINT, lambda *_: crawler.stop())
    result: Final[CrawlResult] = crawler.crawl()

    if args.use_db:
        db: Database = Database()
        try:
            site_id: int = store_crawl(db, ccfg.seed, result)
            print(f"Saved index of {ccfg.seed} as site #{site_id}")
        finally:
            db.close()

    print_crawl(result, args.top)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Parse the command line and do what we're told."""
    args = build_parser().parse_args(argv)
    common.set_basedir(args.basedir)
    if args.verbose > 0:
        common.set_log_level_tty(logging.INFO if args.verbose == 1 else logging.DEBUG)

    try:
        cfg: config.Config = config.load(args.config)
        match args.cmd:
            case "scan":
                return run_scan(cfg, args)
            case "crawl":
                return run_crawl(cfg, args)
    except ConfigurationError as err:
        print(f"Error: {err}", file=sys.stderr)
        return 2

    return 1


if __name__ == '__main__':
    sys.exit(main())

# Local Variables: #
# python-indent: 4 #
# End: #
