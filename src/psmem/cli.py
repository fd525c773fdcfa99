"""Command line entry point for psmem."""

import argparse
import logging
import sys

import psutil
import structlog

from psmem.app import ReportApp
from psmem.config import ScanConfig
from psmem.procfs import ProcRootError
from psmem.report import format_report
from psmem.scanner import MemoryScanner

log = structlog.get_logger()


def configure_logging(verbose: bool = False) -> None:
    """Send structlog output to stderr, at DEBUG when verbose else WARNING."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.WARNING
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the psmem argument parser."""
    parser = argparse.ArgumentParser(
        prog="psmem",
        description="Simple, accurate RAM and swap reporting.",
    )
    parser.add_argument("-q", "--quiet", action="store_true",
                        help="suppress column header and totals footer")
    parser.add_argument("--heap", action="store_true",
                        help="show heap column (reads the detailed smaps)")
    parser.add_argument("--filter", metavar="SUBSTR", default=None,
                        help="only show commands whose name contains SUBSTR")
    parser.add_argument("-w", "--workers", type=int, default=4,
                        help="number of processes read in parallel [dflt=4]")
    parser.add_argument("--no-rollup", action="store_true",
                        help="skip the smaps_rollup fast path")
    parser.add_argument("--proc-root", default=None,
                        help="process information root [dflt=/proc]")
    parser.add_argument("--tui", action="store_true",
                        help="show the report in an interactive table")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="log skipped processes and other details")
    return parser


def _is_root() -> bool:
    try:
        return psutil.Process().uids().effective == 0
    except (psutil.Error, AttributeError):
        return False


def main(argv: list[str] | None = None) -> int:
    """Entry point for psmem."""
    opts = build_parser().parse_args(argv)
    configure_logging(opts.verbose)

    config = ScanConfig(
        prefer_rollup=not (opts.no_rollup or opts.heap),
        workers=opts.workers,
    )
    if opts.proc_root:
        config.proc_root = opts.proc_root
    elif not _is_root():
        log.warning("not_running_as_root", hint="report will omit other users' processes")

    try:
        report = MemoryScanner(config).scan()
    except ProcRootError as exc:
        print(f"psmem: cannot list {exc.filename}: {exc.strerror}", file=sys.stderr)
        return 1

    if opts.filter:
        report = report.filtered(opts.filter)

    if opts.tui:
        ReportApp(report, show_heap=opts.heap).run()
        return 0

    for line in format_report(report, show_heap=opts.heap, quiet=opts.quiet):
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
