"""Memory scanning engine for psmem."""

from concurrent.futures import ThreadPoolExecutor

import structlog

from psmem.aggregate import aggregate
from psmem.config import ScanConfig
from psmem.models import ProcessRecord, Report
from psmem.procfs import list_pids, read_process

log = structlog.get_logger()


class MemoryScanner:
    """
    Scanner that builds a memory report from the proc filesystem.

    Every pid is read independently, optionally on a small thread pool.
    Processes that exit or deny access mid-scan are dropped from the report.
    """

    def __init__(self, config: ScanConfig | None = None) -> None:
        """
        Initialize the MemoryScanner.

        Args:
            config: Scan settings. Defaults to ``ScanConfig()``.
        """
        self._config = config or ScanConfig()

    @property
    def config(self) -> ScanConfig:
        """Get the scan configuration."""
        return self._config

    def scan(self) -> Report:
        """
        Scan every visible process and aggregate the results.

        Raises:
            ProcRootError: If the proc root cannot be listed.
        """
        pids = list_pids(self._config.proc_root)
        records = self._collect_records(pids)
        report = aggregate(records)
        log.info(
            "scan_complete",
            pids=len(pids),
            records=len(records),
            merged=len(report.records),
        )
        return report

    def _collect_records(self, pids: list[int]) -> list[ProcessRecord]:
        """Read every pid, keeping only the complete records."""
        if self._config.workers == 1 or len(pids) <= 1:
            results = [read_process(pid, self._config) for pid in pids]
        else:
            with ThreadPoolExecutor(
                max_workers=self._config.workers,
                thread_name_prefix="MemoryScanner",
            ) as pool:
                results = list(pool.map(lambda pid: read_process(pid, self._config), pids))
        return [rec for rec in results if rec is not None]
