"""Scan configuration for psmem."""

from dataclasses import dataclass, field

import psutil


@dataclass(slots=True)
class ScanConfig:
    """
    Settings for one memory scan.

    Attributes:
        proc_root: Process-information root. Defaults to psutil's procfs path.
        prefer_rollup: Try ``smaps_rollup`` before falling back to ``smaps``.
        workers: Size of the extraction worker pool. 1 means sequential.
        cmdline_limit: Bytes of ``cmdline`` read when resolving a display name.
    """

    proc_root: str = field(default_factory=lambda: getattr(psutil, "PROCFS_PATH", "/proc"))
    prefer_rollup: bool = True
    workers: int = 4
    cmdline_limit: int = 1024

    def __post_init__(self) -> None:
        """Clamp numeric settings to usable values."""
        self.workers = max(1, self.workers)
        self.cmdline_limit = max(1, self.cmdline_limit)
