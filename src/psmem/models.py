"""Data models for psmem."""

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class MemoryUsage:
    """Memory usage of a single process, in kilobytes."""

    pss: float
    shared: float  # pss - private, not clamped at zero
    swap: float
    heap: float = 0.0  # Only known when parsed from the detailed smaps


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """Memory usage of one command, possibly merged from several processes."""

    name: str
    pid: int  # First pid read under this name
    pss: float
    shared: float
    swap: float
    heap: float = 0.0
    count: int = 1

    @classmethod
    def from_usage(cls, name: str, pid: int, usage: MemoryUsage) -> "ProcessRecord":
        """Build a single-process record from an extracted MemoryUsage."""
        return cls(
            name=name,
            pid=pid,
            pss=usage.pss,
            shared=usage.shared,
            swap=usage.swap,
            heap=usage.heap,
        )

    def merge(self, other: "ProcessRecord") -> "ProcessRecord":
        """Return a new record folding ``other`` into this one."""
        if other.name != self.name:
            raise ValueError(f"cannot merge {other.name!r} into {self.name!r}")
        return ProcessRecord(
            name=self.name,
            pid=self.pid,
            pss=self.pss + other.pss,
            shared=self.shared + other.shared,
            swap=self.swap + other.swap,
            heap=self.heap + other.heap,
            count=self.count + other.count,
        )


@dataclass(slots=True, frozen=True)
class Report:
    """Aggregated records in ascending PSS order plus grand totals."""

    records: tuple[ProcessRecord, ...]
    total_pss: float
    total_swap: float

    def filtered(self, substring: str) -> "Report":
        """Keep only records whose name contains ``substring``, recomputing totals."""
        kept = tuple(rec for rec in self.records if substring in rec.name)
        return Report(
            records=kept,
            total_pss=sum(rec.pss for rec in kept),
            total_swap=sum(rec.swap for rec in kept),
        )
