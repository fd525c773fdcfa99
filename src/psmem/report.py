"""Plain-text rendering of psmem reports."""

from psmem.models import ProcessRecord, Report

CMD_DISPLAY_MAX = 32


def display_name(name: str) -> str:
    """Shorten a long command name for display."""
    if len(name) <= CMD_DISPLAY_MAX:
        return name
    if name.startswith("[") and "]" in name:
        return name[: name.index("]") + 1]
    return name[:CMD_DISPLAY_MAX]


def _mb(kb: float) -> float:
    return kb / 1024


def format_row(rec: ProcessRecord, show_heap: bool = False) -> str:
    """Format one record as a report line, sizes in MB."""
    swap = f"{_mb(rec.swap):10.1f}" if rec.swap > 0 else ""
    heap = f"{_mb(rec.heap):10.1f}" if show_heap else ""
    return (
        f"{_mb(rec.pss):10.1f}{_mb(rec.shared):10.1f}{heap}{swap:>10}"
        f"\t{display_name(rec.name)} ({rec.count})"
    )


def format_report(report: Report, show_heap: bool = False, quiet: bool = False) -> list[str]:
    """Format a report as lines: header, one row per record, totals."""
    lines: list[str] = []
    if not quiet:
        heap_col = f"{'HEAP':>10}" if show_heap else ""
        lines.append(f"{'MB RAM':>10}{'SHARED':>10}{heap_col}{'SWAPPED':>10}\tPROCESS (COUNT)")

    lines.extend(format_row(rec, show_heap) for rec in report.records)

    if not quiet:
        width = 30 if show_heap else 20
        lines.append(
            f"#{_mb(report.total_pss):9.1f}{_mb(report.total_swap):{width}.1f}"
            "\tTOTAL USED BY PROCESSES"
        )
    return lines
