"""psmem - Textual viewer for a finished memory report."""

from enum import Enum

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Container
from textual.widgets import DataTable, Footer, Static

from psmem.models import ProcessRecord, Report


class SortKey(Enum):
    """Sort keys for the report table."""

    PSS = "pss"
    SHARED = "shared"
    SWAP = "swap"
    COUNT = "count"
    NAME = "name"


def format_kb(size: float) -> str:
    """Format a kilobyte count as human-readable string."""
    for unit in ["K", "M", "G", "T"]:
        if abs(size) < 1024:
            return f"{size:6.1f}{unit}"
        size = size / 1024
    return f"{size:.1f}P"


class TotalsHeader(Static):
    """Header widget showing report totals."""

    DEFAULT_CSS = """
    TotalsHeader {
        height: auto;
        padding: 1;
        background: $surface;
    }
    """

    def __init__(self, report: Report, *args, **kwargs) -> None:
        """Initialize TotalsHeader."""
        super().__init__(self._render_totals(report), *args, **kwargs)

    @staticmethod
    def _render_totals(report: Report) -> str:
        processes = sum(rec.count for rec in report.records)
        return (
            f"Total PSS: [cyan]{format_kb(report.total_pss).strip()}[/cyan]   "
            f"Total swap: [yellow]{format_kb(report.total_swap).strip()}[/yellow]   "
            f"Commands: {len(report.records)}   Processes: {processes}"
        )


class ReportTable(Container):
    """Container for the report data table."""

    DEFAULT_CSS = """
    ReportTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(
        self,
        records: tuple[ProcessRecord, ...],
        show_heap: bool = False,
        *args,
        **kwargs,
    ) -> None:
        """Initialize ReportTable."""
        super().__init__(*args, **kwargs)
        self._records = records
        self._show_heap = show_heap
        self._sort_key: SortKey = SortKey.PSS

    @property
    def show_heap(self) -> bool:
        """Whether the heap column is shown."""
        return self._show_heap

    @property
    def sort_key(self) -> SortKey:
        """Get current sort key."""
        return self._sort_key

    def cycle_sort(self) -> SortKey:
        """Cycle to the next sort key, redraw, and return it."""
        keys = list(SortKey)
        self._sort_key = keys[(keys.index(self._sort_key) + 1) % len(keys)]
        self._populate()
        return self._sort_key

    def compose(self) -> ComposeResult:
        """Compose the report table."""
        yield DataTable(id="report-table")

    def on_mount(self) -> None:
        """Add columns and rows when mounted."""
        table = self.query_one("#report-table", DataTable)
        table.cursor_type = "row"
        table.add_column("PSS", key="pss", width=9)
        table.add_column("SHARED", key="shared", width=9)
        if self._show_heap:
            table.add_column("HEAP", key="heap", width=9)
        table.add_column("SWAP", key="swap", width=9)
        table.add_column("COUNT", key="count", width=6)
        table.add_column("Command", key="name")
        self._populate()

    def sorted_records(self) -> list[ProcessRecord]:
        """Records ordered by the current sort key, heaviest last."""
        if self._sort_key is SortKey.PSS:
            return list(self._records)
        return sorted(self._records, key=lambda rec: getattr(rec, self._sort_key.value))

    def _populate(self) -> None:
        table = self.query_one("#report-table", DataTable)
        table.clear()
        for rec in self.sorted_records():
            cells = [format_kb(rec.pss), format_kb(rec.shared)]
            if self._show_heap:
                cells.append(format_kb(rec.heap))
            cells += [
                format_kb(rec.swap) if rec.swap > 0 else "",
                str(rec.count),
                Text(rec.name),
            ]
            table.add_row(*cells)


class ReportApp(App):
    """Viewer for a single psmem report."""

    TITLE = "psmem"
    SUB_TITLE = "Proportional memory by command"

    CSS = """
    Screen {
        layout: vertical;
    }

    #totals {
        dock: top;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("f6", "sort", "Sort"),
    ]

    def __init__(self, report: Report, show_heap: bool = False) -> None:
        """
        Initialize the ReportApp.

        Args:
            report: The finished report to show.
            show_heap: Add a heap column. Heap is only known from a smaps scan.
        """
        super().__init__()
        self._report = report
        self._show_heap = show_heap

    @property
    def report(self) -> Report:
        """Get the report being shown."""
        return self._report

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield TotalsHeader(self._report, id="totals")
        yield ReportTable(self._report.records, show_heap=self._show_heap)
        yield Footer()

    def action_sort(self) -> None:
        """Handle sort action - cycle through sort keys."""
        table = self.query_one(ReportTable)
        new_sort_key = table.cycle_sort()
        self.notify(f"Sort: {new_sort_key.value.upper()}")
