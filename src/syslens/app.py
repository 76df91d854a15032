"""syslens - Live Textual dashboard for the collector."""

import time
from queue import Empty, Queue

from textual.app import App, ComposeResult
from textual.containers import Container
from textual.widgets import DataTable, Footer, Static

from syslens.collector import DEFAULT_BACKLOG, DEFAULT_HOST, DEFAULT_PORT, CollectorService
from syslens.sink import QueueSink, Report


def format_megabytes(size: int) -> str:
    """Format a megabyte count as human-readable string."""
    if size < 1024:
        return f"{size}M"
    return f"{size / 1024:.1f}G"


def usage_bar(percent: float, color: str, width: int = 20) -> str:
    """Render a percentage as a fixed-width markup bar."""
    bar_len = min(max(int(percent / (100 / width)), 0), width)
    return f"[{color}]█[/{color}]" * bar_len + "[dim]░[/dim]" * (width - bar_len)


class LatestReport(Static):
    """Header widget showing the most recently received snapshot."""

    DEFAULT_CSS = """
    LatestReport {
        height: auto;
        min-height: 5;
        padding: 1;
        background: $surface;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize LatestReport."""
        super().__init__(*args, **kwargs)
        self._report: Report | None = None
        self._total: int = 0

    @property
    def report(self) -> Report | None:
        """Get the last report shown."""
        return self._report

    def on_mount(self) -> None:
        """Show the placeholder until the first report arrives."""
        self.update(self._get_info())

    def update_report(self, report: Report) -> None:
        """Show a newly received report."""
        self._report = report
        self._total += 1
        self.update(self._get_info())

    def _get_info(self) -> str:
        """Get the header display."""
        if self._report is None:
            return "Waiting for agents..."

        snapshot = self._report.snapshot
        if snapshot.cpu_known:
            cpu = f"CPU \\[{usage_bar(snapshot.cpu_load, 'green')}] {snapshot.cpu_load:5.1f}%"
        else:
            cpu = "CPU n/a"
        mem = (
            f"RAM available: {format_megabytes(snapshot.mem_available)}"
            if snapshot.mem_known
            else "RAM available: n/a"
        )
        procs = (
            f"Active processes: {snapshot.processes_active}"
            if snapshot.processes_known
            else "Active processes: n/a"
        )
        received = time.strftime("%H:%M:%S", time.localtime(self._report.received_at))
        return (
            f"{cpu}\n{mem}\n{procs}\n"
            f"From {self._report.peer or '?'} at {received} ({self._total} received)"
        )


class ReportTable(Container):
    """Container for the table of received reports."""

    DEFAULT_CSS = """
    ReportTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize ReportTable."""
        super().__init__(*args, **kwargs)
        self._count: int = 0

    @property
    def row_count(self) -> int:
        """Get the number of reports shown."""
        return self._count

    def compose(self) -> ComposeResult:
        """Compose the report table."""
        yield DataTable(id="report-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#report-table", DataTable)
        table.cursor_type = "row"

        table.add_column("TIME", key="time", width=10)
        table.add_column("PEER", key="peer", width=22)
        table.add_column("CPU%", key="cpu", width=8)
        table.add_column("RAM", key="mem", width=10)
        table.add_column("PROCS", key="procs")

    def add_report(self, report: Report) -> None:
        """Append a report row."""
        table = self.query_one("#report-table", DataTable)
        snapshot = report.snapshot
        self._count += 1
        table.add_row(
            time.strftime("%H:%M:%S", time.localtime(report.received_at)),
            report.peer or "?",
            f"{snapshot.cpu_load:5.1f}" if snapshot.cpu_known else "n/a",
            format_megabytes(snapshot.mem_available) if snapshot.mem_known else "n/a",
            str(snapshot.processes_active) if snapshot.processes_known else "n/a",
            key=str(self._count),
        )
        # Keep the newest report in view
        table.move_cursor(row=table.row_count - 1)

    def clear_reports(self) -> None:
        """Remove all rows."""
        self.query_one("#report-table", DataTable).clear()
        self._count = 0


class CollectorApp(App):
    """Collector dashboard application."""

    TITLE = "syslens"
    SUB_TITLE = "Snapshot Collector"

    CSS = """
    Screen {
        layout: vertical;
    }

    #latest-report {
        dock: top;
        height: auto;
        min-height: 6;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("c", "clear", "Clear"),
    ]

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        backlog: int = DEFAULT_BACKLOG,
    ) -> None:
        """Initialize the CollectorApp."""
        super().__init__()
        self._update_queue: Queue[Report] = Queue()
        self._service = CollectorService(
            QueueSink(self._update_queue), host=host, port=port, backlog=backlog
        )

    @property
    def service(self) -> CollectorService:
        """Get the collector service feeding the dashboard."""
        return self._service

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield LatestReport(id="latest-report")
        yield ReportTable()
        yield Footer()

    def on_mount(self) -> None:
        """Start the collector when the app is mounted."""
        try:
            self._service.start()
            host, port = self._service.address
            self.sub_title = f"Listening on {host or '*'}:{port}"
        except OSError as exc:
            self.notify(f"Cannot listen: {exc}", severity="error")
        self.set_interval(0.5, self._check_for_updates)

    def _check_for_updates(self) -> None:
        """Drain the queue and show every report received since the last poll."""
        while True:
            try:
                report = self._update_queue.get_nowait()
            except Empty:
                break
            self.show_report(report)

    def show_report(self, report: Report) -> None:
        """Update the widgets with one report."""
        try:
            latest = self.query_one("#latest-report", LatestReport)
            latest.update_report(report)
        except Exception:
            # Widgets may be gone during teardown; the dashboard must not crash
            pass

        try:
            table = self.query_one(ReportTable)
            table.add_report(report)
        except Exception:
            pass

    def action_clear(self) -> None:
        """Handle clear action - empty the report table."""
        try:
            self.query_one(ReportTable).clear_reports()
        except Exception:
            pass

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self._service.stop()
        self.exit()
