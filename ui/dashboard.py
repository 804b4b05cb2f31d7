"""Real-time CLI dashboard for gateway monitoring."""

from datetime import datetime
from threading import Lock

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from ui.log_utils import truncate, write_cli_log, write_request_log

console = Console()


class RequestInfo:
    """Info about a single gateway request."""

    def __init__(self, method: str, target: str, status: int, timestamp: datetime, detail: str = ""):
        self.method = method
        self.target = truncate(target, 60)
        self.status = status
        self.detail = detail
        self.timestamp = timestamp


class Dashboard:
    """Real-time dashboard showing forwarded and rejected requests."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._forwarded: list[RequestInfo] = []
        self._rejected: list[RequestInfo] = []
        self._max_rows = 8
        self._request_count = {"forwarded": 0, "rejected": 0, "failed": 0}
        self._errors: list[str] = []
        self._live: Live | None = None

    def start(self) -> "Dashboard":
        """Start the live dashboard."""
        self._live = Live(
            self._build_layout(),
            console=console,
            refresh_per_second=4,
            screen=False,
        )
        self._live.start()
        return self

    def stop(self) -> None:
        """Stop the live dashboard."""
        if self._live:
            self._live.stop()

    def log_forward(
        self,
        method: str,
        target: str,
        status: int,
        *,
        origin: str | None,
        headers: dict[str, str],
        elapsed_ms: float,
    ) -> None:
        """Log a request forwarded upstream."""
        with self._lock:
            self._request_count["forwarded"] += 1
            info = RequestInfo(method, target, status, datetime.now(), detail=f"{elapsed_ms:.0f} ms")
            self._forwarded.insert(0, info)
            self._forwarded = self._forwarded[: self._max_rows]
            self._refresh()

            write_request_log(
                method, target, status, origin=origin, headers=headers, elapsed_ms=elapsed_ms
            )
            write_cli_log("FORWARD", f"{method} {target}", status=status, origin=origin or "-")

    def log_rejected(self, method: str, target: str | None, status: int, reason: str) -> None:
        """Log a request refused before any upstream call."""
        with self._lock:
            self._request_count["rejected"] += 1
            info = RequestInfo(method, target or "-", status, datetime.now(), detail=reason)
            self._rejected.insert(0, info)
            self._rejected = self._rejected[: self._max_rows]
            self._refresh()
            write_cli_log("REJECT", f"{method} {target or '-'}", status=status, reason=reason)

    def log_error(self, route: str, status: int, message: str) -> None:
        """Log an upstream failure."""
        with self._lock:
            self._request_count["failed"] += 1
            self._errors.insert(0, f"{route} {status}: {truncate(message, 50)}")
            self._errors = self._errors[:3]
            self._refresh()
            write_cli_log("ERROR", message[:200], route=route, status=status)

    def _refresh(self) -> None:
        """Refresh the display."""
        if self._live:
            self._live.update(self._build_layout())

    def _build_layout(self) -> Layout:
        """Build the dashboard layout."""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=5),
        )

        layout["body"].split_row(
            Layout(name="forwarded", ratio=3),
            Layout(name="rejected", ratio=2),
        )

        layout["header"].update(self._build_header())
        layout["forwarded"].update(
            self._build_request_panel(
                self._forwarded, "[green]Forwarded[/green]", "green", "Waiting for requests..."
            )
        )
        layout["rejected"].update(
            self._build_request_panel(
                self._rejected, "[yellow]Rejected[/yellow]", "yellow", "No rejected requests yet..."
            )
        )
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("CORS Gateway", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Forwarded: {self._request_count['forwarded']}", style="green")
        stats.append("  |  ")
        stats.append(f"Rejected: {self._request_count['rejected']}", style="yellow")
        stats.append("  |  ")
        stats.append(f"Failed: {self._request_count['failed']}", style="red")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.proxy.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_request_panel(
        self, rows: list[RequestInfo], title: str, border: str, empty: str
    ) -> Panel:
        """Build a table panel of recent requests."""
        if rows:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Method", width=7)
            table.add_column("Status", width=6)
            table.add_column("Target", ratio=2)
            table.add_column("Detail", ratio=1)

            for row in rows:
                table.add_row(
                    row.timestamp.strftime("%H:%M:%S"),
                    row.method,
                    str(row.status),
                    row.target,
                    truncate(row.detail, 40),
                )
            content = table
        else:
            content = Text(empty, style="dim")

        return Panel(content, title=title, border_style=border)

    def _build_footer(self) -> Panel:
        """Build footer with errors and usage."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            proxy = self.config.proxy
            content = Text(
                f"Call http://{proxy.host}:{proxy.port}{proxy.prefix}?apiurl=<target URL>",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")
