"""Line-per-event console logger for runs without the live dashboard."""

from datetime import datetime

from rich.console import Console

from ui.log_utils import write_cli_log, write_request_log

console = Console()


class ConsoleLog:
    """Print one rich line per gateway event."""

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
        style = "green" if status < 400 else "yellow"
        console.print(
            f"[dim]{_now()}[/dim] [{style}]{status}[/{style}] {method} {target} "
            f"[dim]({elapsed_ms:.0f} ms, origin={origin or '-'})[/dim]"
        )
        write_request_log(method, target, status, origin=origin, headers=headers, elapsed_ms=elapsed_ms)
        write_cli_log("FORWARD", f"{method} {target}", status=status, origin=origin or "-")

    def log_rejected(self, method: str, target: str | None, status: int, reason: str) -> None:
        console.print(f"[dim]{_now()}[/dim] [yellow]{status}[/yellow] {method} {target or '-'}: {reason}")
        write_cli_log("REJECT", f"{method} {target or '-'}", status=status, reason=reason)

    def log_error(self, route: str, status: int, message: str) -> None:
        console.print(f"[dim]{_now()}[/dim] [red]{status}[/red] {route}: {message}")
        write_cli_log("ERROR", message[:200], route=route, status=status)


def _now() -> str:
    return datetime.now().strftime("%H:%M:%S")
