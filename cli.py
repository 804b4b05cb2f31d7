"""CLI entry point for cors-gateway."""

import sys
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.table import Table

from app import create_app
from core.config import CONFIG_FILE, Config, load_config
from ui.console_log import ConsoleLog
from ui.dashboard import Dashboard
from ui.log_utils import write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    config = load_config(on_reset=_log_config_reset)
    plain = False

    # Handle CLI arguments
    if len(sys.argv) > 1:
        arg = sys.argv[1]

        if arg == "--check":
            print_policy(config)
            return

        if arg == "--config":
            console.print(f"[bold]Config:[/bold] {CONFIG_FILE}")
            return

        if arg in ("--help", "-h"):
            _print_help()
            return

        if arg == "--plain":
            plain = True
        else:
            console.print(f"[red][ERROR][/red] Unknown argument: {arg}")
            _print_help()
            sys.exit(2)

    if not config.targets.allowed_targets:
        console.print("[red][ERROR][/red] No allowed targets configured!")
        console.print(f"[dim]Edit {CONFIG_FILE} and set targets.allowed_targets[/dim]")
        sys.exit(1)

    import uvicorn

    dashboard = None if plain else Dashboard(config)
    app = create_app(config, dashboard or ConsoleLog())

    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level="warning",
        timeout_keep_alive=config.proxy.keep_alive_timeout,
    )
    server = uvicorn.Server(uvicorn_config)

    if dashboard:
        dashboard.start()
    else:
        console.print(
            f"[bold cyan]CORS Gateway[/bold cyan] listening on "
            f"http://{config.proxy.host}:{config.proxy.port}{config.proxy.prefix}"
        )
    start_time = datetime.now()
    write_cli_log("STARTUP", "Gateway started", port=config.proxy.port)
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Gateway stopped", duration=str(duration))
        if dashboard:
            dashboard.stop()


def _log_config_reset(backup: Path, reason: str) -> None:
    """Record that an invalid config file was replaced by defaults."""
    console.print(f"[yellow]Warning:[/yellow] Invalid config moved to {backup}, using defaults")
    write_cli_log("CONFIG", "Invalid config replaced by defaults", backup=backup, reason=reason)


def print_policy(config: Config) -> None:
    """Print the effective allow-lists and limits."""
    table = Table(title="Effective policy", show_header=True, header_style="bold")
    table.add_column("Setting")
    table.add_column("Value")
    table.add_row("Allowed targets", "\n".join(config.targets.allowed_targets) or "[red]none[/red]")
    table.add_row("Allowed origins", "\n".join(config.cors.allowed_origins) or "[dim]none[/dim]")
    table.add_row("Methods", ", ".join(config.cors.allowed_methods))
    table.add_row("Max request", f"{config.limits.max_request_bytes} bytes")
    table.add_row("Max response", f"{config.limits.max_response_bytes} bytes")
    table.add_row("Upstream timeout", f"{config.limits.upstream_timeout:g} s")
    console.print(table)


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]CORS Gateway[/bold cyan]

Forwards browser requests to allow-listed APIs and adds CORS headers
for allow-listed origins.

[bold]Usage:[/bold]
    cors-gateway              Start with live dashboard
    cors-gateway --plain      Start with one log line per request
    cors-gateway --check      Show allow-lists and limits
    cors-gateway --config     Show config location
    cors-gateway --help       Show this help

[bold]Calling:[/bold]
    GET /corsproxy/?apiurl=https://httpbin.org/get
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
