"""
Rich console utilities for dual-mode CLI output.

Human-readable Rich output for people at a terminal and structured JSON for
CI jobs and other tools. All output functions adapt to the global
output_mode setting.

This module provides:
- OutputMode: Output format (text/json) plus the quiet flag
- Context managers: spinner(), create_progress_bar()
- Output functions: success(), error(), warning(), info()
- Display functions: print_scenario_table(), print_banner(), print_final_summary()

Human Mode (--format text):
    - Spinners, progress bars, colored tables and panels

Agent Mode (--format json):
    - One JSON document on stdout, no ANSI codes

Quiet Mode (--quiet):
    - Tab-separated values, no decorations

Examples:
    >>> from isp_pricing_verifier.utils.console import output_mode, spinner, success
    >>> output_mode.format = "text"
    >>> with spinner("Loading config..."):
    ...     config = load_config("pricing.config.yaml")
    >>> success("Config loaded")
"""

from __future__ import annotations

import json
import sys
from contextlib import contextmanager
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table


class OutputMode:
    """
    Output mode configuration for dual-mode CLI.

    Attributes:
        format: Output format - "text" (human) or "json" (agent)
        quiet: If True, suppress non-essential output
        _json_buffer: Accumulated JSON payload in agent mode

    Examples:
        >>> mode = OutputMode()
        >>> mode.is_human()
        True
        >>> mode.format = "json"
        >>> mode.is_agent()
        True
    """

    def __init__(self, format_type: str = "text", quiet: bool = False):
        """
        Initialize output mode.

        Raises:
            ValueError: If format_type is not "text" or "json"
        """
        if format_type not in ["text", "json"]:
            raise ValueError(f"Invalid format: {format_type}. Must be 'text' or 'json'")

        self.format = format_type
        self.quiet = quiet
        self._json_buffer: dict[str, Any] = {}

    def is_human(self) -> bool:
        return self.format == "text"

    def is_agent(self) -> bool:
        return self.format == "json"

    def add_json(self, key: str, value: Any) -> None:
        """Add a key to the JSON payload flushed at the end of the command."""
        self._json_buffer[key] = value

    def flush_json(self) -> None:
        """
        Output buffered JSON to stdout and clear the buffer.

        No-op in human mode or when nothing was buffered.
        """
        if self.is_agent() and self._json_buffer:
            json.dump(self._json_buffer, sys.stdout, indent=2, ensure_ascii=False)
            sys.stdout.write("\n")
            sys.stdout.flush()
            self._json_buffer.clear()


# Global output mode instance (set by CLI flags)
output_mode = OutputMode()

# Global Rich console instances for human mode
console = Console()  # stdout
console_err = Console(stderr=True)  # stderr


@contextmanager
def spinner(message: str):
    """
    Show a spinner while a block runs (human mode only).

    Examples:
        >>> with spinner("Loading config..."):
        ...     config = load_config("pricing.config.yaml")
    """
    if output_mode.is_human() and not output_mode.quiet:
        with console.status(f"[bold blue]{message}", spinner="dots") as status:
            yield status
    else:
        yield None


def create_progress_bar() -> Progress | NoOpProgress:
    """
    Create a progress bar for tracking scenarios.

    Browser scenarios have very uneven durations, so the bar shows elapsed
    time rather than an estimate of the time remaining.

    Returns:
        Progress: Rich Progress instance in human mode
        NoOpProgress: No-op progress bar in agent/quiet modes
    """
    if output_mode.is_human() and not output_mode.quiet:
        return Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=console,
            transient=True,
        )
    return NoOpProgress()


class NoOpProgress:
    """
    No-op progress bar for agent and quiet modes.

    Provides the subset of the Rich Progress interface the CLI uses.
    """

    def __enter__(self):
        return self

    def __exit__(self, *args):
        pass

    def add_task(self, _description: str, total: int | None = None) -> int:
        return 0

    def advance(self, _task_id: int, _advance: float = 1.0) -> None:
        pass


def success(message: str) -> None:
    """
    Print a success message.

    Human mode: green checkmark. Agent mode: buffered as status/message.
    """
    if output_mode.is_human():
        if not output_mode.quiet:
            console.print(f"[green]✓[/green] {message}")
    elif output_mode.is_agent():
        output_mode.add_json("status", "success")
        output_mode.add_json("message", message)


def error(message: str) -> None:
    """
    Print an error message.

    Human mode: red cross on stderr, also in quiet mode. Agent mode:
    buffered as status/error.
    """
    if output_mode.is_human():
        console_err.print(f"[red]✗[/red] {message}", style="red")
    elif output_mode.is_agent():
        output_mode.add_json("status", "error")
        output_mode.add_json("error", message)


def warning(message: str) -> None:
    """Print a warning message (agent mode: buffered under "warnings")."""
    if output_mode.is_human():
        if not output_mode.quiet:
            console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")
    elif output_mode.is_agent():
        warnings = output_mode._json_buffer.setdefault("warnings", [])
        warnings.append(message)


def info(message: str) -> None:
    """Print an info message. Silent for agents and in quiet mode."""
    if output_mode.is_human() and not output_mode.quiet:
        console.print(f"[blue]ℹ[/blue] {message}")


def print_scenario_table(results: list[dict]) -> None:
    """
    Print a table of scenario results.

    Expected dict keys in results:
    - scenario_id (str): Scenario identifier
    - provider (str): Network provider of the scenario
    - found_count (int): Packages located
    - total_count (int): Packages declared
    - status (str): "passed", "failed" or "error"
    - error (str | None): Failure message when not passed

    Human mode renders a Rich table, agent mode buffers the list under
    "results", quiet mode prints nothing.
    """
    if output_mode.is_agent():
        output_mode.add_json("results", results)
        return

    if output_mode.quiet:
        return

    table = Table(title="Verification Summary", box=box.ROUNDED)

    table.add_column("Scenario", style="cyan", no_wrap=True)
    table.add_column("Provider", style="magenta")
    table.add_column("Packages", justify="center")
    table.add_column("Status", justify="center")
    table.add_column("Detail")

    for result in results:
        found = result.get("found_count", 0)
        total = result.get("total_count", 0)
        packages_str = f"{found}/{total}"
        if total and found < total:
            packages_str = f"[yellow]{packages_str}[/yellow]"

        status = result.get("status", "unknown")
        if status == "passed":
            status_str = "[green]passed[/green]"
        elif status in ("failed", "error"):
            status_str = f"[red]{status}[/red]"
        else:
            status_str = f"[yellow]{status}[/yellow]"

        detail = (result.get("error") or "").splitlines()
        table.add_row(
            result.get("scenario_id", ""),
            result.get("provider", ""),
            packages_str,
            status_str,
            detail[0] if detail else "",
        )

    console.print(table)


def print_banner(version: str) -> None:
    """Print the startup banner (human mode only)."""
    if not output_mode.is_human() or output_mode.quiet:
        return

    banner = f"""
[bold cyan]╔{"═" * 39}╗
║   ISP Pricing Verifier v{version:<13} ║
║   Check advertised packages & prices  ║
╚{"═" * 39}╝[/bold cyan]
"""

    console.print(banner)


def print_final_summary(run_id: str, output_dir: str, passed: int, total: int) -> None:
    """
    Print final summary with run statistics.

    Human mode: Rich panel (green if every scenario passed)
    Agent mode: Flush all buffered JSON including these final stats
    Quiet mode: Tab-separated run_id, output_dir, passed, total

    Examples:
        >>> print_final_summary(
        ...     run_id="2025-06-12T08-30-00Z",
        ...     output_dir="./output/2025-06-12T08-30-00Z",
        ...     passed=2,
        ...     total=3,
        ... )
    """
    if output_mode.is_agent():
        output_mode.add_json("run_id", run_id)
        output_mode.add_json("output_dir", output_dir)
        output_mode.add_json("passed_scenarios", passed)
        output_mode.add_json("total_scenarios", total)
        output_mode.flush_json()
        return

    if output_mode.quiet:
        print(f"{run_id}\t{output_dir}\t{passed}\t{total}")
        return

    pass_rate = (passed / total * 100) if total > 0 else 0.0

    summary_text = f"""
[bold]Run ID:[/bold] {run_id}
[bold]Output Directory:[/bold] {output_dir}
[bold]Scenarios:[/bold] {passed}/{total} passed ({pass_rate:.1f}%)
"""

    if passed == total:
        border_style = "green"
        title = "[bold green]✓ All Scenarios Passed[/bold green]"
    elif passed > 0:
        border_style = "yellow"
        title = "[bold yellow]⚠ Some Scenarios Failed[/bold yellow]"
    else:
        border_style = "red"
        title = "[bold red]✗ All Scenarios Failed[/bold red]"

    panel = Panel(
        summary_text.strip(),
        title=title,
        border_style=border_style,
        box=box.ROUNDED,
    )

    console.print(panel)
