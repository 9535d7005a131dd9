#!/usr/bin/env python3
"""
Console UI Module using Rich

Styled messages, progress displays and prompts for the kenosis CLI.
"""

from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.prompt import Confirm


class ConsoleUI:
    """Console UI handler using Rich"""

    def __init__(self, force_terminal: Optional[bool] = None, console: Optional[Console] = None):
        """Initialize console with optional terminal forcing"""
        self.console = console or Console(force_terminal=force_terminal, highlight=False)

    # Basic styled output methods
    def print_success(self, message: str):
        """Print success message in green"""
        self.console.print(message, style="green")

    def print_error(self, message: str):
        """Print error message in red"""
        self.console.print(message, style="red bold")

    def print_warning(self, message: str):
        """Print warning message in yellow"""
        self.console.print(message, style="yellow")

    def print_info(self, message: str):
        """Print info message in cyan"""
        self.console.print(message, style="cyan")

    def print_header(self, title: str, subtitle: Optional[str] = None):
        """Print a header with optional subtitle"""
        if subtitle:
            header_text = f"[bold]{title}[/bold]\n[dim]{subtitle}[/dim]"
        else:
            header_text = f"[bold]{title}[/bold]"

        panel = Panel(header_text, box=box.ROUNDED, padding=(0, 1))
        self.console.print(panel)

    # Progress displays
    def create_progress(self) -> Progress:
        """Create a Rich progress context manager for batch operations"""
        return Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TextColumn("({task.completed}/{task.total})"),
            TimeElapsedColumn(),
            TimeRemainingColumn(),
            console=self.console,
        )

    def create_activity_progress(self) -> Progress:
        """Create a Rich progress context manager for activity-only display (no counts)"""
        return Progress(
            SpinnerColumn(),
            TextColumn("{task.description}"),
            TimeElapsedColumn(),
            console=self.console,
        )

    def show_failures(self, failures: list[tuple[str, str]], title: str, show_limit: int = 20):
        """Show (path, error) pairs under a red title"""
        if not failures:
            return

        self.console.print(f"\n[red]{title} ({len(failures)}):[/red]")
        for path, error in failures[:show_limit]:
            self.console.print(f"[red dim]  • {escape(path)}: {escape(error)}[/red dim]")

        if len(failures) > show_limit:
            remaining = len(failures) - show_limit
            self.console.print(f"[red dim]  • ... and {remaining} more[/red dim]")

    # Interactive prompts
    def confirm(self, question: str, default: bool = False) -> bool:
        """Ask for yes/no confirmation"""
        return Confirm.ask(question, default=default, console=self.console)
