#!/usr/bin/env python3
"""
Kenosis — Ancient Greek κένωσις (emptying)

Finds software projects nested anywhere under the given paths, recognizes
their build ecosystem (Cargo, Node, Unity, Maven, ...) and reports or
reclaims the space held by their regenerable build artifacts.

Usage:
    kenosis [paths...]                 # Scan and report artifact sizes
    kenosis <path> --min-size 10M      # Only show projects with > 10 MiB of artifacts
    kenosis <path> --clean             # Report, confirm, then delete artifacts
    kenosis <path> --clean --yes       # Delete without asking
    kenosis --single <project>         # Clean exactly this one project
"""

import argparse
import os
import pathlib
import signal
import sys
import threading
import time
from dataclasses import dataclass, field
from typing import Optional

from rich import box
from rich.markup import escape
from rich.table import Table

import worker_pool
from auxiliary import format_bytes, format_path_for_display, parse_size
from console_ui import ConsoleUI
from kenosis_config import ConfigManager, ConfigurationError, KenosisConfig
from logging_config import setup_logging
from project import CleanError, Project, clean
from scan_results import ScanResults, collect_paths
from size_aggregator import dir_size

# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class ProjectReport:
    project: Project
    artifact_size: int
    present_dirs: list[str] = field(default_factory=list)
    dir_sizes: dict[str, int] = field(default_factory=dict)


@dataclass
class CleanSummary:
    """Outcome of cleaning a batch of projects"""

    cleaned: list[Project] = field(default_factory=list)
    partial: list[Project] = field(default_factory=list)
    total_reclaimed: int = 0
    errors: list[CleanError] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Kenosis
# ---------------------------------------------------------------------------


class Kenosis:
    """Main application class for the Kenosis artifact cleanup tool"""

    def __init__(
        self, args: argparse.Namespace, config: Optional[KenosisConfig] = None, ui: Optional[ConsoleUI] = None
    ):
        self.args = args
        self.ui = ui or ConsoleUI()
        self.config = config or KenosisConfig()
        self._shutdown_requested = False
        self._stop = threading.Event()

    # -- signal handling ----------------------------------------------------

    def install_signal_handlers(self):
        signal.signal(signal.SIGINT, self._signal_handler)
        if hasattr(signal, "SIGTERM"):
            signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, signum, frame):
        if self._shutdown_requested:
            self.ui.console.file.flush()
            os._exit(130)
        self._shutdown_requested = True
        self._stop.set()
        self.ui.print_warning("\nShutdown requested... press Ctrl+C again to force quit.")

    # -- scanning ------------------------------------------------------------

    def scan(self, roots: list[str]) -> ScanResults:
        shown = ", ".join(format_path_for_display(str(pathlib.Path(r).resolve())) for r in roots)
        self.ui.print_header("Kenosis", f"Scanning {shown}")

        progress = self.ui.create_activity_progress()
        with progress:
            task = progress.add_task("Scanning...", total=None)
            results = collect_paths(
                roots,
                follow_links=self.config.follow_links,
                ignore_paths=self.config.ignore_paths,
                stop_event=self._stop,
            )
            progress.update(task, description=f"Scan complete — {len(results.projects)} projects")
        return results

    def measure(self, projects: list[Project], min_size: int = 0) -> list[ProjectReport]:
        """Size every project's artifacts, largest first, dropping those below min_size"""
        reports: list[ProjectReport] = []
        if not projects:
            return reports

        progress = self.ui.create_progress()
        with progress:
            task = progress.add_task("Measuring...", total=len(projects))
            for project in projects:
                if self._shutdown_requested:
                    break
                present = [d for d in project.artifact_dirs() if (project.path / d).exists()]
                dir_sizes = {d: dir_size(project.path / d) for d in present}
                size = sum(dir_sizes.values())
                if size > 0 and size >= min_size:
                    reports.append(ProjectReport(project, size, list(dir_sizes), dir_sizes))
                progress.advance(task)

        reports.sort(key=lambda r: r.artifact_size, reverse=True)
        return reports

    # -- reporting -----------------------------------------------------------

    def report(self, reports: list[ProjectReport], results: ScanResults, duration: float):
        if results.errors:
            self.ui.show_failures(
                [(format_path_for_display(str(e.path)), e.message) for e in results.errors],
                title="Directories that could not be scanned",
            )
            self.ui.console.print()

        if not reports:
            self.ui.print_success("No build artifacts found!")
            return

        table = Table(title="Build Artifacts", box=box.ROUNDED, show_lines=False)
        table.add_column("Project", style="white", min_width=30)
        table.add_column("Type", style="cyan", min_width=8)
        table.add_column("Artifacts", style="dim", min_width=12)
        table.add_column("Size", justify="right", style="yellow", min_width=10)

        for r in reports:
            table.add_row(
                escape(format_path_for_display(r.project.name())),
                r.project.type_name(),
                escape(", ".join(r.present_dirs)),
                format_bytes(r.artifact_size),
            )

        self.ui.console.print(table)
        self.ui.console.print()
        total = sum(r.artifact_size for r in reports)
        self.ui.print_info(f"Total reclaimable: {format_bytes(total)}  ({len(reports)} projects)")
        self.ui.print_info(f"Scan completed in {duration:.1f}s")

    # -- cleaning ------------------------------------------------------------

    def clean(self, reports: list[ProjectReport]) -> CleanSummary:
        summary = CleanSummary()
        progress = self.ui.create_progress()
        with progress:
            task = progress.add_task("Cleaning...", total=len(reports))
            for r in reports:
                if self._shutdown_requested:
                    break
                progress.update(
                    task,
                    description=f"Cleaning {r.project.type_name()}... {format_bytes(summary.total_reclaimed)} reclaimed",
                )
                errors = r.project.clean()
                failed = {e.path for e in errors}
                reclaimed = [size for d, size in r.dir_sizes.items() if r.project.path / d not in failed]
                summary.total_reclaimed += sum(reclaimed)
                summary.errors.extend(errors)
                if not errors:
                    summary.cleaned.append(r.project)
                elif len(failed) < len(r.dir_sizes):
                    summary.partial.append(r.project)
                progress.advance(task)
        return summary

    def summary(self, summary: CleanSummary):
        self.ui.console.print()
        self.ui.print_info("Cleanup Complete")
        if summary.cleaned:
            self.ui.print_success(
                f"  Cleaned: {len(summary.cleaned)} projects, reclaimed {format_bytes(summary.total_reclaimed)}"
            )
        if summary.partial:
            self.ui.print_warning(f"  Partially cleaned: {len(summary.partial)} projects")
        if summary.total_reclaimed and not summary.cleaned:
            self.ui.print_success(f"  Reclaimed {format_bytes(summary.total_reclaimed)}")
        self.ui.show_failures(
            [(format_path_for_display(str(e.path)), e.error.strerror or str(e.error)) for e in summary.errors],
            title="Could not remove",
        )

    def clean_single(self, path: str) -> int:
        target = pathlib.Path(path)
        if not target.is_dir():
            self.ui.print_error(f"Not a directory: {path}")
            return 1
        try:
            errors = clean(target)
        except OSError as e:
            self.ui.print_error(f"Cannot read {path}: {e.strerror or e}")
            return 1
        if errors:
            self.ui.show_failures(
                [(format_path_for_display(str(e.path)), e.error.strerror or str(e.error)) for e in errors],
                title="Could not remove",
            )
        else:
            self.ui.print_success(f"Cleaned {format_path_for_display(str(target))}")
        return 0

    # -- main entry point ----------------------------------------------------

    def run(self) -> int:
        if self.args.single:
            return self.clean_single(self.args.single)

        roots = self.args.paths or ["."]
        for root in roots:
            if not pathlib.Path(root).is_dir():
                self.ui.print_error(f"Not a directory: {root}")
                return 1

        min_size = 0
        if self.args.min_size:
            try:
                min_size = parse_size(self.args.min_size)
            except ValueError:
                self.ui.print_error(f"Invalid size: {self.args.min_size}")
                return 1

        start = time.monotonic()
        results = self.scan(roots)
        reports = self.measure(results.projects, min_size)
        self.report(reports, results, time.monotonic() - start)

        if not self.args.clean or not reports or self._shutdown_requested:
            return 0

        self.ui.console.print()
        if not self.args.yes and not self.ui.confirm(f"Delete artifacts of {len(reports)} projects?", default=False):
            self.ui.print_info("No changes made.")
            return 0

        self.summary(self.clean(reports))
        return 0


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kenosis",
        description="Kenosis — build artifact cleanup tool",
    )
    parser.add_argument("paths", nargs="*", help="Directories to scan (default: current directory)")
    parser.add_argument("--min-size", type=str, default=None, help="Minimum artifact size to report (e.g. 10M, 1G)")
    parser.add_argument("--clean", action="store_true", help="Delete the reported artifact directories")
    parser.add_argument("-y", "--yes", action="store_true", help="Do not ask before deleting")
    parser.add_argument("-s", "--single", metavar="PATH", default=None, help="Clean exactly this one project")
    parser.add_argument("--workers", type=int, default=None, help="Worker threads for filesystem operations")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    parser.add_argument("--log-file", default=None, help="Append log messages to this file")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = ConfigManager().load()
    except ConfigurationError as e:
        ConsoleUI().print_error(str(e))
        return 1

    setup_logging(
        verbose=args.verbose,
        quiet=args.quiet,
        log_file=args.log_file or config.log_file,
        level=config.log_level,
    )

    workers = args.workers if args.workers is not None else config.workers
    try:
        worker_pool.configure(workers)
    except ValueError as e:
        ConsoleUI().print_error(str(e))
        return 1

    app = Kenosis(args, config)
    app.install_signal_handlers()
    try:
        return app.run()
    finally:
        worker_pool.shutdown()


if __name__ == "__main__":
    sys.exit(main())
