"""Utility functions for CLI operations in prlabel."""

from __future__ import annotations

import contextlib
import logging
import os
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from prlabel.utils.log_setup import display_error_summary, display_warning_summary

if TYPE_CHECKING:
	from collections.abc import Callable, Iterator

	from prlabel.labeler.schemas import RunSummary

console = Console()
logger = logging.getLogger(__name__)

MAX_LISTED_WARNINGS = 20


@contextlib.contextmanager
def progress_indicator(
	message: str,
	total: int | None = None,
	transient: bool = False,
) -> Iterator[Callable[[int], None]]:
	"""
	Show a determinate progress bar while a task runs.

	Args:
	    message: The message to display with the progress bar
	    total: The total units of work
	    transient: Whether the progress bar should disappear after completion

	Yields:
	    A callable that accepts an integer amount to advance the progress

	"""
	# Skip visual indicators in testing/CI environments
	if os.environ.get("PYTEST_CURRENT_TEST") or os.environ.get("CI"):
		yield lambda _: None
		return

	progress = Progress(
		SpinnerColumn(),
		TextColumn("[progress.description]{task.description}"),
		BarColumn(),
		MofNCompleteColumn(),
		console=console,
		transient=transient,
	)
	with progress:
		task_id = progress.add_task(message, total=total or 1)
		yield lambda amount=1: progress.update(task_id, advance=amount)


def show_error(message: str, exception: Exception | None = None) -> None:
	"""
	Display an error summary with standardized formatting.

	Args:
	        message: The error message to display
	        exception: Optional exception that caused the error

	"""
	error_text = message
	if exception:
		error_text += f"\n\nDetails: {exception!s}"
		logger.debug("Error occurred", exc_info=exception)

	display_error_summary(error_text)


def show_warning(message: str) -> None:
	"""
	Display a warning summary with standardized formatting.

	Args:
	        message: The warning message to display

	"""
	display_warning_summary(message)


def exit_with_error(message: str, exit_code: int = 1, exception: Exception | None = None) -> None:
	"""
	Display an error message and exit.

	Args:
	        message: Error message to display
	        exit_code: Exit code to use
	        exception: Optional exception that caused the error

	"""
	show_error(message, exception)
	raise typer.Exit(exit_code) from exception


def handle_keyboard_interrupt() -> None:
	"""Handles KeyboardInterrupt by printing a message and exiting cleanly."""
	console.print("\n[yellow]Operation cancelled by user.[/yellow]")
	raise typer.Exit(130)  # Standard exit code for SIGINT


def render_summary(summary: RunSummary) -> None:
	"""
	Print the end-of-run table and the accumulated warnings.

	Args:
	        summary: Result of a label run

	"""
	title = "Label Summary (dry run)" if summary.dry_run else "Label Summary"
	table = Table(title=title)
	table.add_column("", style="green")
	table.add_column("", style="white", justify="right")

	table.add_row("Specs", str(summary.specs))
	table.add_row("Specs failed", str(len(summary.failed_specs)))
	table.add_row("PRs resolved", str(summary.pull_requests_resolved))
	table.add_row("Commits labeled", str(summary.commits_labeled))
	table.add_row("Commits unchanged", str(summary.commits_unchanged))
	table.add_row("Commits failed", str(summary.commits_failed))
	table.add_row("Commits claimed by several PRs", str(summary.conflicts))
	console.print(table)

	if summary.warnings:
		lines = summary.warnings[:MAX_LISTED_WARNINGS]
		hidden = len(summary.warnings) - len(lines)
		if hidden > 0:
			lines.append(f"... and {hidden} more (run with --verbose for details)")
		show_warning("\n".join(f"- {line}" for line in lines))

	if summary.failed_specs:
		show_error("\n".join(f"- {spec}: {reason}" for spec, reason in summary.failed_specs))
