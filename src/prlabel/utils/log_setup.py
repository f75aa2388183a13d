"""
Logging setup for prlabel.

Console output goes through rich on stderr so that stdout stays clean for
``prlabel show``. A run can additionally be logged to a file at DEBUG level.

"""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.rule import Rule
from rich.text import Text

console = Console(stderr=True)

FILE_LOG_FORMAT = "%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s"


def _file_handler(log_file_path: Path | str) -> logging.Handler | None:
	path = Path(log_file_path)
	try:
		path.parent.mkdir(parents=True, exist_ok=True)
		handler = logging.FileHandler(path, mode="a", encoding="utf-8")
	except OSError as e:
		console.print(f"[red]Could not open log file {path}: {e}[/red]")
		return None
	handler.setLevel(logging.DEBUG)
	handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
	return handler


def setup_logging(
	is_verbose: bool = False,
	log_to_console: bool = True,
	log_file_path: Path | str | None = None,
) -> None:
	"""
	Configure the root logger.

	Calling it again replaces the handlers installed by a previous call.

	Args:
	    is_verbose: Show DEBUG messages on the console instead of warnings only
	    log_to_console: Install the rich console handler
	    log_file_path: Also write every record to this file

	"""
	console_level = logging.DEBUG if is_verbose else logging.WARNING

	root_logger = logging.getLogger()
	for handler in root_logger.handlers[:]:
		root_logger.removeHandler(handler)

	handlers: list[logging.Handler] = []
	if log_to_console:
		handlers.append(
			RichHandler(
				level=console_level,
				console=console,
				rich_tracebacks=True,
				show_path=is_verbose,
			)
		)
	file_handler = _file_handler(log_file_path) if log_file_path else None
	if file_handler is not None:
		handlers.append(file_handler)

	root_logger.setLevel(logging.DEBUG if file_handler is not None else console_level)
	for handler in handlers:
		root_logger.addHandler(handler)
	if file_handler is not None:
		root_logger.debug("Logging to file: %s", log_file_path)


def log_environment_info() -> None:
	"""Log prlabel, pygit2/libgit2 and Python versions."""
	import platform

	import pygit2

	from prlabel import __version__

	logger = logging.getLogger(__name__)
	logger.info("prlabel %s", __version__)
	logger.info("pygit2 %s (libgit2 %s)", pygit2.__version__, pygit2.LIBGIT2_VERSION)
	logger.info("Python %s on %s", platform.python_version(), platform.platform())


def _display_summary(title: str, message: str, style: str) -> None:
	console.print()
	console.print(Rule(Text(title, style=f"bold {style}"), style=style))
	console.print(f"\n{message}\n", markup=False)
	console.print(Rule(style=style))
	console.print()


def display_error_summary(error_message: str) -> None:
	"""Print ``error_message`` between red rules."""
	_display_summary("Error Summary", error_message, "red")


def display_warning_summary(warning_message: str) -> None:
	"""Print ``warning_message`` between yellow rules."""
	_display_summary("Warning Summary", warning_message, "yellow")
