"""Command-line interface package for prlabel."""

from __future__ import annotations

import datetime
import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

from prlabel import __version__
from prlabel.utils.log_setup import log_environment_info, setup_logging

from .label_cmd import register_command as register_label_command
from .version_cmd import register_command as register_version_command

logger = logging.getLogger(__name__)

# Initialize the main CLI app
app = typer.Typer(
	help=f"prlabel - attach pull request links to the commits they introduced\n\nVersion: {__version__}",
	no_args_is_help=True,
	context_settings={"help_option_names": ["-h", "--help"]},
)

# --- Global Options Callback ---


def _version_callback(value: bool) -> None:
	"""Callback for --version option."""
	if value:
		typer.echo(f"prlabel version: {__version__}")
		raise typer.Exit


@app.callback(invoke_without_command=True)
def global_options(
	ctx: typer.Context,
	is_verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose logging.")] = False,
	is_output_log: Annotated[
		bool,
		typer.Option(
			"--save-log",
			help="Enable logging to a file. Logs to logs/prlabel_{datetime}.log.",
		),
	] = False,
	_version: Annotated[
		bool | None,
		typer.Option("--version", help="Show version and exit.", callback=_version_callback, is_eager=True),
	] = None,
) -> None:
	"""Global CLI options and logging setup."""
	ctx.meta["is_verbose"] = is_verbose
	ctx.meta["is_output_log"] = is_output_log

	log_file_path_to_use: Path | None = None
	if is_output_log:
		current_time = datetime.datetime.now(tz=datetime.timezone.utc).strftime("%Y-%m-%d_%H-%M-%S")
		log_file_path_to_use = Path("logs") / f"prlabel_{current_time}.log"

	setup_logging(is_verbose=is_verbose, log_file_path=log_file_path_to_use)
	if is_verbose or is_output_log:
		log_environment_info()


# --- Register commands ---

register_label_command(app)
register_version_command(app)


# --- Main Entry Point ---
def main() -> int:
	"""Run the CLI application."""
	return app()


if __name__ == "__main__":
	sys.exit(main())
