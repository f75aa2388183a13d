"""Version information command for prlabel."""

from __future__ import annotations

import platform

import pygit2
import typer
from rich.table import Table

from prlabel import __version__
from prlabel.utils.cli_utils import console


def register_command(app: typer.Typer) -> None:
	"""Register the version command with the CLI app."""

	@app.command(name="version")
	def version_command() -> None:
		"""Show prlabel version information."""
		table = Table(title="prlabel Version Information")
		table.add_column("", style="green")
		table.add_column("", style="white")

		table.add_row("prlabel version:", f"v{__version__}")
		table.add_row("pygit2 version:", pygit2.__version__)
		table.add_row("libgit2 version:", pygit2.LIBGIT2_VERSION)
		table.add_row("Python version:", platform.python_version())
		table.add_row("Platform:", platform.platform())

		console.print(table)
