"""Command for labeling commits with the pull request that introduced them."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer

if TYPE_CHECKING:
	from prlabel.config import AppConfigSchema
	from prlabel.labeler.schemas import RefSpec

logger = logging.getLogger(__name__)

CONFIG_ERROR_EXIT_CODE = 2

# --- Command Argument Annotations ---

SpecsArg = Annotated[
	list[str] | None,
	typer.Argument(
		help="Label specs of the form refpattern:basebranches:urlprefix (defaults to 'labels' from the config file)",
		show_default=False,
	),
]

RepoOpt = Annotated[
	Path,
	typer.Option(
		"--repo",
		"-r",
		help="The repository to label PRs in",
		file_okay=False,
	),
]

ConfigOpt = Annotated[
	Path | None,
	typer.Option(
		"--config",
		"-c",
		help="Path to config file",
	),
]

NotesRefOpt = Annotated[
	str | None,
	typer.Option(
		"--notes-ref",
		help="Notes ref to store labels under (overrides config)",
	),
]

WorkersOpt = Annotated[
	int | None,
	typer.Option(
		"--workers",
		"-j",
		min=1,
		help="Threads used to resolve specs (overrides config)",
	),
]

DryRunFlag = Annotated[bool, typer.Option("--dry-run", "-n", help="Compute labels without writing notes")]


# --- Registration Function ---


def register_command(app: typer.Typer) -> None:
	"""Register the label and show commands with the CLI app."""

	@app.command(name="label")
	def label_command(
		specs: SpecsArg = None,
		repo: RepoOpt = Path(),
		config: ConfigOpt = None,
		notes_ref: NotesRefOpt = None,
		workers: WorkersOpt = None,
		dry_run: DryRunFlag = False,
	) -> None:
		"""
		Attach pull request links to the commits each PR introduced.

		For every spec, refs matching the pattern are treated as PR heads; the
		commits reachable from a PR head but not from any base branch get a note
		with the URL prefix followed by the PR identifier.

		"""
		_label_command_impl(
			spec_texts=specs or [],
			repo=repo,
			config_file=config,
			notes_ref=notes_ref,
			workers=workers,
			dry_run=dry_run,
		)

	@app.command(name="show")
	def show_command(
		commit: Annotated[str, typer.Argument(help="Commit or revision to show the label of")],
		repo: RepoOpt = Path(),
		config: ConfigOpt = None,
		notes_ref: NotesRefOpt = None,
	) -> None:
		"""Print the PR label stored for a commit."""
		_show_command_impl(commit=commit, repo=repo, config_file=config, notes_ref=notes_ref)


# --- Implementation Functions ---


def load_config(config_file: Path | None, repo: Path, notes_ref: str | None, workers: int | None) -> AppConfigSchema:
	"""
	Load the configuration and apply command-line overrides.

	Raises:
		ConfigError: If the file or an override is invalid
	"""
	from pydantic import ValidationError

	from prlabel.config import ConfigLoader, ConfigParsingError

	config = ConfigLoader(config_file=config_file, repo_root=repo).get
	try:
		if notes_ref is not None:
			notes = type(config.notes).model_validate({**config.notes.model_dump(), "ref": notes_ref})
			config = config.model_copy(update={"notes": notes})
		if workers is not None:
			resolver = type(config.resolver).model_validate({**config.resolver.model_dump(), "workers": workers})
			config = config.model_copy(update={"resolver": resolver})
	except ValidationError as e:
		msg = f"Invalid option: {e}"
		raise ConfigParsingError(msg) from e
	return config


def parse_specs(spec_texts: list[str], config: AppConfigSchema) -> list[RefSpec]:
	"""
	Parse every spec up front so a malformed one fails before any graph work.

	Raises:
		ConfigError: If no spec is given or one is malformed
	"""
	from prlabel.config import ConfigError
	from prlabel.labeler.schemas import RefSpec

	texts = spec_texts or config.labels
	if not texts:
		msg = "No label specs given on the command line or in the configuration file"
		raise ConfigError(msg)
	return [RefSpec.parse(text) for text in texts]


def _label_command_impl(
	spec_texts: list[str],
	repo: Path,
	config_file: Path | None,
	notes_ref: str | None,
	workers: int | None,
	dry_run: bool,
) -> None:
	"""Actual implementation of the label command."""
	from prlabel.config import ConfigError
	from prlabel.git.graph import GraphOracle
	from prlabel.git.utils import GitError, GraphReadError
	from prlabel.labeler.command import LabelCommand
	from prlabel.utils.cli_utils import (
		exit_with_error,
		handle_keyboard_interrupt,
		progress_indicator,
		render_summary,
	)

	try:
		config = load_config(config_file, repo, notes_ref, workers)
		specs = parse_specs(spec_texts, config)
	except ConfigError as e:
		exit_with_error(f"Configuration error: {e}", exit_code=CONFIG_ERROR_EXIT_CODE, exception=e)
		return

	for spec in specs:
		logger.info("Labeling %s from %s (base branches %s)", spec.url_template, spec.ref_pattern, spec.base_branches)

	try:
		graph = GraphOracle.open(repo)
		command = LabelCommand.for_repository(graph, config)
		summary = command.run(
			specs,
			dry_run=dry_run,
			progress=lambda total: progress_indicator("Writing notes...", total=total),
		)
	except KeyboardInterrupt:
		handle_keyboard_interrupt()
		return
	except GraphReadError as e:
		exit_with_error("Could not read the commit graph; no labels were attributed.", exception=e)
		return
	except GitError as e:
		exit_with_error(str(e), exception=e)
		return

	render_summary(summary)
	if summary.exit_code:
		raise typer.Exit(summary.exit_code)


def _show_command_impl(commit: str, repo: Path, config_file: Path | None, notes_ref: str | None) -> None:
	"""Actual implementation of the show command."""
	from prlabel.config import ConfigError
	from prlabel.git.graph import GraphOracle
	from prlabel.git.notes import NotesStore
	from prlabel.git.utils import GitError
	from prlabel.utils.cli_utils import exit_with_error

	try:
		config = load_config(config_file, repo, notes_ref, None)
	except ConfigError as e:
		exit_with_error(f"Configuration error: {e}", exit_code=CONFIG_ERROR_EXIT_CODE, exception=e)
		return

	try:
		graph = GraphOracle.open(repo)
		commit_id = graph.resolve_ref(commit)
		label = NotesStore(graph.repo, config.notes).get(commit_id)
	except GitError as e:
		exit_with_error(str(e), exception=e)
		return

	if label is None:
		exit_with_error(f"No label for {commit_id} under {config.notes.ref}")
		return
	typer.echo(label.rstrip("\n"))
