"""Label command workflow: resolve, merge and write in one pass."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from prlabel.git.notes import NotesStore
from prlabel.labeler.merger import AttributionMerger
from prlabel.labeler.resolver import PRResolver
from prlabel.labeler.schemas import RunSummary
from prlabel.labeler.writer import AnnotationWriter

if TYPE_CHECKING:
	from collections.abc import Callable
	from contextlib import AbstractContextManager

	from prlabel.config.config_schema import AppConfigSchema
	from prlabel.git.graph import GraphOracle
	from prlabel.labeler.schemas import RefSpec

	ProgressFactory = Callable[[int], AbstractContextManager[Callable[[int], None]]]

logger = logging.getLogger(__name__)


class LabelCommand:
	"""Handles one labeling run over a repository."""

	def __init__(self, graph: GraphOracle, store: NotesStore, config: AppConfigSchema) -> None:
		"""
		Initialize the label command.

		Args:
			graph: Commit graph to read
			store: Notes store to write labels to
			config: Loaded configuration
		"""
		self.graph = graph
		self.store = store
		self.config = config
		self.resolver = PRResolver(graph, config.resolver)
		self.merger = AttributionMerger(graph)
		self.writer = AnnotationWriter(store)

	@classmethod
	def for_repository(cls, graph: GraphOracle, config: AppConfigSchema) -> LabelCommand:
		"""Build a command whose notes live in the same repository as ``graph``."""
		return cls(graph, NotesStore(graph.repo, config.notes), config)

	def run(
		self,
		specs: list[RefSpec],
		*,
		dry_run: bool = False,
		progress: ProgressFactory | None = None,
	) -> RunSummary:
		"""
		Label every commit introduced by a PR matched by ``specs``.

		Args:
			specs: Parsed label specs
			dry_run: Compute everything but do not write notes
			progress: Optional factory returning a context manager that yields an
				advance callback, given the number of notes to write

		Returns:
			RunSummary for the whole run

		Raises:
			GraphReadError: If the repository cannot be read
		"""
		summary = RunSummary(specs=len(specs), dry_run=dry_run)

		resolutions = self.resolver.resolve_all(specs)
		pull_requests = []
		for resolution in resolutions:
			summary.warnings.extend(resolution.warnings)
			if resolution.error is not None:
				summary.failed_specs.append((resolution.spec, str(resolution.error)))
				continue
			pull_requests.extend(resolution.pull_requests)
		summary.pull_requests_resolved = len(pull_requests)
		logger.info("Resolved %d pull requests from %d specs", len(pull_requests), len(specs))

		mapping = self.merger.merge(pull_requests)
		summary.conflicts = self.merger.conflicts

		plan = self.writer.plan(mapping)
		if progress is not None and plan.pending:
			with progress(plan.pending) as advance:
				report = self.writer.apply(plan, dry_run=dry_run, progress=advance)
		else:
			report = self.writer.apply(plan, dry_run=dry_run)

		summary.commits_labeled = report.labeled
		summary.commits_unchanged = report.unchanged
		summary.commits_failed = len(report.failed)
		summary.warnings.extend(str(error) for _, error in report.failed)
		return summary

