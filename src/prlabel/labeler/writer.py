"""Apply the commit to label mapping to the notes store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from prlabel.git.utils import AnnotationWriteError
from prlabel.labeler.schemas import AnnotationRecord, WritePlan, WriteReport

if TYPE_CHECKING:
	from collections.abc import Callable, Mapping

	from prlabel.labeler.schemas import CommitId, Label

logger = logging.getLogger(__name__)


class AnnotationStore(Protocol):
	"""Key-value store of labels keyed by commit id."""

	def get(self, commit: CommitId) -> Label | None: ...

	def set(self, commit: CommitId, label: Label) -> None: ...


class AnnotationWriter:
	"""Writes only the notes that are missing or out of date."""

	def __init__(self, store: AnnotationStore) -> None:
		"""
		Initialize the writer.

		Args:
			store: Notes store to read and write
		"""
		self.store = store

	def plan(self, mapping: Mapping[CommitId, Label]) -> WritePlan:
		"""
		Compare the mapping with the stored notes.

		Only commits in ``mapping`` are read; anything else in the store is left
		alone and stale labels are never removed.

		Returns:
			WritePlan with the records to create and to overwrite, in commit order
		"""
		plan = WritePlan()
		for commit in sorted(mapping):
			label = mapping[commit]
			existing = self.store.get(commit)
			if existing is None:
				plan.create.append(AnnotationRecord(commit=commit, label=label))
			elif existing != label:
				plan.update.append(AnnotationRecord(commit=commit, label=label))
			else:
				plan.unchanged += 1
		logger.info(
			"%d notes to create, %d to overwrite, %d already up to date",
			len(plan.create),
			len(plan.update),
			plan.unchanged,
		)
		return plan

	def _write(self, record: AnnotationRecord, report: WriteReport) -> bool:
		try:
			self.store.set(record.commit, record.label)
		except AnnotationWriteError as e:
			logger.warning("Could not label %s: %s", record.commit, e)
			report.failed.append((record.commit, e))
			return False
		return True

	def apply(
		self,
		plan: WritePlan,
		*,
		dry_run: bool = False,
		progress: Callable[[int], None] | None = None,
	) -> WriteReport:
		"""
		Write every record of ``plan``.

		A failed write is recorded in the report and the remaining records are
		still attempted.

		Args:
			plan: Result of ``plan``
			dry_run: Count what would be written without writing
			progress: Called with 1 after each record is handled

		Returns:
			WriteReport with created, updated, unchanged and failed counts
		"""
		report = WriteReport(unchanged=plan.unchanged)
		for record in plan.create:
			if dry_run or self._write(record, report):
				report.created += 1
			if progress is not None:
				progress(1)
		for record in plan.update:
			if dry_run or self._write(record, report):
				report.updated += 1
			if progress is not None:
				progress(1)

		logger.info(
			"Notes: %d created, %d updated, %d unchanged, %d failed%s",
			report.created,
			report.updated,
			report.unchanged,
			len(report.failed),
			" (dry run)" if dry_run else "",
		)
		return report

	def write(self, mapping: Mapping[CommitId, Label], *, dry_run: bool = False) -> WriteReport:
		"""Plan and apply ``mapping`` in one step."""
		return self.apply(self.plan(mapping), dry_run=dry_run)
