"""
Set-difference reachability over the commit graph.

A commit is exclusive to a set of positive seeds when it is reachable from one
of them and from none of the negative seeds. The computation runs in two
passes over a shared arena of visit marks: the ancestor closure of every
negative seed is marked EXCLUDED first, then the walk from the positive seeds
collects unmarked commits and stops at anything already marked. The order
matters, a commit reachable from both sides through different paths is only
rejected reliably once the exclusion closure is complete.

"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from prlabel.labeler.schemas import CommitId, VisitState

if TYPE_CHECKING:
	from collections.abc import Iterable

logger = logging.getLogger(__name__)


class ParentLookup(Protocol):
	"""Anything that can list a commit's parents."""

	def parents(self, commit: CommitId) -> tuple[CommitId, ...]: ...


class ReachabilityEngine:
	"""Computes exclusive commit sets over a graph."""

	def __init__(self, graph: ParentLookup) -> None:
		"""
		Initialize the engine.

		Args:
			graph: Parent lookup, usually a GraphOracle
		"""
		self.graph = graph

	def exclusion_closure(self, negative: Iterable[CommitId]) -> frozenset[CommitId]:
		"""Return every commit reachable from the negative seeds."""
		arena: dict[CommitId, VisitState] = {}
		self._mark_excluded(arena, negative)
		return frozenset(arena)

	def collect(self, positive: Iterable[CommitId], excluded: frozenset[CommitId]) -> set[CommitId]:
		"""
		Walk back from the positive seeds, collecting commits outside ``excluded``.

		Args:
			positive: Seeds to walk from
			excluded: A complete exclusion closure from ``exclusion_closure``

		Returns:
			The commits reachable from ``positive`` and not in ``excluded``
		"""
		arena: dict[CommitId, VisitState] = {}
		stack = [commit for commit in positive if commit not in excluded]
		while stack:
			commit = stack.pop()
			if commit in arena:
				continue
			arena[commit] = VisitState.INCLUDED
			stack.extend(
				parent for parent in self.graph.parents(commit) if parent not in excluded and parent not in arena
			)
		return set(arena)

	def exclusive(self, positive: Iterable[CommitId], negative: Iterable[CommitId]) -> set[CommitId]:
		"""Return the commits reachable from ``positive`` but from no commit in ``negative``."""
		arena: dict[CommitId, VisitState] = {}
		self._mark_excluded(arena, negative)

		collected: set[CommitId] = set()
		stack = [commit for commit in positive if commit not in arena]
		while stack:
			commit = stack.pop()
			if commit in arena:
				continue
			arena[commit] = VisitState.INCLUDED
			collected.add(commit)
			stack.extend(parent for parent in self.graph.parents(commit) if parent not in arena)
		return collected

	def _mark_excluded(self, arena: dict[CommitId, VisitState], negative: Iterable[CommitId]) -> None:
		stack = list(negative)
		while stack:
			commit = stack.pop()
			if commit in arena:
				continue
			arena[commit] = VisitState.EXCLUDED
			stack.extend(parent for parent in self.graph.parents(commit) if parent not in arena)
		logger.debug("Exclusion closure holds %d commits", len(arena))
