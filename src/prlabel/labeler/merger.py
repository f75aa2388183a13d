"""Pick one pull request per commit when several claim it."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
	from collections.abc import Iterable

	from prlabel.labeler.schemas import CommitId, Label, PullRequest

logger = logging.getLogger(__name__)


class AncestryLookup(Protocol):
	"""Anything that can answer ancestor-or-equal queries."""

	def is_ancestor(self, ancestor: CommitId, descendant: CommitId) -> bool: ...


class AttributionMerger:
	"""
	Builds the final commit to label mapping.

	A commit claimed by several pull requests goes to the narrowest one: the PR
	whose head is an ancestor-or-equal of the fewest other claimers' heads. Ties
	fall back to the smallest PR identifier, then to label text, head commit and
	ref name, so the choice never depends on enumeration order.
	"""

	def __init__(self, graph: AncestryLookup) -> None:
		"""
		Initialize the merger.

		Args:
			graph: Ancestry lookup, usually a GraphOracle
		"""
		self.graph = graph
		self.conflicts = 0

	def _ancestor_count(self, candidate: PullRequest, claimers: tuple[PullRequest, ...]) -> int:
		return sum(
			1
			for other in claimers
			if other is not candidate and self.graph.is_ancestor(candidate.head_commit, other.head_commit)
		)

	def pick_winner(self, claimers: Iterable[PullRequest]) -> PullRequest:
		"""Return the authoritative pull request among ``claimers``."""
		ordered = tuple(sorted(claimers, key=lambda pr: pr.sort_key()))
		if len(ordered) == 1:
			return ordered[0]
		return min(ordered, key=lambda pr: (self._ancestor_count(pr, ordered), pr.sort_key()))

	def merge(self, pull_requests: Iterable[PullRequest]) -> dict[CommitId, Label]:
		"""
		Assign each claimed commit the label of its winning pull request.

		Args:
			pull_requests: Every resolved pull request, from all specs

		Returns:
			Mapping of commit id to label
		"""
		claims: dict[CommitId, list[PullRequest]] = defaultdict(list)
		for pr in pull_requests:
			for commit in pr.exclusive_commits:
				claims[commit].append(pr)

		mapping: dict[CommitId, Label] = {}
		winners: dict[frozenset[int], PullRequest] = {}
		self.conflicts = 0
		for commit, claimers in claims.items():
			if len(claimers) == 1:
				mapping[commit] = claimers[0].label
				continue

			self.conflicts += 1
			key = frozenset(id(pr) for pr in claimers)
			winner = winners.get(key)
			if winner is None:
				winner = self.pick_winner(claimers)
				winners[key] = winner
				logger.debug(
					"Commits claimed by %s go to PR %s",
					", ".join(sorted(pr.ref_name for pr in claimers)),
					winner.id,
				)
			mapping[commit] = winner.label

		logger.info("Merged %d commits (%d claimed by more than one PR)", len(mapping), self.conflicts)
		return mapping
