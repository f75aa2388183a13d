"""Tests for the attribution merger."""

from __future__ import annotations

import random

import pytest

from prlabel.labeler.merger import AttributionMerger
from prlabel.labeler.schemas import PullRequest, RefSpec
from tests.base import FakeGraph

SPEC = RefSpec.parse("pr:main:u/")
OTHER_SPEC = RefSpec.parse("mr:main:v/")

# m (main) - z - a7 (pr/7)
#              \
#               b8 (pr/8) - c9 (pr/9, stacked on pr/8)
EDGES = {
	"m": (),
	"z": ("m",),
	"a7": ("z",),
	"b8": ("z",),
	"c9": ("b8",),
}


def _pr(pr_id: str, head: str, commits: set[str], spec: RefSpec = SPEC) -> PullRequest:
	return PullRequest(
		id=pr_id,
		ref_name=f"refs/remotes/{spec.ref_pattern}/{pr_id}",
		head_commit=head,
		spec=spec,
		exclusive_commits=frozenset(commits),
	)


@pytest.mark.unit
class TestAttributionMerger:
	"""Tie-breaking between pull requests claiming the same commit."""

	def test_single_claims(self) -> None:
		"""Unshared commits take their PR's label directly."""
		merger = AttributionMerger(FakeGraph(EDGES))

		mapping = merger.merge([_pr("7", "a7", {"a7"}), _pr("8", "b8", {"b8"})])

		assert mapping == {"a7": "u/7", "b8": "u/8"}
		assert merger.conflicts == 0

	def test_scenario_b_smallest_id_wins_between_siblings(self) -> None:
		"""Two sibling PRs sharing z: neither head is an ancestor, so the smaller id wins."""
		merger = AttributionMerger(FakeGraph(EDGES))

		mapping = merger.merge([_pr("8", "b8", {"z", "b8"}), _pr("7", "a7", {"z", "a7"})])

		assert mapping["z"] == "u/7"
		assert mapping["a7"] == "u/7"
		assert mapping["b8"] == "u/8"
		assert merger.conflicts == 1

	def test_narrowest_pr_wins(self) -> None:
		"""A PR whose head is an ancestor of another claimer's head loses to it."""
		merger = AttributionMerger(FakeGraph(EDGES))
		pr8 = _pr("8", "b8", {"z", "b8"})
		pr9 = _pr("9", "c9", {"z", "b8", "c9"})

		mapping = merger.merge([pr8, pr9])

		# pr/8's head is an ancestor of pr/9's head, pr/9's is an ancestor of none.
		assert mapping == {"z": "u/9", "b8": "u/9", "c9": "u/9"}

	def test_ids_compare_as_strings(self) -> None:
		"""The id tie-break is lexicographic, not numeric."""
		merger = AttributionMerger(FakeGraph(EDGES))

		mapping = merger.merge([_pr("7", "a7", {"z"}), _pr("10", "b8", {"z"})])

		assert mapping["z"] == "u/10"

	def test_same_id_across_specs_is_stable(self) -> None:
		"""Equal ids from different specs fall back to the label text."""
		merger = AttributionMerger(FakeGraph(EDGES))

		mapping = merger.merge([_pr("7", "b8", {"z"}, OTHER_SPEC), _pr("7", "a7", {"z"})])

		assert mapping["z"] == "u/7"

	def test_deterministic_under_shuffling(self) -> None:
		"""The same claims produce the same mapping whatever the enumeration order."""
		prs = [
			_pr("7", "a7", {"z", "a7"}),
			_pr("8", "b8", {"z", "b8"}),
			_pr("9", "c9", {"z", "b8", "c9"}),
			_pr("3", "z", {"z"}, OTHER_SPEC),
		]
		expected = AttributionMerger(FakeGraph(EDGES)).merge(prs)

		rng = random.Random(1234)
		for _ in range(25):
			shuffled = prs[:]
			rng.shuffle(shuffled)
			assert AttributionMerger(FakeGraph(EDGES)).merge(shuffled) == expected

	def test_empty_prs_contribute_nothing(self) -> None:
		"""A PR with no exclusive commits produces no labels."""
		assert AttributionMerger(FakeGraph(EDGES)).merge([_pr("1", "m", set())]) == {}
