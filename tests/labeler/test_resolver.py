"""Tests for PR resolution."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from prlabel.config import ResolverSchema
from prlabel.git.graph import GraphOracle
from prlabel.git.utils import GraphReadError, UnknownRefError
from prlabel.labeler.resolver import PRResolver, extract_pr_id
from prlabel.labeler.schemas import RefSpec
from tests.base import GitTestBase
from tests.conftest import URL


@pytest.mark.unit
class TestExtractPrId:
	"""Identifier extraction from ref names."""

	@pytest.mark.parametrize(
		("pattern", "ref_name", "expected"),
		[
			("refs/remotes/pr/*", "refs/remotes/pr/1234", "1234"),
			("refs/remotes/origin/pull/*/head", "refs/remotes/origin/pull/12/head", "12"),
			("refs/remotes/pr/**", "refs/remotes/pr/feature/x", "feature"),
			("refs/remotes/pr/pr-*", "refs/remotes/pr/pr-5", "pr-5"),
			("refs/remotes/pr/*", "refs/remotes/pr", None),
		],
	)
	def test_extract(self, pattern: str, ref_name: str, expected: str | None) -> None:
		"""The component after the literal prefix's last slash is the identifier."""
		assert extract_pr_id(pattern, ref_name) == expected


@pytest.mark.git
class TestPRResolver(GitTestBase):
	"""Resolving specs against a real repository."""

	def _resolver(self, **overrides: object) -> PRResolver:
		return PRResolver(GraphOracle(self.builder.repo), ResolverSchema(**overrides))

	def _scenario_a(self) -> dict[str, str]:
		b = self.builder
		m = b.commit("M", b.commit("root"))
		y = b.commit("Y", m)
		x = b.commit("X", y)
		b.branch("main", m)
		b.ref("refs/remotes/pr/7", x)
		return {"M": m, "Y": y, "X": x}

	def test_scenario_a(self) -> None:
		"""pr/7 -> X -> Y -> M(main) owns exactly X and Y."""
		commits = self._scenario_a()

		resolution = self._resolver().resolve_spec(RefSpec.parse(f"pr:main:{URL}"))

		assert resolution.ok
		assert len(resolution.pull_requests) == 1
		pr = resolution.pull_requests[0]
		assert pr.id == "7"
		assert pr.head_commit == commits["X"]
		assert pr.exclusive_commits == {commits["X"], commits["Y"]}
		assert pr.label == f"{URL}7"

	def test_merged_pr_is_kept_with_no_commits(self) -> None:
		"""A PR whose head is on the base is retained but owns nothing."""
		commits = self._scenario_a()
		self.builder.ref("refs/remotes/pr/3", commits["M"])

		resolution = self._resolver().resolve_spec(RefSpec.parse(f"pr:main:{URL}"))

		by_id = {pr.id: pr for pr in resolution.pull_requests}
		assert set(by_id) == {"3", "7"}
		assert by_id["3"].exclusive_commits == frozenset()

	def test_missing_base_branch_fails_spec(self) -> None:
		"""A missing base branch fails the spec with UnknownRefError."""
		self._scenario_a()

		resolution = self._resolver().resolve_spec(RefSpec.parse(f"pr:main,gone:{URL}"))

		assert not resolution.ok
		assert isinstance(resolution.error, UnknownRefError)
		assert "gone" in str(resolution.error)
		assert resolution.pull_requests == []
		assert any("gone" in warning for warning in resolution.warnings)

	def test_missing_base_branch_tolerated_when_not_strict(self) -> None:
		"""Non-strict mode proceeds with the bases that do resolve."""
		commits = self._scenario_a()

		resolution = self._resolver(strict_base_branches=False).resolve_spec(
			RefSpec.parse(f"pr:main,gone:{URL}")
		)

		assert resolution.ok
		assert resolution.pull_requests[0].exclusive_commits == {commits["X"], commits["Y"]}
		assert len(resolution.warnings) == 1

	def test_all_bases_missing_fails_even_when_not_strict(self) -> None:
		"""With no base tip at all the spec fails."""
		self._scenario_a()

		resolution = self._resolver(strict_base_branches=False).resolve_spec(RefSpec.parse(f"pr:gone:{URL}"))

		assert isinstance(resolution.error, UnknownRefError)

	def test_pattern_without_matches_fails_spec(self) -> None:
		"""A pattern that matches no ref fails only its spec."""
		self._scenario_a()

		resolution = self._resolver().resolve_spec(RefSpec.parse(f"nothing-here:main:{URL}"))

		assert isinstance(resolution.error, UnknownRefError)
		assert "matched no refs" in str(resolution.error)

	def test_numeric_ids_only(self) -> None:
		"""Non-numeric identifiers are skipped with a warning when required."""
		commits = self._scenario_a()
		self.builder.ref("refs/remotes/pr/draft", commits["Y"])

		resolution = self._resolver(require_numeric_ids=True).resolve_spec(RefSpec.parse(f"pr:main:{URL}"))

		assert [pr.id for pr in resolution.pull_requests] == ["7"]
		assert any("draft" in warning for warning in resolution.warnings)

	def test_recursive_glob_uses_first_component(self) -> None:
		"""With ** the identifier is still the first component after the prefix."""
		commits = self._scenario_a()
		self.builder.ref("refs/remotes/pr/9/head", commits["Y"])

		resolution = self._resolver().resolve_spec(RefSpec.parse(f"refs/remotes/pr/**:main:{URL}"))

		assert resolution.ok
		assert sorted(pr.id for pr in resolution.pull_requests) == ["7", "9"]

	def test_resolve_all_keeps_spec_order_with_threads(self) -> None:
		"""Parallel resolution returns the same results, in input order."""
		commits = self._scenario_a()
		self.builder.ref("refs/remotes/mr/1", commits["X"])
		specs = [
			RefSpec.parse(f"pr:main:{URL}"),
			RefSpec.parse("mr:main:https://other.example.com/mr/"),
			RefSpec.parse(f"missing:main:{URL}"),
		]

		sequential = self._resolver().resolve_all(specs)
		parallel = self._resolver(workers=3).resolve_all(specs)

		assert [r.spec for r in parallel] == specs
		for left, right in zip(sequential, parallel, strict=True):
			assert left.ok == right.ok
			assert [(pr.id, pr.exclusive_commits) for pr in left.pull_requests] == [
				(pr.id, pr.exclusive_commits) for pr in right.pull_requests
			]

	def test_graph_read_error_is_fatal(self) -> None:
		"""A graph read failure propagates out of the resolver."""
		self._scenario_a()
		resolver = self._resolver()

		with (
			patch.object(GraphOracle, "parents", side_effect=GraphReadError("corrupt")),
			pytest.raises(GraphReadError),
		):
			resolver.resolve_spec(RefSpec.parse(f"pr:main:{URL}"))

	def test_namespace_falls_back_to_head_layout(self) -> None:
		"""A bare namespace also matches ``<namespace>/<id>/head`` refs, ignoring sibling merge refs."""
		commits = self._scenario_a()
		self.builder.ref("refs/remotes/origin/pr/12/head", commits["X"])
		self.builder.ref("refs/remotes/origin/pr/12/merge", commits["Y"])

		resolution = self._resolver().resolve_spec(RefSpec.parse(f"origin/pr:main:{URL}"))

		assert resolution.ok, resolution.error
		assert [(pr.id, pr.ref_name) for pr in resolution.pull_requests] == [
			("12", "refs/remotes/origin/pr/12/head")
		]
		assert resolution.pull_requests[0].exclusive_commits == {commits["X"], commits["Y"]}
		assert resolution.pull_requests[0].label == f"{URL}12"

	def test_direct_children_win_over_head_layout(self) -> None:
		"""The head layout is only tried when the namespace has no direct children."""
		commits = self._scenario_a()
		self.builder.ref("refs/remotes/pr/9/head", commits["Y"])

		resolution = self._resolver().resolve_spec(RefSpec.parse(f"pr:main:{URL}"))

		assert [pr.ref_name for pr in resolution.pull_requests] == ["refs/remotes/pr/7"]

	def test_no_match_in_either_layout(self) -> None:
		"""The failure names both patterns that were tried."""
		self._scenario_a()

		resolution = self._resolver().resolve_spec(RefSpec.parse(f"origin/pr:main:{URL}"))

		assert isinstance(resolution.error, UnknownRefError)
		assert "refs/remotes/origin/pr/*/head" in str(resolution.error)

	def test_all_refs_skipped_fails_spec(self) -> None:
		"""A spec whose matching refs are all skipped resolves nothing and fails."""
		commits = self._scenario_a()
		self.builder.ref("refs/remotes/drafts/wip", commits["X"])

		resolution = self._resolver(require_numeric_ids=True).resolve_spec(RefSpec.parse(f"drafts:main:{URL}"))

		assert isinstance(resolution.error, UnknownRefError)
		assert "skipped" in str(resolution.error)
		assert resolution.pull_requests == []
		assert any("wip" in warning for warning in resolution.warnings)
