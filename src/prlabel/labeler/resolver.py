"""Resolve label specs into pull requests and the commits they introduce."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from prlabel.git.utils import UnknownRefError
from prlabel.labeler.reachability import ReachabilityEngine
from prlabel.labeler.schemas import PullRequest, RefSpec, SpecResolution, literal_prefix

if TYPE_CHECKING:
	from prlabel.config.config_schema import ResolverSchema
	from prlabel.git.graph import GraphOracle
	from prlabel.labeler.schemas import CommitId

logger = logging.getLogger(__name__)


def extract_pr_id(pattern: str, ref_name: str) -> str | None:
	"""
	Extract the PR identifier from a ref name matched by ``pattern``.

	The identifier is the path component of ``ref_name`` that follows the last
	``/`` of the pattern's literal prefix, so ``refs/remotes/pr/*`` yields
	``1234`` for ``refs/remotes/pr/1234`` and ``refs/remotes/origin/pull/*/head``
	yields ``12`` for ``refs/remotes/origin/pull/12/head``.

	Returns:
		The identifier, or None when the ref name has no such component
	"""
	position = literal_prefix(pattern).count("/")
	components = ref_name.split("/")
	if position >= len(components):
		return None
	return components[position] or None


class PRResolver:
	"""Turns specs into PullRequest objects using the graph oracle."""

	def __init__(self, graph: GraphOracle, config: ResolverSchema, engine: ReachabilityEngine | None = None) -> None:
		"""
		Initialize the resolver.

		Args:
			graph: Commit graph to read
			config: Resolver settings
			engine: Reachability engine (defaults to one over ``graph``)
		"""
		self.graph = graph
		self.config = config
		self.engine = engine or ReachabilityEngine(graph)

	def _resolve_bases(self, spec: RefSpec, resolution: SpecResolution) -> set[CommitId]:
		tips: set[CommitId] = set()
		missing: list[str] = []
		for branch in spec.base_branches:
			try:
				tips.add(self.graph.resolve_ref(branch))
			except UnknownRefError as e:
				missing.append(branch)
				resolution.warnings.append(f"{spec}: base branch '{branch}' not found ({e})")
				logger.warning("Spec %s: base branch '%s' not found", spec, branch)

		if missing and (self.config.strict_base_branches or not tips):
			msg = f"Unresolved base branches: {', '.join(missing)}"
			raise UnknownRefError(msg)
		return tips

	def _build_pull_request(
		self, spec: RefSpec, pattern: str, ref_name: str, resolution: SpecResolution
	) -> PullRequest | None:
		pr_id = extract_pr_id(pattern, ref_name)
		if pr_id is None:
			resolution.warnings.append(f"{spec}: skipped '{ref_name}', no PR identifier after '{pattern}'")
			logger.warning("Skipping ref %s: no PR identifier for pattern %s", ref_name, pattern)
			return None
		if self.config.require_numeric_ids and not pr_id.isdigit():
			resolution.warnings.append(f"{spec}: skipped '{ref_name}', identifier '{pr_id}' is not numeric")
			logger.warning("Skipping ref %s: identifier '%s' is not numeric", ref_name, pr_id)
			return None
		try:
			head = self.graph.resolve_ref(ref_name)
		except UnknownRefError as e:
			resolution.warnings.append(f"{spec}: skipped '{ref_name}' ({e})")
			logger.warning("Skipping ref %s: %s", ref_name, e)
			return None
		return PullRequest(id=pr_id, ref_name=ref_name, head_commit=head, spec=spec)

	def _match_refs(self, spec: RefSpec) -> tuple[str, set[str]]:
		patterns = spec.candidate_patterns(self.config.remote_namespace)
		for pattern in patterns:
			ref_names = self.graph.match_refs(pattern)
			if ref_names:
				return pattern, ref_names
		msg = f"Pattern '{' or '.join(patterns)}' matched no refs"
		raise UnknownRefError(msg)

	def resolve_spec(self, spec: RefSpec) -> SpecResolution:
		"""
		Resolve one spec.

		Missing refs fail only this spec; the failure is stored on the returned
		resolution. A spec whose matching refs are all skipped fails the same
		way. GraphReadError propagates.
		"""
		resolution = SpecResolution(spec=spec)
		try:
			base_tips = self._resolve_bases(spec, resolution)
			pattern, ref_names = self._match_refs(spec)
		except UnknownRefError as e:
			logger.warning("Spec %s failed: %s", spec, e)
			resolution.error = e
			return resolution

		logger.info("Spec %s: %d refs match %s", spec, len(ref_names), pattern)
		excluded = self.engine.exclusion_closure(base_tips)
		logger.debug("Spec %s: %d commits reachable from base branches", spec, len(excluded))

		for ref_name in sorted(ref_names):
			pr = self._build_pull_request(spec, pattern, ref_name, resolution)
			if pr is None:
				continue
			pr.exclusive_commits = frozenset(self.engine.collect({pr.head_commit}, excluded))
			logger.debug("PR %s (%s): %d exclusive commits", pr.id, ref_name, len(pr.exclusive_commits))
			resolution.pull_requests.append(pr)

		if not resolution.pull_requests:
			msg = f"All {len(ref_names)} refs matching '{pattern}' were skipped"
			logger.warning("Spec %s failed: %s", spec, msg)
			resolution.error = UnknownRefError(msg)
		return resolution

	def resolve_all(self, specs: list[RefSpec]) -> list[SpecResolution]:
		"""
		Resolve every spec, in parallel threads when ``workers`` is above one.

		Results are returned in the order of ``specs`` regardless of worker count.
		"""
		workers = min(self.config.workers, len(specs))
		if workers <= 1:
			return [self.resolve_spec(spec) for spec in specs]

		logger.debug("Resolving %d specs on %d threads", len(specs), workers)
		with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="prlabel-resolve") as pool:
			return list(pool.map(self.resolve_spec, specs))
