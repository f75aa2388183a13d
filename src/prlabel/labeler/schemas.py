"""Data models for commit attribution."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from prlabel.config.config_loader import ConfigError

if TYPE_CHECKING:
	from prlabel.git.utils import AnnotationWriteError, UnknownRefError

CommitId = str
Label = str

GLOB_METACHARACTERS = frozenset("*?[")
ID_PLACEHOLDER = "{id}"
SPEC_FIELD_COUNT = 3


def has_glob(pattern: str) -> bool:
	"""Return True if ``pattern`` contains a glob metacharacter."""
	return any(char in GLOB_METACHARACTERS for char in pattern)


def literal_prefix(pattern: str) -> str:
	"""Return the part of a glob pattern before its first metacharacter."""
	for index, char in enumerate(pattern):
		if char in GLOB_METACHARACTERS:
			return pattern[:index]
	return pattern


def make_label(url_template: str, pr_id: str) -> Label:
	"""
	Build the note text for a pull request.

	The template's ``{id}`` placeholder is substituted when present; otherwise the
	identifier is appended to the template as-is.

	Args:
		url_template: URL prefix or template for the spec
		pr_id: Identifier extracted from the PR ref name

	Returns:
		The label text
	"""
	if ID_PLACEHOLDER in url_template:
		return url_template.replace(ID_PLACEHOLDER, pr_id)
	return f"{url_template}{pr_id}"


@dataclass(frozen=True)
class CommitNode:
	"""A commit and its ordered parents (first parent is the mainline)."""

	commit_id: CommitId
	parents: tuple[CommitId, ...] = ()


@dataclass(frozen=True)
class RefSpec:
	"""
	One ``refpattern:basebranches:urlprefix`` labeling rule.

	``ref_pattern`` is a glob over ref names, ``base_branches`` the branches whose
	history is already considered mainline, and ``url_template`` the text the PR
	identifier is inserted into.
	"""

	ref_pattern: str
	base_branches: tuple[str, ...]
	url_template: str

	@classmethod
	def parse(cls, text: str) -> RefSpec:
		"""
		Parse a ``refpattern:basebranches:urlprefix`` triplet.

		Only the first two colons separate fields, so URLs keep their scheme.

		Raises:
			ConfigError: If the text does not have three fields or a field is empty
		"""
		segments = text.split(":", SPEC_FIELD_COUNT - 1)
		if len(segments) != SPEC_FIELD_COUNT:
			msg = f"Malformed label spec '{text}': expected 'refpattern:basebranches:urlprefix'"
			raise ConfigError(msg)

		ref_pattern, branches, url_template = segments
		ref_pattern = ref_pattern.strip()
		if not ref_pattern:
			msg = f"Malformed label spec '{text}': missing ref pattern"
			raise ConfigError(msg)

		base_branches: list[str] = []
		for branch in branches.split(","):
			name = branch.strip()
			if name and name not in base_branches:
				base_branches.append(name)
		if not base_branches:
			msg = f"Malformed label spec '{text}': missing base branches"
			raise ConfigError(msg)

		return cls(ref_pattern=ref_pattern, base_branches=tuple(base_branches), url_template=url_template)

	def normalized_pattern(self, remote_namespace: str = "refs/remotes/") -> str:
		"""
		Return the full ref glob this spec matches.

		Patterns outside ``refs/`` are taken relative to ``remote_namespace`` and a
		pattern without any glob character names a namespace whose children match.
		"""
		pattern = self.ref_pattern
		if not pattern.startswith("refs/"):
			pattern = f"{remote_namespace.rstrip('/')}/{pattern.lstrip('/')}"
		if not has_glob(pattern):
			pattern = f"{pattern.rstrip('/')}/*"
		return pattern

	def candidate_patterns(self, remote_namespace: str = "refs/remotes/") -> tuple[str, ...]:
		"""
		Return the ref globs to try, in order, until one matches.

		A namespace pattern also covers the ``<namespace>/<id>/head`` layout used
		when PR heads are fetched as ``refs/pull/<id>/head``.
		"""
		pattern = self.normalized_pattern(remote_namespace)
		if has_glob(self.ref_pattern):
			return (pattern,)
		return (pattern, f"{pattern}/head")

	def __str__(self) -> str:
		"""Render the spec back in its command-line form."""
		return f"{self.ref_pattern}:{','.join(self.base_branches)}:{self.url_template}"


@dataclass
class PullRequest:
	"""A PR ref matched by a spec, with the commits only it introduces."""

	id: str
	ref_name: str
	head_commit: CommitId
	spec: RefSpec
	exclusive_commits: frozenset[CommitId] = field(default_factory=frozenset)

	@property
	def label(self) -> Label:
		"""Note text for this pull request."""
		return make_label(self.spec.url_template, self.id)

	def sort_key(self) -> tuple[str, str, str, str]:
		"""Total order used to break ties deterministically."""
		return (self.id, self.label, self.head_commit, self.ref_name)


@dataclass(frozen=True)
class AnnotationRecord:
	"""A note to persist for one commit."""

	commit: CommitId
	label: Label


class VisitState(str, Enum):
	"""Traversal marks used by the reachability engine."""

	EXCLUDED = "excluded"
	INCLUDED = "included"


@dataclass
class SpecResolution:
	"""Outcome of resolving one spec."""

	spec: RefSpec
	pull_requests: list[PullRequest] = field(default_factory=list)
	warnings: list[str] = field(default_factory=list)
	error: UnknownRefError | None = None

	@property
	def ok(self) -> bool:
		"""Whether the spec resolved."""
		return self.error is None


@dataclass
class WritePlan:
	"""Notes the writer has to create or overwrite."""

	create: list[AnnotationRecord] = field(default_factory=list)
	update: list[AnnotationRecord] = field(default_factory=list)
	unchanged: int = 0

	@property
	def pending(self) -> int:
		"""Number of notes to write."""
		return len(self.create) + len(self.update)


@dataclass
class WriteReport:
	"""Counts of what the annotation writer did."""

	created: int = 0
	updated: int = 0
	unchanged: int = 0
	failed: list[tuple[CommitId, AnnotationWriteError]] = field(default_factory=list)

	@property
	def labeled(self) -> int:
		"""Commits whose note was created or overwritten."""
		return self.created + self.updated


@dataclass
class RunSummary:
	"""End-of-run report for the label command."""

	specs: int = 0
	pull_requests_resolved: int = 0
	commits_labeled: int = 0
	commits_unchanged: int = 0
	commits_failed: int = 0
	conflicts: int = 0
	failed_specs: list[tuple[RefSpec, str]] = field(default_factory=list)
	warnings: list[str] = field(default_factory=list)
	dry_run: bool = False

	@property
	def exit_code(self) -> int:
		"""Process exit status: non-zero when any spec failed entirely."""
		return 1 if self.failed_specs else 0
