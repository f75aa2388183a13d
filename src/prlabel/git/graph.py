"""Read-only view of a repository's commit graph."""

from __future__ import annotations

import logging
import re
import threading
from functools import lru_cache
from typing import TYPE_CHECKING

from pygit2 import Commit, Oid
from pygit2 import GitError as Pygit2GitError

from prlabel.git.utils import GraphReadError, UnknownRefError, open_repository
from prlabel.labeler.schemas import CommitId, CommitNode

if TYPE_CHECKING:
	from pathlib import Path

	from pygit2.repository import Repository

logger = logging.getLogger(__name__)


@lru_cache(maxsize=128)
def glob_to_regex(pattern: str) -> re.Pattern[str]:
	"""
	Compile a git-style ref glob.

	``*`` and ``?`` stay within one path component, ``**`` spans components and
	``[...]`` is a character class.
	"""
	parts: list[str] = []
	index = 0
	while index < len(pattern):
		char = pattern[index]
		if char == "*":
			if pattern.startswith("**", index):
				parts.append(".*")
				index += 2
				continue
			parts.append("[^/]*")
		elif char == "?":
			parts.append("[^/]")
		elif char == "[":
			end = pattern.find("]", index + 2)
			if end == -1:
				parts.append(re.escape(char))
			else:
				body = pattern[index + 1 : end]
				if body.startswith("!"):
					body = "^" + body[1:]
				parts.append(f"[{body}]")
				index = end
		else:
			parts.append(re.escape(char))
		index += 1
	return re.compile("".join(parts) + r"\Z")


class GraphOracle:
	"""
	Commit graph adapter backed by pygit2.

	Lookups are cached for the lifetime of the oracle. The caches only ever grow
	and entries never change once stored, and all pygit2 access happens under a
	lock, so one oracle can be shared by resolver threads.
	"""

	def __init__(self, repo: Repository) -> None:
		"""
		Initialize the oracle.

		Args:
			repo: Repository to read from
		"""
		self.repo = repo
		self._lock = threading.Lock()
		self._nodes: dict[CommitId, CommitNode] = {}
		self._refs: dict[str, CommitId] = {}
		self._ref_names: tuple[str, ...] | None = None
		self._ancestry: dict[tuple[CommitId, CommitId], bool] = {}

	@classmethod
	def open(cls, path: Path | None = None) -> GraphOracle:
		"""Open the repository containing ``path`` and wrap it."""
		return cls(open_repository(path))

	def node(self, commit: CommitId) -> CommitNode:
		"""
		Return the commit node for ``commit``.

		Raises:
			GraphReadError: If the commit object is missing or unreadable
		"""
		cached = self._nodes.get(commit)
		if cached is not None:
			return cached

		with self._lock:
			try:
				obj = self.repo.get(Oid(hex=commit))
			except (Pygit2GitError, ValueError, OSError) as e:
				msg = f"Failed to read commit {commit}: {e}"
				raise GraphReadError(msg) from e
			if not isinstance(obj, Commit):
				msg = f"Commit {commit} is missing from the object database"
				raise GraphReadError(msg)
			node = CommitNode(commit_id=commit, parents=tuple(str(parent) for parent in obj.parent_ids))
			self._nodes[commit] = node
		return node

	def parents(self, commit: CommitId) -> tuple[CommitId, ...]:
		"""Return the ordered parent ids of ``commit`` (empty for a root commit)."""
		return self.node(commit).parents

	def resolve_ref(self, name: str) -> CommitId:
		"""
		Resolve a ref name or revision expression to a commit id.

		Tags are peeled to the commit they point at.

		Raises:
			UnknownRefError: If the name does not exist or does not lead to a commit
			GraphReadError: If the repository cannot be read
		"""
		cached = self._refs.get(name)
		if cached is not None:
			return cached

		with self._lock:
			try:
				commit = self.repo.revparse_single(name).peel(Commit)
			except KeyError as e:
				msg = f"Unknown ref '{name}'"
				raise UnknownRefError(msg) from e
			except ValueError as e:
				# InvalidSpecError, or an object that cannot be peeled to a commit
				msg = f"Ref '{name}' does not point at a commit: {e}"
				raise UnknownRefError(msg) from e
			except (Pygit2GitError, OSError) as e:
				msg = f"Failed to resolve ref '{name}': {e}"
				raise GraphReadError(msg) from e
			commit_id = str(commit.id)
			self._refs[name] = commit_id
		logger.debug("Resolved %s -> %s", name, commit_id)
		return commit_id

	def ref_names(self) -> tuple[str, ...]:
		"""Return every reference name in the repository."""
		if self._ref_names is None:
			with self._lock:
				try:
					self._ref_names = tuple(sorted(self.repo.references))
				except (Pygit2GitError, OSError) as e:
					msg = f"Failed to list references: {e}"
					raise GraphReadError(msg) from e
		return self._ref_names

	def match_refs(self, pattern: str) -> set[str]:
		"""Return the reference names matching a git-style glob; may be empty."""
		regex = glob_to_regex(pattern)
		return {name for name in self.ref_names() if regex.match(name)}

	def is_ancestor(self, ancestor: CommitId, descendant: CommitId) -> bool:
		"""Return True if ``ancestor`` is ``descendant`` or one of its ancestors."""
		if ancestor == descendant:
			return True
		key = (ancestor, descendant)
		cached = self._ancestry.get(key)
		if cached is not None:
			return cached

		with self._lock:
			try:
				result = self.repo.descendant_of(Oid(hex=descendant), Oid(hex=ancestor))
			except (Pygit2GitError, ValueError, OSError) as e:
				msg = f"Failed to compare {ancestor} with {descendant}: {e}"
				raise GraphReadError(msg) from e
			self._ancestry[key] = result
		return result
