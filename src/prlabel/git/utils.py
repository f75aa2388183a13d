"""Git utilities for prlabel."""

from __future__ import annotations

import logging
from pathlib import Path

from pygit2 import discover_repository
from pygit2 import GitError as Pygit2GitError
from pygit2.repository import Repository

logger = logging.getLogger(__name__)


class GitError(Exception):
	"""Custom exception for Git-related errors."""


class GraphReadError(GitError):
	"""The commit graph could not be read; attribution must not continue on a partial view."""


class UnknownRefError(GitError):
	"""A ref name or pattern did not resolve to anything usable."""


class AnnotationWriteError(GitError):
	"""A single note could not be persisted."""


def get_repo_root(path: Path | None = None) -> Path:
	"""
	Get the git directory of the repository containing ``path``.

	Args:
		path: Directory to start searching from (defaults to the working directory)

	Returns:
		Path to the repository's git directory

	Raises:
		GitError: If no repository is found
	"""
	start = path or Path.cwd()
	git_dir = discover_repository(str(start))
	if git_dir is None:
		msg = f"Not a git repository: {start}"
		logger.error(msg)
		raise GitError(msg)
	return Path(git_dir)


def open_repository(path: Path | None = None) -> Repository:
	"""
	Open the repository containing ``path``.

	Raises:
		GitError: If no repository is found or it cannot be opened
	"""
	git_dir = get_repo_root(path)
	try:
		repo = Repository(str(git_dir))
	except Pygit2GitError as e:
		msg = f"Failed to open repository at {git_dir}: {e}"
		logger.exception(msg)
		raise GitError(msg) from e
	logger.debug("Opened repository %s", repo.path)
	return repo
