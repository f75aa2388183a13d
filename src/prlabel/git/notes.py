"""Git notes storage for commit labels."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from pygit2 import GitError as Pygit2GitError
from pygit2 import Signature

from prlabel.git.utils import AnnotationWriteError, GraphReadError

if TYPE_CHECKING:
	from pygit2.repository import Repository

	from prlabel.config.config_schema import NotesSchema
	from prlabel.labeler.schemas import CommitId, Label

logger = logging.getLogger(__name__)


class NotesStore:
	"""
	Key-value view of a notes ref, keyed by commit id.

	Every ``set`` creates one notes commit, so a label is either fully written or
	not written at all. Writes are serialized because the notes ref only
	tolerates a single writer.
	"""

	def __init__(self, repo: Repository, config: NotesSchema) -> None:
		"""
		Initialize the store.

		Args:
			repo: Repository holding the notes
			config: Notes ref and author settings
		"""
		self.repo = repo
		self.ref = config.ref
		self.author_name = config.author_name
		self.author_email = config.author_email
		self._write_lock = threading.Lock()

	def _signature(self) -> Signature:
		return Signature(self.author_name, self.author_email)

	def get(self, commit: CommitId) -> Label | None:
		"""
		Return the note attached to ``commit``, or None when there is none.

		Raises:
			GraphReadError: If the notes ref cannot be read
		"""
		try:
			note = self.repo.lookup_note(commit, self.ref)
		except KeyError:
			return None
		except (Pygit2GitError, OSError) as e:
			msg = f"Failed to read note for {commit} from {self.ref}: {e}"
			raise GraphReadError(msg) from e
		return note.message

	def set(self, commit: CommitId, label: Label) -> None:
		"""
		Create or overwrite the note attached to ``commit``.

		Raises:
			AnnotationWriteError: If the note could not be written
		"""
		with self._write_lock:
			signature = self._signature()
			try:
				self.repo.create_note(label, signature, signature, commit, self.ref, True)
			except (Pygit2GitError, ValueError, OSError) as e:
				msg = f"Failed to write note for {commit} to {self.ref}: {e}"
				raise AnnotationWriteError(msg) from e
		logger.debug("Wrote note for %s: %s", commit, label)
