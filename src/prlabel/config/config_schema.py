"""Pydantic schemas for prlabel configuration."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class NotesSchema(BaseModel):
	"""Where and as whom notes are written."""

	ref: str = Field(default="refs/notes/label-pr", description="Notes reference holding the labels")
	author_name: str = "PR Labeller"
	author_email: str = "pr-labeller@localhost"

	@field_validator("ref")
	@classmethod
	def _check_ref(cls, value: str) -> str:
		if not value.startswith("refs/notes/"):
			msg = f"notes ref must live under refs/notes/, got '{value}'"
			raise ValueError(msg)
		return value


class ResolverSchema(BaseModel):
	"""PR resolution settings."""

	workers: int = Field(default=1, ge=1, description="Threads used to resolve specs in parallel")
	strict_base_branches: bool = Field(
		default=True, description="Fail a spec when any of its base branches is missing"
	)
	require_numeric_ids: bool = Field(default=False, description="Skip PR refs whose identifier is not a number")
	remote_namespace: str = Field(
		default="refs/remotes/", description="Namespace for ref patterns not starting with refs/"
	)


class AppConfigSchema(BaseModel):
	"""Top-level prlabel configuration."""

	labels: list[str] = Field(default_factory=list, description="Default refpattern:basebranches:urlprefix specs")
	notes: NotesSchema = Field(default_factory=NotesSchema)
	resolver: ResolverSchema = Field(default_factory=ResolverSchema)
