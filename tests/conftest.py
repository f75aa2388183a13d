"""Global test fixtures and configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from tests.base import RepoBuilder

if TYPE_CHECKING:
	from pathlib import Path

URL = "https://example.com/pull/"


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
	"""Keep user and working-directory config files out of every test."""
	monkeypatch.chdir(tmp_path)
	monkeypatch.setattr("prlabel.config.config_loader.xdg_config_home", str(tmp_path / "xdg"))


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
	"""Empty repository to shape commit graphs in."""
	return RepoBuilder(tmp_path / "repo")


@pytest.fixture
def scenario_a(repo_builder: RepoBuilder) -> dict[str, str]:
	"""
	Base ``main`` at M; ``pr/7`` at X whose parent is Y, whose parent is M.

	Returns the commit ids by name.
	"""
	root = repo_builder.commit("root")
	m = repo_builder.commit("M", root)
	y = repo_builder.commit("Y", m)
	x = repo_builder.commit("X", y)
	repo_builder.branch("main", m)
	repo_builder.ref("refs/remotes/pr/7", x)
	return {"root": root, "M": m, "Y": y, "X": x}
