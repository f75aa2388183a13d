"""
Configuration loader for prlabel.

This module provides functionality for loading configuration settings
from YAML files into the pydantic schema.

"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from xdg.BaseDirectory import xdg_config_home

from prlabel.config.config_schema import AppConfigSchema

logger = logging.getLogger(__name__)

LOCAL_CONFIG_NAME = ".prlabel.yml"


class ConfigError(Exception):
	"""Exception raised for configuration errors."""


class ConfigFileNotFoundError(ConfigError):
	"""Exception raised when configuration file is not found."""


class ConfigParsingError(ConfigError):
	"""Exception raised when configuration file cannot be parsed."""


class ConfigLoader:
	"""
	Loads configuration for prlabel using pydantic schemas.

	The loader resolves the configuration file, parses it and validates it
	eagerly, so a broken file is reported before any repository work starts.

	"""

	def __init__(self, config_file: Path | None = None, repo_root: Path | None = None) -> None:
		"""
		Initialize the configuration loader.

		Args:
			config_file: Path to configuration file (optional)
			repo_root: Repository working directory, searched for a local config file (optional)

		"""
		self.repo_root = repo_root
		self._config_file = config_file
		self._resolved_config_file = self._resolve_config_file(config_file)
		self._app_config = self._load_config()
		logger.debug("ConfigLoader initialized from %s", self._resolved_config_file or "defaults")

	def _resolve_config_file(self, config_file: Path | None = None) -> Path | None:
		"""
		Resolve the configuration file path.

		If a config file is specified, use that. Otherwise, look in standard locations:
		1. .prlabel.yml in the repository root
		2. .prlabel.yml in the current directory
		3. $XDG_CONFIG_HOME/prlabel/config.yml

		Args:
			config_file: Explicitly provided config file path (optional)

		Returns:
			Resolved config file path or None if no suitable file found

		"""
		if config_file:
			return config_file.expanduser().resolve()

		candidates = []
		if self.repo_root is not None:
			candidates.append(self.repo_root / LOCAL_CONFIG_NAME)
		candidates.append(Path(LOCAL_CONFIG_NAME))
		candidates.append(Path(xdg_config_home) / "prlabel" / "config.yml")

		for candidate in candidates:
			if candidate.exists():
				return candidate
		return None

	@staticmethod
	def _parse_yaml_file(file_path: Path) -> dict[str, Any]:
		"""
		Parse a YAML file into a dictionary.

		Raises:
			yaml.YAMLError: If the file cannot be parsed as a YAML mapping
		"""
		with file_path.open(encoding="utf-8") as f:
			content = yaml.safe_load(f)
			if content is None:  # Empty file
				return {}
			if not isinstance(content, dict):
				msg = f"File {file_path} does not contain a valid YAML dictionary"
				raise yaml.YAMLError(msg)
			return content

	def _load_config(self) -> AppConfigSchema:
		"""
		Load configuration from file and parse it into AppConfigSchema.

		Raises:
			ConfigFileNotFoundError: If an explicitly given configuration file doesn't exist
			ConfigParsingError: If the file cannot be read, parsed or validated

		"""
		file_config_dict: dict[str, Any] = {}
		if self._resolved_config_file:
			if not self._resolved_config_file.exists():
				msg = f"Configuration file not found: {self._resolved_config_file}"
				raise ConfigFileNotFoundError(msg)
			try:
				file_config_dict = self._parse_yaml_file(self._resolved_config_file)
			except yaml.YAMLError as e:
				msg = f"Configuration file {self._resolved_config_file} does not contain a valid YAML dictionary."
				logger.exception(msg)
				raise ConfigParsingError(msg) from e
			except OSError as e:
				msg = f"Error accessing configuration file {self._resolved_config_file}: {e}"
				logger.exception(msg)
				raise ConfigParsingError(msg) from e
			logger.info("Loaded configuration from %s", self._resolved_config_file)
		else:
			logger.info("No configuration file found. Using default configuration.")

		try:
			return AppConfigSchema(**file_config_dict)
		except ValidationError as e:
			msg = f"Error parsing configuration into schema: {e}"
			logger.exception(msg)
			raise ConfigParsingError(msg) from e

	@property
	def config_file(self) -> Path | None:
		"""The configuration file in use, if any."""
		return self._resolved_config_file

	@property
	def get(self) -> AppConfigSchema:
		"""
		Get the current application configuration.

		Returns:
			AppConfigSchema: The current configuration
		"""
		return self._app_config
