"""Configuration for prlabel."""

from prlabel.config.config_loader import ConfigError, ConfigFileNotFoundError, ConfigLoader, ConfigParsingError
from prlabel.config.config_schema import AppConfigSchema, NotesSchema, ResolverSchema

__all__ = [
	"AppConfigSchema",
	"ConfigError",
	"ConfigFileNotFoundError",
	"ConfigLoader",
	"ConfigParsingError",
	"NotesSchema",
	"ResolverSchema",
]
