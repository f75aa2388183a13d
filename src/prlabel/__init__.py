"""prlabel - label commits with the pull request that introduced them."""

from __future__ import annotations

__version__ = "0.1.0"
__author__ = "prlabel contributors"
