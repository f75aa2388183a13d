"""Shared utilities for prlabel."""
