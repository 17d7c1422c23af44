"""Searchable directory of alternative digital services."""

__version__ = "0.1.0"
