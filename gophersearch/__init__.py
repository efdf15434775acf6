"""Gopher AI search client: submit a search job, poll until it resolves."""

__version__ = "0.1.0"
