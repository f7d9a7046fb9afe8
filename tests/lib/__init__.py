"""Shared helpers for the journal test suites."""

from .stores import InMemoryRecordStore, make_entry

__all__ = [
    "InMemoryRecordStore",
    "make_entry",
]
