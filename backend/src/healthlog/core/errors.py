"""Failures raised by the persistence core.

Absent rows are not errors: reads return ``None`` and deletes return ``False``.
"""
from __future__ import annotations


class StoreError(Exception):
    """Base class for everything the stores raise."""


class ConstraintViolation(StoreError):
    """Unique, NOT NULL or foreign key constraint rejected a write."""


class StorageUnavailable(StoreError):
    """The database cannot be opened or a statement failed at the I/O level."""


class InvariantBreach(StoreError):
    """Persisted state contradicts one of the ledger invariants."""


class MalformedDocument(StoreError, ValueError):
    """A bulk-replace payload entry has the wrong shape or an unstorable value."""
