"""Exception types raised by RecordKit.

Driver failures are not wrapped: anything raised by :mod:`sqlite3`
reaches the caller unchanged.
"""

from __future__ import annotations


class RecordKitError(Exception):
    """Base class for all RecordKit errors."""


class UnknownAttributeError(RecordKitError, AttributeError):
    """Raised when a record is given or asked for a column its table lacks."""

    def __init__(self, name: str) -> None:
        super().__init__(f"unknown attribute '{name}'")
        self.name = name


class UnsupportedOperationError(RecordKitError, AttributeError):
    """Raised when a Relation is asked for an operation it does not provide."""

    def __init__(self, name: str) -> None:
        super().__init__(f"no such operation '{name}'")
        self.name = name


class AssociationError(RecordKitError, LookupError):
    """Raised when an association or its target model cannot be resolved."""
