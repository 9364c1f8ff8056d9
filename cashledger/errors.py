"""
Ledger Exceptions

Every failure in the ledger is one of four kinds. None of them is fatal:
the operation is aborted and the stored collection is left as it was.
"""

from typing import Optional

from cashledger.models.transaction import ValidationIssue


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class ValidationError(LedgerError):
    """
    Input rejected before any mutation was attempted.

    Raised for non-positive amounts, empty notes, inverted date ranges,
    missing fields and unconfirmed deletes.
    """

    def __init__(
        self,
        message: str,
        issues: Optional[list[ValidationIssue]] = None,
    ):
        super().__init__(message)
        self.issues = issues or []


class NotFoundError(LedgerError):
    """Edit or delete referenced an id absent from the collection."""

    def __init__(self, transaction_id: str):
        super().__init__(f"Transaction not found: {transaction_id}")
        self.transaction_id = transaction_id


class PersistenceError(LedgerError):
    """The record store could not read or write a partition."""
    pass


class PreconditionError(LedgerError):
    """No active identity; the operation refuses to run."""
    pass
