# orderledger/errors.py

"""Error taxonomy shared by the append and reconcile pipelines.

Pipeline code raises these; the API layer turns them into the JSON error
envelope (error_code + HTTP status). Anything else escaping a pipeline is
reported as INTERNAL_ERROR.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class LedgerError(Exception):
    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, *, data: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.data = data


class InvalidInputError(LedgerError):
    """Malformed request, rejected before any external call."""
    code = "INVALID_INPUT"
    status_code = 400


class OwnerNotFoundError(LedgerError):
    code = "NOT_FOUND"
    status_code = 404


class SpreadsheetNotFoundError(LedgerError):
    """Owner has no linked spreadsheet, or a ledger tab is missing."""
    code = "NOT_FOUND"
    status_code = 404


class NoValidRowsError(LedgerError):
    code = "NO_VALID_ROWS"
    status_code = 400

    def __init__(self, failed_count: int) -> None:
        super().__init__(
            "No order item passed validation.",
            data={"processed_count": 0, "failed_count": failed_count},
        )
        self.failed_count = failed_count


class ExternalDependencyError(LedgerError):
    """A Sheets or database call failed mid-pipeline. No partial-success detail."""
    code = "INTERNAL_ERROR"
    status_code = 500


__all__ = [
    "LedgerError",
    "InvalidInputError",
    "OwnerNotFoundError",
    "SpreadsheetNotFoundError",
    "NoValidRowsError",
    "ExternalDependencyError",
]
