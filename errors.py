"""
Error types for SplitLedger
"""
from __future__ import annotations
from typing import Optional


class SplitLedgerError(Exception):
    """Base class for every error raised by SplitLedger"""


class InvalidSplitError(SplitLedgerError):
    """Malformed or inconsistent split input for an expense"""

    def __init__(self, message: str, expense_id: Optional[str] = None):
        if expense_id:
            message = f"expense {expense_id}: {message}"
        super().__init__(message)
        self.expense_id = expense_id


class DanglingParticipantError(SplitLedgerError):
    """An expense (or recorded payment) references a member that is not part of the group"""

    def __init__(self, record_id: str, member_id: str, role: str = "participant"):
        super().__init__(f"{role} {member_id!r} of {record_id} is not a group member")
        self.record_id = record_id
        self.member_id = member_id
        self.role = role


class UnbalancedLedgerError(SplitLedgerError):
    """Net balances handed to the settlement optimizer do not sum to zero"""

    def __init__(self, total: int):
        super().__init__(f"net balances sum to {total} minor units, expected 0")
        self.total = total


class LedgerValidationError(SplitLedgerError):
    """A ledger write was rejected (unknown member, group, expense, bad date...)"""
