"""
Data models for SplitLedger application
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Union


class SplitType(str, Enum):
    """How an expense amount is divided among its participants"""
    EQUAL = "EQUAL"
    PERCENTAGE = "PERCENTAGE"
    EXACT_AMOUNT = "EXACT_AMOUNT"


class ExpenseCategory(str, Enum):
    FOOD = "FOOD"
    TRANSPORT = "TRANSPORT"
    ENTERTAINMENT = "ENTERTAINMENT"
    SHOPPING = "SHOPPING"
    UTILITIES = "UTILITIES"
    TRAVEL = "TRAVEL"
    HEALTH = "HEALTH"
    OTHER = "OTHER"


# percentage (0-100) for PERCENTAGE, minor units for EXACT_AMOUNT
SplitInput = Union[int, float, str]


@dataclass(frozen=True)
class Member:
    """Participant identity, owned by the group-management side"""
    id: str
    name: str
    email: str = ""


@dataclass
class Group:
    id: str
    name: str
    member_ids: List[str]
    description: str = ""
    creator_id: str = ""


@dataclass
class Expense:
    """Single shared cost paid by one member"""
    id: str
    group_id: str
    description: str
    amount: int  # minor units, e.g. cents
    payer_id: str
    split_type: SplitType
    participant_ids: List[str]
    split_inputs: Dict[str, SplitInput] = field(default_factory=dict)
    date: str = ""  # YYYY-MM-DD
    category: ExpenseCategory = ExpenseCategory.OTHER
    notes: str = ""


@dataclass
class Payment:
    """Recorded settle-up between two members; not a money movement"""
    id: str
    group_id: str
    debtor_id: str
    creditor_id: str
    amount: int  # minor units
    date: str = ""
    notes: str = ""


@dataclass
class UserBalance:
    """Paid/owed totals of one member within a group"""
    member_id: str
    member_name: str
    total_paid: int = 0
    total_owed: int = 0

    @property
    def net_balance(self) -> int:
        # positive -> the group owes them; negative -> they owe the group
        return self.total_paid - self.total_owed


@dataclass(frozen=True)
class Settlement:
    """Suggested transfer from debtor to creditor"""
    debtor_id: str
    creditor_id: str
    amount: int  # minor units, always positive


@dataclass
class Ledger:
    """Complete ledger containing all data"""
    members: List[Member]
    groups: List[Group]
    expenses: List[Expense]
    payments: List[Payment] = field(default_factory=list)
    versions: Dict[str, int] = field(default_factory=dict)  # group id -> expense-set version
    version: int = 1

    def member_map(self) -> Dict[str, Member]:
        return {m.id: m for m in self.members}

    def get_group(self, group_id: str) -> Group:
        for g in self.groups:
            if g.id == group_id:
                return g
        raise KeyError(group_id)

    def group_members(self, group_id: str) -> List[Member]:
        """Members of a group, in the group's member order; unknown ids are skipped"""
        by_id = self.member_map()
        return [by_id[mid] for mid in self.get_group(group_id).member_ids if mid in by_id]

    def group_expenses(self, group_id: str) -> List[Expense]:
        return [e for e in self.expenses if e.group_id == group_id]

    def group_payments(self, group_id: str) -> List[Payment]:
        return [p for p in self.payments if p.group_id == group_id]
