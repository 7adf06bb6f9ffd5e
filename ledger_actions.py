"""
Write operations on a Ledger: members, groups, expenses and recorded payments.

Every expense write runs the split calculator before touching the ledger, so an
invalid split never gets stored. Each change to a group's expenses bumps that
group's version in `ledger.versions`, which is what BalanceCache keys on.
"""
from __future__ import annotations
import logging
import uuid
from dataclasses import replace
from datetime import date
from typing import Dict, Iterable, Optional, Union

from errors import LedgerValidationError
from models import (
    Expense,
    ExpenseCategory,
    Group,
    Ledger,
    Member,
    Payment,
    SplitInput,
    SplitType,
)
from splits import expense_splits
from utils import parse_date, today_str

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


def _touch(ledger: Ledger, group_id: str) -> None:
    ledger.versions[group_id] = ledger.versions.get(group_id, 0) + 1


def _group(ledger: Ledger, group_id: str) -> Group:
    try:
        return ledger.get_group(group_id)
    except KeyError:
        raise LedgerValidationError(f"Group {group_id!r} not found") from None


def _check_date(value: str) -> str:
    try:
        d = parse_date(value)
    except ValueError:
        raise LedgerValidationError(f"Date must be YYYY-MM-DD, got {value!r}") from None
    if d > date.today():
        raise LedgerValidationError(f"Expense date {value} is in the future")
    return d.isoformat()


# ---------- Members & groups ----------
def add_member(ledger: Ledger, name: str, email: str = "", member_id: Optional[str] = None) -> Member:
    name = name.strip()
    if not name:
        raise LedgerValidationError("Member name required")
    member = Member(id=member_id or _new_id(), name=name, email=email.strip())
    if member.id in ledger.member_map():
        raise LedgerValidationError(f"Member {member.id!r} already exists")
    ledger.members.append(member)
    return member


def add_group(
    ledger: Ledger,
    name: str,
    member_ids: Iterable[str],
    description: str = "",
    creator_id: str = "",
    group_id: Optional[str] = None,
) -> Group:
    name = name.strip()
    if not name:
        raise LedgerValidationError("Group name required")
    known = ledger.member_map()
    ids = list(dict.fromkeys(member_ids))
    if creator_id and creator_id not in ids:
        ids.append(creator_id)
    for mid in ids:
        if mid not in known:
            raise LedgerValidationError(f"Member {mid!r} not found")
    group = Group(id=group_id or _new_id(), name=name, member_ids=ids,
                  description=description, creator_id=creator_id)
    if any(g.id == group.id for g in ledger.groups):
        raise LedgerValidationError(f"Group {group.id!r} already exists")
    ledger.groups.append(group)
    ledger.versions.setdefault(group.id, 0)
    return group


def add_member_to_group(ledger: Ledger, group_id: str, member_id: str) -> None:
    group = _group(ledger, group_id)
    if member_id not in ledger.member_map():
        raise LedgerValidationError(f"Member {member_id!r} not found")
    if member_id not in group.member_ids:
        group.member_ids.append(member_id)
        _touch(ledger, group_id)


# ---------- Expenses ----------
def _validate_expense(ledger: Ledger, expense: Expense) -> None:
    group = _group(ledger, expense.group_id)
    if not expense.description.strip():
        raise LedgerValidationError("Description required")
    if expense.payer_id not in ledger.member_map():
        raise LedgerValidationError(f"Payer {expense.payer_id!r} not found")
    if expense.payer_id not in group.member_ids:
        raise LedgerValidationError("Payer must be a member of the group")
    for pid in expense.participant_ids:
        if pid not in group.member_ids:
            raise LedgerValidationError(f"Participant {pid!r} is not a member of the group")
    # raises InvalidSplitError
    expense_splits(expense)


def create_expense(
    ledger: Ledger,
    group_id: str,
    description: str,
    amount: int,
    payer_id: str,
    split_type: Union[SplitType, str] = SplitType.EQUAL,
    participant_ids: Optional[Iterable[str]] = None,
    split_inputs: Optional[Dict[str, SplitInput]] = None,
    expense_date: Optional[str] = None,
    category: Union[ExpenseCategory, str] = ExpenseCategory.OTHER,
    notes: str = "",
    expense_id: Optional[str] = None,
) -> Expense:
    """
    Validate and append a new expense. With no participants given, every
    group member participates.
    """
    group = _group(ledger, group_id)
    participants = list(participant_ids) if participant_ids else list(group.member_ids)
    try:
        split_type = SplitType(split_type)
        category = ExpenseCategory(category)
    except ValueError as ex:
        raise LedgerValidationError(str(ex)) from None

    expense = Expense(
        id=expense_id or _new_id(),
        group_id=group_id,
        description=description.strip(),
        amount=amount,
        payer_id=payer_id,
        split_type=split_type,
        participant_ids=participants,
        split_inputs=dict(split_inputs or {}),
        date=_check_date(expense_date) if expense_date else today_str(),
        category=category,
        notes=notes.strip(),
    )
    return add_expense(ledger, expense)


def add_expense(ledger: Ledger, expense: Expense) -> Expense:
    """
    Validate and append an already built expense, e.g. one read from CSV.
    Rejects duplicate ids, future dates, non-members and invalid splits.
    """
    if any(e.id == expense.id for e in ledger.expenses):
        raise LedgerValidationError(f"Expense {expense.id!r} already exists")
    if expense.date:
        expense = replace(expense, date=_check_date(expense.date))
    _validate_expense(ledger, expense)

    ledger.expenses.append(expense)
    _touch(ledger, expense.group_id)
    logger.info("added expense %s (%s) to group %s", expense.id, expense.amount, expense.group_id)
    return expense


def update_expense(ledger: Ledger, expense_id: str, **changes) -> Expense:
    """
    Replace editable fields of an expense: description, amount, split_type,
    participant_ids, split_inputs, date, category, notes. Id, group and payer stay fixed.
    """
    fixed = {"id", "group_id", "payer_id"} & set(changes)
    if fixed:
        raise LedgerValidationError(f"Cannot change {', '.join(sorted(fixed))} of an expense")

    for i, e in enumerate(ledger.expenses):
        if e.id == expense_id:
            break
    else:
        raise LedgerValidationError(f"Expense {expense_id!r} not found")

    try:
        if "split_type" in changes:
            changes["split_type"] = SplitType(changes["split_type"])
        if "category" in changes:
            changes["category"] = ExpenseCategory(changes["category"])
    except ValueError as ex:
        raise LedgerValidationError(str(ex)) from None
    if changes.get("date"):
        changes["date"] = _check_date(changes["date"])
    if "participant_ids" in changes:
        changes["participant_ids"] = list(changes["participant_ids"])
    try:
        updated = replace(e, **changes)
    except TypeError as ex:
        raise LedgerValidationError(str(ex)) from None
    _validate_expense(ledger, updated)

    ledger.expenses[i] = updated
    _touch(ledger, updated.group_id)
    logger.info("updated expense %s", expense_id)
    return updated


def delete_expense(ledger: Ledger, expense_id: str) -> None:
    e = next((x for x in ledger.expenses if x.id == expense_id), None)
    if e is None:
        raise LedgerValidationError(f"Expense {expense_id!r} not found")
    ledger.expenses = [x for x in ledger.expenses if x.id != expense_id]
    _touch(ledger, e.group_id)
    logger.info("deleted expense %s", expense_id)


# ---------- Payments ----------
def record_payment(
    ledger: Ledger,
    group_id: str,
    debtor_id: str,
    creditor_id: str,
    amount: int,
    payment_date: Optional[str] = None,
    notes: str = "",
) -> Payment:
    """Record that debtor settled `amount` minor units with creditor"""
    group = _group(ledger, group_id)
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise LedgerValidationError(f"Payment amount must be a positive integer, got {amount!r}")
    if debtor_id == creditor_id:
        raise LedgerValidationError("Debtor and creditor must differ")
    for mid, role in ((debtor_id, "Debtor"), (creditor_id, "Creditor")):
        if mid not in group.member_ids:
            raise LedgerValidationError(f"{role} {mid!r} must be a member of the group")

    payment = Payment(
        id=_new_id(),
        group_id=group_id,
        debtor_id=debtor_id,
        creditor_id=creditor_id,
        amount=amount,
        date=_check_date(payment_date) if payment_date else today_str(),
        notes=notes.strip(),
    )
    ledger.payments.append(payment)
    _touch(ledger, group_id)
    logger.info("recorded payment %s: %s -> %s %s", payment.id, debtor_id, creditor_id, amount)
    return payment


def delete_payment(ledger: Ledger, payment_id: str) -> None:
    p = next((x for x in ledger.payments if x.id == payment_id), None)
    if p is None:
        raise LedgerValidationError(f"Payment {payment_id!r} not found")
    ledger.payments = [x for x in ledger.payments if x.id != payment_id]
    _touch(ledger, p.group_id)
