"""
JSON-ready report shapes built on top of the balance computations
"""
from __future__ import annotations
import logging
from datetime import date, timedelta
from typing import Dict, List, Optional

from computations import (
    apply_payments,
    compute_group_balances,
    compute_settlements,
    filter_expenses_by_date,
    net_balances,
)
from models import Expense, Ledger, UserBalance
from splits import expense_splits
from utils import from_minor_units, months_before, parse_date

logger = logging.getLogger(__name__)


def _money(units: int) -> float:
    return float(from_minor_units(units))


def group_summary(
    ledger: Ledger,
    group_id: str,
    start: Optional[date] = None,
    end: Optional[date] = None
) -> Dict[str, UserBalance]:
    """Balances of one group, optionally restricted to a date range"""
    exps = filter_expenses_by_date(ledger.group_expenses(group_id), start, end)
    return compute_group_balances(ledger.group_members(group_id), exps)


def outstanding_balances(ledger: Ledger, group_id: str) -> Dict[str, int]:
    """Net balances of a group after its recorded payments"""
    balances = group_summary(ledger, group_id)
    return apply_payments(net_balances(balances), ledger.group_payments(group_id))


def group_balance_report(ledger: Ledger, group_id: str) -> dict:
    """
    GroupBalanceResponse for a group:
    {groupId, groupName, totalExpenses, userBalances: [...], settlements: [...]}
    Settlements are suggested from what is still outstanding after recorded payments.
    """
    group = ledger.get_group(group_id)
    names = {m.id: m.name for m in ledger.members}

    balances = group_summary(ledger, group_id)
    outstanding = apply_payments(net_balances(balances), ledger.group_payments(group_id))
    settlements = compute_settlements(outstanding)
    total = sum(e.amount for e in ledger.group_expenses(group_id))

    logger.info("group %s: %d balances, %d settlements", group_id, len(balances), len(settlements))
    return {
        "groupId": group.id,
        "groupName": group.name,
        "totalExpenses": _money(total),
        "userBalances": [
            {
                "userId": b.member_id,
                "userName": b.member_name,
                "totalPaid": _money(b.total_paid),
                "totalOwed": _money(b.total_owed),
                "netBalance": _money(b.net_balance),
                "outstanding": _money(outstanding[b.member_id]),
            }
            for b in balances.values()
        ],
        "settlements": [
            {
                "debtorId": s.debtor_id,
                "debtorName": names.get(s.debtor_id, ""),
                "creditorId": s.creditor_id,
                "creditorName": names.get(s.creditor_id, ""),
                "amount": _money(s.amount),
            }
            for s in settlements
        ],
    }


def _member_groups(ledger: Ledger, member_id: str):
    return [g for g in ledger.groups if member_id in g.member_ids]


def member_group_balances(ledger: Ledger, member_id: str) -> List[dict]:
    """A member's outstanding balance in each group they belong to"""
    out = []
    for g in _member_groups(ledger, member_id):
        balance = outstanding_balances(ledger, g.id).get(member_id, 0)
        out.append({"groupId": g.id, "groupName": g.name, "balance": _money(balance)})
    return out


def member_debts_by_group(ledger: Ledger, member_id: str) -> List[dict]:
    """Total a member owes toward expenses, per group with any owed split"""
    owed: Dict[str, int] = {}
    for e in ledger.expenses:
        share = expense_splits(e).get(member_id)
        if share is not None:
            owed[e.group_id] = owed.get(e.group_id, 0) + share
    group_names = {g.id: g.name for g in ledger.groups}
    return [
        {"userId": member_id, "groupId": gid, "groupName": group_names.get(gid, ""), "amount": _money(amt)}
        for gid, amt in owed.items()
    ]


def _share(expense: Expense, member_id: str) -> int:
    return expense_splits(expense).get(member_id, 0)


def _spent_between(ledger: Ledger, member_id: str, start: date, end: date) -> int:
    """Member's owed share of expenses dated start <= date < end"""
    total = 0
    for e in ledger.expenses:
        if e.date and start <= parse_date(e.date) < end:
            total += _share(e, member_id)
    return total


def monthly_change(ledger: Ledger, member_id: str, today: Optional[date] = None) -> dict:
    """
    Last month versus the month before it.
    spentChange is the percent change of the member's share (0 when nothing was spent before),
    balanceChange what the last month's expenses moved their net balance by. Groups carry no
    creation date, so groupsChange is always 0.
    """
    today = today or date.today()
    end = today + timedelta(days=1)
    one_month_ago = months_before(today, 1)
    two_months_ago = months_before(today, 2)

    current = _spent_between(ledger, member_id, one_month_ago, end)
    previous = _spent_between(ledger, member_id, two_months_ago, one_month_ago)
    spent_change = round((current - previous) / previous * 100, 2) if previous > 0 else 0.0

    moved = 0
    for e in ledger.expenses:
        if e.date and one_month_ago <= parse_date(e.date) < end:
            if e.payer_id == member_id:
                moved += e.amount
            moved -= _share(e, member_id)

    return {"spentChange": spent_change, "groupsChange": 0, "balanceChange": _money(moved)}


def dashboard_stats(ledger: Ledger, member_id: str, today: Optional[date] = None) -> dict:
    """
    Headline numbers for one member across all of their groups.
    totalSpent is the member's own share of every expense they took part in.
    """
    groups = _member_groups(ledger, member_id)
    spent = sum(_share(e, member_id) for e in ledger.expenses)
    net = sum(outstanding_balances(ledger, g.id).get(member_id, 0) for g in groups)
    return {
        "totalSpent": _money(spent),
        "activeGroups": len(groups),
        "netBalance": _money(net),
        "monthlyChange": monthly_change(ledger, member_id, today),
    }


def recent_activity(ledger: Ledger, member_id: str, limit: int = 5) -> dict:
    """Latest expenses the member paid or took part in, and their latest recorded payments"""
    group_names = {g.id: g.name for g in ledger.groups}
    names = {m.id: m.name for m in ledger.members}

    involved = [e for e in ledger.expenses if e.payer_id == member_id or member_id in e.participant_ids]
    # newest first; undated expenses sort last, ties keep ledger order
    involved.sort(key=lambda e: e.date, reverse=True)
    payments = [p for p in ledger.payments if member_id in (p.debtor_id, p.creditor_id)]
    payments.sort(key=lambda p: p.date, reverse=True)

    return {
        "expenses": [
            {
                "id": e.id,
                "description": e.description,
                "amount": _money(e.amount),
                "category": e.category.value,
                "groupName": group_names.get(e.group_id, ""),
                "paidByName": names.get(e.payer_id, ""),
                "date": e.date,
            }
            for e in involved[:limit]
        ],
        "settlements": [
            {
                "id": p.id,
                "debtorName": names.get(p.debtor_id, ""),
                "creditorName": names.get(p.creditor_id, ""),
                "amount": _money(p.amount),
                "groupName": group_names.get(p.group_id, ""),
                "date": p.date,
            }
            for p in payments[:limit]
        ],
    }
