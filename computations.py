"""
Business logic and computations for SplitLedger
"""
from __future__ import annotations
import heapq
import logging
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional

from errors import DanglingParticipantError, UnbalancedLedgerError
from models import Expense, Member, Payment, Settlement, UserBalance
from splits import expense_splits
from utils import parse_date

logger = logging.getLogger(__name__)


def filter_expenses_by_date(
    expenses: List[Expense],
    start: Optional[date],
    end: Optional[date]
) -> List[Expense]:
    """Filter expenses by date range; undated expenses only pass an open range"""
    if start is None and end is None:
        return list(expenses)
    out = []
    for e in expenses:
        if not e.date:
            continue
        ed = parse_date(e.date)
        if start and ed < start:
            continue
        if end and ed > end:
            continue
        out.append(e)
    return out


def compute_group_balances(members: Iterable[Member], expenses: Iterable[Expense]) -> Dict[str, UserBalance]:
    """
    Aggregate paid/owed totals for every member of a group.
    Returns dict mapping member id -> UserBalance, in member order. Members without any
    activity are present with zero totals. Any payer or participant outside `members`
    raises DanglingParticipantError; nothing is silently dropped.
    """
    balances = {m.id: UserBalance(member_id=m.id, member_name=m.name) for m in members}

    for e in expenses:
        if e.payer_id not in balances:
            raise DanglingParticipantError(e.id, e.payer_id, role="payer")
        owed = expense_splits(e)
        for pid in owed:
            if pid not in balances:
                raise DanglingParticipantError(e.id, pid)

        # payer gets the full amount even when not a participant
        balances[e.payer_id].total_paid += e.amount
        for pid, amt in owed.items():
            balances[pid].total_owed += amt

    total = sum(b.net_balance for b in balances.values())
    if total != 0:
        # splits always reconcile to the amount, so this is a calculator defect
        logger.error("balance aggregation drifted by %s minor units", total)
        raise UnbalancedLedgerError(total)
    return balances


def net_balances(balances: Mapping[str, UserBalance]) -> Dict[str, int]:
    """member id -> net balance (positive: should receive; negative: should pay)"""
    return {mid: b.net_balance for mid, b in balances.items()}


def apply_payments(net: Mapping[str, int], payments: Iterable[Payment]) -> Dict[str, int]:
    """
    Outstanding balances after recorded settle-up payments.
    A payment moves its debtor up and its creditor down by the payment amount.
    """
    out = dict(net)
    for p in payments:
        for mid, role in ((p.debtor_id, "debtor"), (p.creditor_id, "creditor")):
            if mid not in out:
                raise DanglingParticipantError(p.id, mid, role=role)
        out[p.debtor_id] += p.amount
        out[p.creditor_id] -= p.amount
    return out


def apply_settlements(balances: Mapping[str, int], settlements: Iterable[Settlement]) -> Dict[str, int]:
    """Balances left after carrying out the given transfers"""
    out = dict(balances)
    for s in settlements:
        out[s.debtor_id] = out.get(s.debtor_id, 0) + s.amount
        out[s.creditor_id] = out.get(s.creditor_id, 0) - s.amount
    return out


def compute_settlements(balances: Mapping[str, int]) -> List[Settlement]:
    """
    Compute transfers to settle debts.
    Greedy settlement: the largest debtor pays the largest creditor until both sides are
    empty. Ties go to the smaller member id. Emits at most (non-zero balances - 1)
    transfers, and applying them leaves every balance at exactly zero.
    """
    for mid, v in balances.items():
        if isinstance(v, bool) or not isinstance(v, int):
            raise TypeError(f"balance of {mid!r} must be integer minor units, got {v!r}")

    total = sum(balances.values())
    if total != 0:
        logger.error("refusing to settle unbalanced ledger: net sum %s", total)
        raise UnbalancedLedgerError(total)

    # max-heaps via negated amounts; member id breaks ties ascending
    creditors = [(-v, mid) for mid, v in balances.items() if v > 0]
    debtors = [(v, mid) for mid, v in balances.items() if v < 0]
    heapq.heapify(creditors)
    heapq.heapify(debtors)

    transfers: List[Settlement] = []
    while creditors and debtors:
        neg_credit, cid = heapq.heappop(creditors)
        debt, did = heapq.heappop(debtors)
        credit, debt = -neg_credit, -debt

        x = min(credit, debt)
        transfers.append(Settlement(debtor_id=did, creditor_id=cid, amount=x))
        logger.debug("settle: %s pays %s %s", did, cid, x)

        if credit > x:
            heapq.heappush(creditors, (-(credit - x), cid))
        if debt > x:
            heapq.heappush(debtors, (-(debt - x), did))

    return transfers
