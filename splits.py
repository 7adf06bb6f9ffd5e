"""
Split calculator: turns an expense into per-participant owed amounts.

All amounts are integer minor units. Whenever a split does not divide evenly, the
leftover units go one at a time to participants in ascending id order, so the result
never depends on the order participants were listed in and always sums to the amount.
"""
from __future__ import annotations
import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Dict, Iterable, List, Mapping, Optional, Union

from errors import InvalidSplitError
from models import Expense, SplitInput, SplitType

logger = logging.getLogger(__name__)

PERCENT_TOLERANCE = Decimal("0.01")
HUNDRED = Decimal(100)


def compute_splits(
    amount: int,
    split_type: Union[SplitType, str],
    participant_ids: Iterable[str],
    split_inputs: Optional[Mapping[str, SplitInput]] = None,
    expense_id: Optional[str] = None,
) -> Dict[str, int]:
    """
    Compute what each participant owes toward an expense.
    Returns dict mapping participant id -> owed minor units, keys in ascending id order.
    Raises InvalidSplitError for any malformed input; never coerces.
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidSplitError(f"amount must be integer minor units, got {amount!r}", expense_id)
    if amount <= 0:
        raise InvalidSplitError(f"amount must be positive, got {amount}", expense_id)

    try:
        split_type = SplitType(split_type)
    except ValueError:
        raise InvalidSplitError(f"unknown split type {split_type!r}", expense_id) from None

    order = _ordered_participants(participant_ids, expense_id)
    inputs = dict(split_inputs or {})

    if split_type is SplitType.EQUAL:
        shares = _equal(amount, order)
    elif split_type is SplitType.PERCENTAGE:
        shares = _percentage(amount, order, inputs, expense_id)
    elif split_type is SplitType.EXACT_AMOUNT:
        shares = _exact(amount, order, inputs, expense_id)
    else:
        raise InvalidSplitError(f"unsupported split type {split_type.value}", expense_id)

    logger.debug("expense %s split %s %s -> %s", expense_id, amount, split_type.value, shares)
    return shares


def expense_splits(expense: Expense) -> Dict[str, int]:
    """Owed amounts for a stored expense"""
    return compute_splits(
        expense.amount,
        expense.split_type,
        expense.participant_ids,
        expense.split_inputs,
        expense_id=expense.id,
    )


def _ordered_participants(participant_ids: Iterable[str], expense_id: Optional[str]) -> List[str]:
    ids = list(participant_ids)
    if not ids:
        raise InvalidSplitError("participant set is empty", expense_id)
    if len(set(ids)) != len(ids):
        raise InvalidSplitError("participant set contains duplicates", expense_id)
    return sorted(ids)


def _check_keys(order: List[str], inputs: Mapping[str, SplitInput], kind: str,
                expense_id: Optional[str]) -> None:
    missing = set(order) - set(inputs)
    extra = set(inputs) - set(order)
    if missing or extra:
        raise InvalidSplitError(
            f"{kind} must cover exactly the participants. "
            f"Missing={sorted(missing)}, Extra={sorted(extra)}",
            expense_id,
        )


def _equal(amount: int, order: List[str]) -> Dict[str, int]:
    base, remainder = divmod(amount, len(order))
    return {pid: base + (1 if i < remainder else 0) for i, pid in enumerate(order)}


def _percentage(amount: int, order: List[str], inputs: Mapping[str, SplitInput],
                expense_id: Optional[str]) -> Dict[str, int]:
    _check_keys(order, inputs, "percentages", expense_id)

    percents: Dict[str, Decimal] = {}
    for pid in order:
        pct = _to_decimal(inputs[pid], pid, expense_id)
        if pct < 0 or pct > HUNDRED:
            raise InvalidSplitError(f"percentage for {pid} must be within 0-100, got {pct}", expense_id)
        percents[pid] = pct

    total_pct = sum(percents.values(), Decimal(0))
    if abs(total_pct - HUNDRED) > PERCENT_TOLERANCE:
        raise InvalidSplitError(f"percentages must sum to 100, got {total_pct}", expense_id)

    shares = {
        pid: int((amount * pct / HUNDRED).quantize(Decimal(1), rounding=ROUND_HALF_UP))
        for pid, pct in percents.items()
    }

    # reconcile rounding drift one unit at a time; zero-percent participants never absorb it
    eligible = [pid for pid in order if percents[pid] > 0]
    diff = amount - sum(shares.values())
    while diff > 0:
        for pid in eligible:
            shares[pid] += 1
            diff -= 1
            if diff == 0:
                break
    while diff < 0:
        for pid in eligible:
            if shares[pid] > 0:
                shares[pid] -= 1
                diff += 1
                if diff == 0:
                    break
    return shares


def _exact(amount: int, order: List[str], inputs: Mapping[str, SplitInput],
           expense_id: Optional[str]) -> Dict[str, int]:
    _check_keys(order, inputs, "exact amounts", expense_id)

    shares: Dict[str, int] = {}
    for pid in order:
        value = inputs[pid]
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidSplitError(f"exact amount for {pid} must be integer minor units, got {value!r}",
                                    expense_id)
        if value < 0:
            raise InvalidSplitError(f"exact amount for {pid} is negative: {value}", expense_id)
        shares[pid] = value

    total = sum(shares.values())
    if total != amount:
        raise InvalidSplitError(f"exact amounts must sum to {amount}, got {total}", expense_id)
    return shares


def _to_decimal(value: SplitInput, pid: str, expense_id: Optional[str]) -> Decimal:
    if isinstance(value, bool):
        raise InvalidSplitError(f"percentage for {pid} is not a number: {value!r}", expense_id)
    try:
        d = Decimal(str(value))
    except InvalidOperation:
        raise InvalidSplitError(f"percentage for {pid} is not a number: {value!r}", expense_id) from None
    if not d.is_finite():
        raise InvalidSplitError(f"percentage for {pid} is not a number: {value!r}", expense_id)
    return d
