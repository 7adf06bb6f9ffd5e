"""
CSV export and import functionality for SplitLedger
"""
from __future__ import annotations
import csv
import logging
from typing import Dict, List

from models import Expense, ExpenseCategory, SplitInput, SplitType
from utils import format_amount, to_minor_units

logger = logging.getLogger(__name__)

COLUMNS = ['id', 'group_id', 'date', 'description', 'payer_id', 'amount', 'split_type',
           'participants', 'split_inputs', 'category', 'notes']


def _inputs_to_str(e: Expense) -> str:
    if e.split_type is SplitType.EXACT_AMOUNT:
        return ';'.join([f"{k}:{format_amount(v)}" for k, v in e.split_inputs.items()])
    return ';'.join([f"{k}:{v}" for k, v in e.split_inputs.items()])


def _inputs_from_str(raw: str, split_type: SplitType) -> Dict[str, SplitInput]:
    inputs: Dict[str, SplitInput] = {}
    if not raw:
        return inputs
    for pair in raw.split(';'):
        if ':' in pair:
            k, v = pair.split(':', 1)
            v = v.strip()
            if split_type is SplitType.EXACT_AMOUNT:
                inputs[k.strip()] = to_minor_units(v)
            else:
                inputs[k.strip()] = float(v)
    return inputs


def export_expenses_to_csv(expenses: List[Expense], filepath: str) -> None:
    """
    Export expenses list to CSV file
    Amounts are written as decimal currency, participants joined with ';'
    """
    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        # Write header
        writer.writerow(COLUMNS)

        # Write data
        for e in expenses:
            writer.writerow([
                e.id,
                e.group_id,
                e.date,
                e.description,
                e.payer_id,
                format_amount(e.amount),
                e.split_type.value,
                ';'.join(e.participant_ids),
                _inputs_to_str(e),
                e.category.value,
                e.notes
            ])
    logger.info("exported %d expenses to %s", len(expenses), filepath)


def import_expenses_from_csv(filepath: str) -> List[Expense]:
    """
    Import expenses list from CSV file
    Returns list of Expense objects; raises ValueError on malformed rows
    """
    expenses = []

    with open(filepath, 'r', encoding='utf-8') as f:
        reader = csv.DictReader(f)

        for line_no, row in enumerate(reader, start=2):
            try:
                split_type = SplitType(row['split_type'].strip())
                expense = Expense(
                    id=row['id'],
                    group_id=row['group_id'],
                    date=row.get('date', ''),
                    description=row['description'],
                    payer_id=row['payer_id'],
                    amount=to_minor_units(row['amount']),
                    split_type=split_type,
                    participant_ids=[p.strip() for p in row['participants'].split(';') if p.strip()],
                    split_inputs=_inputs_from_str(row.get('split_inputs', ''), split_type),
                    category=ExpenseCategory(row.get('category') or ExpenseCategory.OTHER.value),
                    notes=row.get('notes', '') or '',
                )
            except (KeyError, ValueError) as ex:
                raise ValueError(f"{filepath}:{line_no}: {ex}") from ex
            expenses.append(expense)

    logger.info("imported %d expenses from %s", len(expenses), filepath)
    return expenses
