"""
Excel export functionality for SplitLedger
"""
from __future__ import annotations
import logging
from datetime import date
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from models import Ledger
from computations import (
    apply_payments,
    compute_group_balances,
    compute_settlements,
    filter_expenses_by_date,
    net_balances,
)
from splits import expense_splits
from utils import from_minor_units

logger = logging.getLogger(__name__)


def _amount(units: int) -> float:
    return float(from_minor_units(units))


def _style_header(ws, row=1):
    """Apply header styling to worksheet row"""
    header_font = Font(bold=True, color="FFFFFF")
    fill = PatternFill("solid", fgColor="4F81BD")
    align = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="A0A0A0")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    for cell in ws[row]:
        cell.font = header_font
        cell.fill = fill
        cell.alignment = align
        cell.border = border


def _autosize_columns(ws, min_width=10, max_width=45):
    """Auto-size columns based on content"""
    for col in range(1, ws.max_column + 1):
        letter = get_column_letter(col)
        max_len = 0
        for cell in ws[letter]:
            v = cell.value
            if v is None:
                continue
            s = str(v)
            max_len = max(max_len, len(s))
        ws.column_dimensions[letter].width = max(min_width, min(max_width, max_len + 2))


def _money_format(ws, first_col: int, last_col: int):
    for r in range(2, ws.max_row + 1):
        for c in range(first_col, last_col + 1):
            ws.cell(r, c).number_format = "0.00"


def export_excel(
    ledger: Ledger,
    group_id: str,
    filepath: str,
    start: Optional[date] = None,
    end: Optional[date] = None
) -> None:
    """
    Export one group's ledger to an Excel file with sheets:
    - Expenses (one owed column per member)
    - Balances
    - Settlements
    """
    wb = Workbook()
    # remove default sheet
    wb.remove(wb.active)

    group = ledger.get_group(group_id)
    members = ledger.group_members(group_id)
    names = {m.id: m.name for m in members}
    exps = filter_expenses_by_date(ledger.group_expenses(group_id), start, end)
    exps.sort(key=lambda e: (e.date, e.description))

    # Expenses sheet
    ws = wb.create_sheet("Expenses")
    headers = ["date", "description", "paid by", "split", "amount"] + [f"{m.name} owes" for m in members]
    ws.append(headers)
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for e in exps:
        owed = expense_splits(e)
        row = [e.date, e.description, names.get(e.payer_id, e.payer_id), e.split_type.value,
               _amount(e.amount)]
        row += [_amount(owed[m.id]) if m.id in owed else None for m in members]
        ws.append(row)

    # Footer totals, as formulas
    if exps:
        ws.append(["TOTALS"] + [""] * (len(headers) - 1))
        trow = ws.max_row
        ws.cell(trow, 1).font = Font(bold=True)
        for col in range(5, len(headers) + 1):
            letter = get_column_letter(col)
            ws.cell(trow, col).value = f"=SUM({letter}2:{letter}{trow - 1})"
    _money_format(ws, 5, len(headers))
    _autosize_columns(ws)

    # Balances sheet
    balances = compute_group_balances(members, exps)
    outstanding = apply_payments(net_balances(balances), ledger.group_payments(group_id))
    ws = wb.create_sheet("Balances")
    ws.append(["Member", "Paid", "Owed", "Net (Paid-Owed)", "Outstanding"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for b in balances.values():
        ws.append([
            b.member_name,
            _amount(b.total_paid),
            _amount(b.total_owed),
            _amount(b.net_balance),
            _amount(outstanding[b.member_id]),
        ])
    _money_format(ws, 2, 5)
    _autosize_columns(ws)

    # Settlements sheet
    ws = wb.create_sheet("Settlements")
    ws.append(["From (Debtor)", "To (Creditor)", "Amount"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for s in compute_settlements(outstanding):
        ws.append([names[s.debtor_id], names[s.creditor_id], _amount(s.amount)])
    _money_format(ws, 3, 3)
    _autosize_columns(ws)

    wb.save(filepath)
    logger.info("exported group %s (%s) to %s", group.id, group.name, filepath)
