"""
SplitLedger command line
- Show who owes whom in a group, with the fewest transfers that settle everyone up.
- Export a group's expenses/balances/settlements to Excel, or expenses to CSV.

Run:
  splitledger ledger.json init
  splitledger ledger.json report GROUP_ID
  splitledger ledger.json dashboard MEMBER_ID
  splitledger ledger.json export-excel GROUP_ID out.xlsx
  splitledger ledger.json export-csv out.csv
  splitledger ledger.json import-csv in.csv [--replace]

Dependencies:
  pip install openpyxl
"""
from __future__ import annotations
import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from config import configure_logging, get_default_ledger, load_ledger, save_ledger
from csv_handler import export_expenses_to_csv, import_expenses_from_csv
from errors import LedgerValidationError, SplitLedgerError
from excel_export import export_excel
from ledger_actions import add_expense
from reports import dashboard_stats, group_balance_report, recent_activity

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="splitledger", description="Shared-expense balances and settlements")
    parser.add_argument("ledger", help="ledger JSON file")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING (default: $SPLITLEDGER_LOG_LEVEL)")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("init", help="create a ledger seeded from members.json in the app directory")
    p.add_argument("--force", action="store_true", help="overwrite an existing ledger file")

    p = sub.add_parser("report", help="print balances and suggested settlements of a group")
    p.add_argument("group_id")
    p.add_argument("--json", action="store_true", help="print the raw report as JSON")

    p = sub.add_parser("dashboard", help="print a member's stats and recent expenses as JSON")
    p.add_argument("member_id")
    p.add_argument("--limit", type=int, default=5)

    p = sub.add_parser("export-excel", help="write a group's workbook")
    p.add_argument("group_id")
    p.add_argument("output")

    p = sub.add_parser("export-csv", help="write all expenses to CSV")
    p.add_argument("output")

    p = sub.add_parser("import-csv", help="add expenses from CSV and save the ledger")
    p.add_argument("input")
    p.add_argument("--replace", action="store_true", help="replace existing expenses instead of appending")
    return parser


def print_report(report: dict) -> None:
    print(f"{report['groupName']}  (total {report['totalExpenses']:.2f})")
    print(f"{'member':<20}{'paid':>12}{'owed':>12}{'net':>12}{'outstanding':>14}")
    for b in report["userBalances"]:
        print(f"{b['userName']:<20}{b['totalPaid']:>12.2f}{b['totalOwed']:>12.2f}"
              f"{b['netBalance']:>12.2f}{b['outstanding']:>14.2f}")
    print()
    if not report["settlements"]:
        print("All settled.")
    for s in report["settlements"]:
        print(f"{s['debtorName']} pays {s['creditorName']} {s['amount']:.2f}")


def run(args: argparse.Namespace) -> None:
    if args.command == "init":
        if os.path.exists(args.ledger) and not args.force:
            raise LedgerValidationError(f"{args.ledger} already exists (use --force to overwrite)")
        ledger = get_default_ledger()
        save_ledger(ledger, args.ledger)
        print(f"Created {args.ledger} with {len(ledger.members)} members.")
        return

    ledger = load_ledger(args.ledger)

    if args.command == "report":
        report = group_balance_report(ledger, args.group_id)
        if args.json:
            print(json.dumps(report, ensure_ascii=False, indent=2))
        else:
            print_report(report)
    elif args.command == "dashboard":
        out = {
            "stats": dashboard_stats(ledger, args.member_id),
            "recentActivity": recent_activity(ledger, args.member_id, args.limit),
        }
        print(json.dumps(out, ensure_ascii=False, indent=2))
    elif args.command == "export-excel":
        export_excel(ledger, args.group_id, args.output)
        print(f"Exported: {args.output}")
    elif args.command == "export-csv":
        export_expenses_to_csv(ledger.expenses, args.output)
        print(f"Exported {len(ledger.expenses)} expenses to {args.output}")
    elif args.command == "import-csv":
        imported = import_expenses_from_csv(args.input)
        if args.replace:
            for gid in {e.group_id for e in ledger.expenses}:
                ledger.versions[gid] = ledger.versions.get(gid, 0) + 1
            ledger.expenses = []
        # every row goes through the validated write path; nothing is saved unless all pass
        for e in imported:
            add_expense(ledger, e)
        save_ledger(ledger, args.ledger)
        print(f"Imported {len(imported)} expenses.")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application"""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    try:
        run(args)
    except KeyError as ex:
        logger.error("unknown id: %s", ex)
        return 1
    except (SplitLedgerError, OSError, ValueError) as ex:
        logger.error("%s", ex)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
