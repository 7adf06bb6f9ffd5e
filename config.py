"""
Configuration and data loading/saving for SplitLedger
"""
from __future__ import annotations
import json
import logging
import os
from dataclasses import asdict
from typing import List, Optional, Union

from models import Expense, ExpenseCategory, Group, Ledger, Member, Payment, SplitType
from utils import app_dir

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[Union[str, int]] = None) -> None:
    """Set up root logging; level falls back to $SPLITLEDGER_LOG_LEVEL, then WARNING"""
    if level is None:
        level = os.environ.get("SPLITLEDGER_LOG_LEVEL", "WARNING")
    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)


def load_members(path: str) -> List[Member]:
    """Load members list from JSON file"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return [Member(**m) for m in data.get("members", [])]
    except FileNotFoundError:
        return []


def get_default_ledger() -> Ledger:
    """Create default ledger with loaded members and one group holding all of them"""
    base = app_dir()
    members = load_members(os.path.join(base, "members.json"))

    if not members:
        members = [Member("me", "Me")]  # fallback

    return Ledger(
        members=members,
        groups=[Group("default", "Default", [m.id for m in members])],
        expenses=[],
        versions={"default": 0},
    )


def expense_to_dict(e: Expense) -> dict:
    d = asdict(e)
    d["split_type"] = e.split_type.value
    d["category"] = e.category.value
    return d


def dict_to_expense(d: dict) -> Expense:
    d = dict(d)
    d["split_type"] = SplitType(d["split_type"])
    d["category"] = ExpenseCategory(d.get("category", ExpenseCategory.OTHER.value))
    d["participant_ids"] = list(d.get("participant_ids", []))
    d["split_inputs"] = dict(d.get("split_inputs", {}))
    return Expense(**d)


def ledger_to_dict(ledger: Ledger) -> dict:
    """Convert Ledger object to dictionary for JSON serialization"""
    return {
        "version": ledger.version,
        "members": [asdict(m) for m in ledger.members],
        "groups": [asdict(g) for g in ledger.groups],
        "expenses": [expense_to_dict(e) for e in ledger.expenses],
        "payments": [asdict(p) for p in ledger.payments],
        "versions": dict(ledger.versions),
    }


def dict_to_ledger(d: dict) -> Ledger:
    """Convert dictionary from JSON to Ledger object"""
    members = [Member(**m) for m in d.get("members", [])]
    groups = [Group(**g) for g in d.get("groups", [])]
    exps = [dict_to_expense(e) for e in d.get("expenses", [])]
    payments = [Payment(**p) for p in d.get("payments", [])]

    return Ledger(
        version=d.get("version", 1),
        members=members,
        groups=groups,
        expenses=exps,
        payments=payments,
        versions={k: int(v) for k, v in d.get("versions", {}).items()},
    )


def load_ledger(path: str) -> Ledger:
    with open(path, "r", encoding="utf-8") as f:
        ledger = dict_to_ledger(json.load(f))
    logger.info("loaded ledger %s: %d expenses", path, len(ledger.expenses))
    return ledger


def save_ledger(ledger: Ledger, path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(ledger_to_dict(ledger), f, ensure_ascii=False, indent=2)
    logger.info("saved ledger %s", path)
