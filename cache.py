"""
Cache of group balance reports, keyed by group id and expense-set version
"""
from __future__ import annotations
import logging
from threading import Lock
from typing import Callable, Dict, Optional, Tuple

from models import Ledger
from reports import group_balance_report

logger = logging.getLogger(__name__)


class BalanceCache:
    """
    Holds at most one report per group. An entry is only served while the group's
    version in the ledger matches the version it was computed at; ledger_actions
    bumps the version on every expense or payment write.
    """

    def __init__(self, compute: Callable[[Ledger, str], dict] = group_balance_report):
        self._compute = compute
        self._entries: Dict[str, Tuple[int, dict]] = {}
        self._lock = Lock()

    def get(self, ledger: Ledger, group_id: str) -> dict:
        version = ledger.versions.get(group_id, 0)
        with self._lock:
            hit = self._entries.get(group_id)
            if hit is not None and hit[0] == version:
                return hit[1]

        logger.debug("balance cache miss: group %s version %s", group_id, version)
        report = self._compute(ledger, group_id)
        with self._lock:
            self._entries[group_id] = (version, report)
        return report

    def peek(self, group_id: str) -> Optional[Tuple[int, dict]]:
        with self._lock:
            return self._entries.get(group_id)

    def invalidate(self, group_id: Optional[str] = None) -> None:
        """Drop one group's entry, or everything when no group is given"""
        with self._lock:
            if group_id is None:
                self._entries.clear()
            else:
                self._entries.pop(group_id, None)
