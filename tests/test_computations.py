import logging
from datetime import date

import pytest

from computations import (
    apply_payments,
    apply_settlements,
    compute_group_balances,
    compute_settlements,
    filter_expenses_by_date,
    net_balances,
)
from errors import DanglingParticipantError, InvalidSplitError, UnbalancedLedgerError
from models import Expense, Payment, Settlement, SplitType


def _expense(eid, amount, payer, participants, split_type=SplitType.EQUAL, inputs=None, when=""):
    return Expense(eid, "g", eid, amount, payer, split_type, participants, inputs or {}, date=when)


# ---------- balances ----------
def test_balances_equal_split(members):
    balances = compute_group_balances(members, [_expense("e1", 90, "a", ["a", "b", "c"])])
    assert balances["a"].total_paid == 90
    assert balances["a"].total_owed == 30
    assert net_balances(balances) == {"a": 60, "b": -30, "c": -30}


def test_payer_outside_participants_still_gets_paid_total(members):
    balances = compute_group_balances(members, [_expense("e1", 100, "a", ["b", "c"])])
    assert net_balances(balances) == {"a": 100, "b": -50, "c": -50}
    assert balances["a"].total_owed == 0


def test_inactive_members_appear_with_zero(members):
    balances = compute_group_balances(members, [_expense("e1", 10, "a", ["a", "b"])])
    assert list(balances) == ["a", "b", "c"]
    c = balances["c"]
    assert (c.member_name, c.total_paid, c.total_owed, c.net_balance) == ("Cara", 0, 0, 0)


def test_no_expenses_gives_all_zero(members):
    assert net_balances(compute_group_balances(members, [])) == {"a": 0, "b": 0, "c": 0}


def test_balances_conserve_money(members):
    expenses = [
        _expense("e1", 1001, "a", ["a", "b", "c"]),
        _expense("e2", 333, "b", ["a", "c"], SplitType.PERCENTAGE, {"a": 33.3, "c": 66.7}),
        _expense("e3", 50, "c", ["a", "b"], SplitType.EXACT_AMOUNT, {"a": 49, "b": 1}),
    ]
    assert sum(net_balances(compute_group_balances(members, expenses)).values()) == 0


def test_dangling_participant_is_rejected(members):
    with pytest.raises(DanglingParticipantError) as info:
        compute_group_balances(members, [_expense("e1", 100, "a", ["a", "zed"])])
    assert info.value.record_id == "e1"
    assert info.value.member_id == "zed"


def test_dangling_payer_is_rejected(members):
    with pytest.raises(DanglingParticipantError) as info:
        compute_group_balances(members, [_expense("e1", 100, "zed", ["a", "b"])])
    assert info.value.role == "payer"


def test_invalid_split_propagates(members):
    bad = _expense("e1", 100, "a", ["a", "b"], SplitType.PERCENTAGE, {"a": 50, "b": 45})
    with pytest.raises(InvalidSplitError):
        compute_group_balances(members, [bad])


def test_filter_expenses_by_date():
    exps = [
        _expense("jan", 1, "a", ["a"], when="2025-01-05"),
        _expense("feb", 1, "a", ["a"], when="2025-02-05"),
        _expense("undated", 1, "a", ["a"]),
    ]
    assert [e.id for e in filter_expenses_by_date(exps, None, None)] == ["jan", "feb", "undated"]
    picked = filter_expenses_by_date(exps, date(2025, 2, 1), None)
    assert [e.id for e in picked] == ["feb"]
    picked = filter_expenses_by_date(exps, None, date(2025, 1, 31))
    assert [e.id for e in picked] == ["jan"]


# ---------- settlements ----------
def test_one_debtor_two_creditors():
    settlements = compute_settlements({"a": 50, "b": 30, "c": -80})
    assert settlements == [Settlement("c", "a", 50), Settlement("c", "b", 30)]


def test_one_creditor_two_debtors_largest_debtor_first():
    settlements = compute_settlements({"a": 100, "b": -40, "c": -60})
    assert settlements == [Settlement("c", "a", 60), Settlement("b", "a", 40)]


def test_ties_break_on_member_id():
    settlements = compute_settlements({"d": -10, "b": 10, "c": -10, "a": 10})
    assert settlements == [Settlement("c", "a", 10), Settlement("d", "b", 10)]


def test_settled_members_are_ignored():
    assert compute_settlements({"a": 0, "b": 0}) == []
    assert compute_settlements({}) == []


def test_settlements_zero_everything_with_few_transfers():
    balances = {"a": 700, "b": -250, "c": 125, "d": -400, "e": 0, "f": -175}
    settlements = compute_settlements(balances)
    assert all(s.amount > 0 for s in settlements)
    assert set(apply_settlements(balances, settlements).values()) == {0}
    nonzero = sum(1 for v in balances.values() if v)
    assert len(settlements) <= nonzero - 1


def test_unbalanced_input_is_rejected_and_logged(caplog):
    with caplog.at_level(logging.ERROR, logger="computations"):
        with pytest.raises(UnbalancedLedgerError) as info:
            compute_settlements({"a": 50, "b": -49})
    assert info.value.total == 1
    assert "unbalanced" in caplog.text


def test_non_integer_balance_is_a_type_error():
    with pytest.raises(TypeError):
        compute_settlements({"a": 0.5, "b": -0.5})


# ---------- payments ----------
def test_apply_payments_moves_debtor_and_creditor():
    out = apply_payments({"a": 60, "b": -30, "c": -30}, [Payment("p1", "g", "b", "a", 30)])
    assert out == {"a": 30, "b": 0, "c": -30}
    assert compute_settlements(out) == [Settlement("c", "a", 30)]


def test_apply_payments_rejects_unknown_member():
    with pytest.raises(DanglingParticipantError) as info:
        apply_payments({"a": 0}, [Payment("p1", "g", "zed", "a", 30)])
    assert info.value.role == "debtor"


def test_one_creditor_two_debtors_settles_with_expected_transfers():
    balances = {"a": 100, "b": -40, "c": -60}
    settlements = compute_settlements(balances)
    assert set(settlements) == {Settlement("b", "a", 40), Settlement("c", "a", 60)}
    assert set(apply_settlements(balances, settlements).values()) == {0}
