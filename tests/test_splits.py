import pytest

from errors import InvalidSplitError
from models import Expense, SplitType
from splits import compute_splits, expense_splits


def test_equal_split_remainder_goes_to_lowest_ids():
    assert compute_splits(100, SplitType.EQUAL, ["c", "a", "b"]) == {"a": 34, "b": 33, "c": 33}


def test_equal_split_two_ways_odd_amount():
    assert compute_splits(99, SplitType.EQUAL, ["b", "a"]) == {"a": 50, "b": 49}


def test_equal_split_ignores_participant_order():
    first = compute_splits(1001, SplitType.EQUAL, ["x", "y", "z", "w"])
    second = compute_splits(1001, SplitType.EQUAL, ["w", "z", "y", "x"])
    assert first == second


def test_equal_split_is_fair_and_conserves_amount():
    ids = ["m1", "m2", "m3", "m4", "m5", "m6", "m7"]
    for n in range(1, len(ids) + 1):
        for amount in (1, 2, 7, 100, 101, 9999):
            shares = compute_splits(amount, SplitType.EQUAL, ids[:n])
            assert sum(shares.values()) == amount
            assert max(shares.values()) - min(shares.values()) <= 1


def test_split_type_accepts_string_value():
    assert compute_splits(10, "EQUAL", ["a", "b"]) == {"a": 5, "b": 5}


def test_percentage_split():
    shares = compute_splits(100, SplitType.PERCENTAGE, ["a", "b", "c"], {"a": 50, "b": 30, "c": 20})
    assert shares == {"a": 50, "b": 30, "c": 20}


def test_percentage_rounding_shortfall_is_added_in_id_order():
    shares = compute_splits(100, SplitType.PERCENTAGE, ["c", "b", "a"],
                            {"a": "33.33", "b": "33.33", "c": "33.34"})
    assert shares == {"a": 34, "b": 33, "c": 33}


def test_percentage_rounding_excess_is_removed_in_id_order():
    # 2.5 and 2.5 both round half-up to 3
    shares = compute_splits(5, SplitType.PERCENTAGE, ["a", "b"], {"a": 50, "b": 50})
    assert shares == {"a": 2, "b": 3}
    assert sum(shares.values()) == 5


def test_percentage_zero_share_participant_never_absorbs_drift():
    shares = compute_splits(7, SplitType.PERCENTAGE, ["a", "b", "c"], {"a": 0, "b": 50, "c": 50})
    assert shares["a"] == 0
    assert sum(shares.values()) == 7


def test_percentage_sum_within_tolerance_is_accepted():
    shares = compute_splits(1000, SplitType.PERCENTAGE, ["a", "b"], {"a": 50.005, "b": 50})
    assert sum(shares.values()) == 1000


def test_percentage_sum_of_95_is_rejected():
    with pytest.raises(InvalidSplitError, match="sum to 100"):
        compute_splits(100, SplitType.PERCENTAGE, ["a", "b", "c"], {"a": 50, "b": 25, "c": 20})


@pytest.mark.parametrize("inputs", [
    {"a": 50},
    {"a": 50, "b": 40, "z": 10},
    {"a": -10, "b": 110},
    {"a": "fifty", "b": 50},
    {"a": True, "b": 99},
])
def test_percentage_bad_inputs(inputs):
    with pytest.raises(InvalidSplitError):
        compute_splits(100, SplitType.PERCENTAGE, ["a", "b"], inputs)


def test_exact_amount_passes_through():
    assert compute_splits(100, SplitType.EXACT_AMOUNT, ["a", "b"], {"a": 70, "b": 30}) == {"a": 70, "b": 30}


def test_exact_amount_requires_exact_sum():
    with pytest.raises(InvalidSplitError, match="sum to 100"):
        compute_splits(100, SplitType.EXACT_AMOUNT, ["a", "b"], {"a": 70, "b": 29})


@pytest.mark.parametrize("inputs", [
    {"a": 110, "b": -10},
    {"a": 70.0, "b": 30},
    {"a": 100},
])
def test_exact_amount_bad_inputs(inputs):
    with pytest.raises(InvalidSplitError):
        compute_splits(100, SplitType.EXACT_AMOUNT, ["a", "b"], inputs)


@pytest.mark.parametrize("amount", [0, -5, 10.5, True])
def test_amount_must_be_positive_integer(amount):
    with pytest.raises(InvalidSplitError, match="amount"):
        compute_splits(amount, SplitType.EQUAL, ["a"])


def test_empty_participants_rejected():
    with pytest.raises(InvalidSplitError, match="empty"):
        compute_splits(100, SplitType.EQUAL, [])


def test_duplicate_participants_rejected():
    with pytest.raises(InvalidSplitError, match="duplicates"):
        compute_splits(100, SplitType.EQUAL, ["a", "a"])


def test_unknown_split_type_rejected():
    with pytest.raises(InvalidSplitError, match="unknown split type"):
        compute_splits(100, "SHARES", ["a"])


def test_expense_splits_reports_expense_id():
    e = Expense("e9", "g", "Taxi", 100, "a", SplitType.EXACT_AMOUNT, ["a", "b"], {"a": 1, "b": 2})
    with pytest.raises(InvalidSplitError) as info:
        expense_splits(e)
    assert info.value.expense_id == "e9"
    assert "e9" in str(info.value)
