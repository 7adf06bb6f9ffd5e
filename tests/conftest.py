import pytest

from models import Expense, Group, Ledger, Member, SplitType


@pytest.fixture
def members():
    return [Member("a", "Ann"), Member("b", "Ben"), Member("c", "Cara")]


@pytest.fixture
def ledger():
    """
    trip: Ann pays 90.00 split equally by Ann/Ben/Cara; Ben pays 30.00 split 50/50 with Ann.
    flat: Dev pays 50.00, Ann owes exactly 20.00 of it.
    """
    return Ledger(
        members=[Member("a", "Ann"), Member("b", "Ben"), Member("c", "Cara"), Member("d", "Dev")],
        groups=[
            Group("trip", "Trip", ["a", "b", "c"]),
            Group("flat", "Flat", ["a", "d"]),
        ],
        expenses=[
            Expense("e1", "trip", "Hotel", 9000, "a", SplitType.EQUAL, ["a", "b", "c"], date="2025-01-10"),
            Expense("e2", "trip", "Dinner", 3000, "b", SplitType.PERCENTAGE, ["a", "b"],
                    {"a": 50, "b": 50}, date="2025-02-01"),
            Expense("e3", "flat", "Power bill", 5000, "d", SplitType.EXACT_AMOUNT, ["a", "d"],
                    {"a": 2000, "d": 3000}, date="2025-01-15"),
        ],
        versions={"trip": 2, "flat": 1},
    )
