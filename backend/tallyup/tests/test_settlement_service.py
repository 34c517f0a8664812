"""
Tests for settlement planning and stored settlements.
"""
import random
import pytest
from datetime import date
from decimal import Decimal

from tallyup.core.exceptions import InvalidAmount
from tallyup.core.records import Settlement
from tallyup.models.settlement import SettlementResult
from tallyup.schemas.expense import ExpenseCreate
from tallyup.services.adjustment_service import get_adjustments
from tallyup.services.balance_service import calculate_balances
from tallyup.services.expense_service import create_expense
from tallyup.services.settlement_service import (
    calculate_settlement,
    plan_settlements,
    record_settlement,
)
from tallyup.services.share_service import allocate_shares

TODAY = date(2024, 12, 31)


def apply_plan(balances, plan):
    """Apply every payment to a copy of the balances."""
    result = dict(balances)
    for settlement in plan:
        result[settlement.from_member] += settlement.amount
        result[settlement.to_member] -= settlement.amount
    return result


def random_balances(seed):
    """Balances in whole cents that sum to zero, none of them within a cent of zero."""
    rng = random.Random(seed)
    while True:
        count = rng.randint(2, 9)
        cents = [rng.choice([-1, 1]) * rng.randint(2, 90000) for _ in range(count - 1)]
        cents.append(-sum(cents))
        if abs(cents[-1]) > 1:
            break
    return {f"m{i}": Decimal(value) / 100 for i, value in enumerate(cents)}


def test_plan_from_calculated_balances():
    """Test a plan built from real expenses settles everyone."""
    members = ["A", "B", "C", "D"]
    expenses = [
        {"amount": Decimal("120"), "payer": "A", "shares": allocate_shares("120", members, "equal")},
        {"amount": Decimal("45.50"), "payer": "B", "shares": allocate_shares("45.50", ["B", "C"], "equal")},
        {"amount": Decimal("80"), "payer": "D", "shares": allocate_shares("80", ["A", "D"], "equal")},
    ]
    balances = calculate_balances(expenses, members).balances

    settled = apply_plan(balances, plan_settlements(balances))

    assert all(value == 0 for value in settled.values())


def test_single_expense_plan():
    """Test both debtors pay the payer."""
    balances = {"A": Decimal("66.67"), "B": Decimal("-33.33"), "C": Decimal("-33.34")}

    plan = plan_settlements(balances)

    assert set(plan) == {
        Settlement(from_member="B", to_member="A", amount=Decimal("33.33")),
        Settlement(from_member="C", to_member="A", amount=Decimal("33.34")),
    }
    # Largest debtor goes first
    assert [s.from_member for s in plan] == ["C", "B"]


def test_one_creditor_two_debtors():
    """Test the larger debt is settled first."""
    plan = plan_settlements({"A": 50, "B": -20, "C": -30})

    assert plan == [
        Settlement(from_member="C", to_member="A", amount=Decimal("30.00")),
        Settlement(from_member="B", to_member="A", amount=Decimal("20.00")),
    ]


def test_single_pair():
    """Test one debtor and one creditor give exactly one payment."""
    plan = plan_settlements({"A": Decimal("-12.34"), "B": Decimal("12.34")})

    assert plan == [Settlement(from_member="A", to_member="B", amount=Decimal("12.34"))]


def test_all_zero_balances():
    """Test a settled group needs no payments."""
    assert plan_settlements({"A": 0, "B": Decimal("0.00"), "C": -0.0}) == []
    assert plan_settlements({}) == []


def test_noise_below_a_cent_is_ignored():
    """Test balances within the tolerance count as settled."""
    plan = plan_settlements({"A": Decimal("0.01"), "B": Decimal("-0.01"), "C": Decimal("0.004")})

    assert plan == []


def test_ties_keep_balance_order():
    """Test equal debts are paid in the order they appear."""
    plan = plan_settlements({"A": -10, "B": -10, "C": 20})

    assert [(s.from_member, s.to_member) for s in plan] == [("A", "C"), ("B", "C")]


def test_chained_debts():
    """Test a debtor split across two creditors."""
    plan = plan_settlements({"A": 70, "B": 30, "C": -100})

    assert plan == [
        Settlement(from_member="C", to_member="A", amount=Decimal("70.00")),
        Settlement(from_member="C", to_member="B", amount=Decimal("30.00")),
    ]


def test_non_numeric_balances_are_ignored():
    """Test garbage entries do not break planning."""
    plan = plan_settlements({"A": "oops", "B": "5", "C": "-5"})

    assert plan == [Settlement(from_member="C", to_member="B", amount=Decimal("5.00"))]


def test_balances_beyond_the_storable_range_are_ignored():
    """Test oversized balances are left out of the plan."""
    plan = plan_settlements({"A": "1e30", "B": "-1e30", "C": "5", "D": "-5"})

    assert plan == [Settlement(from_member="D", to_member="C", amount=Decimal("5.00"))]


@pytest.mark.parametrize("seed", range(25))
def test_plan_is_sound_and_bounded(seed):
    """Test applying the plan zeroes every balance within n - 1 payments."""
    balances = random_balances(seed)

    plan = plan_settlements(balances)

    settled = apply_plan(balances, plan)
    assert all(abs(value) <= Decimal("0.01") for value in settled.values())
    non_zero = [value for value in balances.values() if abs(value) >= Decimal("0.01")]
    assert len(plan) <= max(len(non_zero) - 1, 0)
    assert all(s.amount > 0 for s in plan)


def test_plan_is_deterministic():
    """Test repeated calls give identical plans."""
    balances = random_balances(3)

    assert plan_settlements(balances) == plan_settlements(dict(balances))


def test_calculate_settlement_stores_latest_result(db, group):
    """Test the month's plan is stored and replaced on recalculation."""
    create_expense(group.id, ExpenseCreate(
        description="Groceries",
        amount=Decimal("100.00"),
        payer_id="alice",
        expense_date=date(2024, 3, 5)
    ), db, today=TODAY)

    calculate_settlement(group.id, "2024-03", db)
    second = calculate_settlement(group.id, "2024-03", db)

    results = db.query(SettlementResult).filter(SettlementResult.group_id == group.id).all()
    assert results == [second]

    data = second.calculation_data
    assert data["net_balances"] == {"alice": 66.67, "bob": -33.33, "carol": -33.34}
    assert data["transfers"] == [
        {"from_member": "carol", "to_member": "alice", "amount": 33.34},
        {"from_member": "bob", "to_member": "alice", "amount": 33.33},
    ]
    assert data["total_expenses"] == 100.0
    assert "carol -> alice: 33.34" in second.summary


def test_calculate_settlement_for_empty_month(db, group):
    """Test a month without expenses is already settled."""
    result = calculate_settlement(group.id, "2024-01", db)

    assert result.calculation_data["transfers"] == []
    assert result.calculation_data["is_settled"] is True
    assert "All settled up" in result.summary


def test_record_settlement_appends_payment(db, group):
    """Test recorded payments accumulate in the monthly data."""
    create_expense(group.id, ExpenseCreate(
        description="Dinner",
        amount=Decimal("90"),
        payer_id="bob",
        expense_date=date(2024, 5, 20)
    ), db, today=TODAY)

    record_settlement(group.id, "2024-05", "alice", "bob", Decimal("30"), db)
    monthly = record_settlement(group.id, "2024-05", "carol", "bob", "30.00", db)

    assert [(p["from_member"], p["to_member"], p["amount"]) for p in monthly.settlements] == [
        ("alice", "bob", 30.0),
        ("carol", "bob", 30.0),
    ]
    # Recording a payment does not rewrite the month's balances
    assert monthly.member_balances["bob"]["balance"] == 60.0


def test_record_settlement_requires_monthly_data(db, group):
    """Test recording into a month that has no data."""
    with pytest.raises(LookupError):
        record_settlement(group.id, "2024-06", "alice", "bob", "10", db)


def test_record_settlement_rejects_bad_amount(db, group):
    """Test zero and negative payments."""
    with pytest.raises(InvalidAmount):
        record_settlement(group.id, "2024-06", "alice", "bob", "0", db)


def test_recorded_payment_shrinks_the_plan(db, group):
    """Test a recorded payment is booked as adjustments and planned around."""
    create_expense(group.id, ExpenseCreate(
        description="Dinner",
        amount=Decimal("90"),
        payer_id="bob",
        expense_date=date(2024, 5, 20)
    ), db, today=TODAY)

    record_settlement(group.id, "2024-05", "alice", "bob", "30", db)
    result = calculate_settlement(group.id, "2024-05", db)

    data = result.calculation_data
    assert data["net_balances"] == {"alice": -30.0, "bob": 60.0, "carol": -30.0}
    assert data["adjusted_balances"] == {"alice": 0.0, "bob": 30.0, "carol": -30.0}
    assert data["transfers"] == [{"from_member": "carol", "to_member": "bob", "amount": 30.0}]
    assert "After adjustments:" in result.summary

    adjustments = get_adjustments(group.id, "2024-05", db)
    assert [(a.member_id, a.adjustment_type, a.amount) for a in adjustments] == [
        ("alice", "ADD", Decimal("30.00")),
        ("bob", "DEDUCT", Decimal("30.00")),
    ]
