"""
Tests for expense entry and the monthly aggregate.
"""
import pytest
from datetime import date, datetime
from decimal import Decimal

from tallyup.core.exceptions import ExpenseValidationError, ShareMismatch
from tallyup.models.expense import Expense
from tallyup.models.monthly import MonthlyData
from tallyup.schemas.expense import EpochTimestampIn, ExpenseCreate
from tallyup.services.expense_service import create_expense, validate_expense
from tallyup.services.monthly_service import (
    calculate_period_balances,
    get_monthly_data,
    get_period_expenses,
    refresh_monthly_data,
)

MEMBERS = ["alice", "bob", "carol"]
TODAY = date(2024, 12, 31)


def expense_input(**overrides):
    values = {
        "description": "Groceries",
        "amount": Decimal("100.00"),
        "payer_id": "alice",
        "expense_date": date(2024, 3, 5),
    }
    values.update(overrides)
    return ExpenseCreate(**values)


def test_validate_equal_split_defaults_to_all_members():
    """Test participants default to the whole group in joining order."""
    validated = validate_expense(expense_input(), MEMBERS, today=TODAY)

    assert validated.shares == {"alice": Decimal("33.33"), "bob": Decimal("33.33"), "carol": Decimal("33.34")}
    assert validated.expense_date == datetime(2024, 3, 5, 12)
    assert validated.month_key == "2024-03"
    assert validated.category == "uncategorized"
    assert validated.split_type == "equal"


def test_validate_custom_split():
    """Test custom shares for a subset of members."""
    validated = validate_expense(expense_input(
        split_type="custom",
        participant_ids=["bob", "carol"],
        custom_shares={"bob": Decimal("70"), "carol": Decimal("30")},
        category="utilities"
    ), MEMBERS, today=TODAY)

    assert validated.shares == {"bob": Decimal("70.00"), "carol": Decimal("30.00")}
    assert validated.category == "utilities"


def test_validate_custom_split_mismatch():
    """Test custom shares that do not add up."""
    with pytest.raises(ShareMismatch):
        validate_expense(expense_input(
            split_type="custom",
            custom_shares={"alice": Decimal("10"), "bob": Decimal("10")}
        ), MEMBERS, today=TODAY)


def test_validate_custom_split_requires_shares():
    """Test a custom split with no shares."""
    with pytest.raises(ExpenseValidationError):
        validate_expense(expense_input(split_type="custom"), MEMBERS, today=TODAY)


def test_validate_epoch_date():
    """Test a document-store timestamp as the expense date."""
    validated = validate_expense(
        expense_input(expense_date=EpochTimestampIn(seconds=1709208000, nanoseconds=0)),
        MEMBERS,
        today=TODAY
    )

    # 2024-02-29T12:00:00Z is the same calendar date in every zone from UTC-11 to UTC+11
    assert validated.month_key == "2024-02"
    assert validated.expense_date.hour == 12


def test_validate_missing_date_uses_today():
    """Test the date defaults to today."""
    validated = validate_expense(expense_input(expense_date=None), MEMBERS, today=TODAY)

    assert validated.expense_date == datetime(2024, 12, 31, 12)
    assert validated.month_key == "2024-12"


@pytest.mark.parametrize("overrides,message", [
    ({"description": "   "}, "Description is required"),
    ({"amount": Decimal("0")}, "Valid amount is required"),
    ({"amount": Decimal("-3")}, "Valid amount is required"),
    ({"amount": Decimal("1e30")}, "Valid amount is required"),
    ({"payer_id": "mallory"}, "not a member"),
    ({"participant_ids": ["alice", "mallory"]}, "Not members"),
    ({"expense_date": date(2025, 1, 1)}, "future"),
])
def test_validate_rejects_bad_input(overrides, message):
    """Test each validation rule."""
    with pytest.raises(ExpenseValidationError) as exc_info:
        validate_expense(expense_input(**overrides), MEMBERS, today=TODAY)

    assert message in str(exc_info.value)


def test_create_expense_persists_shares_and_monthly_data(db, group):
    """Test the expense, its shares and the month's aggregate are stored together."""
    expense = create_expense(group.id, expense_input(), db, today=TODAY)

    stored = db.query(Expense).filter(Expense.id == expense.id).one()
    assert stored.month_key == "2024-03"
    assert {s.member_id: s.share_amount for s in stored.shares} == {
        "alice": Decimal("33.33"), "bob": Decimal("33.33"), "carol": Decimal("33.34")
    }

    monthly = db.query(MonthlyData).filter(MonthlyData.group_id == group.id).one()
    assert monthly.month_key == "2024-03"
    assert monthly.total_expenses == Decimal("100.00")
    assert monthly.member_balances == {
        "alice": {"balance": 66.67, "total_paid": 100.0},
        "bob": {"balance": -33.33, "total_paid": 0.0},
        "carol": {"balance": -33.34, "total_paid": 0.0},
    }


def test_create_expense_updates_existing_month(db, group):
    """Test a second expense in the month updates the same aggregate row."""
    create_expense(group.id, expense_input(), db, today=TODAY)
    create_expense(group.id, expense_input(
        description="Taxi",
        amount=Decimal("30"),
        payer_id="bob",
        expense_date=date(2024, 3, 31)
    ), db, today=TODAY)

    rows = db.query(MonthlyData).filter(MonthlyData.group_id == group.id).all()
    assert len(rows) == 1
    assert rows[0].total_expenses == Decimal("130.00")
    assert rows[0].member_balances["bob"] == {"balance": -13.33, "total_paid": 30.0}


def test_create_expense_in_other_month_keeps_months_apart(db, group):
    """Test each month gets its own aggregate."""
    create_expense(group.id, expense_input(expense_date=date(2024, 1, 31)), db, today=TODAY)
    create_expense(group.id, expense_input(expense_date=date(2024, 2, 1)), db, today=TODAY)

    assert [e.expense_date.day for e in get_period_expenses(group.id, "2024-01", db)] == [31]
    assert [e.expense_date.day for e in get_period_expenses(group.id, "2024-02", db)] == [1]
    assert get_monthly_data(group.id, "2024-01", db).total_expenses == Decimal("100.00")


def test_create_expense_unknown_group(db):
    """Test a missing group."""
    with pytest.raises(LookupError):
        create_expense(999, expense_input(), db, today=TODAY)


def test_rejected_expense_leaves_nothing_behind(db, group):
    """Test validation failures store nothing."""
    with pytest.raises(ExpenseValidationError):
        create_expense(group.id, expense_input(payer_id="mallory"), db, today=TODAY)

    assert db.query(Expense).count() == 0
    assert db.query(MonthlyData).count() == 0


def test_get_monthly_data_default(db, group):
    """Test a month without data returns an empty aggregate."""
    monthly = get_monthly_data(group.id, "2030-01", db)

    assert monthly.id is None
    assert monthly.total_expenses == 0
    assert monthly.member_balances == {}
    assert monthly.settlements == []


def test_refresh_monthly_data_is_repeatable(db, group):
    """Test recomputing a month gives the same aggregate."""
    create_expense(group.id, expense_input(), db, today=TODAY)

    before = dict(get_monthly_data(group.id, "2024-03", db).member_balances)
    refresh_monthly_data(group.id, "2024-03", db)
    db.commit()

    assert get_monthly_data(group.id, "2024-03", db).member_balances == before


def test_calculate_period_balances(db, group):
    """Test balances over a month from stored expenses."""
    create_expense(group.id, expense_input(), db, today=TODAY)

    report, skipped = calculate_period_balances(group.id, "2024-03", db)

    assert skipped == []
    assert report.balances == {"alice": Decimal("66.67"), "bob": Decimal("-33.33"), "carol": Decimal("-33.34")}
    assert report.summary.total_positive == report.summary.total_negative
