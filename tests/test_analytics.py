import datetime as dt
from types import SimpleNamespace

import pytest

from finance_tracker import analytics as an

TODAY = dt.date(2025, 4, 11)


@pytest.mark.parametrize(
    "target, expected",
    [
        (None, "No deadline"),
        (dt.date(2025, 4, 10), "Deadline passed"),
        (TODAY, "Due today"),
        (TODAY + dt.timedelta(days=10), "10 days left"),
        (TODAY + dt.timedelta(days=45), "2 months left"),
        (TODAY + dt.timedelta(days=330), "11 months left"),
        (TODAY + dt.timedelta(days=360), "1 year left"),
        (TODAY + dt.timedelta(days=400), "1 year, 2 months left"),
        (TODAY + dt.timedelta(days=750), "2 years, 1 month left"),
    ],
)
def test_time_remaining(target, expected):
    assert an.time_remaining(target, TODAY) == expected


def test_goal_progress_rounds_and_caps():
    assert an.goal_progress(7500, 10000) == 75
    assert an.goal_progress(4800, 5000) == 96
    assert an.goal_progress(12000, 10000) == 100
    assert an.goal_progress(10, 0) == 0
    assert an.goal_progress(1, 8) == 13
    assert an.goal_progress(1, 200) == 1


def test_apply_contribution_clamps_to_target():
    assert an.apply_contribution(1800, 200, 3000) == 2000
    assert an.apply_contribution(2900, 500, 3000) == 3000
    with pytest.raises(ValueError):
        an.apply_contribution(100, 0, 3000)


def test_portfolio_stats():
    holdings = [
        SimpleNamespace(quantity=10, purchase_price=150.0, current_price=175.5),
        SimpleNamespace(quantity=5, purchase_price=250.0, current_price=220.75),
    ]
    stats = an.portfolio_stats(holdings)
    assert stats["total_cost_basis"] == 2750.0
    assert stats["total_value"] == 2858.75
    assert stats["total_gain_loss"] == 108.75
    assert stats["total_gain_loss_percent"] == pytest.approx(3.95, abs=0.01)
    assert an.portfolio_value(holdings) == 2858.75


def test_budget_status_thresholds():
    assert an.budget_status(800, 1000) == "warning"
    assert an.budget_status(300, 400) == "warning"
    assert an.budget_status(250, 400) == "on_track"
    assert an.budget_status(1500, 1500) == "over"
    assert an.budget_status(350, 300) == "over"


def test_budget_summary():
    budgets = [
        SimpleNamespace(id=1, category="Groceries", budgeted=1000.0),
        SimpleNamespace(id=2, category="Shopping", budgeted=300.0),
    ]
    summary = an.budget_summary(6000, budgets, {"Groceries": 800.0, "Shopping": 350.0})
    assert summary["total_budgeted"] == 1300.0
    assert summary["remaining_to_budget"] == 4700.0
    assert summary["budgeted_percent"] == pytest.approx(21.67)
    assert [c["status"] for c in summary["categories"]] == ["warning", "over"]


def test_budget_summary_without_income():
    summary = an.budget_summary(0, [], {})
    assert summary["budgeted_percent"] == 0.0
    assert summary["categories"] == []


def test_spending_by_category_and_month_filter():
    expenses = [
        SimpleNamespace(date=dt.date(2025, 4, 1), category="Rent/Mortgage", amount=1500.0),
        SimpleNamespace(date=dt.date(2025, 4, 2), category="Groceries", amount=85.3),
        SimpleNamespace(date=dt.date(2025, 4, 10), category="Groceries", amount=120.5),
        SimpleNamespace(date=dt.date(2025, 3, 30), category="Groceries", amount=60.0),
    ]
    april = an.month_expenses(expenses, TODAY)
    assert len(april) == 3
    assert an.spending_by_category(april) == {"Rent/Mortgage": 1500.0, "Groceries": 205.8}


def test_current_date_defaults_to_utc(monkeypatch):
    monkeypatch.setattr(an, "utc_today", lambda: TODAY)
    expenses = [
        SimpleNamespace(date=dt.date(2025, 4, 30), category="Groceries", amount=10.0),
        SimpleNamespace(date=dt.date(2025, 5, 1), category="Groceries", amount=20.0),
    ]
    assert [e.amount for e in an.month_expenses(expenses)] == [10.0]
    assert an.time_remaining(TODAY) == "Due today"
    assert an.time_remaining(TODAY + dt.timedelta(days=3)) == "3 days left"
