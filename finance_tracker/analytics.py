"""Analytics and summary calculations.

Functions that derive the totals shown by the client from stored rows:
portfolio valuation, goal progress, budget status and spend roll-ups.
"""

from __future__ import annotations

import datetime as dt
import math
from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Optional

BUDGET_WARNING_RATIO = 0.75


def utc_today() -> dt.date:
    return dt.datetime.now(dt.timezone.utc).date()


def month_key(d: dt.date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def portfolio_value(holdings: Iterable) -> float:
    return round(sum(h.quantity * h.current_price for h in holdings), 2)


def portfolio_stats(holdings: Iterable) -> Dict[str, float]:
    holdings = list(holdings)
    cost_basis = sum(h.quantity * h.purchase_price for h in holdings)
    value = sum(h.quantity * h.current_price for h in holdings)
    gain = value - cost_basis
    gain_pct = (gain / cost_basis) * 100 if cost_basis > 0 else 0.0
    return {
        "total_cost_basis": round(cost_basis, 2),
        "total_value": round(value, 2),
        "total_gain_loss": round(gain, 2),
        "total_gain_loss_percent": round(gain_pct, 2),
    }


def goal_progress(current: float, target: float) -> int:
    if target <= 0:
        return 0
    # Halves round up
    return min(int(math.floor((current / target) * 100 + 0.5)), 100)


def apply_contribution(current: float, amount: float, target: float) -> float:
    """Add ``amount`` to a goal balance without passing the target."""
    if amount <= 0:
        raise ValueError("Please enter a valid contribution amount")
    return min(current + amount, target)


def _plural(n: int, word: str) -> str:
    return f"{n} {word}{'s' if n > 1 else ''}"


def time_remaining(target_date: Optional[dt.date], today: Optional[dt.date] = None) -> str:
    if target_date is None:
        return "No deadline"
    today = today or utc_today()
    if target_date < today:
        return "Deadline passed"
    days = (target_date - today).days
    if days == 0:
        return "Due today"
    if days < 30:
        return f"{days} days left"
    months = math.ceil(days / 30)
    if months < 12:
        return f"{months} months left"
    years, rem = divmod(months, 12)
    if rem == 0:
        return f"{_plural(years, 'year')} left"
    return f"{_plural(years, 'year')}, {_plural(rem, 'month')} left"


def spending_by_category(expenses: Iterable) -> Dict[str, float]:
    """Sum expense amounts per category name, largest first.

    Each item needs ``amount`` and a ``category`` that is either a name or an
    object with a ``name`` attribute.
    """
    totals: Dict[str, float] = defaultdict(float)
    for e in expenses:
        cat = getattr(e.category, "name", e.category) or "Other"
        totals[cat] += e.amount
    return {k: round(v, 2) for k, v in sorted(totals.items(), key=lambda kv: kv[1], reverse=True)}


def month_expenses(expenses: Iterable, today: Optional[dt.date] = None) -> List:
    current = month_key(today or utc_today())
    return [e for e in expenses if month_key(e.date) == current]


def budget_status(spent: float, budgeted: float) -> str:
    if budgeted <= 0:
        return "over" if spent > 0 else "on_track"
    ratio = spent / budgeted
    if ratio < BUDGET_WARNING_RATIO:
        return "on_track"
    if ratio < 1:
        return "warning"
    return "over"


def budget_summary(
    income: float,
    budgets: Iterable,
    spent_by_category: Mapping[str, float],
) -> Dict:
    """Compare each budget line against what was spent in its category."""
    rows = []
    total_budgeted = 0.0
    for b in budgets:
        spent = round(spent_by_category.get(b.category, 0.0), 2)
        total_budgeted += b.budgeted
        rows.append(
            {
                "id": b.id,
                "name": b.category,
                "budgeted": round(b.budgeted, 2),
                "spent": spent,
                "status": budget_status(spent, b.budgeted),
            }
        )
    budgeted_pct = round((total_budgeted / income) * 100, 2) if income > 0 else 0.0
    return {
        "total_income": round(income, 2),
        "total_budgeted": round(total_budgeted, 2),
        "remaining_to_budget": round(income - total_budgeted, 2),
        "budgeted_percent": budgeted_pct,
        "categories": rows,
    }
