"""Reporting utilities.

Formats stored rows and analytics into the JSON shapes the client consumes
and into a human-readable text report for the command line.
"""

from __future__ import annotations

import datetime as dt
import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from . import analytics as an

RECENT_EXPENSE_COUNT = 5


def _iso(value: Optional[dt.date]) -> Optional[str]:
    return value.isoformat() if value else None


def format_expense(row) -> Dict:
    return {
        "id": row.id,
        "date": _iso(row.date),
        "description": row.description,
        "category": row.category.name,
        "amount": float(row.amount),
    }


def format_goal(row, today: Optional[dt.date] = None) -> Dict:
    current = float(row.current_amount or 0)
    target = float(row.target_amount)
    return {
        "id": row.id,
        "name": row.name,
        "targetAmount": target,
        "currentAmount": current,
        "targetDate": _iso(row.target_date),
        "progress": an.goal_progress(current, target),
        "timeRemaining": an.time_remaining(row.target_date, today),
    }


def format_holding(row) -> Dict:
    return {
        "id": row.id,
        "name": row.name,
        "ticker": row.ticker,
        "quantity": float(row.quantity),
        "purchasePrice": float(row.purchase_price),
        "currentPrice": float(row.current_price),
        "purchaseDate": _iso(row.purchase_date),
    }


def format_history(row) -> Dict:
    return {"date": _iso(row.date), "value": float(row.value)}


def format_portfolio_stats(stats: Dict[str, float]) -> Dict[str, float]:
    return {
        "totalCostBasis": stats["total_cost_basis"],
        "totalValue": stats["total_value"],
        "totalGainLoss": stats["total_gain_loss"],
        "totalGainLossPercent": stats["total_gain_loss_percent"],
    }


def format_budget_summary(summary: Dict) -> Dict:
    return {
        "totalIncome": summary["total_income"],
        "totalBudgeted": summary["total_budgeted"],
        "remainingToBudget": summary["remaining_to_budget"],
        "budgetedPercent": summary["budgeted_percent"],
        "categories": summary["categories"],
    }


def format_settings(settings, linked_accounts: Iterable) -> Dict:
    return {
        "userProfile": {"fullName": settings.full_name, "email": settings.email},
        "linkedAccounts": [
            {"id": a.id, "name": a.name, "last4": a.last4, "status": a.status}
            for a in linked_accounts
        ],
        "preferences": {
            "currency": settings.currency,
            "notifications": {
                "weeklySummary": settings.notify_weekly_summary,
                "budgetAlerts": settings.notify_budget_alerts,
                "investmentAlerts": settings.notify_investment_alerts,
                "goalAchieved": settings.notify_goal_achieved,
            },
        },
    }


def build_budget_summary(income: float, budgets: Iterable, expenses: Iterable, today: Optional[dt.date] = None) -> Dict:
    spent = an.spending_by_category(an.month_expenses(expenses, today))
    return an.budget_summary(income, budgets, spent)


def build_dashboard(
    expenses: List,
    budgets: List,
    holdings: List,
    history: List,
    goals: List,
    today: Optional[dt.date] = None,
) -> Dict:
    """Roll up every section of the dashboard; ``expenses`` newest first."""
    this_month = an.month_expenses(expenses, today)
    spent = an.spending_by_category(this_month)
    stats = an.portfolio_stats(holdings)
    return {
        "budgetSummary": {
            "totalBudget": round(sum(b.budgeted for b in budgets), 2),
            "totalSpent": round(sum(e.amount for e in this_month), 2),
            "categories": [
                {"name": b.category, "spent": spent.get(b.category, 0.0), "budget": round(b.budgeted, 2)}
                for b in budgets
            ],
        },
        "recentExpenses": [format_expense(e) for e in expenses[:RECENT_EXPENSE_COUNT]],
        "investmentSummary": {
            "totalValue": stats["total_value"],
            "totalGainLossAmount": stats["total_gain_loss"],
            "totalGainLossPercent": stats["total_gain_loss_percent"],
            "portfolioHistory": [format_history(h) for h in history],
        },
        "goalSummary": [format_goal(g, today) for g in goals],
    }


def format_text_report(dashboard: Dict) -> str:
    lines: List[str] = []
    inv = dashboard["investmentSummary"]
    lines.append("=== Finance Tracker Summary ===")
    lines.append(f"Portfolio value: ${inv['totalValue']:.2f}")
    lines.append(f"Gain/Loss:       ${inv['totalGainLossAmount']:.2f} ({inv['totalGainLossPercent']:+.2f}%)")
    lines.append("")

    budget = dashboard["budgetSummary"]
    lines.append("-- Budget (Current Month) --")
    lines.append(f"Budgeted ${budget['totalBudget']:.2f}  Spent ${budget['totalSpent']:.2f}")
    for cat in budget["categories"]:
        lines.append(f"{cat['name']:15} Budget ${cat['budget']:.2f}  Spent ${cat['spent']:.2f}")
    lines.append("")

    lines.append("-- Goals --")
    for goal in dashboard["goalSummary"]:
        lines.append(
            f"{goal['name'][:30]:30} ${goal['currentAmount']:.2f} / ${goal['targetAmount']:.2f}"
            f"  {goal['progress']:3d}%  {goal['timeRemaining']}"
        )
    lines.append("")

    lines.append("-- Recent Expenses --")
    for e in dashboard["recentExpenses"]:
        lines.append(f"{e['date']} {e['description'][:30]:30} {e['category']:15} ${e['amount']:.2f}")
    return "\n".join(lines)


def save_json(summary: Dict, path: str | Path) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        json.dump(summary, f, indent=2)
