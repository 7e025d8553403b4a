"""Database lifecycle and per-user lookup helpers."""

from __future__ import annotations

import datetime as dt
import logging
from typing import List, Optional, Sequence

from flask import current_app

from .config import ALL_CATEGORIES_LABEL, DEFAULT_CATEGORIES
from .models import Budget, Category, Goal, Transaction, UserSettings, db

logger = logging.getLogger(__name__)


def init_db() -> None:
    db.create_all()


def default_categories() -> Sequence[str]:
    if current_app:
        return current_app.config.get("DEFAULT_CATEGORIES") or DEFAULT_CATEGORIES
    return DEFAULT_CATEGORIES


def fetch_categories(user_id: str) -> List[Category]:
    """Return the user's categories by name, seeding the defaults on first use."""
    rows = Category.query.filter_by(user_id=user_id).order_by(Category.name).all()
    if not rows:
        names = list(default_categories())
        db.session.add_all([Category(user_id=user_id, name=name) for name in names])
        db.session.commit()
        logger.info("Seeded %d default categories for user %s", len(names), user_id)
        rows = Category.query.filter_by(user_id=user_id).order_by(Category.name).all()
    return rows


def find_category(user_id: str, name: str) -> Optional[Category]:
    if not name:
        return None
    fetch_categories(user_id)
    return Category.query.filter_by(user_id=user_id, name=name).first()


def fetch_expenses(
    user_id: str,
    start: Optional[dt.date] = None,
    end: Optional[dt.date] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
) -> List[Transaction]:
    query = (
        Transaction.query.join(Category)
        .filter(Transaction.user_id == user_id)
        .order_by(Transaction.date.desc(), Transaction.id.desc())
    )
    if start:
        query = query.filter(Transaction.date >= start)
    if end:
        query = query.filter(Transaction.date <= end)
    if category and category != ALL_CATEGORIES_LABEL:
        query = query.filter(Category.name == category)
    if search:
        query = query.filter(Transaction.description.ilike(f"%{search}%"))
    return query.all()


def fetch_expense(user_id: str, expense_id: int) -> Optional[Transaction]:
    return Transaction.query.filter_by(id=expense_id, user_id=user_id).first()


def fetch_goals(user_id: str) -> List[Goal]:
    return Goal.query.filter_by(user_id=user_id).order_by(Goal.created_at, Goal.id).all()


def fetch_budgets(user_id: str) -> List[Budget]:
    return Budget.query.filter_by(user_id=user_id).order_by(Budget.created_at, Budget.id).all()


def ensure_settings(user_id: str) -> UserSettings:
    row = UserSettings.query.filter_by(user_id=user_id).first()
    if row:
        return row
    row = UserSettings(user_id=user_id)
    db.session.add(row)
    db.session.commit()
    return row
