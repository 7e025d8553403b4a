"""SQLAlchemy models for the Finance Tracker REST layer."""

from __future__ import annotations

import datetime as dt

from flask_sqlalchemy import SQLAlchemy


db = SQLAlchemy()


class Category(db.Model):
    __tablename__ = "categories"
    __table_args__ = (db.UniqueConstraint("user_id", "name", name="uq_categories_user_name"),)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    created_at = db.Column(db.DateTime, default=dt.datetime.utcnow, nullable=False)

    transactions = db.relationship("Transaction", back_populates="category", cascade="all, delete-orphan")


class Transaction(db.Model):
    __tablename__ = "transactions"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id", ondelete="CASCADE"), nullable=False)
    date = db.Column(db.Date, nullable=False)
    description = db.Column(db.String(255), nullable=False)
    amount = db.Column(db.Float, nullable=False)
    created_at = db.Column(db.DateTime, default=dt.datetime.utcnow, nullable=False)

    category = db.relationship("Category", back_populates="transactions")


class Goal(db.Model):
    __tablename__ = "goals"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    target_amount = db.Column(db.Float, nullable=False)
    current_amount = db.Column(db.Float, nullable=False, default=0.0)
    target_date = db.Column(db.Date)
    created_at = db.Column(db.DateTime, default=dt.datetime.utcnow, nullable=False)


class Holding(db.Model):
    __tablename__ = "holdings"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    ticker = db.Column(db.String(16), nullable=False)
    quantity = db.Column(db.Float, nullable=False)
    purchase_price = db.Column(db.Float, nullable=False)
    current_price = db.Column(db.Float, nullable=False)
    purchase_date = db.Column(db.Date, nullable=False)
    created_at = db.Column(db.DateTime, default=dt.datetime.utcnow, nullable=False)


class PortfolioHistory(db.Model):
    __tablename__ = "portfolio_history"
    __table_args__ = (db.UniqueConstraint("user_id", "date", name="uq_portfolio_history_user_date"),)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)
    value = db.Column(db.Float, nullable=False)


class Budget(db.Model):
    __tablename__ = "budgets"
    __table_args__ = (db.UniqueConstraint("user_id", "category", name="uq_budgets_user_category"),)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    category = db.Column(db.String(120), nullable=False)
    budgeted = db.Column(db.Float, nullable=False)
    created_at = db.Column(db.DateTime, default=dt.datetime.utcnow, nullable=False)


class UserSettings(db.Model):
    __tablename__ = "user_settings"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, unique=True)
    full_name = db.Column(db.String(120), nullable=False, default="")
    email = db.Column(db.String(120), nullable=False, default="")
    currency = db.Column(db.String(3), nullable=False, default="USD")
    monthly_income = db.Column(db.Float, nullable=False, default=0.0)
    notify_weekly_summary = db.Column(db.Boolean, nullable=False, default=True)
    notify_budget_alerts = db.Column(db.Boolean, nullable=False, default=False)
    notify_investment_alerts = db.Column(db.Boolean, nullable=False, default=True)
    notify_goal_achieved = db.Column(db.Boolean, nullable=False, default=True)


class LinkedAccount(db.Model):
    __tablename__ = "linked_accounts"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    last4 = db.Column(db.String(4), nullable=False)
    status = db.Column(db.String(16), nullable=False, default="Linked")
    created_at = db.Column(db.DateTime, default=dt.datetime.utcnow, nullable=False)
