"""Flask REST interface for the Finance Tracker."""

from __future__ import annotations

import datetime as dt
import logging
import re
import uuid
from functools import wraps
from typing import Any, Dict, Optional

from flask import Flask, g, jsonify, request
from flask_cors import CORS
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from . import analytics as an
from .config import ALL_CATEGORIES_LABEL, SUPPORTED_CURRENCIES, AppConfig
from .db import (
    ensure_settings,
    fetch_budgets,
    fetch_categories,
    fetch_expense,
    fetch_expenses,
    fetch_goals,
    find_category,
    init_db,
)
from .models import Budget, Category, Goal, Holding, LinkedAccount, Transaction, db
from .portfolio import fetch_history, fetch_holdings, refresh_prices
from .reports import (
    build_budget_summary,
    build_dashboard,
    format_budget_summary,
    format_expense,
    format_goal,
    format_history,
    format_holding,
    format_portfolio_stats,
    format_settings,
)

logger = logging.getLogger(__name__)

LAST4_PATTERN = re.compile(r"^\d{4}$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
MIN_SIGNUP_PASSWORD = 6
MIN_NEW_PASSWORD = 8


def _error(message: str, status: int):
    return jsonify({"error": message}), status


def _invalid(exc: ValueError):
    logger.warning("Rejected %s %s: %s", request.method, request.path, exc)
    return _error(str(exc), 400)


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _required_text(data: Dict[str, Any], key: str, message: str) -> str:
    value = data.get(key)
    text = str(value).strip() if value is not None else ""
    if not text:
        raise ValueError(message)
    return text


def _parse_number(value: Any, label: str, minimum: float = 0.0, inclusive: bool = False) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{label} must be a valid number.")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{label} must be a valid number.") from None
    if number != number or number in (float("inf"), float("-inf")):
        raise ValueError(f"{label} must be a valid number.")
    if inclusive and number < minimum:
        raise ValueError(f"{label} cannot be negative.")
    if not inclusive and number <= minimum:
        raise ValueError(f"{label} must be greater than zero.")
    return number


def _parse_date(value: Any, label: str) -> dt.date:
    text = str(value).strip()
    try:
        if not DATE_PATTERN.match(text):
            raise ValueError(text)
        return dt.date.fromisoformat(text)
    except ValueError:
        raise ValueError(f"{label} must be in YYYY-MM-DD format.") from None


def _optional_date(value: Optional[str], label: str) -> Optional[dt.date]:
    return _parse_date(value, label) if value else None


def _parse_expense(data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "date": _parse_date(data.get("date"), "Date"),
        "description": _required_text(data, "description", "Description is required."),
        "category": _required_text(data, "category", "Category is required."),
        "amount": _parse_number(data.get("amount"), "Amount"),
    }


def _parse_goal(data: Dict[str, Any], existing: Optional[Goal] = None) -> Dict[str, Any]:
    fields = {
        "name": _required_text(data, "name", "Goal name is required."),
        "target_amount": _parse_number(data.get("targetAmount"), "Target amount"),
    }
    current = data.get("currentAmount")
    if current in (None, ""):
        fields["current_amount"] = existing.current_amount if existing else 0.0
    else:
        fields["current_amount"] = _parse_number(current, "Current amount", inclusive=True)
    target_date = data.get("targetDate")
    fields["target_date"] = _parse_date(target_date, "Target date") if target_date else None
    return fields


def _parse_holding(data: Dict[str, Any]) -> Dict[str, Any]:
    purchase_date = data.get("purchaseDate")
    return {
        "name": _required_text(data, "name", "Name is required."),
        "ticker": _required_text(data, "ticker", "Ticker is required.").upper(),
        "quantity": _parse_number(data.get("quantity"), "Quantity"),
        "purchase_price": _parse_number(data.get("purchasePrice"), "Purchase price"),
        "current_price": _parse_number(data.get("currentPrice"), "Current price"),
        "purchase_date": _parse_date(purchase_date, "Purchase date") if purchase_date else an.utc_today(),
    }


def _parse_budget(data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "category": _required_text(data, "name", "Budget category is required."),
        "budgeted": _parse_number(data.get("budgeted"), "Budget amount"),
    }


def user_id_required(view):
    @wraps(view)
    def wrapped_view(**kwargs):
        if request.method in ("GET", "DELETE"):
            user_id = request.args.get("userId")
        else:
            user_id = _json_body().get("userId")
        if user_id is None or str(user_id).strip() == "":
            return _error("User ID is required", 400)
        g.user_id = str(user_id).strip()
        return view(**kwargs)

    return wrapped_view


def create_app(config_path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> Flask:
    cfg = AppConfig.load(config_path)
    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = Flask(__name__)
    app.config.update(cfg.flask_settings())
    if overrides:
        app.config.update(overrides)

    db.init_app(app)
    CORS(app, origins=app.config["CORS_ORIGINS"])
    with app.app_context():
        init_db()

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(exc):
        db.session.rollback()
        logger.error("Database error on %s %s", request.method, request.path, exc_info=exc)
        return _error("Server error", 500)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc):
        return _error(exc.description, exc.code)

    # Expenses

    @app.route("/expenses", methods=["GET"])
    @user_id_required
    def list_expenses():
        try:
            start = _optional_date(request.args.get("startDate"), "Start date")
            end = _optional_date(request.args.get("endDate"), "End date")
        except ValueError as exc:
            return _invalid(exc)
        rows = fetch_expenses(
            g.user_id,
            start=start,
            end=end,
            category=request.args.get("category"),
            search=request.args.get("search"),
        )
        return jsonify([format_expense(row) for row in rows])

    @app.route("/expenses", methods=["POST"])
    @user_id_required
    def create_expense():
        try:
            fields = _parse_expense(_json_body())
            category = find_category(g.user_id, fields.pop("category"))
            if category is None:
                raise ValueError("Invalid category")
        except ValueError as exc:
            return _invalid(exc)
        row = Transaction(user_id=g.user_id, category=category, **fields)
        db.session.add(row)
        db.session.commit()
        logger.info("Created expense %s for user %s", row.id, g.user_id)
        return jsonify(format_expense(row)), 201

    @app.route("/expenses/<int:expense_id>", methods=["PUT"])
    @user_id_required
    def update_expense(expense_id: int):
        try:
            fields = _parse_expense(_json_body())
            category = find_category(g.user_id, fields.pop("category"))
            if category is None:
                raise ValueError("Invalid category")
        except ValueError as exc:
            return _invalid(exc)
        row = fetch_expense(g.user_id, expense_id)
        if row is None:
            return _error("Expense not found", 404)
        row.category = category
        for key, value in fields.items():
            setattr(row, key, value)
        db.session.commit()
        logger.info("Updated expense %s for user %s", row.id, g.user_id)
        return jsonify(format_expense(row))

    @app.route("/expenses/<int:expense_id>", methods=["DELETE"])
    @user_id_required
    def delete_expense(expense_id: int):
        row = fetch_expense(g.user_id, expense_id)
        if row is None:
            return _error("Expense not found", 404)
        db.session.delete(row)
        db.session.commit()
        logger.info("Deleted expense %s for user %s", expense_id, g.user_id)
        return jsonify({"id": expense_id})

    # Categories

    @app.route("/categories", methods=["GET"])
    @user_id_required
    def list_categories():
        rows = fetch_categories(g.user_id)
        return jsonify([ALL_CATEGORIES_LABEL] + [row.name for row in rows])

    @app.route("/categories", methods=["POST"])
    @user_id_required
    def create_category():
        try:
            name = _required_text(_json_body(), "name", "Category name is required.")
            if name == ALL_CATEGORIES_LABEL:
                raise ValueError("That category name is reserved.")
            if find_category(g.user_id, name) is not None:
                raise ValueError("That category already exists.")
        except ValueError as exc:
            return _invalid(exc)
        row = Category(user_id=g.user_id, name=name)
        db.session.add(row)
        db.session.commit()
        return jsonify({"id": row.id, "name": row.name}), 201

    # Goals

    def _fetch_goal(goal_id: int) -> Optional[Goal]:
        return Goal.query.filter_by(id=goal_id, user_id=g.user_id).first()

    @app.route("/goals", methods=["GET"])
    @user_id_required
    def list_goals():
        return jsonify([format_goal(row) for row in fetch_goals(g.user_id)])

    @app.route("/goals", methods=["POST"])
    @user_id_required
    def create_goal():
        try:
            fields = _parse_goal(_json_body())
        except ValueError as exc:
            return _invalid(exc)
        row = Goal(user_id=g.user_id, **fields)
        db.session.add(row)
        db.session.commit()
        logger.info("Created goal %s for user %s", row.id, g.user_id)
        return jsonify(format_goal(row)), 201

    @app.route("/goals/<int:goal_id>", methods=["PUT"])
    @user_id_required
    def update_goal(goal_id: int):
        row = _fetch_goal(goal_id)
        try:
            fields = _parse_goal(_json_body(), existing=row)
        except ValueError as exc:
            return _invalid(exc)
        if row is None:
            return _error("Goal not found", 404)
        for key, value in fields.items():
            setattr(row, key, value)
        db.session.commit()
        return jsonify(format_goal(row))

    @app.route("/goals/<int:goal_id>", methods=["DELETE"])
    @user_id_required
    def delete_goal(goal_id: int):
        row = _fetch_goal(goal_id)
        if row is None:
            return _error("Goal not found", 404)
        db.session.delete(row)
        db.session.commit()
        return jsonify({"id": goal_id})

    @app.route("/goals/<int:goal_id>/contribute", methods=["POST"])
    @user_id_required
    def contribute_to_goal(goal_id: int):
        row = _fetch_goal(goal_id)
        if row is None:
            return _error("Goal not found", 404)
        try:
            amount = _parse_number(_json_body().get("amount"), "Contribution amount")
            row.current_amount = an.apply_contribution(row.current_amount or 0.0, amount, row.target_amount)
        except ValueError as exc:
            return _invalid(exc)
        db.session.commit()
        logger.info("Contributed %.2f to goal %s for user %s", amount, goal_id, g.user_id)
        return jsonify(format_goal(row))

    # Investments

    def _fetch_holding(holding_id: int) -> Optional[Holding]:
        return Holding.query.filter_by(id=holding_id, user_id=g.user_id).first()

    @app.route("/investments", methods=["GET"])
    @user_id_required
    def list_holdings():
        return jsonify([format_holding(row) for row in fetch_holdings(g.user_id)])

    @app.route("/investments", methods=["POST"])
    @user_id_required
    def create_holding():
        try:
            fields = _parse_holding(_json_body())
        except ValueError as exc:
            return _invalid(exc)
        row = Holding(user_id=g.user_id, **fields)
        db.session.add(row)
        db.session.commit()
        logger.info("Created holding %s (%s) for user %s", row.id, row.ticker, g.user_id)
        return jsonify(format_holding(row)), 201

    @app.route("/investments/<int:holding_id>", methods=["PUT"])
    @user_id_required
    def update_holding(holding_id: int):
        try:
            fields = _parse_holding(_json_body())
        except ValueError as exc:
            return _invalid(exc)
        row = _fetch_holding(holding_id)
        if row is None:
            return _error("Holding not found", 404)
        for key, value in fields.items():
            setattr(row, key, value)
        db.session.commit()
        return jsonify(format_holding(row))

    @app.route("/investments/<int:holding_id>", methods=["DELETE"])
    @user_id_required
    def delete_holding(holding_id: int):
        row = _fetch_holding(holding_id)
        if row is None:
            return _error("Holding not found", 404)
        db.session.delete(row)
        db.session.commit()
        return jsonify({"id": holding_id})

    @app.route("/investments/history", methods=["GET"])
    @user_id_required
    def portfolio_history():
        return jsonify([format_history(row) for row in fetch_history(g.user_id)])

    @app.route("/investments/summary", methods=["GET"])
    @user_id_required
    def portfolio_summary():
        return jsonify(format_portfolio_stats(an.portfolio_stats(fetch_holdings(g.user_id))))

    @app.route("/investments/refresh", methods=["POST"])
    @user_id_required
    def refresh_portfolio():
        holdings, snapshot = refresh_prices(
            g.user_id,
            rng=app.config.get("PRICE_RNG"),
            change_percent=app.config["PRICE_CHANGE_PERCENT"],
        )
        return jsonify(
            {
                "holdings": [format_holding(row) for row in holdings],
                "history": format_history(snapshot),
            }
        )

    # Budgets

    def _fetch_budget(budget_id: int) -> Optional[Budget]:
        return Budget.query.filter_by(id=budget_id, user_id=g.user_id).first()

    def _budget_exists(name: str, exclude_id: Optional[int] = None) -> bool:
        query = Budget.query.filter_by(user_id=g.user_id, category=name)
        if exclude_id is not None:
            query = query.filter(Budget.id != exclude_id)
        return query.first() is not None

    @app.route("/budgets", methods=["GET"])
    @user_id_required
    def budget_overview():
        settings = ensure_settings(g.user_id)
        summary = build_budget_summary(
            settings.monthly_income,
            fetch_budgets(g.user_id),
            fetch_expenses(g.user_id),
        )
        return jsonify(format_budget_summary(summary))

    @app.route("/budgets", methods=["POST"])
    @user_id_required
    def create_budget():
        try:
            fields = _parse_budget(_json_body())
            if _budget_exists(fields["category"]):
                raise ValueError("A budget for that category already exists.")
        except ValueError as exc:
            return _invalid(exc)
        row = Budget(user_id=g.user_id, **fields)
        db.session.add(row)
        db.session.commit()
        logger.info("Created budget %s for user %s", row.category, g.user_id)
        return jsonify({"id": row.id, "name": row.category, "budgeted": row.budgeted}), 201

    @app.route("/budgets/<int:budget_id>", methods=["PUT"])
    @user_id_required
    def update_budget(budget_id: int):
        try:
            fields = _parse_budget(_json_body())
            if _budget_exists(fields["category"], exclude_id=budget_id):
                raise ValueError("A budget for that category already exists.")
        except ValueError as exc:
            return _invalid(exc)
        row = _fetch_budget(budget_id)
        if row is None:
            return _error("Budget not found", 404)
        row.category = fields["category"]
        row.budgeted = fields["budgeted"]
        db.session.commit()
        return jsonify({"id": row.id, "name": row.category, "budgeted": row.budgeted})

    @app.route("/budgets/<int:budget_id>", methods=["DELETE"])
    @user_id_required
    def delete_budget(budget_id: int):
        row = _fetch_budget(budget_id)
        if row is None:
            return _error("Budget not found", 404)
        db.session.delete(row)
        db.session.commit()
        return jsonify({"id": budget_id})

    @app.route("/budgets/income", methods=["PUT"])
    @user_id_required
    def update_income():
        try:
            income = _parse_number(_json_body().get("income"), "Income", inclusive=True)
        except ValueError as exc:
            return _invalid(exc)
        settings = ensure_settings(g.user_id)
        settings.monthly_income = income
        db.session.commit()
        return jsonify({"totalIncome": income})

    # Settings

    def _settings_payload():
        settings = ensure_settings(g.user_id)
        accounts = (
            LinkedAccount.query.filter_by(user_id=g.user_id)
            .order_by(LinkedAccount.created_at, LinkedAccount.id)
            .all()
        )
        return format_settings(settings, accounts)

    @app.route("/settings", methods=["GET"])
    @user_id_required
    def get_settings():
        return jsonify(_settings_payload())

    @app.route("/settings", methods=["PUT"])
    @user_id_required
    def update_settings():
        data = _json_body()
        settings = ensure_settings(g.user_id)
        try:
            if "fullName" in data:
                settings.full_name = str(data["fullName"] or "").strip()
            if "email" in data:
                email = str(data["email"] or "").strip()
                if email and "@" not in email:
                    raise ValueError("Email address is invalid.")
                settings.email = email
            if "currency" in data:
                currency = str(data["currency"] or "").upper()
                if currency not in SUPPORTED_CURRENCIES:
                    raise ValueError(f"Unsupported currency: {data['currency']}")
                settings.currency = currency
            notifications = data.get("notifications") or {}
            if not isinstance(notifications, dict):
                raise ValueError("Notifications must be an object.")
            for key, attr in (
                ("weeklySummary", "notify_weekly_summary"),
                ("budgetAlerts", "notify_budget_alerts"),
                ("investmentAlerts", "notify_investment_alerts"),
                ("goalAchieved", "notify_goal_achieved"),
            ):
                if key in notifications:
                    if not isinstance(notifications[key], bool):
                        raise ValueError(f"Notification setting {key} must be true or false.")
                    setattr(settings, attr, notifications[key])
        except ValueError as exc:
            db.session.rollback()
            return _invalid(exc)
        db.session.commit()
        return jsonify(_settings_payload())

    @app.route("/settings/password", methods=["POST"])
    @user_id_required
    def change_password():
        data = _json_body()
        current = data.get("currentPassword") or ""
        new = data.get("newPassword") or ""
        confirm = data.get("confirmPassword") or ""
        if not current or not new or not confirm:
            return _error("Please fill in all password fields", 400)
        if new != confirm:
            return _error("New password and confirm password do not match", 400)
        if len(new) < MIN_NEW_PASSWORD:
            return _error(f"Password should be at least {MIN_NEW_PASSWORD} characters long", 400)
        if current != app.config["DEMO_PASSWORD"]:
            return _error("Your current password is incorrect", 400)
        return jsonify({"message": "Your password has been updated successfully"})

    @app.route("/settings/linked-accounts", methods=["POST"])
    @user_id_required
    def link_account():
        data = _json_body()
        try:
            name = _required_text(data, "name", "Account name is required.")
            last4 = str(data.get("last4") or "").strip()
            if not LAST4_PATTERN.match(last4):
                raise ValueError("last4 must be exactly four digits.")
        except ValueError as exc:
            return _invalid(exc)
        row = LinkedAccount(user_id=g.user_id, name=name, last4=last4, status="Linked")
        db.session.add(row)
        db.session.commit()
        return jsonify({"id": row.id, "name": row.name, "last4": row.last4, "status": row.status}), 201

    @app.route("/settings/linked-accounts/<int:account_id>", methods=["DELETE"])
    @user_id_required
    def unlink_account(account_id: int):
        row = LinkedAccount.query.filter_by(id=account_id, user_id=g.user_id).first()
        if row is None:
            return _error("Linked account not found", 404)
        db.session.delete(row)
        db.session.commit()
        return jsonify({"id": account_id})

    # Auth (simulated)

    @app.route("/auth/login", methods=["POST"])
    def login():
        data = _json_body()
        email = str(data.get("email") or "").strip()
        password = data.get("password") or ""
        if not email or not password:
            return _error("Please fill in all fields", 400)
        if email != app.config["DEMO_EMAIL"] or password != app.config["DEMO_PASSWORD"]:
            logger.warning("Failed login for %s", email)
            return _error("Invalid credentials", 401)
        return jsonify({"userId": app.config["DEMO_USER_ID"], "email": email})

    @app.route("/auth/signup", methods=["POST"])
    def signup():
        data = _json_body()
        full_name = str(data.get("fullName") or "").strip()
        email = str(data.get("email") or "").strip()
        password = data.get("password") or ""
        confirm = data.get("confirmPassword") or ""
        if not full_name or not email or not password or not confirm:
            return _error("Please fill in all fields", 400)
        if password != confirm:
            return _error("Passwords do not match", 400)
        if len(password) < MIN_SIGNUP_PASSWORD:
            return _error(f"Password should be at least {MIN_SIGNUP_PASSWORD} characters long", 400)
        if email == app.config["DEMO_EMAIL"]:
            return _error("Email already in use", 409)
        return jsonify({"userId": uuid.uuid4().hex, "email": email, "fullName": full_name}), 201

    # Dashboard

    @app.route("/dashboard", methods=["GET"])
    @user_id_required
    def dashboard():
        return jsonify(
            build_dashboard(
                expenses=fetch_expenses(g.user_id),
                budgets=fetch_budgets(g.user_id),
                holdings=fetch_holdings(g.user_id),
                history=fetch_history(g.user_id),
                goals=fetch_goals(g.user_id),
            )
        )

    return app
