"""Command-line interface for the Finance Tracker.

Usage:
  finance-tracker serve --port 3001
  finance-tracker init-db
  finance-tracker refresh --user-id demo-user
  finance-tracker report --user-id demo-user --json out/summary.json

Every command accepts ``--config`` pointing at a JSON file with category and
price-drift overrides.
"""

from __future__ import annotations

import argparse
from typing import List, Optional

from .db import fetch_budgets, fetch_expenses, fetch_goals, init_db
from .portfolio import fetch_history, fetch_holdings, refresh_prices
from .reports import build_dashboard, format_text_report, save_json
from .webapp import create_app


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Personal Finance Tracker")
    p.add_argument("--config", "-c", help="Path to JSON config with category/price overrides")
    sub = p.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the REST API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, help="Port to listen on (default: PORT or 3001)")
    serve.add_argument("--debug", action="store_true")

    sub.add_parser("init-db", help="Create database tables")

    refresh = sub.add_parser("refresh", help="Refresh holding prices and record today's value")
    refresh.add_argument("--user-id", required=True)

    report = sub.add_parser("report", help="Print a text summary for a user")
    report.add_argument("--user-id", required=True)
    report.add_argument("--json", dest="json_out", help="Write summary JSON to path")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    app = create_app(args.config)

    if args.command == "serve":
        port = args.port or app.config["PORT"]
        app.run(host=args.host, port=port, debug=args.debug)
        return 0

    with app.app_context():
        if args.command == "init-db":
            init_db()
            print("Database initialized.")
        elif args.command == "refresh":
            holdings, snapshot = refresh_prices(
                args.user_id, change_percent=app.config["PRICE_CHANGE_PERCENT"]
            )
            for h in holdings:
                print(f"{h.ticker:8} ${h.current_price:.2f}")
            print(f"\nPortfolio value on {snapshot.date.isoformat()}: ${snapshot.value:.2f}")
        elif args.command == "report":
            summary = build_dashboard(
                expenses=fetch_expenses(args.user_id),
                budgets=fetch_budgets(args.user_id),
                holdings=fetch_holdings(args.user_id),
                history=fetch_history(args.user_id),
                goals=fetch_goals(args.user_id),
            )
            print(format_text_report(summary))
            if args.json_out:
                save_json(summary, args.json_out)
                print(f"\nSaved JSON summary to: {args.json_out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
