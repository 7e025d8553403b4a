"""Configuration utilities for the Finance Tracker.

Settings come from the environment (optionally seeded from a ``.env`` file)
and an optional JSON file that can override the default category list and
the simulated price drift used by the refresh endpoint.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

PACKAGE_ROOT = Path(__file__).resolve().parent
PROJECT_ROOT = PACKAGE_ROOT.parent

# Seeded for a user on first category read.
DEFAULT_CATEGORIES: List[str] = [
    "Groceries",
    "Transport",
    "Utilities",
    "Entertainment",
    "Rent/Mortgage",
    "Shopping",
    "Healthcare",
    "Education",
    "Travel",
    "Dining Out",
    "Subscriptions",
    "Personal Care",
    "Other",
]

ALL_CATEGORIES_LABEL = "All Categories"

SUPPORTED_CURRENCIES: Dict[str, str] = {
    "USD": "US Dollar ($)",
    "EUR": "Euro (€)",
    "GBP": "British Pound (£)",
    "JPY": "Japanese Yen (¥)",
    "CAD": "Canadian Dollar (C$)",
}

DEFAULT_PRICE_CHANGE_PERCENT = 2.0


@dataclass
class AppConfig:
    database_url: str
    secret_key: str
    cors_origins: List[str]
    log_level: str = "INFO"
    port: int = 3001
    demo_email: str = "test@example.com"
    demo_password: str = "password"
    demo_user_id: str = "demo-user"
    categories: List[str] = field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    price_change_percent: float = DEFAULT_PRICE_CHANGE_PERCENT

    @staticmethod
    def load(config_path: Optional[str | Path] = None) -> "AppConfig":
        """Load config from the environment, then apply a JSON file if given.

        JSON format:
        {
          "categories": ["Groceries", "Rent/Mortgage"],
          "price_change_percent": 2.0
        }
        """

        load_dotenv(PROJECT_ROOT / ".env")

        origins = os.environ.get("CORS_ORIGINS", "*")
        cfg = AppConfig(
            database_url=os.environ.get(
                "DATABASE_URL", f"sqlite:///{PROJECT_ROOT / 'finance_tracker.db'}"
            ),
            secret_key=os.environ.get("SECRET_KEY", "finance-tracker-dev-key"),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()] or ["*"],
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            port=int(os.environ.get("PORT", "3001")),
            demo_email=os.environ.get("DEMO_EMAIL", "test@example.com"),
            demo_password=os.environ.get("DEMO_PASSWORD", "password"),
            demo_user_id=os.environ.get("DEMO_USER_ID", "demo-user"),
        )

        if config_path:
            p = Path(config_path)
            if p.exists():
                with p.open("r", encoding="utf-8") as f:
                    raw = json.load(f)
                if isinstance(raw, dict):
                    cfg._apply_overrides(raw)
        return cfg

    def _apply_overrides(self, raw: Dict[str, Any]) -> None:
        if isinstance(raw.get("categories"), list):
            names = [str(c).strip() for c in raw["categories"]]
            # Keep first occurrence order
            self.categories = list(dict.fromkeys(n for n in names if n))
        if "price_change_percent" in raw:
            pct = float(raw["price_change_percent"])
            if pct < 0:
                raise ValueError("price_change_percent cannot be negative")
            self.price_change_percent = pct

    def flask_settings(self) -> Dict[str, Any]:
        return {
            "SECRET_KEY": self.secret_key,
            "SQLALCHEMY_DATABASE_URI": self.database_url,
            "SQLALCHEMY_TRACK_MODIFICATIONS": False,
            "CORS_ORIGINS": self.cors_origins,
            "PORT": self.port,
            "DEMO_EMAIL": self.demo_email,
            "DEMO_PASSWORD": self.demo_password,
            "DEMO_USER_ID": self.demo_user_id,
            "DEFAULT_CATEGORIES": self.categories,
            "PRICE_CHANGE_PERCENT": self.price_change_percent,
        }
