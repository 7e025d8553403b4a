"""Personal Finance Tracker package."""

__all__ = [
    "config",
    "models",
    "db",
    "analytics",
    "portfolio",
    "reports",
    "webapp",
    "cli",
]

__version__ = "0.1.0"
