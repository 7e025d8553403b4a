"""WSGI entry point for production deployment (gunicorn)."""

import os

from .webapp import create_app

app = create_app(os.environ.get("FINANCE_TRACKER_CONFIG"))
