"""Shared test setup: settings overrides must be in place before the app is imported."""
import os

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("APP_ENV", "test")
