# tests/conftest.py
"""Test environment: in-memory allow-list DB, no API key, no real upstream credentials."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("API_KEY", "")
os.environ.setdefault("AUTHORIZED_USERS", "")
os.environ.setdefault("PCO_API_BASE", "https://pco.test/check-ins/v2")
