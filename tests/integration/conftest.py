"""Pytest configuration and fixtures for integration tests.

Ensures environment variables are loaded and validates required Flowise
settings before running integration tests.
"""

import os
import pytest
from dotenv import load_dotenv
from pathlib import Path


REQUIRED_VARS = ("FLOWISE_API_URL", "FLOWISE_API_KEY", "FLOWISE_RECIPE_FLOW_ID")


def pytest_configure(config):
    """Configure pytest and load .env before test collection."""
    # Load environment variables from .env (in project root)
    env_path = Path(__file__).parent.parent.parent / ".env"
    load_dotenv(env_path)

    print("\n" + "=" * 70)
    print("Note: These tests call a live Flowise server")
    print(f"Environment loaded from: {env_path}")
    print("=" * 70 + "\n")


@pytest.fixture(scope="session", autouse=True)
def check_flowise_settings():
    """Skip integration tests if Flowise is not configured in .env"""
    missing = [name for name in REQUIRED_VARS if not os.getenv(name)]

    if missing:
        pytest.skip(
            f"Integration tests skipped. Missing settings: {', '.join(missing)}. Please set these in your .env file.",
            allow_module_level=True,
        )
