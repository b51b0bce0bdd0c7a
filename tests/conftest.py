"""Root pytest configuration.

Test Structure:
    tests/
    ├── unit/           # Fast, isolated tests (mocks, no database)
    ├── integration/    # SQLite-backed repository and HTTP API tests
    └── shared/         # Shared fixtures and utilities

Settings for tests come from config/.env.test; explicit ``Settings(...)``
arguments in fixtures always win over it.
"""

from pathlib import Path

import pytest
from dotenv import load_dotenv

from lemon_config import clear_settings_cache

PROJECT_ROOT = Path(__file__).resolve().parents[1]

CONFIG_DIR = PROJECT_ROOT / "config"
if (CONFIG_DIR / ".env.test").exists():
    load_dotenv(CONFIG_DIR / ".env.test")


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: Tests that verify database/persistence or HTTP behavior",
    )
    config.addinivalue_line(
        "markers",
        "slow: Tests that take more than 1 second",
    )


@pytest.fixture(scope="session", autouse=True)
def configure_app_settings():
    """Start and end the session with an empty settings cache."""
    clear_settings_cache()
    yield
    clear_settings_cache()
