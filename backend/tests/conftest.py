"""Root conftest — shared test configuration."""

import os

# Settings are cached on first use, so the environment must be set before import
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("MAIL_DELIVERY_METHOD", "memory")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest  # noqa: E402

from epetitions.infrastructure import mailer  # noqa: E402
from epetitions.services import site_service  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_site_and_mail():
    """Site cache and memory deliveries never leak between tests."""
    site_service.reset()
    mailer.deliveries.clear()
    yield
    site_service.reset()
    mailer.deliveries.clear()
