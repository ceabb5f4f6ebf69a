"""
Test Configuration

Environment variables are set before any application module is imported,
since settings and the loguru sinks are built at import time.

Architecture:
- Unit tests (test/**/unit/): in-memory fakes, no PostgreSQL or Kvrocks
"""

import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    """Set test environment variables before any module imports."""
    os.environ.setdefault('POSTGRES_DB', 'cinema_booking_test_db')
    os.environ.setdefault('KVROCKS_KEY_PREFIX', 'test_')

    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)


# Call immediately to set env vars before any imports
_early_setup_test_environment()
