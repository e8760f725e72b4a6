"""
Pytest fixtures for the shift settlement test suite.

Provides:
- Structured logging configuration and log capture
- In-memory SQLite database sessions (per-test rollback)
- Deterministic clock and settlement policy
"""

import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from shift_config.schema import SettlementPolicy
from shift_kernel.db.engine import (
    create_tables,
    drop_tables,
    init_engine_from_url,
    reset_engine,
)
from shift_kernel.domain.clock import DeterministicClock
from shift_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

SHIFT_OPENED_AT = datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture shift_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            calculate_shift_financials(...)
            logs = captured_logs()
            assert any(r["message"] == "shift_settlement_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("shift_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture(scope="session")
def db_engine():
    """In-memory SQLite engine with all tables created once per session."""
    engine = init_engine_from_url("sqlite://")
    create_tables()
    yield engine
    drop_tables()
    reset_engine()


@pytest.fixture
def session(db_engine) -> Generator[Session, None, None]:
    """Provide a database session whose changes are rolled back after the test."""
    conn = db_engine.connect()
    trans = conn.begin()
    sess = Session(bind=conn, expire_on_commit=False)
    yield sess
    try:
        sess.close()
    finally:
        try:
            trans.rollback()
        finally:
            conn.close()


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock():
    """Clock fixed at the default shift opening time."""
    return DeterministicClock(SHIFT_OPENED_AT)


@pytest.fixture
def settlement_policy():
    """Settlement policy with the standard 60/40 defaults."""
    return SettlementPolicy(
        policy_id="test",
        version=1,
        default_percent_master=Decimal("60"),
        default_percent_salon=Decimal("40"),
        default_payment_mode="percent_with_guarantee",
        max_corrected_hours=Decimal("48"),
    )
