"""
conftest.py - Shared pytest fixtures for replay tests

Provides:
- Engines (empty, with one funded client, with a disputed deposit)
- CSV sample streams
"""

import io

import pytest

from ledger_replay import LedgerStore, TransactionEngine

from tests.helpers import seed_account, deposit, dispute


# =============================================================================
# ENGINE FIXTURES
# =============================================================================

@pytest.fixture
def store():
    """Fresh, empty store."""
    return LedgerStore()


@pytest.fixture
def engine(store):
    """Engine over the empty ``store`` fixture."""
    return TransactionEngine(store)


@pytest.fixture
def funded_engine(engine):
    """Engine with client 2 holding 100 available (seeded, no ledger entries)."""
    seed_account(engine.store, 2, available="100")
    return engine


@pytest.fixture
def disputed_engine(engine):
    """Client 1 deposited 20 (tx 1) and disputed it."""
    engine.apply(deposit(1, 1, "20"))
    engine.apply(dispute(1, 1))
    return engine


# =============================================================================
# CSV FIXTURES
# =============================================================================

SAMPLE_CSV = """type, client, tx, amount
deposit, 1, 1, 1.0
deposit, 2, 2, 2.0
deposit, 1, 3, 2.0
withdrawal, 1, 4, 1.5
withdrawal, 2, 5, 3.0
"""

SAMPLE_REPORT = """client,available,held,total,locked
1,1.5000,0.0000,1.5000,false
2,2.0000,0.0000,2.0000,false
"""


@pytest.fixture
def sample_stream():
    """The five-row sample from the input format description."""
    return io.StringIO(SAMPLE_CSV)


@pytest.fixture
def sample_file(tmp_path):
    """The sample written to disk."""
    path = tmp_path / "transactions.csv"
    path.write_text(SAMPLE_CSV)
    return path
