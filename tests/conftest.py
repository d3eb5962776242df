"""Shared fixtures for the ledger tests."""

import pytest

from ledger.config import get_settings
from ledger.models import AppState, Contribution, Expenditure, Member


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Point storage at a temp dir and reload settings for every test."""
    monkeypatch.setenv("LEDGER_STORAGE_DATA_DIR", str(tmp_path / "data"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sample_state() -> AppState:
    """Two members and three expenditures across two years."""
    return AppState(
        main_title="SPSIB ASSOCIATION",
        sub_title="OFFICIAL DIGITAL AUDIT STATEMENT",
        logo="",
        members=[
            Member(name="A. KUMAR", contributions={
                "Jan": Contribution(amount=600),
                "Feb": Contribution(amount=600),
            }),
            Member(name="B. RAO", contributions={
                "Jan": Contribution(amount=800),
                "Mar": Contribution(amount=500),
            }),
        ],
        expenditures=[
            Expenditure(id="e3", date="2024-03-10", description="TURF RENT", amount=1000),
            Expenditure(id="e2", date="2023-03-02", description="BALLS", amount=250),
            Expenditure(id="e1", date="2024-01-15", description="WATER", amount=200),
        ],
    )
