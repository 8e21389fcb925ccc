"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

from auction_tracker.main import app
from auction_tracker.models import Label, Scenario
from auction_tracker.seed import demo_entries
from auction_tracker import store


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def portfolio():
    """The four-property demo portfolio (projected entries only)."""
    return demo_entries()


@pytest.fixture
def cash_property(portfolio):
    """Cash purchase: sale 190000, down payment 92700, renovation 10000."""
    return [e for e in portfolio if e.property_name == "guapo-casa1"]


@pytest.fixture
def financed_property(portfolio):
    """Financed purchase: sale 270000, acquisition value 200000."""
    entries = [e for e in portfolio if e.property_name == "nova-olinda-casa1"]
    return store.set_value(
        entries,
        "nova-olinda-casa1",
        Scenario.projected,
        None,
        Label.acquisition_value,
        200000,
    )
