"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from datetime import datetime
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import Settings  # noqa: E402
from learnloop.delivery.state_store import StateStore  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (companion + store)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.path):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.path):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.path):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def memory_store():
    """In-process state store."""
    store = StateStore(":memory:")
    yield store
    store.close()


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from the user's environment and home directory."""
    return Settings(_env_file=None, data_dir=tmp_path, use_ai=False)


@pytest.fixture
def fixed_now():
    """A fixed local timestamp."""
    return datetime(2024, 3, 14, 9, 30, 0)


@pytest.fixture
def sample_question():
    """Provide a sample question document for testing."""
    return {
        "id": "q-001",
        "question": "Which keyword defines a function in Python?",
        "options": ["func", "def", "lambda", "fn"],
        "correct": 1,
        "explanation": "'def' starts a function definition.",
        "topic": "python",
        "level": "beginner",
        "source": "openai",
    }
