"""
Pytest configuration for the pack slip pipeline tests.

Puts the project root on sys.path (the config package lives there) and
resets the configuration singleton around every test.
"""

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import ENV_OVERRIDES, ConfigurationManager


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    """Load settings.yaml without environment overrides for each test"""
    for name in ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)
    ConfigurationManager.reset()
    yield
    ConfigurationManager.reset()
