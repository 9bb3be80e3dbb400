import sys
from pathlib import Path

import pytest

# Allow running the tests without installing the package
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from smsfilters.filters import reset_default_filters


CONFIG_DIR = Path(__file__).parent.parent / "config"


@pytest.fixture(autouse=True)
def default_filters():
    """Restore the built-in tables after every test."""
    yield
    reset_default_filters()


@pytest.fixture
def sample_config_path():
    return CONFIG_DIR / "message_filters.yaml"


@pytest.fixture(autouse=True)
def no_config_env(monkeypatch):
    monkeypatch.delenv("SMSFILTERS_CONFIG", raising=False)
