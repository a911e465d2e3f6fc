from pathlib import Path

import pytest

from schemaguard.config import get_settings
from schemaguard.validator import Validator

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    # Keep the developer's environment out of default-directory lookups
    monkeypatch.delenv("SCHEMAGUARD_SCHEMA_DIR", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def validator() -> Validator:
    v = Validator(FIXTURES)
    v.init_sync()
    return v


@pytest.fixture()
def stripping_validator() -> Validator:
    v = Validator(FIXTURES, options={"strip_additional_properties": True})
    v.init_sync()
    return v
