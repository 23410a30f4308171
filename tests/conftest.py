import os

import pytest

from officeql.schema import get_default_registry
from officeql.settings import _Settings


@pytest.fixture
def settings(monkeypatch):
    """Settings with code defaults, isolated from OFFICEQL_* variables and .env files."""
    for name in list(os.environ):
        if name.upper().startswith("OFFICEQL_"):
            monkeypatch.delenv(name, raising=False)
    return _Settings(_env_file=None)


@pytest.fixture
def registry():
    return get_default_registry()
