"""Shared fixtures for stackconf tests."""

import pytest

from stackconf.crypto import SymmetricCrypter
from stackconf.store import ConfigStore


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep tests away from the real environment and user config."""
    for var in ("STACKCONF_PROJECT_FILE", "STACKCONF_PASSPHRASE", "STACKCONF_STACK", "STACKCONF_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def store():
    return ConfigStore(name="proj")


@pytest.fixture
def crypter():
    return SymmetricCrypter(b"k" * 32)


@pytest.fixture
def saves():
    """A save collaborator that records each saved store."""
    return []


