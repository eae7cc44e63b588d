"""Root-level pytest fixtures for all tests.

Provides shared fixtures including:
- In-memory SQLite session factories
- An in-memory keyring backend (the system keychain is never touched)
- A script registry populated with fake site scripts
"""

import os

# Point the module-level engine at an in-memory database before any
# invoicehub module is imported.
os.environ.setdefault("INVOICEHUB_DATABASE_URL", "sqlite:///:memory:")

from collections.abc import Generator

import keyring
import pytest
from sqlalchemy.orm import Session, sessionmaker

from invoicehub.db.connection import build_engine
from invoicehub.db.models import Base
from invoicehub.scripts.registry import ScriptRegistry
from invoicehub.services.keyring_store import KeyringVault
from tests.helpers import site_scripts
from tests.helpers.memory_keyring import MemoryKeyring


# ============================================================================
# Pytest Markers
# ============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests that take a long time to run"
    )


# ============================================================================
# Keyring Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def memory_keyring() -> Generator[MemoryKeyring, None, None]:
    """Install an in-memory keyring backend for every test."""
    previous = keyring.get_keyring()
    backend = MemoryKeyring()
    keyring.set_keyring(backend)
    try:
        yield backend
    finally:
        keyring.set_keyring(previous)


@pytest.fixture
def vault() -> KeyringVault:
    return KeyringVault("com.invoicehub.test")


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
def session_factory() -> Generator[sessionmaker, None, None]:
    """Session factory over a fresh in-memory database."""
    engine = build_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    try:
        yield factory
    finally:
        engine.dispose()


@pytest.fixture
def db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """A session on the in-memory database."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


# ============================================================================
# Site Script Fixtures
# ============================================================================


@pytest.fixture
def registry() -> ScriptRegistry:
    """Registry with one fake script per fetch path."""
    site_scripts.TwoFactorScript.received_codes = []
    reg = ScriptRegistry()
    reg.register("static", site_scripts.StaticScript)
    reg.register("two-factor", site_scripts.TwoFactorScript)
    reg.register("security-question", site_scripts.SecurityQuestionScript)
    reg.register("authenticated", site_scripts.AuthenticatedScript)
    reg.register("bad-password", site_scripts.BadPasswordScript)
    reg.register("broken-listing", site_scripts.BrokenListingScript)
    reg.register("crashing-login", site_scripts.CrashingLoginScript)
    reg.register("crashing-after-login", site_scripts.CrashingAfterLoginScript)
    reg.register("credential-echo", site_scripts.CredentialEchoScript)
    reg.register("no-result", site_scripts.NoResultScript)
    reg.register("bad-date", site_scripts.BadDateScript)
    return reg
