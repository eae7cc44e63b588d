"""Pytest fixtures for API tests.

Provides a TestClient whose app uses an in-memory database, the in-memory
keyring and the fake site script registry.
"""

from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from invoicehub.api.main import create_app
from invoicehub.cli.config import InvoiceHubConfig
from invoicehub.db.connection import get_db
from invoicehub.orchestrator.runtime import FetchRuntime, build_runtime


@pytest.fixture
def runtime(session_factory, registry, vault, tmp_path) -> FetchRuntime:
    return build_runtime(
        session_factory,
        registry=registry,
        vault=vault,
        output_dir=tmp_path / "exports",
        log_dir=tmp_path / "logs",
    )


@pytest.fixture
def client(
    session_factory: sessionmaker, runtime: FetchRuntime
) -> Generator[TestClient, None, None]:
    """Create a TestClient with overridden database dependency.

    Args:
        session_factory: In-memory session factory fixture.
        runtime: Fetch runtime wired to the same database.

    Yields:
        TestClient configured for testing.
    """
    app = create_app(runtime=runtime, config=InvoiceHubConfig())

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def create_account(client: TestClient) -> Callable[..., dict]:
    """Create an account through the API and return the response body."""

    def _create(name: str, provider: str, **credentials: str) -> dict:
        resp = client.post(
            "/api/v1/accounts",
            json={
                "name": name,
                "provider": provider,
                "credentials": credentials or {"username": "user", "password": "secret"},
            },
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create
