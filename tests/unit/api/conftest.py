import pytest
from fastapi.testclient import TestClient

from projectdesk.api.dependencies import get_db
from projectdesk.api.main import app


@pytest.fixture
def client(session_factory) -> TestClient:
    """Test client whose requests run against the in-memory test database."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    original_overrides = app.dependency_overrides.copy()
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides = original_overrides
