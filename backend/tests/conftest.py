"""
Pytest configuration and shared fixtures for the purchase records test suite.
"""
import os
import shutil
import tempfile
from pathlib import Path
from typing import Generator

# Never touch a real store from tests; must be set before purchase_records is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("STORAGE_ACCESS_KEY_ID", None)
os.environ.pop("STORAGE_SECRET_ACCESS_KEY", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from purchase_records.database import Base, get_db
from purchase_records.main import app
from purchase_records.services.storage_service import StorageService, get_storage_service
import purchase_records.models  # noqa: F401


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for uploaded files."""
    tmp_path = tempfile.mkdtemp(prefix="purchase_records_test_")
    yield Path(tmp_path)
    shutil.rmtree(tmp_path, ignore_errors=True)


@pytest.fixture
def test_engine():
    """In-memory SQLite shared across threads for one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def storage(temp_dir: Path) -> StorageService:
    """Local storage service writing into the temp directory."""
    service = StorageService(upload_dir=str(temp_dir / "uploads"))
    service.ensure_storage()
    return service


@pytest.fixture
def client(session_factory, storage) -> Generator[TestClient, None, None]:
    """API client wired to the test store and test upload directory."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage_service] = lambda: storage
    # Lifespan is not entered: no real store connection is attempted
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture
def purchase_form() -> dict:
    """A valid submission with one qualifying product line."""
    return {
        "buyerName": "Asha Rao",
        "email": "asha@example.com",
        "purchaseDate": "2024-05-14",
        "platform": "Amazon",
        "gst": "Yes",
        "invoiceNumber": "INV-7781",
        "notes": "Office supplies",
        "productName1": "Widget",
        "unitPrice1": "10",
        "quantity1": "2",
    }


@pytest.fixture
def png_bytes() -> bytes:
    """Smallest useful PNG-looking payload; content is never decoded."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


# Configure pytest markers
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "api: API tests")
