"""Pytest configuration for backend tests.

Routes are exercised through TestClient with the config and store
dependencies overridden, so no hosted backend is contacted.
"""

import sys
from pathlib import Path
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

# Add project root to path
project_root = Path(__file__).parent.parent.parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from kgic.core.config import Config, SupabaseConfig
from kgic.domain.content import ContentStore
from kgic.domain.storage import BlobStore
from web.backend import deps
from web.backend.main import app


def make_config(service_role: str = "service") -> Config:
    config = Config()
    config.supabase = SupabaseConfig(
        url="https://proj.supabase.co", anon_key="anon", service_role=service_role
    )
    return config


@pytest.fixture
def config() -> Config:
    return make_config()


@pytest.fixture
def content_store() -> Mock:
    return Mock(spec=ContentStore)


@pytest.fixture
def blob_store() -> Mock:
    return Mock(spec=BlobStore)


@pytest.fixture
def client(config, content_store, blob_store):
    """TestClient with a configured backend backed by mocks."""
    app.dependency_overrides[deps.get_config] = lambda: config
    app.dependency_overrides[deps.get_content_store] = lambda: content_store
    app.dependency_overrides[deps.get_service_store] = lambda: content_store
    app.dependency_overrides[deps.get_blob_store] = lambda: blob_store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def unconfigured_client():
    """TestClient with no backend configured at all."""
    app.dependency_overrides[deps.get_config] = lambda: Config()
    yield TestClient(app)
    app.dependency_overrides.clear()
