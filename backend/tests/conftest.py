import sys
import uuid
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
from fastapi.testclient import TestClient

from app.dependencies import get_pricing_config
from app.infra.budget_store import InMemoryBudgetStore
from app.infra.metrics import configure_metrics
from app.infra.project_store import InMemoryProjectStore
from app.main import app
from app.settings import settings

DEFAULT_ORG_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
OTHER_ORG_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")


@pytest.fixture(autouse=True)
def restore_settings():
    original_testing = settings.testing
    original_app_env = settings.app_env
    original_metrics = settings.metrics_enabled
    original_metrics_token = settings.metrics_token
    original_pricing_path = settings.pricing_config_path
    original_default_org = settings.default_org_id
    yield
    settings.testing = original_testing
    settings.app_env = original_app_env
    settings.metrics_enabled = original_metrics
    settings.metrics_token = original_metrics_token
    settings.pricing_config_path = original_pricing_path
    settings.default_org_id = original_default_org
    get_pricing_config.cache_clear()


@pytest.fixture(autouse=True)
def enable_test_mode():
    settings.testing = True
    settings.app_env = "dev"
    settings.default_org_id = DEFAULT_ORG_ID
    yield


@pytest.fixture(autouse=True)
def restore_app_state():
    """Restore app.state after each test to prevent state pollution."""
    original_metrics = getattr(app.state, "metrics", None)
    yield
    if original_metrics is not None:
        app.state.metrics = original_metrics
    configure_metrics(False)


def _fresh_stores() -> None:
    app.state.budget_store = InMemoryBudgetStore()
    app.state.project_store = InMemoryProjectStore()


@pytest.fixture()
def client():
    _fresh_stores()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def client_no_raise():
    """Test client that returns HTTP responses instead of raising server exceptions."""
    _fresh_stores()
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def org_headers():
    return {"X-Org-Id": str(DEFAULT_ORG_ID)}


@pytest.fixture()
def other_org_headers():
    return {"X-Org-Id": str(OTHER_ORG_ID)}
