# tests/conftest.py
import os
import tempfile
import uuid
from typing import NamedTuple

import pytest
import requests

# Must be set before anything under flagdeck is imported
_DB_DIR = tempfile.mkdtemp(prefix="flagdeck-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR}/flagdeck-test.db"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ADMIN_KEYS"] = "test-admin-key"
os.environ["ALLOW_MULTIPLE_TENANTS"] = "true"
os.environ["LOGGING_CONFIG"] = os.path.join(_DB_DIR, "no-logging.yaml")

ADMIN_TOKEN = "test-admin-key"

BASE_URL = os.getenv("BASE_URL") or os.getenv("APP_BASE_URL")


class BaseUrlSession(requests.Session):
    def __init__(self, base_url: str):
        super().__init__()
        self._base = base_url.rstrip("/")

    def request(self, method, url, *args, **kwargs):
        # Allow relative paths like "/api/v1/health"
        if not url.lower().startswith("http"):
            url = f"{self._base}/{url.lstrip('/')}"
        return super().request(method, url, *args, **kwargs)


class Workspace(NamedTuple):
    tenant_id: int
    project_id: int
    secret_key: str
    public_key: str
    public_key_id: int


@pytest.fixture(scope="session", autouse=True)
def _schema():
    from flagdeck.db import init_db
    init_db()


@pytest.fixture(scope="session")
def client():
    """In-process client; runs the app lifespan"""
    from fastapi.testclient import TestClient
    from flagdeck.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db():
    from flagdeck.db import SessionLocal

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def make_workspace(db) -> Workspace:
    """Fresh tenant with one project, one secret and one public key"""
    from flagdeck.schemas.tenant import SignUp
    from flagdeck.services.api_keys import ApiKeyService
    from flagdeck.services.tenants import TenantService

    result = TenantService.sign_up(db, SignUp(email=f"{uuid.uuid4().hex}@example.com", name="Test"))
    public_record, public_key = ApiKeyService.create_key(db, result.project_id, result.tenant_id, "public")
    return Workspace(result.tenant_id, result.project_id, result.full_key, public_key, public_record.id)


@pytest.fixture
def workspace(db) -> Workspace:
    return make_workspace(db)


@pytest.fixture
def other_workspace(db) -> Workspace:
    return make_workspace(db)


class Seeder:
    """Writes rows straight into a workspace's project"""

    def __init__(self, db, ws: Workspace):
        self.db = db
        self.ws = ws

    def _add(self, record):
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return record

    def config(self, name, value, value_type="string", is_public=False):
        from flagdeck.models import ConfigRecord
        return self._add(ConfigRecord(
            tenant_id=self.ws.tenant_id, project_id=self.ws.project_id,
            name=name, value=value, value_type=value_type, is_public=is_public,
        ))

    def flag(self, name, value, value_type="string", is_public=False,
             user_id="", user_role="", user_account_id=""):
        from flagdeck.models import FeatureFlag
        return self._add(FeatureFlag(
            tenant_id=self.ws.tenant_id, project_id=self.ws.project_id,
            name=name, value=value, value_type=value_type, is_public=is_public,
            user_id=user_id, user_role=user_role, user_account_id=user_account_id,
        ))

    def prompt(self, name, body):
        from flagdeck.models import Prompt
        return self._add(Prompt(
            tenant_id=self.ws.tenant_id, project_id=self.ws.project_id, name=name, body=body,
        ))


@pytest.fixture
def seed(db, workspace) -> Seeder:
    return Seeder(db, workspace)


@pytest.fixture
def secret_headers(workspace):
    return {"Authorization": workspace.secret_key}


@pytest.fixture
def public_headers(workspace):
    return {"Authorization": workspace.public_key}


@pytest.fixture
def admin_headers(workspace):
    return {"Authorization": f"Bearer {ADMIN_TOKEN}", "X-Tenant-ID": str(workspace.tenant_id)}


@pytest.fixture(scope="session")
def e2e_client():
    """Session against a running deployment; only when BASE_URL is set"""
    if not BASE_URL:
        pytest.skip("BASE_URL not set")
    return BaseUrlSession(BASE_URL)
