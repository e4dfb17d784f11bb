# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import pytest
from types import SimpleNamespace
from fastapi.testclient import TestClient
from unittest.mock import Mock
from typing import Generator

from main import create_app
from models.enums import Role
from models.identity import Identity, SessionState
from models.tenant import Tenant, TenantState


OWNER_ID = "U1"


@pytest.fixture(scope="function")
def app():
    """Create a test FastAPI application instance."""
    return create_app()


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Login rate limits are process-wide."""
    from core.rate_limiter import reset_rate_limits
    reset_rate_limits()
    yield
    reset_rate_limits()


# ------------------------------------------------------------------
# Agencies
# ------------------------------------------------------------------
def agency_row(**overrides) -> dict:
    """A Supabase `agencies` row as PostgREST returns it."""
    row = {
        "id": "a-1",
        "slug": "acme",
        "agency_name": "Acme Immobilier",
        "user_id": OWNER_ID,
        "is_active": True,
        "isImmo": True,
        "isLocative": True,
        "must_change_password": False,
        "contact_email": "contact@acme.test",
    }
    row.update(overrides)
    return row


@pytest.fixture
def tenant() -> Tenant:
    return Tenant.model_validate(agency_row())


@pytest.fixture
def resolved(tenant) -> TenantState:
    return TenantState.resolved(tenant)


# ------------------------------------------------------------------
# Identities / sessions
# ------------------------------------------------------------------
@pytest.fixture
def owner() -> Identity:
    return Identity(id=OWNER_ID, email="contact@acme.test", role=Role.agency_owner)


@pytest.fixture
def proprietor() -> Identity:
    return Identity(id="U2", email="proprio@acme.test", role=Role.proprietor)


@pytest.fixture
def client_identity() -> Identity:
    return Identity(id="U3", email="client@acme.test", role=Role.client)


@pytest.fixture
def admin_identity() -> Identity:
    return Identity(id="A1", email="admin@platform.test", role=Role.admin)


def present(identity: Identity) -> SessionState:
    return SessionState.present(identity)


def auth_user(user_id: str = "U2", email: str = "proprio@acme.test", **metadata):
    """Stand-in for a supabase-py auth User."""
    return SimpleNamespace(id=user_id, email=email, user_metadata=metadata)


def auth_session(user=None, access_token: str = "access-token"):
    """Stand-in for a supabase-py Session."""
    return SimpleNamespace(
        user=user or auth_user(role="proprietaire"),
        access_token=access_token,
        refresh_token="refresh-token",
        expires_in=3600,
    )


# ------------------------------------------------------------------
# Supabase
# ------------------------------------------------------------------
def supabase_with_agency(row=None, error: Exception = None) -> Mock:
    """
    Mock client whose agencies lookup
    (table().select().eq().maybe_single().execute()) returns `row`.
    """
    mock_client = Mock()
    execute = (
        mock_client.table.return_value
        .select.return_value
        .eq.return_value
        .maybe_single.return_value
        .execute
    )
    if error is not None:
        execute.side_effect = error
    elif row is None:
        execute.return_value = None
    else:
        execute.return_value = Mock(data=row)
    return mock_client


@pytest.fixture
def mock_supabase_client():
    """Create a mock Supabase client."""
    mock_client = Mock()
    mock_table = Mock()
    mock_client.table.return_value = mock_table
    return mock_client


class FakeAuth:
    """Minimal stand-in for supabase-py's `client.auth`."""

    def __init__(self, session=None, error: Exception = None):
        self.session = session
        self.error = error
        self.callback = None
        self.subscription = Mock()
        self.sign_out = Mock()
        self.before_read = None

    def on_auth_state_change(self, callback):
        self.callback = callback
        return self.subscription

    def get_session(self):
        if self.before_read is not None:
            self.before_read()
        if self.error is not None:
            raise self.error
        return self.session

    def emit(self, event, session=None):
        self.callback(event, session)
