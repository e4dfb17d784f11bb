# tests/test_provisioning.py

"""
Tests for agency provisioning (owner account + agency row) and the
admin endpoints around it.
"""

import pytest
import requests
from types import SimpleNamespace
from unittest.mock import patch, Mock

from conftest import agency_row
from core.errors import ProvisioningError
from core.notifications import send_email
from dependencies.auth import get_current_identity
from models.provisioning import AgencyCreate
from services.agency_provisioning import provision_agency


def agency_payload(**overrides) -> dict:
    payload = {
        "agency_name": "Acme Immobilier",
        "contact_email": "Contact@Acme-Immo.com",
        "contact_phone": "+221 77 000 00 00",
        "license_number": "LIC-001",
        "slug": "acme",
        "address": "12 rue des Palmiers",
        "city": "Dakar",
        "postal_code": "10000",
    }
    payload.update(overrides)
    return payload


def provisioning_client(existing_users=None, taken_columns=(), insert_error=None) -> Mock:
    """Mock service-role client for the provisioning steps."""
    mock_client = Mock()
    mock_client.auth.admin.list_users.return_value = existing_users or []
    mock_client.auth.admin.create_user.return_value = Mock(user=SimpleNamespace(id="U1"))

    table = mock_client.table.return_value

    def lookup(column, value):
        query = Mock()
        query.limit.return_value.execute.return_value = Mock(
            data=[{"id": "a-0"}] if column in taken_columns else []
        )
        return query

    table.select.return_value.eq.side_effect = lookup

    if insert_error is not None:
        table.insert.return_value.execute.side_effect = insert_error
    else:
        table.insert.return_value.execute.return_value = Mock(
            data=[agency_row(contact_email="contact@acme-immo.com", license_number="LIC-001")]
        )
    return mock_client


# ============================================================
# Payload validation
# ============================================================
def test_payload_normalizes_slug_and_email():
    payload = AgencyCreate(**agency_payload(slug=" Acme-Immo "))
    assert payload.slug == "acme-immo"
    assert payload.contact_email == "contact@acme-immo.com"


@pytest.mark.parametrize("slug", ["admin", "404", "health", "acme immo", "acme--immo", "-acme", "acmé"])
def test_payload_rejects_bad_slugs(slug):
    with pytest.raises(ValueError):
        AgencyCreate(**agency_payload(slug=slug))


# ============================================================
# provision_agency
# ============================================================
@patch("services.agency_provisioning.send_email")
def test_provision_success(mock_send_email):
    mock_client = provisioning_client()

    agency = provision_agency(AgencyCreate(**agency_payload()), client=mock_client)

    assert agency["slug"] == "acme"
    created = mock_client.auth.admin.create_user.call_args[0][0]
    assert created["email"] == "contact@acme-immo.com"
    assert created["email_confirm"] is True
    assert created["user_metadata"] == {"role": "AGENCY"}

    inserted = mock_client.table.return_value.insert.call_args[0][0]
    assert inserted["user_id"] == "U1"
    assert inserted["slug"] == "acme"
    assert inserted["is_active"] is True
    assert inserted["must_change_password"] is True
    assert "admin_name" not in inserted

    mock_send_email.assert_called_once()
    assert mock_send_email.call_args.kwargs["to"] == "contact@acme-immo.com"


def test_provision_duplicate_email():
    users = [SimpleNamespace(email="CONTACT@acme-immo.com")]
    mock_client = provisioning_client(existing_users=users)

    with pytest.raises(ProvisioningError) as exc:
        provision_agency(AgencyCreate(**agency_payload()), client=mock_client)

    assert exc.value.message == "Email already exists"
    assert exc.value.status_code == 400
    mock_client.auth.admin.create_user.assert_not_called()


def test_provision_duplicate_license():
    mock_client = provisioning_client(taken_columns=("license_number",))

    with pytest.raises(ProvisioningError, match="License number already exists"):
        provision_agency(AgencyCreate(**agency_payload()), client=mock_client)


def test_provision_duplicate_slug():
    mock_client = provisioning_client(taken_columns=("slug",))

    with pytest.raises(ProvisioningError, match="Slug already exists"):
        provision_agency(AgencyCreate(**agency_payload()), client=mock_client)
    mock_client.auth.admin.create_user.assert_not_called()


@patch("services.agency_provisioning.send_email")
def test_provision_insert_failure_deletes_owner(mock_send_email):
    mock_client = provisioning_client(insert_error=Exception("insert violates check constraint"))

    with pytest.raises(ProvisioningError):
        provision_agency(AgencyCreate(**agency_payload()), client=mock_client)

    mock_client.auth.admin.delete_user.assert_called_once_with("U1")
    mock_send_email.assert_not_called()


def test_provision_without_client():
    with patch("services.agency_provisioning.get_supabase_client", return_value=None):
        with pytest.raises(ProvisioningError) as exc:
            provision_agency(AgencyCreate(**agency_payload()))
    assert exc.value.status_code == 500


# ============================================================
# Admin endpoints
# ============================================================
@pytest.fixture
def as_admin(app, admin_identity):
    app.dependency_overrides[get_current_identity] = lambda: admin_identity
    yield admin_identity
    app.dependency_overrides.clear()


def test_create_agency_requires_admin(client, app, owner):
    app.dependency_overrides[get_current_identity] = lambda: owner
    try:
        response = client.post("/admin/agencies", json=agency_payload())
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 403


@patch("services.agency_provisioning.send_email")
def test_create_agency_endpoint(mock_send_email, client, as_admin):
    with patch("routers.admin_agencies.get_supabase_client", return_value=provisioning_client()):
        response = client.post("/admin/agencies", json=agency_payload())

    assert response.status_code == 201
    assert response.json()["slug"] == "acme"


def test_create_agency_endpoint_duplicate(client, as_admin):
    mock_client = provisioning_client(taken_columns=("slug",))
    with patch("routers.admin_agencies.get_supabase_client", return_value=mock_client):
        response = client.post("/admin/agencies", json=agency_payload())

    assert response.status_code == 400
    assert response.json()["detail"] == "Slug already exists"


def test_update_flags_uses_column_names(client, as_admin):
    mock_client = Mock()
    mock_client.table.return_value.update.return_value.eq.return_value.execute.return_value = Mock(
        data=[agency_row(isImmo=False)]
    )
    with patch("routers.admin_agencies.get_supabase_client", return_value=mock_client):
        response = client.patch("/admin/agencies/a-1", json={"has_immo_module": False})

    assert response.status_code == 200
    mock_client.table.return_value.update.assert_called_once_with({"isImmo": False})


def test_update_flags_empty_body(client, as_admin):
    response = client.patch("/admin/agencies/a-1", json={})
    assert response.status_code == 400


def test_update_flags_unknown_agency(client, as_admin):
    mock_client = Mock()
    mock_client.table.return_value.update.return_value.eq.return_value.execute.return_value = Mock(data=[])
    with patch("routers.admin_agencies.get_supabase_client", return_value=mock_client):
        response = client.patch("/admin/agencies/missing", json={"is_active": False})

    assert response.status_code == 404


# ============================================================
# Mailer client
# ============================================================
def test_send_email_skipped_without_mailer_url():
    with patch("core.notifications.settings") as mock_settings, \
         patch("core.notifications.requests.post") as mock_post:
        mock_settings.MAILER_URL = None
        assert send_email("a@b.com", "Hi", "<p>Hi</p>") is False
    mock_post.assert_not_called()


def test_send_email_posts_to_mailer():
    with patch("core.notifications.settings") as mock_settings, \
         patch("core.notifications.requests.post") as mock_post:
        mock_settings.MAILER_URL = "https://mailer.local/"
        mock_settings.MAILER_FROM = "noreply@portal.com"
        mock_settings.MAILER_TIMEOUT_SECONDS = 5
        mock_post.return_value = Mock(status_code=200)

        assert send_email("a@b.com", "Hi", "<p>Hi</p>") is True

    mock_post.assert_called_once_with(
        "https://mailer.local/api/send-email",
        json={"to": "a@b.com", "subject": "Hi", "html": "<p>Hi</p>", "from": "noreply@portal.com"},
        timeout=5,
    )


def test_send_email_failure_is_reported_not_raised():
    with patch("core.notifications.settings") as mock_settings, \
         patch("core.notifications.requests.post") as mock_post:
        mock_settings.MAILER_URL = "https://mailer.local"
        mock_post.side_effect = requests.ConnectionError("refused")

        assert send_email("a@b.com", "Hi", "<p>Hi</p>") is False
