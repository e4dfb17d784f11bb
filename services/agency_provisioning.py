# services/agency_provisioning.py

"""
Creates an agency together with its owner account.

The auth user is created first, then the `agencies` row. Supabase offers
no transaction across the two, so a failed insert is compensated by
deleting the user that was just created.
"""

from html import escape
from typing import Optional

from supabase import Client

from core.config import settings
from core.errors import ProvisioningError, extract_supabase_error
from core.logging_config import logger
from core.notifications import send_email
from core.route_classifier import tenant_auth_page
from core.supabase_client import get_supabase_client
from core.tenant_resolver import AGENCIES_TABLE
from models.provisioning import AgencyCreate


OWNER_ROLE_METADATA = "AGENCY"


# -----------------------------------------------------
# Normalize Supabase list_users() result
# -----------------------------------------------------
def extract_user_list(result):
    if isinstance(result, list):
        return result
    if isinstance(result, dict) and "users" in result:
        return result["users"]
    users_attr = getattr(result, "users", None)
    if users_attr is not None:
        return users_attr
    return []


def _email_taken(client: Client, email: str) -> bool:
    try:
        users = extract_user_list(client.auth.admin.list_users())
    except Exception as e:
        raise ProvisioningError(f"Failed to list users: {extract_supabase_error(e)}", 500)

    for user in users:
        existing = user.get("email") if isinstance(user, dict) else getattr(user, "email", None)
        if existing and existing.lower() == email.lower():
            return True
    return False


def _agency_exists(client: Client, column: str, value: str) -> bool:
    try:
        result = (
            client.table(AGENCIES_TABLE)
            .select("id")
            .eq(column, value)
            .limit(1)
            .execute()
        )
    except Exception as e:
        raise ProvisioningError(f"Failed to check {column}: {extract_supabase_error(e)}", 500)
    return bool(result.data)


def _agency_row(payload: AgencyCreate, user_id: str) -> dict:
    row = payload.model_dump(exclude_none=True)
    row.update({
        "user_id": user_id,
        "is_active": True,
        "must_change_password": True,
    })
    return row


def _send_welcome_email(agency: dict):
    slug = agency.get("slug", "")
    name = escape(agency.get("agency_name") or slug)
    html = f"""
<h1>Bienvenue sur votre espace agence</h1>
<p>Le compte de l'agence <strong>{name}</strong> a été créé.</p>
<p>Connectez-vous sur <code>{escape(tenant_auth_page(slug))}</code> avec l'adresse
{escape(agency.get("contact_email") or "")} et le mot de passe qui vous a été communiqué.
Vous devrez le changer lors de votre première connexion.</p>
"""
    send_email(
        to=agency.get("contact_email"),
        subject=f"Votre agence {agency.get('agency_name') or slug} est prête",
        html=html,
    )


def provision_agency(payload: AgencyCreate, client: Optional[Client] = None) -> dict:
    """
    Create the owner auth user and the agency row.

    Raises ProvisioningError (400 for rejected input, 500 for backend
    failures). Returns the inserted agency row.
    """
    client = client or get_supabase_client()
    if client is None:
        raise ProvisioningError("Supabase client not configured", 500)

    email = payload.contact_email
    logger.info(f"Provisioning agency slug={payload.slug} email={email}")

    if _email_taken(client, email):
        raise ProvisioningError("Email already exists")
    if _agency_exists(client, "license_number", payload.license_number):
        raise ProvisioningError("License number already exists")
    if _agency_exists(client, "slug", payload.slug):
        raise ProvisioningError("Slug already exists")

    # -------------------------------------------------
    # 1. Owner account
    # -------------------------------------------------
    try:
        user_resp = client.auth.admin.create_user({
            "email": email,
            "password": settings.AGENCY_DEFAULT_PASSWORD,
            "email_confirm": True,
            "user_metadata": {"role": OWNER_ROLE_METADATA},
        })
    except Exception as e:
        raise ProvisioningError(extract_supabase_error(e))

    user = getattr(user_resp, "user", None)
    if user is None:
        raise ProvisioningError("Failed to create user")

    # -------------------------------------------------
    # 2. Agency row (compensate on failure)
    # -------------------------------------------------
    try:
        result = client.table(AGENCIES_TABLE).insert(_agency_row(payload, str(user.id))).execute()
        if not result.data:
            raise ProvisioningError("Agency insert returned no row")
    except Exception as e:
        logger.error(f"Error creating agency {payload.slug}: {extract_supabase_error(e)}")
        try:
            client.auth.admin.delete_user(str(user.id))
            logger.info(f"Rolled back owner account {user.id}")
        except Exception as cleanup_error:
            logger.error(
                f"Rollback of owner account {user.id} failed: {extract_supabase_error(cleanup_error)}"
            )
        if isinstance(e, ProvisioningError):
            raise
        raise ProvisioningError(extract_supabase_error(e))

    agency = result.data[0]
    logger.info(f"Agency created: slug={agency.get('slug')} id={agency.get('id')}")

    _send_welcome_email(agency)
    return agency
