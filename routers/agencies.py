# routers/agencies.py

from fastapi import APIRouter, HTTPException

from core.errors import TenantFetchFailed, TenantNotFound
from core.logging_config import logger
from core.supabase_client import get_supabase_client
from core.tenant_resolver import fetch_tenant_by_slug
from models.tenant import TenantPublic


router = APIRouter(
    prefix="/agencies",
    tags=["Agencies - Public"],
)


# ============================================================
# GET — Public agency profile by slug
# ============================================================
@router.get(
    "/{slug}",
    response_model=TenantPublic,
    summary="Resolve an agency by its slug (public)",
)
def get_agency(slug: str):
    """
    Public profile used by the agency website (name, branding, contact,
    enabled modules). Failed lookups answer 404 like unknown slugs.
    """
    try:
        tenant = fetch_tenant_by_slug(slug, client=get_supabase_client())
    except TenantNotFound:
        raise HTTPException(404, "Agency not found")
    except TenantFetchFailed as e:
        logger.warning(f"Agency lookup failed for {slug}: {e.detail}")
        raise HTTPException(404, "Agency not found")

    return TenantPublic.from_tenant(tenant)
