# core/tenant_resolver.py

from typing import Optional

from pydantic import ValidationError
from supabase import Client

from core.errors import (
    TenantFetchFailed,
    TenantNotFound,
    TenantResolutionError,
    extract_supabase_error,
)
from core.logging_config import logger
from core.supabase_client import get_supabase_client
from models.tenant import Tenant, TenantState


AGENCIES_TABLE = "agencies"


def fetch_tenant_by_slug(slug: str, client: Optional[Client] = None) -> Tenant:
    """
    Look up the agency addressed by `slug`.

    Raises TenantNotFound when no row matches and TenantFetchFailed when
    Supabase could not be queried. No retry.
    """
    if not slug or not slug.strip():
        raise TenantNotFound(slug or "")

    client = client or get_supabase_client()
    if client is None:
        raise TenantFetchFailed(slug, "Supabase client not configured")

    try:
        result = (
            client.table(AGENCIES_TABLE)
            .select("*")
            .eq("slug", slug)
            .maybe_single()
            .execute()
        )
    except Exception as e:
        raise TenantFetchFailed(slug, extract_supabase_error(e)) from e

    # postgrest returns None (not an empty response) when maybe_single finds nothing
    if result is None or not result.data:
        raise TenantNotFound(slug)

    try:
        return Tenant.model_validate(result.data)
    except ValidationError as e:
        raise TenantFetchFailed(slug, f"malformed agency row: {e.error_count()} error(s)") from e


def resolve_tenant(slug: str, client: Optional[Client] = None) -> TenantState:
    """
    Fetch boundary for the guard: every lookup error becomes a failed state.
    Not-found and backend failures both end up on the not-found page; they
    stay distinguishable through the state's error.
    """
    try:
        tenant = fetch_tenant_by_slug(slug, client)
    except TenantNotFound as e:
        logger.info(f"Agency lookup: {e}")
        return TenantState.failed(e)
    except TenantResolutionError as e:
        logger.warning(f"Agency lookup: {e}")
        return TenantState.failed(e)

    return TenantState.resolved(tenant)
