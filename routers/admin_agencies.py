# routers/admin_agencies.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from core.errors import handle_supabase_error
from core.logging_config import logger
from core.supabase_client import get_supabase_client
from core.tenant_resolver import AGENCIES_TABLE
from dependencies.auth import require_admin
from models.identity import Identity
from models.provisioning import AgencyCreate
from services.agency_provisioning import provision_agency


router = APIRouter(
    prefix="/admin/agencies",
    tags=["Admin - Agencies"],
)


class AgencyFlagsUpdate(BaseModel):
    """Admin toggles. The slug is immutable and not accepted here."""

    is_active: Optional[bool] = None
    has_immo_module: Optional[bool] = Field(None, alias="isImmo")
    has_locative_module: Optional[bool] = Field(None, alias="isLocative")

    model_config = ConfigDict(populate_by_name=True)


# -----------------------------------------------------
# POST — create agency + owner account
# -----------------------------------------------------
@router.post("", summary="Admin: provision an agency and its owner", status_code=201)
def create_agency(payload: AgencyCreate, admin: Identity = Depends(require_admin)):
    logger.info(f"Admin {admin.id} provisioning agency {payload.slug}")

    return provision_agency(payload, client=get_supabase_client())


# -----------------------------------------------------
# PATCH — activate / deactivate, toggle modules
# -----------------------------------------------------
@router.patch("/{agency_id}", summary="Admin: update agency flags")
def update_agency_flags(
    agency_id: str,
    payload: AgencyFlagsUpdate,
    admin: Identity = Depends(require_admin),
):
    # Column names in the agencies table
    update = payload.model_dump(exclude_none=True, by_alias=True)
    if not update:
        raise HTTPException(400, "No fields to update")

    client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")

    try:
        result = (
            client.table(AGENCIES_TABLE)
            .update(update)
            .eq("id", agency_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to update agency")

    if not result.data:
        raise HTTPException(404, "Agency not found")

    logger.info(f"Admin {admin.id} updated agency {agency_id}: {update}")
    return result.data[0]
