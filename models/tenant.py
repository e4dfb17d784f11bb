# models/tenant.py

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.enums import TenantStatus


# -------------------------------------------------
# Tenant (Supabase "agencies" row)
# -------------------------------------------------
class Tenant(BaseModel):
    """
    An onboarded agency. `slug` addresses it in every portal URL and
    `user_id` references the auth identity that owns it.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str
    slug: str
    agency_name: Optional[str] = None
    user_id: Optional[str] = None

    is_active: bool = True
    has_immo_module: bool = Field(False, alias="isImmo")
    has_locative_module: bool = Field(False, alias="isLocative")
    must_change_password: bool = False

    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    license_number: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    logo_url: Optional[str] = None
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None
    created_at: Optional[datetime] = None

    # Normalize UUID → str always
    @field_validator("id", "user_id", mode="before")
    @classmethod
    def normalize_uuid(cls, v):
        if isinstance(v, UUID):
            return str(v)
        return v

    # Nullable boolean columns default to False, except is_active
    @field_validator("has_immo_module", "has_locative_module", "must_change_password", mode="before")
    @classmethod
    def null_flag_is_false(cls, v):
        return False if v is None else v

    @field_validator("is_active", mode="before")
    @classmethod
    def null_active_is_true(cls, v):
        return True if v is None else v

    # Parse trailing Z timestamps
    @field_validator("created_at", mode="before")
    @classmethod
    def normalize_created_at(cls, v):
        if isinstance(v, str) and v.endswith("Z"):
            return v.replace("Z", "+00:00")
        return v


class TenantPublic(BaseModel):
    """What anonymous visitors of an agency site may see."""

    slug: str
    agency_name: Optional[str] = None
    is_active: bool
    has_immo_module: bool
    has_locative_module: bool
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    logo_url: Optional[str] = None
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None

    @classmethod
    def from_tenant(cls, tenant: Tenant) -> "TenantPublic":
        return cls(**tenant.model_dump(include=set(cls.model_fields)))


# -------------------------------------------------
# Tenant resolution state
# -------------------------------------------------
class TenantState(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    status: TenantStatus
    tenant: Optional[Tenant] = None
    error: Optional[Exception] = None

    @classmethod
    def loading(cls) -> "TenantState":
        return cls(status=TenantStatus.loading)

    @classmethod
    def resolved(cls, tenant: Tenant) -> "TenantState":
        return cls(status=TenantStatus.resolved, tenant=tenant)

    @classmethod
    def failed(cls, error: Exception) -> "TenantState":
        return cls(status=TenantStatus.failed, error=error)

    @property
    def is_loading(self) -> bool:
        return self.status == TenantStatus.loading
