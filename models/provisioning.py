# models/provisioning.py

import re
from typing import Optional
from pydantic import BaseModel, EmailStr, field_validator


SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


# --------------------------------------------------------------------
# ADMIN REQUEST BODY — create an agency and its owner account
# --------------------------------------------------------------------
class AgencyCreate(BaseModel):
    agency_name: str
    contact_email: EmailStr
    contact_phone: str
    license_number: str
    slug: str
    address: str
    city: str
    postal_code: str
    logo_url: Optional[str] = None
    primary_color: str = "#1e40af"
    secondary_color: str = "#f59e0b"

    admin_name: Optional[str] = None
    admin_email: Optional[EmailStr] = None
    admin_phone: Optional[str] = None
    admin_license: Optional[str] = None

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: str) -> str:
        # Imported here: core.route_classifier imports the models package
        from core.route_classifier import is_reserved_segment

        v = v.strip().lower()
        if not SLUG_PATTERN.match(v):
            raise ValueError("slug must be lowercase letters, digits and single hyphens")
        if is_reserved_segment(v):
            raise ValueError(f"slug '{v}' is reserved")
        return v

    @field_validator("contact_email", "admin_email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        if isinstance(v, str):
            return v.strip().lower() or None
        return v
