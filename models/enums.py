from enum import Enum
from typing import Optional


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string.
    """

    def __str__(self):
        return str(self.value)


# -----------------------------------------------------
# IDENTITY ROLE
# -----------------------------------------------------
# Raw user_metadata.role values written by the portal and the
# provisioning function, mapped onto the roles the guard knows.
_ROLE_ALIASES = {
    "agency": "AGENCY_OWNER",
    "agency_owner": "AGENCY_OWNER",
    "proprietaire": "PROPRIETOR",
    "proprietor": "PROPRIETOR",
    "client": "CLIENT",
    "admin": "ADMIN",
    "super_admin": "ADMIN",
}


class Role(BaseStrEnum):
    """Role claim attached to an auth user at creation."""

    agency_owner = "AGENCY_OWNER"
    proprietor = "PROPRIETOR"
    client = "CLIENT"
    admin = "ADMIN"
    none = "NONE"

    @classmethod
    def from_metadata(cls, raw: Optional[str]) -> "Role":
        if not raw or not isinstance(raw, str):
            return cls.none
        value = _ROLE_ALIASES.get(raw.strip().lower())
        return cls(value) if value else cls.none


# -----------------------------------------------------
# ROUTE CLASSIFICATION
# -----------------------------------------------------
class RouteClass(BaseStrEnum):
    """Category of a portal path, derived from its prefix."""

    public_tenant_page = "public-tenant-page"
    agency_scoped = "agency-scoped"
    proprietor_scoped = "proprietor-scoped"
    admin_scoped = "admin-scoped"
    change_password_scoped = "change-password-scoped"


# -----------------------------------------------------
# LOAD STATES
# -----------------------------------------------------
class TenantStatus(BaseStrEnum):
    loading = "loading"
    resolved = "resolved"
    failed = "failed"


class SessionStatus(BaseStrEnum):
    loading = "loading"
    present = "present"
    absent = "absent"


# -----------------------------------------------------
# GUARD OUTCOME
# -----------------------------------------------------
class OutcomeKind(BaseStrEnum):
    show_loading = "show_loading"
    redirect = "redirect"
    render = "render"
