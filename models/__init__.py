# -------------------------
# Enums
# -------------------------
from .enums import (
    OutcomeKind,
    Role,
    RouteClass,
    SessionStatus,
    TenantStatus,
)

# -------------------------
# Tenant (agencies)
# -------------------------
from .tenant import (
    Tenant,
    TenantPublic,
    TenantState,
)

# -------------------------
# Identity / Session
# -------------------------
from .identity import (
    Identity,
    SessionState,
)

# -------------------------
# Guard
# -------------------------
from .guard import GuardOutcome

# -------------------------
# Auth Models
# -------------------------
from .auth import AdminLoginRequest, LoginRequest, TokenResponse

# -------------------------
# Provisioning
# -------------------------
from .provisioning import AgencyCreate

__all__ = [
    # enums
    "OutcomeKind",
    "Role",
    "RouteClass",
    "SessionStatus",
    "TenantStatus",

    # tenant
    "Tenant",
    "TenantPublic",
    "TenantState",

    # identity
    "Identity",
    "SessionState",

    # guard
    "GuardOutcome",

    # auth
    "AdminLoginRequest",
    "LoginRequest",
    "TokenResponse",

    # provisioning
    "AgencyCreate",
]
