from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from core.supabase_client import get_supabase_client
from core.logging_config import logger
from models.enums import Role
from models.identity import Identity


bearer_scheme = HTTPBearer()
optional_bearer_scheme = HTTPBearer(auto_error=False)


# ============================================================
# TOKEN → IDENTITY (Supabase validates the JWT)
# ============================================================
def identity_from_token(token: str) -> Identity:
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired authentication token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")

    try:
        auth_resp = client.auth.get_user(token)
    except Exception as e:
        logger.info(f"Token rejected by Supabase: {type(e).__name__}")
        raise unauthorized

    if not auth_resp or not auth_resp.user:
        raise unauthorized

    return Identity.from_auth_user(auth_resp.user)


def get_current_identity(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> Identity:
    return identity_from_token(credentials.credentials)


# ============================================================
# OPTIONAL AUTHENTICATION (guard + public endpoints)
# ============================================================
def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_bearer_scheme),
) -> Optional[Identity]:
    """
    Returns the Identity if a valid token was sent, None otherwise.
    An invalid token counts as no session: it never raises 401.
    """
    if not credentials:
        return None

    try:
        return identity_from_token(credentials.credentials)
    except HTTPException as e:
        if e.status_code != status.HTTP_401_UNAUTHORIZED:
            raise
        return None


# ============================================================
# ROLE CHECKER
# ============================================================
def requires_role(*allowed_roles: Role):
    def checker(identity: Identity = Depends(get_current_identity)) -> Identity:
        if identity.role not in allowed_roles:
            raise HTTPException(
                status_code=403,
                detail=f"Requires one of: {[str(r) for r in allowed_roles]}",
            )
        return identity
    return checker


require_admin = requires_role(Role.admin)
