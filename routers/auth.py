from fastapi import APIRouter, HTTPException, Depends, Request
from fastapi.security import HTTPAuthorizationCredentials

from core.config import settings
from core.errors import extract_supabase_error, handle_supabase_error
from core.logging_config import logger
from core.rate_limiter import require_rate_limit, get_rate_limit_identifier
from core.supabase_client import get_supabase_client, get_public_client
from core.tenant_resolver import resolve_tenant
from dependencies.auth import bearer_scheme, get_current_identity
from models.auth import AdminLoginRequest, LoginRequest, TokenResponse
from models.enums import Role
from models.identity import Identity


router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)


INVALID_CREDENTIALS = "Invalid email or password"


# ============================================================
# Helpers
# ============================================================
def _limit_login_attempts(request: Request, email: str):
    # Per client address, then per account: X-Forwarded-For is client-supplied
    require_rate_limit(
        request,
        identifier=get_rate_limit_identifier(request, subject=f"login:{email}"),
        max_requests=settings.LOGIN_RATE_LIMIT,
        window_seconds=settings.LOGIN_RATE_WINDOW_SECONDS,
    )
    require_rate_limit(
        request,
        identifier=f"login:{email}",
        max_requests=settings.LOGIN_ACCOUNT_RATE_LIMIT,
        window_seconds=settings.LOGIN_RATE_WINDOW_SECONDS,
    )


def _sign_in(client, email: str, password: str):
    try:
        response = client.auth.sign_in_with_password(
            {"email": email, "password": password}
        )
    except Exception as e:
        # Log the error for debugging but don't expose details to user
        logger.warning(f"Login attempt failed for {email}: {type(e).__name__}")
        raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS)

    if not response.session or not response.session.access_token:
        raise HTTPException(401, INVALID_CREDENTIALS)

    return response.session


def _discard_session(client):
    try:
        client.auth.sign_out()
    except Exception as e:
        logger.warning(f"Could not sign out rejected session: {extract_supabase_error(e)}")


def _token_response(session) -> TokenResponse:
    return TokenResponse(
        access_token=session.access_token,
        refresh_token=getattr(session, "refresh_token", None),
        expires_in=getattr(session, "expires_in", None),
    )


# ============================================================
# LOGIN (agency portal + proprietors)
# ============================================================
@router.post("/login", response_model=TokenResponse, summary="Authenticate user")
def login(payload: LoginRequest, request: Request):
    """
    Email/password sign-in through Supabase.

    With `agency_slug`, only the agency owner and proprietors may sign in;
    any other account gets the same 401 as a wrong password.
    """
    email = payload.email.strip().lower()
    _limit_login_attempts(request, email)

    client = get_public_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")

    session = _sign_in(client, email, payload.password)

    if payload.agency_slug:
        tenant = resolve_tenant(payload.agency_slug, client=get_supabase_client()).tenant
        identity = Identity.from_auth_user(session.user)

        allowed = tenant is not None and (
            identity.id == tenant.user_id or identity.role == Role.proprietor
        )
        if not allowed:
            logger.warning(f"Login refused for {email} on agency {payload.agency_slug}")
            _discard_session(client)
            raise HTTPException(401, INVALID_CREDENTIALS)

    logger.info(f"Login succeeded for {email}")
    return _token_response(session)


# ============================================================
# ADMIN LOGIN (super-admin console)
# ============================================================
@router.post("/admin/login", response_model=TokenResponse, summary="Authenticate an administrator")
def admin_login(payload: AdminLoginRequest, request: Request):
    email = payload.email.strip().lower()
    _limit_login_attempts(request, email)

    client = get_public_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")

    session = _sign_in(client, email, payload.password)

    try:
        result = client.rpc("is_admin", {"user_id": session.user.id}).execute()
    except Exception as e:
        _discard_session(client)
        raise handle_supabase_error(e, "Admin check")

    if not result.data:
        logger.warning(f"Admin login refused for {email}: not an admin")
        _discard_session(client)
        raise HTTPException(403, "Admin access required")

    logger.info(f"Admin login succeeded for {email}")
    return _token_response(session)


# ============================================================
# LOGOUT
# ============================================================
@router.post("/logout", summary="Sign the current session out")
def logout(credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)):
    client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")

    try:
        client.auth.admin.sign_out(credentials.credentials)
    except Exception as e:
        raise handle_supabase_error(e, "Logout")

    return {"success": True}


# ============================================================
# CURRENT IDENTITY
# ============================================================
@router.get("/me", response_model=Identity, summary="Current authenticated identity")
def read_me(identity: Identity = Depends(get_current_identity)):
    return identity
