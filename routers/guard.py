# routers/guard.py

from typing import Optional
from fastapi import APIRouter, Depends, Query

from core.guard import evaluate, evaluate_admin
from core.route_classifier import is_admin_path, slug_from_path
from core.supabase_client import get_supabase_client
from core.tenant_resolver import resolve_tenant
from dependencies.auth import get_optional_identity
from models.guard import GuardOutcome
from models.identity import Identity, SessionState


router = APIRouter(
    prefix="/guard",
    tags=["Guard"],
)


# -----------------------------------------------------
# GET /guard/evaluate?path=/acme/agency/dashboard
# Bearer token optional: no token means no session
# -----------------------------------------------------
@router.get(
    "/evaluate",
    response_model=GuardOutcome,
    summary="Decide whether a portal path renders or redirects",
)
def evaluate_path(
    path: str = Query(..., min_length=1, description="Portal path, e.g. /acme/agency/dashboard"),
    identity: Optional[Identity] = Depends(get_optional_identity),
):
    """
    Server-side evaluation of the portal guard.

    Tenant and session are resolved before evaluating, so the outcome is
    always `render` or `redirect`. Unknown agencies and failed lookups
    redirect to the not-found page; unauthorized access redirects
    without any error message.
    """
    session_state = SessionState.present(identity) if identity else SessionState.absent()

    if is_admin_path(path):
        return evaluate_admin(session_state, path)

    slug = slug_from_path(path)
    if slug is None:
        return GuardOutcome.render()

    tenant_state = resolve_tenant(slug, client=get_supabase_client())
    return evaluate(tenant_state, session_state, path)
