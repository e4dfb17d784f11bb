# core/guard.py

"""
Tenant-scoped authorization guard.

Turns (tenant state, session state, path) into one of three outcomes:
show a loader, redirect somewhere, or render the page. Rules are checked
in a fixed order and the first match wins. Unauthorized access is always
a redirect, never an exception.
"""

from typing import Optional

from core.config import settings
from core.logging_config import logger
from core.route_classifier import (
    admin_auth_page,
    agency_module,
    agency_services_page,
    belongs_to,
    change_password_page,
    classify,
    is_admin_path,
    is_not_found_path,
    proprietor_dashboard,
    split_path,
    tenant_auth_page,
    tenant_home,
)
from models.enums import Role, RouteClass, SessionStatus, TenantStatus
from models.guard import GuardOutcome
from models.identity import Identity, SessionState
from models.tenant import Tenant, TenantState


# Routes that need an active agency behind them
TENANT_SCOPED = {
    RouteClass.agency_scoped,
    RouteClass.proprietor_scoped,
    RouteClass.change_password_scoped,
}

# Routes that need a signed-in identity
SESSION_SCOPED = {
    RouteClass.agency_scoped,
    RouteClass.proprietor_scoped,
}


def _is_owner(identity: Identity, tenant: Tenant) -> bool:
    return tenant.user_id is not None and identity.id == tenant.user_id


def _module_enabled(tenant: Tenant, module: Optional[str]) -> bool:
    if module == "immo":
        return tenant.has_immo_module
    if module == "locative":
        return tenant.has_locative_module
    return True


def _password_change_pending(identity: Identity, tenant: Tenant) -> bool:
    # Owners carry the flag on the agency row as well
    if identity.must_change_password:
        return True
    return _is_owner(identity, tenant) and tenant.must_change_password


def _decide(outcome: GuardOutcome, path: str, rule: str) -> GuardOutcome:
    logger.debug(
        f"guard: {path} → {outcome.outcome}"
        f"{' ' + outcome.location if outcome.location else ''} ({rule})"
    )
    return outcome


# ============================================================
# Agency guard
# ============================================================
def evaluate(
    tenant_state: TenantState,
    session_state: SessionState,
    path: str,
    not_found_path: Optional[str] = None,
) -> GuardOutcome:
    not_found = not_found_path or settings.NOT_FOUND_PATH

    # 1. Wait for both the agency and the session before deciding anything
    if tenant_state.is_loading or session_state.is_loading:
        return _decide(GuardOutcome.show_loading(), path, "loading")

    # The not-found page is where failed lookups land
    if is_not_found_path(path, not_found):
        return _decide(GuardOutcome.render(), path, "not-found page")

    # 2. Unknown agency, or the lookup failed
    tenant = tenant_state.tenant
    if tenant_state.status == TenantStatus.failed or tenant is None:
        return _decide(GuardOutcome.redirect_to(not_found), path, "tenant unresolved")

    slug = tenant.slug

    # A path under another agency is never authorized against this one
    if not is_admin_path(path) and not belongs_to(path, slug):
        return _decide(GuardOutcome.redirect_to(not_found), path, "path outside agency")

    route = classify(path, slug)

    # 3. Public agency pages need no session
    if route == RouteClass.public_tenant_page:
        return _decide(GuardOutcome.render(route), path, "public page")

    if route in TENANT_SCOPED and not tenant.is_active:
        return _decide(GuardOutcome.redirect_to(not_found, route), path, "agency inactive")

    identity = session_state.identity if session_state.status == SessionStatus.present else None

    # 4. Back office and proprietor space require a session
    if route in SESSION_SCOPED and identity is None:
        return _decide(GuardOutcome.redirect_to(tenant_auth_page(slug), route), path, "no session")

    # 5. Back office: owner only
    if route == RouteClass.agency_scoped:
        if not _is_owner(identity, tenant):
            if identity.role == Role.proprietor:
                return _decide(
                    GuardOutcome.redirect_to(proprietor_dashboard(slug), route), path, "proprietor in back office"
                )
            return _decide(GuardOutcome.redirect_to(tenant_home(slug), route), path, "not the owner")

        if not _module_enabled(tenant, agency_module(path)):
            return _decide(
                GuardOutcome.redirect_to(agency_services_page(slug), route), path, "module disabled"
            )
        return _decide(GuardOutcome.render(route), path, "owner")

    # 6. Proprietor space
    if route == RouteClass.proprietor_scoped:
        if identity.role != Role.proprietor:
            if _is_owner(identity, tenant):
                return _decide(
                    GuardOutcome.redirect_to(agency_services_page(slug), route), path, "owner in proprietor space"
                )
            return _decide(GuardOutcome.redirect_to(tenant_home(slug), route), path, "not a proprietor")

        if identity.must_change_password:
            return _decide(
                GuardOutcome.redirect_to(change_password_page(slug), route), path, "password change pending"
            )
        return _decide(GuardOutcome.render(route), path, "proprietor")

    # Password change page
    if route == RouteClass.change_password_scoped:
        if identity is None:
            return _decide(GuardOutcome.redirect_to(tenant_auth_page(slug), route), path, "no session")
        if not _password_change_pending(identity, tenant):
            target = (
                proprietor_dashboard(slug) if identity.role == Role.proprietor else agency_services_page(slug)
            )
            return _decide(GuardOutcome.redirect_to(target, route), path, "no password change pending")
        return _decide(GuardOutcome.render(route), path, "password change pending")

    # Admin console reached through an agency
    if route == RouteClass.admin_scoped and identity is not None and identity.role == Role.admin:
        return _decide(GuardOutcome.render(route), path, "admin")

    # 7. Anything else goes through the admin sign-in
    return _decide(GuardOutcome.redirect_to(admin_auth_page(), route), path, "default")


# ============================================================
# Admin console guard (paths without an agency slug)
# ============================================================
def evaluate_admin(session_state: SessionState, path: str) -> GuardOutcome:
    route = RouteClass.admin_scoped

    if session_state.is_loading:
        return _decide(GuardOutcome.show_loading(), path, "loading")

    if split_path(path) == split_path(admin_auth_page()):
        return _decide(GuardOutcome.render(route), path, "admin sign-in")

    identity = session_state.identity if session_state.status == SessionStatus.present else None
    if identity is not None and identity.role == Role.admin:
        return _decide(GuardOutcome.render(route), path, "admin")

    return _decide(GuardOutcome.redirect_to(admin_auth_page(), route), path, "not an admin")
