# core/route_classifier.py

"""
Portal path classification and the well-known portal locations.

Every agency URL starts with the agency slug:

    /{slug}                              public agency site
    /{slug}/agency/auth                  agency sign-in (public)
    /{slug}/agency/change-password       first-login password change
    /{slug}/agency/...                   agency back office (owner only)
    /{slug}/proprietaire/...             proprietor space
    /admin/...                           super-admin console (no slug)
"""

from typing import List, Optional

from core.config import settings
from models.enums import RouteClass


ADMIN_SECTION = "admin"
AGENCY_SECTION = "agency"
PROPRIETOR_SECTION = "proprietaire"
CHANGE_PASSWORD_PAGE = "change-password"

# Pages under /{slug}/agency/ that anonymous visitors must reach
PUBLIC_AGENCY_PAGES = {"auth", "login", "register", "reset-password"}

# Back-office sections gated by an agency feature flag
MODULE_SECTIONS = ("immo", "locative")

# First path segments owned by the portal itself, never agency slugs
RESERVED_SEGMENTS = {ADMIN_SECTION, "404", "api", "auth", "health", "guard", "agencies"}


def split_path(path: str) -> List[str]:
    """'/acme/agency/?tab=1' → ['acme', 'agency']"""
    if not path:
        return []
    path = path.split("#", 1)[0].split("?", 1)[0]
    return [segment for segment in path.split("/") if segment]


def is_reserved_segment(segment: str) -> bool:
    not_found = split_path(settings.NOT_FOUND_PATH)
    return segment in RESERVED_SEGMENTS or (bool(not_found) and segment == not_found[0])


def slug_from_path(path: str) -> Optional[str]:
    """First path segment, or None for '/', the admin console and portal pages such as /404."""
    segments = split_path(path)
    if not segments or is_reserved_segment(segments[0]):
        return None
    return segments[0]


def is_not_found_path(path: str, not_found_path: Optional[str] = None) -> bool:
    return split_path(path) == split_path(not_found_path or settings.NOT_FOUND_PATH)


def is_admin_path(path: str) -> bool:
    segments = split_path(path)
    return bool(segments) and segments[0] == ADMIN_SECTION


def _tenant_segments(path: str) -> List[str]:
    # The first segment is the agency slug; callers resolve the tenant from it.
    return split_path(path)[1:]


def belongs_to(path: str, slug: str) -> bool:
    """True when `path` lives under the agency addressed by `slug`."""
    segments = split_path(path)
    return bool(segments) and segments[0] == slug


def classify(path: str, slug: str) -> RouteClass:
    """
    Classify a portal path relative to the resolved agency slug.
    Raises ValueError for a path under another agency.
    """
    if is_admin_path(path):
        return RouteClass.admin_scoped

    if not belongs_to(path, slug):
        raise ValueError(f"{path!r} is not a path of agency {slug!r}")

    rest = _tenant_segments(path)
    if not rest:
        return RouteClass.public_tenant_page

    section = rest[0]
    page = rest[1] if len(rest) > 1 else None

    if section == AGENCY_SECTION:
        if page == CHANGE_PASSWORD_PAGE:
            return RouteClass.change_password_scoped
        if page in PUBLIC_AGENCY_PAGES:
            return RouteClass.public_tenant_page
        return RouteClass.agency_scoped

    if section == PROPRIETOR_SECTION:
        return RouteClass.proprietor_scoped

    return RouteClass.public_tenant_page


def agency_module(path: str) -> Optional[str]:
    """'immo' or 'locative' when the path is inside that back-office section."""
    rest = _tenant_segments(path)
    if len(rest) > 1 and rest[0] == AGENCY_SECTION and rest[1] in MODULE_SECTIONS:
        return rest[1]
    return None


# ============================================================
# Well-known locations
# ============================================================
def tenant_home(slug: str) -> str:
    return f"/{slug}"


def tenant_auth_page(slug: str) -> str:
    return f"/{slug}/{AGENCY_SECTION}/auth"


def agency_services_page(slug: str) -> str:
    return f"/{slug}/{AGENCY_SECTION}/services"


def proprietor_dashboard(slug: str) -> str:
    return f"/{slug}/{PROPRIETOR_SECTION}/dashboard"


def change_password_page(slug: str) -> str:
    return f"/{slug}/{AGENCY_SECTION}/{CHANGE_PASSWORD_PAGE}"


def admin_auth_page() -> str:
    return f"/{ADMIN_SECTION}/auth"
