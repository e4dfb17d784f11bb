# core/errors.py

from fastapi import HTTPException


# ============================================================
# Domain errors
# ============================================================
class TenantResolutionError(Exception):
    """Base class for anything that stops a slug from resolving to an agency."""

    def __init__(self, slug: str, message: str = ""):
        self.slug = slug
        super().__init__(message or f"Agency '{slug}' could not be resolved")


class TenantNotFound(TenantResolutionError):
    def __init__(self, slug: str):
        super().__init__(slug, f"Agency '{slug}' not found")


class TenantFetchFailed(TenantResolutionError):
    def __init__(self, slug: str, detail: str):
        self.detail = detail
        super().__init__(slug, f"Agency '{slug}' lookup failed: {detail}")


class SessionFetchFailed(Exception):
    """The initial session read from the auth client raised."""


class ProvisioningError(Exception):
    """Agency provisioning was rejected or could not complete."""

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


# ============================================================
# Supabase error helpers
# ============================================================
def extract_supabase_error(error: Exception) -> str:
    """
    Safely extract readable details from Supabase Python client errors.
    Handles:
      • PostgREST errors
      • GoTrue (Auth) errors
      • Generic Python exceptions
    """

    # Case 1 — Supabase Auth / GoTrue / PostgREST errors
    message = getattr(error, "message", None)
    if message:
        return str(message)

    # Case 2 — Supabase errors with args (common)
    if getattr(error, "args", None):
        return str(error.args[0])

    # Case 3 — Plain string fallback
    return str(error) or type(error).__name__


def handle_supabase_error(error: Exception, operation: str = "Database operation", status_code: int = 500) -> HTTPException:
    """
    Handle Supabase errors with consistent formatting.
    Returns HTTPException (doesn't raise) so caller can customize or re-raise.

    Args:
        error: The exception that occurred
        operation: Description of what operation failed (e.g., "Failed to load agency")
        status_code: HTTP status code (default 500)

    Returns:
        HTTPException with standardized error message
    """
    from core.logging_config import logger

    error_detail = extract_supabase_error(error)
    logger.error(f"{operation}: {error_detail}")

    # Provide user-friendly messages for common errors
    error_lower = error_detail.lower()
    if "duplicate" in error_lower or "unique" in error_lower:
        return HTTPException(status_code=400, detail=f"{operation}: Record already exists")
    elif "foreign key" in error_lower:
        return HTTPException(status_code=400, detail=f"{operation}: Invalid reference")
    elif "not found" in error_lower or "does not exist" in error_lower:
        return HTTPException(status_code=404, detail=f"{operation}: Resource not found")
    else:
        return HTTPException(status_code=status_code, detail=f"{operation} failed")
