# core/supabase_client.py

from typing import Optional

from supabase import create_client, Client
from core.config import settings
from core.logging_config import logger


# ============================================================
# Supabase Client Factory (service role)
# ============================================================

def get_supabase_client() -> Optional[Client]:
    """
    Creates a Supabase client using the SERVICE ROLE KEY.
    REQUIRED for:
        - auth.admin.create_user / delete_user / list_users
        - validating bearer tokens with auth.get_user
        - reading agencies regardless of RLS
    """
    try:
        supabase_url = settings.SUPABASE_URL
        supabase_key = settings.SUPABASE_SERVICE_ROLE_KEY

        if not supabase_url or not supabase_key:
            logger.error("Missing Supabase credentials")
            logger.error(f"   URL: {supabase_url}")
            logger.error(f"   SERVICE ROLE KEY: {'SET' if supabase_key else 'MISSING'}")
            return None

        return create_client(supabase_url, supabase_key)

    except Exception as e:
        logger.error(f"Supabase Init Error: {e}", exc_info=True)
        return None


# ============================================================
# Public client (anon key, holds a user session)
# ============================================================

def get_public_client() -> Optional[Client]:
    """
    Anon-key client for sign-in flows. Each call returns a fresh client
    so one user's session never leaks into another request.
    """
    supabase_url = settings.SUPABASE_URL
    supabase_key = settings.SUPABASE_ANON_KEY or settings.SUPABASE_SERVICE_ROLE_KEY

    if not supabase_url or not supabase_key:
        logger.error("Missing Supabase credentials for public client")
        return None

    try:
        return create_client(supabase_url, supabase_key)
    except Exception as e:
        logger.error(f"Supabase Init Error: {e}", exc_info=True)
        return None


# ============================================================
# Ping Supabase for health checks
# ============================================================

def ping_supabase() -> dict:
    """
    Simple connectivity check.
    Does NOT query auth tables.
    """
    try:
        client = get_supabase_client()
        if client is None:
            return {"service": "Supabase", "status": "not_configured"}

        tables = ["agencies"]
        results = {}

        for t in tables:
            try:
                res = client.table(t).select("id").limit(1).execute()
                results[t] = {
                    "status": "ok",
                    "rows_found": len(res.data or [])
                }
            except Exception as err:
                results[t] = {"status": "error", "detail": str(err)}

        return {
            "service": "Supabase",
            "status": "ok",
            "tables": results,
        }

    except Exception as e:
        logger.error(f"Supabase Ping Error: {e}", exc_info=True)
        return {"service": "Supabase", "status": "error", "detail": str(e)}
