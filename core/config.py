from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "Agency Portal API"
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # -------------------------------------------------
    # Frontend Domains (agency portals + admin console)
    # -------------------------------------------------
    FRONTEND_DOMAIN: Optional[str] = None

    FRONTEND_DOMAINS: List[str] = [
        "https://lycsimmo.com",
        "https://www.lycsimmo.com",
    ]

    # -------------------------------------------------
    # CORS (auto-built below)
    # -------------------------------------------------
    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Supabase (Primary DB & Auth)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None

    # -------------------------------------------------
    # Mailer microservice (fire-and-forget)
    # -------------------------------------------------
    MAILER_URL: Optional[str] = None
    MAILER_FROM: str = "Agence LYCS Immo <noreply@lycsimmo.com>"
    MAILER_TIMEOUT_SECONDS: int = 10

    # -------------------------------------------------
    # Agency provisioning
    # -------------------------------------------------
    # Owners must change it on first login (must_change_password=true)
    AGENCY_DEFAULT_PASSWORD: str = Field("passer2025", min_length=6)

    # -------------------------------------------------
    # Portal routing
    # -------------------------------------------------
    NOT_FOUND_PATH: str = "/404"

    # -------------------------------------------------
    # Login rate limiting
    # -------------------------------------------------
    LOGIN_RATE_LIMIT: int = Field(10, description="Login attempts allowed per window")
    LOGIN_ACCOUNT_RATE_LIMIT: int = Field(
        20, description="Login attempts allowed per account per window, whatever the client address"
    )
    LOGIN_RATE_WINDOW_SECONDS: int = Field(300, description="Login rate limit window")

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    model_config = SettingsConfigDict(case_sensitive=True)


# Instantiate settings
settings = Settings()

# -------------------------------------------------
# Build CORS list dynamically after loading settings
# -------------------------------------------------
cors_origins = []

# 1) add the custom frontend domain
if settings.FRONTEND_DOMAIN:
    domain = settings.FRONTEND_DOMAIN
    if not domain.startswith("http"):
        domain = f"https://{domain}"
    cors_origins.append(domain.rstrip("/"))

# 2) add the known portal domains
cors_origins.extend([d.rstrip("/") for d in settings.FRONTEND_DOMAINS])

# 3) remove duplicates
settings.BACKEND_CORS_ORIGINS = sorted(list(set(cors_origins)))
