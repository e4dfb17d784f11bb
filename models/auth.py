from typing import Optional
from pydantic import BaseModel, EmailStr


# -----------------------------------------------------
# LOGIN REQUEST (using Supabase email/password)
# -----------------------------------------------------
class LoginRequest(BaseModel):
    email: EmailStr
    password: str
    agency_slug: Optional[str] = None   # agency portal sign-in: owner or proprietors only


class AdminLoginRequest(BaseModel):
    email: EmailStr
    password: str


# -----------------------------------------------------
# TOKEN RESPONSE (Supabase session JWT)
# -----------------------------------------------------
class TokenResponse(BaseModel):
    access_token: str                    # Supabase access token (JWT)
    refresh_token: Optional[str] = None  # Supabase refresh token
    expires_in: Optional[int] = None     # Seconds until expiration
    token_type: str = "bearer"
