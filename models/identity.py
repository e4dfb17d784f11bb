# models/identity.py

from typing import Any, Optional
from pydantic import BaseModel, ConfigDict

from models.enums import Role, SessionStatus


# ===============================================================
# IDENTITY (authenticated principal)
# ===============================================================
class Identity(BaseModel):
    """
    Mirrors the parts of a Supabase auth user the portal relies on.
    The role comes from user_metadata and is trusted as-is.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    email: Optional[str] = None
    role: Role = Role.none
    must_change_password: bool = False
    full_name: Optional[str] = None

    @classmethod
    def from_auth_user(cls, user: Any) -> "Identity":
        metadata = getattr(user, "user_metadata", None) or {}
        full_name = metadata.get("full_name")
        if not full_name and (metadata.get("first_name") or metadata.get("last_name")):
            full_name = " ".join(
                p for p in (metadata.get("first_name"), metadata.get("last_name")) if p
            )

        return cls(
            id=str(user.id),
            email=getattr(user, "email", None),
            role=Role.from_metadata(metadata.get("role")),
            must_change_password=bool(metadata.get("must_change_password")),
            full_name=full_name,
        )


# ===============================================================
# SESSION STATE
# ===============================================================
class SessionState(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: SessionStatus
    identity: Optional[Identity] = None

    @classmethod
    def loading(cls) -> "SessionState":
        return cls(status=SessionStatus.loading)

    @classmethod
    def present(cls, identity: Identity) -> "SessionState":
        return cls(status=SessionStatus.present, identity=identity)

    @classmethod
    def absent(cls) -> "SessionState":
        return cls(status=SessionStatus.absent)

    @classmethod
    def from_session(cls, session: Any) -> "SessionState":
        """Build from a supabase-py Session (or None)."""
        user = getattr(session, "user", None) if session is not None else None
        if user is None:
            return cls.absent()
        return cls.present(Identity.from_auth_user(user))

    @property
    def is_loading(self) -> bool:
        return self.status == SessionStatus.loading
