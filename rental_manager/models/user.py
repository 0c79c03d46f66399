from dataclasses import dataclass, field
from typing import Optional

from rental_manager.utils.constants import Role


def role_from_metadata(user_metadata: Optional[dict], app_metadata: Optional[dict]) -> Role:
    """
    Resolve a role from auth metadata: user metadata first, then app metadata.
    Anything missing or unknown falls back to CLIENT.
    """
    for meta in (user_metadata or {}, app_metadata or {}):
        role = Role.parse(meta.get("role"))
        if role is not None:
            return role
    return Role.CLIENT


@dataclass
class AuthUser:
    """
    Authenticated identity as seen by this app. The auth provider owns the
    record; we only read the role for authorization decisions.
    """
    user_id: str
    email: str
    role: Role = Role.CLIENT
    metadata: dict = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.metadata.get("name") or self.email

    @classmethod
    def from_auth_user(cls, user) -> "AuthUser":
        """Build from the auth provider's user object."""
        user_metadata = getattr(user, "user_metadata", None) or {}
        app_metadata = getattr(user, "app_metadata", None) or {}
        return cls(
            user_id=str(user.id),
            email=user.email or "",
            role=role_from_metadata(user_metadata, app_metadata),
            metadata={k: user_metadata.get(k) for k in ("name", "phone") if user_metadata.get(k)},
        )

    # ---------- session (de)serialisation ----------
    def to_session(self) -> dict:
        return {
            "uid": self.user_id,
            "email": self.email,
            "role": self.role.value,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_session(cls, data: Optional[dict]) -> Optional["AuthUser"]:
        if not data or not data.get("uid"):
            return None
        return cls(
            user_id=data["uid"],
            email=data.get("email") or "",
            role=Role.parse(data.get("role")) or Role.CLIENT,
            metadata=data.get("metadata") or {},
        )
