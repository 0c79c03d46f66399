from __future__ import annotations

import re

from loguru import logger

from rental_manager.exceptions import AuthenticationError, InvalidRoleError
from rental_manager.models.backend import Backend
from rental_manager.models.user import AuthUser
from rental_manager.utils.constants import LIST_TABLES_RPC, UPDATE_ROLE_RPC, Role

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6


class UserService:
    """Sign-in/up through the auth provider and role administration."""

    @staticmethod
    def update_role(backend: Backend, user_id: str, role, token: str | None = None):
        """
        Forward a role change to the `update_user_role` procedure.
        The role is checked against the Role enumeration first, so only a
        known value ever reaches the backend. Returns the procedure's data.
        """
        new_role = Role.parse(role)
        if new_role is None:
            raise InvalidRoleError()
        data = backend.rpc(UPDATE_ROLE_RPC, {"user_id": user_id, "new_role": new_role.value}, token=token)
        logger.info(f"Role of user {user_id} set to {new_role.value}")
        return data

    @staticmethod
    def sign_in(backend: Backend, email: str, password: str) -> tuple[AuthUser, str]:
        email = (email or "").strip().lower()
        if not email or not password:
            raise AuthenticationError("Email and password are required.")
        return backend.sign_in(email, password)

    @staticmethod
    def register(backend: Backend, name: str, email: str, password: str, phone: str = "") -> AuthUser:
        """New accounts always start as clients; managers promote them later."""
        name = (name or "").strip()
        email = (email or "").strip().lower()
        if not name or not email or not password:
            raise AuthenticationError("Name, email and password are required.")
        if not EMAIL_PATTERN.match(email):
            raise AuthenticationError("Please enter a valid email address.")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthenticationError(f"Password must have at least {MIN_PASSWORD_LENGTH} characters.")
        metadata = {"name": name, "phone": (phone or "").strip(), "role": Role.CLIENT.value}
        return backend.sign_up(email, password, metadata)

    @staticmethod
    def list_tables(backend: Backend, token: str | None = None) -> list[str]:
        rows = backend.rpc(LIST_TABLES_RPC, token=token) or []
        return sorted(r.get("table_name", "") for r in rows if isinstance(r, dict))

    @staticmethod
    def list_users(backend: Backend, token: str | None = None) -> list[dict]:
        """Users for the role administration page; unknown stored roles show as client."""
        users = []
        for row in backend.list_users(token=token):
            role = Role.parse(row.get("role")) or Role.CLIENT
            users.append({
                "id": row.get("id"),
                "email": row.get("email") or "",
                "name": row.get("name") or "",
                "role": role,
                "created_at": row.get("created_at"),
            })
        return sorted(users, key=lambda u: u["email"])
