from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from loguru import logger
from postgrest.exceptions import APIError
from supabase import AuthError, Client, ClientOptions, create_client

from rental_manager.exceptions import AuthenticationError, BackendError
from rental_manager.models.user import AuthUser
from rental_manager.utils.constants import (
    ADMIN_GET_USERS_RPC,
    EQUIPMENT_TABLE,
    INSPECTIONS_TABLE,
    RENTAL_REQUESTS_TABLE,
    USERS_VIEW,
)


@dataclass(frozen=True)
class Backend:
    """
    Handle to the hosted database/auth/storage backend.

    Holds only connection settings. A fresh client is built per call and,
    when an access token is given, database and storage calls run as that
    user so row-level security applies. No state is shared between requests.
    """

    url: str
    key: str

    @classmethod
    def from_config(cls, config, service_role: bool = False) -> "Backend":
        key = config["SUPABASE_SERVICE_ROLE_KEY"] if service_role else config["SUPABASE_ANON_KEY"]
        return cls(url=config["SUPABASE_URL"], key=key)

    # ---------- Clients ----------
    def client(self, token: Optional[str] = None) -> Client:
        """Database, storage and RPC calls of the returned client all run as `token` when given."""
        if not token:
            return create_client(self.url, self.key)
        options = ClientOptions(headers={"Authorization": f"Bearer {token}"})
        return create_client(self.url, self.key, options=options)

    @staticmethod
    def _execute(query):
        """Run a query builder, mapping backend failures to BackendError."""
        try:
            return query.execute()
        except APIError as e:
            raise BackendError(e.message or str(e), code=e.code) from e

    # ---------- Auth ----------
    def sign_in(self, email: str, password: str) -> tuple[AuthUser, str]:
        """Return the signed-in identity and its access token."""
        try:
            res = self.client().auth.sign_in_with_password({"email": email, "password": password})
        except AuthError as e:
            raise AuthenticationError(e.message or "Invalid credentials") from e
        if not res.user or not res.session:
            raise AuthenticationError()
        return AuthUser.from_auth_user(res.user), res.session.access_token

    def sign_up(self, email: str, password: str, metadata: dict) -> AuthUser:
        try:
            res = self.client().auth.sign_up({
                "email": email,
                "password": password,
                "options": {"data": metadata},
            })
        except AuthError as e:
            raise AuthenticationError(e.message or "Registration failed") from e
        if not res.user:
            raise AuthenticationError("Registration failed")
        return AuthUser.from_auth_user(res.user)

    def sign_out(self, token: Optional[str] = None) -> None:
        if not token:
            return
        try:
            self.client().auth.admin.sign_out(token)
        except AuthError as e:
            logger.warning(f"Sign-out failed: {e}")

    def send_password_reset(self, email: str, redirect_to: str) -> None:
        try:
            self.client().auth.reset_password_for_email(email, {"redirect_to": redirect_to})
        except AuthError as e:
            raise BackendError(e.message or "Password reset failed") from e

    # ---------- RPC ----------
    def rpc(self, name: str, params: Optional[dict] = None, token: Optional[str] = None):
        return self._execute(self.client(token).rpc(name, params or {})).data

    # ---------- Rental requests ----------
    def list_rental_requests(self, token: Optional[str] = None, user_id: Optional[str] = None,
                             email: Optional[str] = None) -> list[dict]:
        query = self.client(token).table(RENTAL_REQUESTS_TABLE).select("*")
        if user_id:
            query = query.eq("user_id", user_id)
        elif email:
            query = query.eq("email", email)
        return self._execute(query.order("created_at", desc=True)).data or []

    def get_rental_request(self, request_id, columns: str = "*", token: Optional[str] = None) -> Optional[dict]:
        query = self.client(token).table(RENTAL_REQUESTS_TABLE).select(columns).eq("id", request_id).limit(1)
        rows = self._execute(query).data or []
        return rows[0] if rows else None

    def insert_rental_request(self, row: dict, token: Optional[str] = None) -> dict:
        rows = self._execute(self.client(token).table(RENTAL_REQUESTS_TABLE).insert(row)).data or []
        return rows[0] if rows else row

    def update_rental_request(self, request_id, updates: dict, token: Optional[str] = None) -> list[dict]:
        query = self.client(token).table(RENTAL_REQUESTS_TABLE).update(updates).eq("id", request_id)
        return self._execute(query).data or []

    # ---------- Equipment ----------
    def list_equipment(self, category: Optional[str] = None, token: Optional[str] = None) -> list[dict]:
        query = self.client(token).table(EQUIPMENT_TABLE).select("*")
        if category:
            query = query.eq("category", category).eq("available", True)
        return self._execute(query).data or []

    # ---------- Inspections ----------
    def insert_inspection(self, row: dict, token: Optional[str] = None) -> list[dict]:
        return self._execute(self.client(token).table(INSPECTIONS_TABLE).insert(row)).data or []

    def list_inspections(self, token: Optional[str] = None, rental_request_id=None,
                         inspection_type: Optional[str] = None, request_ids=None) -> list[dict]:
        query = self.client(token).table(INSPECTIONS_TABLE).select("*")
        if rental_request_id:
            query = query.eq("rental_request_id", rental_request_id)
        if inspection_type:
            query = query.eq("inspection_type", inspection_type)
        if request_ids is not None:
            query = query.in_("rental_request_id", list(request_ids))
        return self._execute(query.order("created_at", desc=True)).data or []

    # ---------- Storage ----------
    def upload_file(self, bucket: str, path: str, content: bytes, content_type: str,
                    token: Optional[str] = None) -> str:
        """Upload `content` and return its public URL."""
        store = self.client(token).storage.from_(bucket)
        try:
            store.upload(path, content, {"content-type": content_type, "upsert": "true"})
        except Exception as e:
            raise BackendError(f"Failed to upload file: {e}") from e
        return store.get_public_url(path)

    # ---------- Users ----------
    def find_user_by_email(self, email: str) -> Optional[dict]:
        query = self.client().table(USERS_VIEW).select("id, email, role").eq("email", email).limit(1)
        rows = self._execute(query).data or []
        return rows[0] if rows else None

    def list_users(self, token: Optional[str] = None) -> list[dict]:
        """Every user with their current role; falls back to the admin procedure when the view is unavailable."""
        try:
            return self._execute(self.client(token).table(USERS_VIEW).select("*")).data or []
        except BackendError as e:
            logger.warning(f"Could not read {USERS_VIEW}, trying {ADMIN_GET_USERS_RPC}: {e.message}")
        return self.rpc(ADMIN_GET_USERS_RPC, token=token) or []
