import sys, pathlib

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

import pytest

from rental_manager import create_app
from rental_manager.config import TestConfig
from rental_manager.exceptions import AuthenticationError
from rental_manager.models.user import AuthUser
from rental_manager.utils.constants import Role


class FakeBackend:
    """
    In-memory stand-in for the hosted backend. Records every call so tests can
    assert that validation failures never reach it.
    """

    def __init__(self):
        self.calls = []
        self.rental_requests = {}
        self.inspections = []
        self.equipment = []
        self.users = {}          # email -> (password, AuthUser)
        self.uploads = {}
        self.rpc_result = None
        self.rpc_error = None    # exception instance raised by rpc()

    # ---------- Auth ----------
    def add_user(self, email, password, role=Role.CLIENT, user_id=None, name="Test User"):
        user = AuthUser(user_id=user_id or f"uid-{len(self.users) + 1}", email=email, role=Role(role),
                        metadata={"name": name})
        self.users[email] = (password, user)
        return user

    def sign_in(self, email, password):
        self.calls.append(("sign_in", email))
        stored = self.users.get(email)
        if not stored or stored[0] != password:
            raise AuthenticationError("Invalid login credentials")
        return stored[1], f"token-{stored[1].user_id}"

    def sign_up(self, email, password, metadata):
        self.calls.append(("sign_up", email, metadata))
        if email in self.users:
            raise AuthenticationError("User already registered")
        return self.add_user(email, password, role=metadata.get("role", "client"), name=metadata.get("name"))

    def sign_out(self, token=None):
        self.calls.append(("sign_out", token))

    def send_password_reset(self, email, redirect_to):
        self.calls.append(("send_password_reset", email, redirect_to))

    # ---------- RPC ----------
    def rpc(self, name, params=None, token=None):
        self.calls.append(("rpc", name, params, token))
        if self.rpc_error is not None:
            raise self.rpc_error
        return self.rpc_result

    # ---------- Rental requests ----------
    def add_request(self, **row):
        rid = row.setdefault("id", str(len(self.rental_requests) + 1))
        row.setdefault("created_at", f"2030-01-{int(rid):02d}T10:00:00")
        row.setdefault("reference_number", f"RNT-{100000 + int(rid)}")
        self.rental_requests[rid] = row
        return row

    def list_rental_requests(self, token=None, user_id=None, email=None):
        self.calls.append(("list_rental_requests", user_id, email))
        rows = list(self.rental_requests.values())
        if user_id:
            rows = [r for r in rows if r.get("user_id") == user_id]
        elif email:
            rows = [r for r in rows if r.get("email") == email]
        return sorted(rows, key=lambda r: r.get("created_at") or "", reverse=True)

    def get_rental_request(self, request_id, columns="*", token=None):
        self.calls.append(("get_rental_request", request_id, columns))
        row = self.rental_requests.get(str(request_id))
        if row is None or columns == "*":
            return row
        wanted = [c.strip() for c in columns.split(",")]
        return {c: row.get(c) for c in wanted}

    def insert_rental_request(self, row, token=None):
        self.calls.append(("insert_rental_request", row))
        return self.add_request(**dict(row))

    def update_rental_request(self, request_id, updates, token=None):
        self.calls.append(("update_rental_request", request_id, updates))
        row = self.rental_requests.get(str(request_id))
        if row is None:
            return []
        row.update(updates)
        return [row]

    # ---------- Equipment / inspections / storage ----------
    def list_equipment(self, category=None, token=None):
        if category:
            return [e for e in self.equipment if e.get("category") == category and e.get("available")]
        return list(self.equipment)

    def insert_inspection(self, row, token=None):
        self.calls.append(("insert_inspection", row))
        self.inspections.append(dict(row))
        return [row]

    def list_inspections(self, token=None, rental_request_id=None, inspection_type=None, request_ids=None):
        rows = self.inspections
        if rental_request_id:
            rows = [r for r in rows if r["rental_request_id"] == rental_request_id]
        if inspection_type:
            rows = [r for r in rows if r["inspection_type"] == inspection_type]
        if request_ids is not None:
            rows = [r for r in rows if r["rental_request_id"] in request_ids]
        return list(rows)

    def upload_file(self, bucket, path, content, content_type, token=None):
        self.uploads[path] = content
        return f"https://files.example.com/{bucket}/{path}"

    def list_users(self, token=None):
        self.calls.append(("list_users", token))
        return [{"id": u.user_id, "email": email, "name": u.metadata.get("name"), "role": u.role.value,
                 "created_at": "2030-01-01T10:00:00"}
                for email, (_, u) in self.users.items()]

    def find_user_by_email(self, email):
        stored = self.users.get(email)
        if not stored:
            return None
        user = stored[1]
        return {"id": user.user_id, "email": email, "role": user.role.value}

    # ---------- helpers ----------
    def calls_named(self, name):
        return [c for c in self.calls if c[0] == name]


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def app(backend):
    return create_app(TestConfig, backend=backend)


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def login_as(client):
    """Put an identity with the given role straight into the session."""

    def _login(role, user_id="uid-1", email="someone@example.com"):
        user = AuthUser(user_id=user_id, email=email, role=Role(role))
        with client.session_transaction() as sess:
            sess["user"] = user.to_session()
            sess["access_token"] = f"token-{user_id}"
        return user

    return _login
