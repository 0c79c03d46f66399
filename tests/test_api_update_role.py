"""
Role update endpoint: authorization wrapper, payload validation, and mapping
of backend outcomes to response envelopes.
"""

import pytest
from loguru import logger

from rental_manager.exceptions import BackendError

URL = "/api/users/update-role"


@pytest.fixture
def log_messages(app):
    messages = []
    handler_id = logger.add(lambda m: messages.append(m), level="DEBUG")
    yield messages
    logger.remove(handler_id)


def test_unauthenticated_caller_gets_401_before_anything_else(client, backend):
    r = client.post(URL, json={"userId": "u2", "role": "manager"})
    assert r.status_code == 401
    assert r.get_json() == {"success": False, "message": "You must be logged in to update user roles"}
    assert backend.calls_named("rpc") == []


@pytest.mark.parametrize("role", ["client", "equipment_inspector", "financial_inspector"])
def test_non_manager_gets_403_before_validation(client, backend, login_as, role):
    login_as(role)
    # invalid payload on purpose: the role check must come first
    r = client.post(URL, json={})
    assert r.status_code == 403
    assert r.get_json() == {"success": False, "message": "Only managers can update user roles"}
    assert backend.calls_named("rpc") == []


@pytest.mark.parametrize("payload", [
    {},
    {"userId": "u2"},
    {"role": "client"},
    {"userId": "", "role": "client"},
    {"userId": "u2", "role": ""},
    {"userId": 5, "role": "client"},
    {"userId": {"a": 1}, "role": "client"},
    {"userId": ["x"], "role": "client"},
    None,
])
def test_missing_fields_rejected_without_backend_call(client, backend, login_as, payload):
    login_as("manager")
    if payload is None:
        r = client.post(URL, data="not json", content_type="application/json")
    else:
        r = client.post(URL, json=payload)
    assert r.status_code == 400
    assert r.get_json() == {"success": False, "message": "User ID and role are required"}
    assert backend.calls_named("rpc") == []


@pytest.mark.parametrize("role", ["admin", "Manager", "staff", "manager ", 42])
def test_invalid_role_rejected_without_backend_call(client, backend, login_as, role):
    login_as("manager")
    r = client.post(URL, json={"userId": "u2", "role": role})
    assert r.status_code == 400
    assert r.get_json() == {"success": False, "message": "Invalid role"}
    assert backend.calls_named("rpc") == []


def test_success_returns_backend_payload(client, backend, login_as):
    login_as("manager", user_id="mgr-1")
    backend.rpc_result = {"id": "u2", "role": "financial_inspector"}

    r = client.post(URL, json={"userId": "u2", "role": "financial_inspector"})

    assert r.status_code == 200
    assert r.get_json() == {
        "success": True,
        "data": {"id": "u2", "role": "financial_inspector"},
        "message": "User role updated successfully",
    }
    assert backend.calls_named("rpc") == [
        ("rpc", "update_user_role", {"user_id": "u2", "new_role": "financial_inspector"}, "token-mgr-1"),
    ]


def test_backend_error_message_is_surfaced_and_logged(client, backend, login_as, log_messages):
    login_as("manager")
    backend.rpc_error = BackendError("constraint violated")

    r = client.post(URL, json={"userId": "u2", "role": "client"})

    assert r.status_code == 500
    assert r.get_json() == {"success": False, "message": "constraint violated"}
    assert any("constraint violated" in m for m in log_messages)


def test_unexpected_exception_is_hidden_and_logged(client, backend, login_as, log_messages):
    login_as("manager")
    backend.rpc_error = RuntimeError("socket exploded")

    r = client.post(URL, json={"userId": "u2", "role": "client"})

    assert r.status_code == 500
    assert r.get_json() == {"success": False, "message": "Internal server error"}
    assert "socket exploded" not in r.get_data(as_text=True)
    assert any("socket exploded" in m for m in log_messages)
