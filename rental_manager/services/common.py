"""Shared service helpers: request-scoped accessors and small parsers."""

from datetime import date, datetime
from typing import Optional

from flask import current_app, session

from rental_manager.models.backend import Backend
from rental_manager.models.user import AuthUser

SESSION_USER_KEY = "user"
SESSION_TOKEN_KEY = "access_token"


def _backend() -> Backend:
    """The backend handle configured on the running app."""
    return current_app.extensions["backend"]


def current_user() -> Optional[AuthUser]:
    return AuthUser.from_session(session.get(SESSION_USER_KEY))


def access_token() -> Optional[str]:
    return session.get(SESSION_TOKEN_KEY)


def login_session(user: AuthUser, token: str) -> None:
    session.clear()
    session[SESSION_USER_KEY] = user.to_session()
    session[SESSION_TOKEN_KEY] = token


def parse_datetime(value) -> Optional[datetime]:
    """Parse an ISO date or datetime string; None on empty or bad input."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    s = (value or "").strip() if isinstance(value, str) else ""
    if not s:
        return None
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        return None


def to_float_safe(value) -> Optional[float]:
    """Safely convert to float; return None if invalid."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def round2(x: float) -> float:
    return round(float(x), 2)
