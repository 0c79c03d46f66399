from functools import wraps

from flask import flash, redirect, request
from loguru import logger

from rental_manager.services.common import current_user
from rental_manager.utils.access_guard import AccessGuard, GuardState
from rental_manager.utils.constants import ALL_ROLES, Role
from rental_manager.utils.responses import forbidden, server_error, unauthorized


def role_required(*roles):
    """Page guard: redirect visitors whose role is not in `roles`."""
    allowed = [Role(r) for r in roles]

    def deco(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            targets = []
            guard = AccessGuard(allowed, navigate=targets.append, path=request.full_path.rstrip("?"))
            state = guard.settle(current_user())
            if targets:
                if state is GuardState.REDIRECTING_UNAUTHENTICATED:
                    flash("Please login first")
                else:
                    flash("Insufficient permission")
                return redirect(targets[0])
            return fn(*args, **kwargs)

        return wrapper

    return deco


def login_required(fn):
    return role_required(*ALL_ROLES)(fn)


def api_roles_required(*roles, auth_message="You must be logged in to access this resource",
                       role_message="You do not have permission to access this resource"):
    """
    JSON endpoint guard. Unauthenticated callers get 401, callers outside
    `roles` get 403; the view then runs with the current user as first arg.
    """
    allowed = {Role(r) for r in roles}

    def deco(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            user = current_user()
            if user is None:
                return unauthorized(auth_message)
            if user.role not in allowed:
                logger.info(f"{request.path}: role {user.role.value} denied for user {user.user_id}")
                return forbidden(role_message)
            try:
                return fn(user, *args, **kwargs)
            except Exception:
                logger.exception(f"Unhandled error in {request.method} {request.path}")
                return server_error()

        return wrapper

    return deco
