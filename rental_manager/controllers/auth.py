from flask import Blueprint, flash, redirect, render_template, request, session, url_for
from loguru import logger

from ..exceptions import AuthenticationError, BackendError
from ..services.common import _backend, access_token, current_user, login_session
from ..services.user_service import UserService

bp = Blueprint("auth", __name__, url_prefix="/")


def _safe_next(target: str) -> str:
    """Only same-site absolute paths are followed after login."""
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return url_for("views.home")


@bp.before_app_request
def bounce_signed_in_users():
    """Signed-in users have no business on the login/register pages."""
    if request.endpoint in ("auth.login_form", "auth.register_form") and current_user():
        return redirect(url_for("views.home"))
    return None


@bp.get("login")
def login_form():
    return render_template("auth/login.html", next=request.args.get("redirect", ""))


@bp.post("login")
def login_submit():
    email = request.form.get("email", "").strip()
    password = request.form.get("password", "")
    next_path = request.form.get("redirect") or request.args.get("redirect", "")

    try:
        user, token = UserService.sign_in(_backend(), email, password)
    except AuthenticationError as e:
        logger.info(f"Login failed for {email or '<empty>'}: {e.message}")
        flash("Invalid credentials", "danger")
        return redirect(url_for("auth.login_form", redirect=next_path or None))

    login_session(user, token)
    logger.info(f"User {user.user_id} signed in as {user.role.value}")
    return redirect(_safe_next(next_path))


@bp.get("register")
def register_form():
    return render_template("auth/register.html")


@bp.post("register")
def register_submit():
    form = request.form
    try:
        UserService.register(
            _backend(),
            name=form.get("name", ""),
            email=form.get("email", ""),
            password=form.get("password", ""),
            phone=form.get("phone", ""),
        )
    except AuthenticationError as e:
        flash(e.message, "danger")
        return redirect(url_for("auth.register_form"))

    flash("Registration successful. Please check your email and login.", "success")
    return redirect(url_for("auth.login_form"))


@bp.get("logout")
def logout():
    _backend().sign_out(access_token())
    session.clear()
    flash("Logged out")
    return redirect(url_for("auth.login_form"))


@bp.get("forgot-password")
def forgot_password_form():
    return render_template("auth/forgot_password.html")


@bp.post("forgot-password")
def forgot_password_submit():
    email = (request.form.get("email") or "").strip().lower()
    if not email:
        flash("Email is required.", "danger")
        return redirect(url_for("auth.forgot_password_form"))
    try:
        _backend().send_password_reset(email, url_for("auth.login_form", _external=True))
    except BackendError as e:
        logger.error(f"Password reset for {email} failed: {e.message}")
    # Same answer whether or not the account exists.
    flash("If an account exists for that email, a reset link has been sent.", "info")
    return redirect(url_for("auth.login_form"))
