from flask import Blueprint, flash, render_template, request
from loguru import logger

from ..exceptions import BackendError
from ..services.common import _backend, access_token, current_user, to_float_safe
from ..services.rental_service import RentalService
from ..services.user_service import UserService
from ..utils.constants import Role
from ..utils.decorators import login_required, role_required

bp = Blueprint("views", __name__)


def _orders_for_current_user():
    """Rent orders visible to the signed-in user; an empty list when the backend fails."""
    try:
        return RentalService.rent_orders(_backend(), current_user(), token=access_token())
    except BackendError as e:
        logger.error(f"Error fetching rental requests: {e.message}")
        flash("Could not load rental requests.", "danger")
        return []


@bp.get("/")
@login_required
def home():
    return render_template("pages/home.html", orders=_orders_for_current_user(), user=current_user())


@bp.get("/my-orders")
@login_required
def my_orders():
    return render_template("pages/my_orders.html", orders=_orders_for_current_user(), user=current_user())


@bp.get("/profile")
@login_required
def profile():
    return render_template("pages/profile.html", user=current_user())


@bp.get("/rental-confirmation")
@login_required
def rental_confirmation():
    return render_template(
        "pages/rental_confirmation.html",
        reference=request.args.get("ref", ""),
        cost=to_float_safe(request.args.get("cost")),
    )


@bp.get("/inspections")
@role_required(Role.EQUIPMENT_INSPECTOR, Role.FINANCIAL_INSPECTOR, Role.MANAGER)
def inspections():
    return render_template("pages/inspections.html", orders=_orders_for_current_user())


@bp.get("/financial")
@role_required(Role.FINANCIAL_INSPECTOR, Role.MANAGER)
def financial():
    orders = _orders_for_current_user()
    total = sum(o.amount for o in orders)
    return render_template("pages/financial.html", orders=orders, total=total)


@bp.get("/admin/users")
@role_required(Role.MANAGER)
def admin_users():
    error = None
    users = []
    try:
        users = UserService.list_users(_backend(), token=access_token())
    except BackendError as e:
        logger.error(f"Error fetching users: {e.message}")
        error = "Could not load the user list. Check that you have administrator permissions."
    return render_template("pages/admin_users.html", users=users, roles=list(Role), error=error)


@bp.get("/tables")
@role_required(Role.MANAGER)
def tables():
    error = None
    names = []
    try:
        names = UserService.list_tables(_backend(), token=access_token())
    except BackendError as e:
        logger.error(f"Error listing tables: {e.message}")
        error = e.message
    return render_template("pages/tables.html", tables=names, error=error)


@bp.get("/unauthorized")
def unauthorized():
    return render_template("pages/unauthorized.html"), 403
