from flask import Blueprint, flash, jsonify, redirect, render_template, request, url_for
from loguru import logger

from ..exceptions import BackendError, RentalValidationError
from ..services.common import _backend, access_token, current_user
from ..services.rental_service import RentalService
from ..utils.constants import DELIVERY_OPTIONS, PAYMENT_METHODS
from ..utils.decorators import login_required

bp = Blueprint("rentals", __name__, url_prefix="/")


@bp.get("/rentals/new")
@login_required
def new_rental():
    """Rental request form with the equipment catalogue."""
    try:
        equipment = RentalService.equipment(_backend(), token=access_token())
    except BackendError as e:
        logger.error(f"Error fetching equipment: {e.message}")
        equipment = []
    return render_template("rentals/new.html", equipment=equipment,
                           delivery_options=DELIVERY_OPTIONS, payment_methods=PAYMENT_METHODS)


@bp.post("/rentals")
@login_required
def submit_rental():
    """Create a pending rental request for the current user."""
    try:
        req = RentalService.submit(_backend(), request.form, current_user(), token=access_token())
    except RentalValidationError as e:
        flash(e.message, "danger")
        return redirect(url_for("rentals.new_rental"))
    except BackendError as e:
        logger.error(f"Error processing rental request: {e.message}")
        flash("Failed to submit rental request. Please try again.", "danger")
        return redirect(url_for("rentals.new_rental"))

    flash("Rental request submitted", "success")
    return redirect(url_for("views.rental_confirmation", ref=req.reference_number, cost=req.estimated_cost))


@bp.get("/equipment")
@login_required
def list_equipment():
    category = (request.args.get("category") or "").strip() or None
    try:
        items = RentalService.equipment(_backend(), category=category, token=access_token())
    except BackendError as e:
        logger.error(f"Error fetching equipment: {e.message}")
        items = []
    return jsonify(items)
