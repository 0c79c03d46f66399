"""Rental request submission, cost estimation and listing."""

import math
import random
import re
from datetime import datetime
from typing import Optional

from loguru import logger

from rental_manager.exceptions import RentalValidationError
from rental_manager.models.backend import Backend
from rental_manager.models.rental import EquipmentItem, RentalRequest, RentOrder
from rental_manager.models.user import AuthUser
from rental_manager.services.common import parse_datetime, round2, to_float_safe
from rental_manager.utils.constants import (
    DELIVERY_FEE,
    DELIVERY_OPTIONS,
    INSURANCE_RATE,
    OPERATOR_DAILY_FEE,
    PAYMENT_METHODS,
    RentalStatus,
    Role,
)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
EQUIPMENT_FIELD = re.compile(r"^equipmentItems\[(\d+)\]\[(\w+)\]$")
SECONDS_PER_DAY = 24 * 60 * 60


def rental_days(start: Optional[datetime], end: Optional[datetime]) -> int:
    """Whole days between start and end, rounding partial days up."""
    if not start or not end:
        return 0
    return math.ceil(abs((end - start).total_seconds()) / SECONDS_PER_DAY)


def estimate_cost(items, start, end, insurance: bool = False, operator: bool = False,
                  delivery_option: str = "pickup"):
    """
    Return (cost, breakdown) for a rental.
      - base: daily_rate * days * quantity summed over items
      - insurance: +10% of base
      - operator: +150 per day
      - delivery: +75 flat
    cost is None when there are no items or the period is empty.
    """
    days = rental_days(start, end)
    if not items or days <= 0:
        return None, {}

    breakdown = {}
    base = 0.0
    for item in items:
        item_cost = float(item.daily_rate) * days * int(item.quantity)
        breakdown[item.id] = round2(item_cost)
        base += item_cost

    cost = base
    if insurance:
        cost += base * INSURANCE_RATE
    if operator:
        cost += OPERATOR_DAILY_FEE * days
    if delivery_option == "delivery":
        cost += DELIVERY_FEE
    return round2(cost), breakdown


def generate_reference_number(rng=random) -> str:
    return f"RNT-{rng.randint(100000, 999999)}"


def parse_equipment_items(form) -> list:
    """Collect `equipmentItems[i][field]` form fields into EquipmentItem objects."""
    by_index: dict[int, dict] = {}
    for key in form.keys():
        m = EQUIPMENT_FIELD.match(key)
        if not m:
            continue
        idx, prop = int(m.group(1)), m.group(2)
        by_index.setdefault(idx, {"id": "", "name": "", "daily_rate": 0, "quantity": 1})[prop] = form.get(key)

    items = []
    for idx in sorted(by_index):
        raw = by_index[idx]
        rate = to_float_safe(raw.get("daily_rate"))
        try:
            qty = int(raw.get("quantity") or 1)
        except (TypeError, ValueError):
            qty = 0
        items.append(EquipmentItem(id=str(raw.get("id") or ""), name=raw.get("name") or "",
                                   daily_rate=rate if rate is not None else -1.0, quantity=qty))
    return items


def _flag(form, name: str) -> bool:
    return (form.get(name) or "").strip().lower() in ("1", "true", "on", "yes")


class RentalService:
    """Create and list rental requests."""

    @staticmethod
    def build_request(form, user: Optional[AuthUser] = None) -> RentalRequest:
        """Validate a submitted rental form; raise RentalValidationError on the first problems found."""
        errors = {}
        full_name = (form.get("fullName") or "").strip()
        email = (form.get("email") or "").strip()
        phone = (form.get("phone") or "").strip()
        start = parse_datetime(form.get("rentalStart"))
        end = parse_datetime(form.get("rentalEnd"))
        delivery_option = (form.get("deliveryOption") or "").strip()
        delivery_address = (form.get("deliveryAddress") or "").strip() or None
        payment_method = (form.get("paymentMethod") or "").strip()
        items = parse_equipment_items(form)

        if len(full_name) < 2:
            errors["fullName"] = "Full name must be at least 2 characters."
        if not EMAIL_PATTERN.match(email):
            errors["email"] = "Please enter a valid email address."
        if len(phone) < 10:
            errors["phone"] = "Please enter a valid phone number."
        if start is None:
            errors["rentalStart"] = "Start date is required."
        if end is None:
            errors["rentalEnd"] = "End date is required."
        if start and end and end <= start:
            errors["rentalEnd"] = "End date must be after start date."
        if delivery_option not in DELIVERY_OPTIONS:
            errors["deliveryOption"] = "Please select a delivery option."
        elif delivery_option == "delivery" and not delivery_address:
            errors["deliveryAddress"] = "Delivery address is required when delivery is selected"
        if payment_method not in PAYMENT_METHODS:
            errors["paymentMethod"] = "Please select a payment method."
        if not items:
            errors["equipmentItems"] = "Select at least one equipment item."
        elif any(i.daily_rate < 0 or i.quantity < 1 for i in items):
            errors["equipmentItems"] = "Equipment rates and quantities must be positive."
        if not _flag(form, "termsAccepted"):
            errors["termsAccepted"] = "You must accept the terms and conditions."

        if errors:
            raise RentalValidationError(next(iter(errors.values())), errors=errors)

        insurance = _flag(form, "insuranceOption")
        operator = _flag(form, "operatorNeeded")
        cost, _ = estimate_cost(items, start, end, insurance, operator, delivery_option)

        return RentalRequest(
            full_name=full_name,
            email=email,
            phone=phone,
            equipment_items=items,
            rental_start=start.isoformat(),
            rental_end=end.isoformat(),
            delivery_option=delivery_option,
            delivery_address=delivery_address if delivery_option == "delivery" else None,
            insurance=insurance,
            operator_needed=operator,
            payment_method=payment_method,
            special_requirements=(form.get("specialRequirements") or "").strip() or None,
            estimated_cost=cost or 0.0,
            status=RentalStatus.PENDING,
            reference_number=generate_reference_number(),
            user_id=user.user_id if user else None,
        )

    @staticmethod
    def submit(backend: Backend, form, user: Optional[AuthUser] = None, token: Optional[str] = None) -> RentalRequest:
        req = RentalService.build_request(form, user)
        row = backend.insert_rental_request(req.to_row(), token=token)
        logger.info(f"Rental request {req.reference_number} created (cost {req.estimated_cost})")
        return RentalRequest.from_row({**req.to_row(), **(row or {})})

    @staticmethod
    def requests_for(backend: Backend, user: AuthUser, token: Optional[str] = None) -> list:
        """Clients only see their own requests; every other role sees all of them."""
        if user.role is Role.CLIENT:
            if user.user_id:
                rows = backend.list_rental_requests(token=token, user_id=user.user_id)
            else:
                rows = backend.list_rental_requests(token=token, email=user.email)
        else:
            rows = backend.list_rental_requests(token=token)
        return [RentalRequest.from_row(r) for r in rows]

    @staticmethod
    def rent_orders(backend: Backend, user: AuthUser, token: Optional[str] = None, now=None) -> list:
        return [RentOrder.from_request(r, now=now) for r in RentalService.requests_for(backend, user, token)]

    @staticmethod
    def owns_request(backend: Backend, request_id, user: AuthUser, token: Optional[str] = None) -> bool:
        row = backend.get_rental_request(request_id, columns="user_id", token=token)
        return bool(row) and row.get("user_id") == user.user_id

    @staticmethod
    def equipment(backend: Backend, category: Optional[str] = None, token: Optional[str] = None) -> list:
        return backend.list_equipment(category=category, token=token)
