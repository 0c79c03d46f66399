from __future__ import annotations

from loguru import logger

from rental_manager.exceptions import AccessDeniedError, RentalNotFoundError, RentalValidationError
from rental_manager.models.backend import Backend
from rental_manager.models.user import AuthUser
from rental_manager.services.rental_service import RentalService
from rental_manager.utils.constants import PAYMENT_STATUSES, RentalStatus, Role

UPDATABLE_FIELDS = ("payment_status", "payment_amount", "payment_date", "payment_notes", "estimated_cost", "status")
BASIC_FIELDS = "id, reference_number, estimated_cost, status, payment_status"
FULL_FIELDS = BASIC_FIELDS + ", payment_amount, payment_date, payment_notes, payment_proof_urls"

# Numeric fields may legitimately be zero; the rest must be non-empty.
_NUMERIC_FIELDS = {"payment_amount", "estimated_cost"}


class FinancialService:
    """Payment fields of a rental request, visible according to role."""

    @staticmethod
    def collect_updates(payload: dict) -> dict:
        updates = {}
        for name in UPDATABLE_FIELDS:
            if name not in payload:
                continue
            value = payload[name]
            if name in _NUMERIC_FIELDS:
                if value is not None:
                    updates[name] = value
            elif value:
                updates[name] = value
        if "status" in updates and updates["status"] not in RentalStatus.ALL:
            raise RentalValidationError("Invalid status")
        if "payment_status" in updates and updates["payment_status"] not in PAYMENT_STATUSES:
            raise RentalValidationError("Invalid payment status")
        return updates

    @staticmethod
    def update(backend: Backend, payload: dict, token: str | None = None) -> dict:
        request_id = payload.get("rental_request_id")
        if not request_id:
            raise RentalValidationError("Missing rental_request_id")
        updates = FinancialService.collect_updates(payload)
        if not updates:
            raise RentalValidationError("No fields to update")
        backend.update_rental_request(request_id, updates, token=token)
        logger.info(f"Financial fields {sorted(updates)} updated on rental request {request_id}")
        return updates

    @staticmethod
    def fields_for(role: Role) -> str:
        if role in (Role.FINANCIAL_INSPECTOR, Role.MANAGER):
            return FULL_FIELDS
        return BASIC_FIELDS

    @staticmethod
    def fetch(backend: Backend, request_id, user: AuthUser, token: str | None = None) -> dict:
        if not request_id:
            raise RentalValidationError("Missing rental_request_id parameter")
        if user.role is Role.CLIENT and not RentalService.owns_request(backend, request_id, user, token):
            raise AccessDeniedError(
                "You do not have permission to view financial information for this rental request")
        row = backend.get_rental_request(request_id, columns=FinancialService.fields_for(user.role), token=token)
        if row is None:
            raise RentalNotFoundError()
        return row
