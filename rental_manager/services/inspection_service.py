from __future__ import annotations

from datetime import datetime, timezone

from loguru import logger

from rental_manager.exceptions import RentalValidationError
from rental_manager.models.backend import Backend
from rental_manager.models.user import AuthUser
from rental_manager.utils.constants import InspectionType, Role


class InspectionService:
    """Initial/final equipment inspections attached to rental requests."""

    @staticmethod
    def submit(backend: Backend, payload: dict, inspector: AuthUser, token: str | None = None) -> list:
        request_id = payload.get("rental_request_id")
        equipment_id = payload.get("equipment_id")
        inspection_type = payload.get("inspection_type")
        if not request_id or not equipment_id or not inspection_type:
            raise RentalValidationError("Missing required fields")
        if inspection_type not in InspectionType.ALL:
            raise RentalValidationError("Invalid inspection type")

        row = {
            "rental_request_id": request_id,
            "equipment_id": equipment_id,
            "inspection_type": inspection_type,
            "inspection_date": payload.get("inspection_date") or datetime.now(timezone.utc).isoformat(),
            "inspector_id": inspector.user_id,
            "notes": payload.get("notes"),
            "image_urls": payload.get("image_urls") or [],
        }
        data = backend.insert_inspection(row, token=token)

        column = f"{inspection_type}_inspection_status"
        backend.update_rental_request(request_id, {column: "completed"}, token=token)
        logger.info(f"{inspection_type} inspection recorded for rental request {request_id} by {inspector.user_id}")
        return data

    @staticmethod
    def list_for(backend: Backend, user: AuthUser, rental_request_id=None, inspection_type=None,
                 token: str | None = None) -> list:
        """Clients are limited to inspections on their own rental requests."""
        request_ids = None
        if user.role is Role.CLIENT:
            own = backend.list_rental_requests(token=token, user_id=user.user_id)
            request_ids = [r["id"] for r in own if r.get("id") is not None]
            if not request_ids:
                return []
        return backend.list_inspections(token=token, rental_request_id=rental_request_id,
                                        inspection_type=inspection_type, request_ids=request_ids)
