from __future__ import annotations

import time

from loguru import logger

from rental_manager.exceptions import BackendError, RentalNotFoundError, RentalValidationError
from rental_manager.models.backend import Backend
from rental_manager.utils.constants import ContractStatus


class ContractService:
    """Rental contract generation and status tracking."""

    @staticmethod
    def contract_url(base_url: str, reference_number: str, now_ms: int | None = None) -> str:
        now_ms = int(time.time() * 1000) if now_ms is None else now_ms
        return f"{base_url.rstrip('/')}/{reference_number}_contract_{now_ms}.pdf"

    @staticmethod
    def generate(backend: Backend, request_id, base_url: str, token: str | None = None) -> str:
        """
        Attach a contract document URL to the rental request and mark the
        contract as generated. PDF rendering happens outside this app; only
        the URL is recorded here.
        """
        if not request_id:
            raise RentalValidationError("Missing rental_request_id")
        row = backend.get_rental_request(request_id, token=token)
        if row is None:
            raise RentalNotFoundError("Failed to fetch rental request data")
        url = ContractService.contract_url(base_url, row.get("reference_number") or str(request_id))
        backend.update_rental_request(
            request_id,
            {"contract_generated_url": url, "contract_status": ContractStatus.GENERATED},
            token=token,
        )
        logger.info(f"Contract generated for rental request {request_id}: {url}")
        return url

    @staticmethod
    def set_status(backend: Backend, request_id, status: str, token: str | None = None) -> None:
        if not request_id or not status:
            raise RentalValidationError("Missing required fields")
        if status not in ContractStatus.ALL:
            raise RentalValidationError("Invalid contract status")
        backend.update_rental_request(request_id, {"contract_status": status}, token=token)
