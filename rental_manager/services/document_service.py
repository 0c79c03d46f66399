from __future__ import annotations

import time

from loguru import logger
from werkzeug.utils import secure_filename

from rental_manager.exceptions import AccessDeniedError, RentalValidationError
from rental_manager.models.backend import Backend
from rental_manager.models.user import AuthUser
from rental_manager.services.rental_service import RentalService
from rental_manager.utils.constants import DOCUMENT_TYPES, FILES_BUCKET, Role


class DocumentService:
    """Uploads of client documents, payment proofs, inspection photos and contracts."""

    @staticmethod
    def storage_path(request_id, document_type: str, filename: str, now_ms: int | None = None) -> str:
        now_ms = int(time.time() * 1000) if now_ms is None else now_ms
        return f"{request_id}/{document_type}/{now_ms}_{secure_filename(filename) or 'upload'}"

    @staticmethod
    def upload(backend: Backend, user: AuthUser, request_id, document_type: str, files,
               token: str | None = None) -> list:
        """
        Store `files` (werkzeug FileStorage objects) and append their public
        URLs to the column matching `document_type`. Returns the new URLs.
        """
        files = [f for f in (files or []) if f and f.filename]
        if not request_id or not document_type or not files:
            raise RentalValidationError("Missing required fields")

        allowed_roles, column = DOCUMENT_TYPES.get(document_type, (set(), None))
        if user.role not in allowed_roles:
            raise AccessDeniedError("You do not have permission to upload this document type")
        if user.role is Role.CLIENT and not RentalService.owns_request(backend, request_id, user, token):
            raise AccessDeniedError("You do not have permission to upload documents for this rental request")

        urls = []
        for f in files:
            path = DocumentService.storage_path(request_id, document_type, f.filename)
            urls.append(backend.upload_file(FILES_BUCKET, path, f.read(),
                                            f.mimetype or "application/octet-stream", token=token))

        existing = backend.get_rental_request(request_id, columns=column, token=token) or {}
        backend.update_rental_request(request_id, {column: list(existing.get(column) or []) + urls}, token=token)
        logger.info(f"{len(urls)} {document_type} file(s) uploaded for rental request {request_id}")
        return urls
