from flask import Blueprint, current_app, request
from loguru import logger

from ..exceptions import (
    AccessDeniedError,
    BackendError,
    InvalidRoleError,
    RentalNotFoundError,
    RentalValidationError,
)
from ..services.common import _backend, access_token
from ..services.contract_service import ContractService
from ..services.document_service import DocumentService
from ..services.financial_service import FinancialService
from ..services.inspection_service import InspectionService
from ..services.user_service import UserService
from ..utils.constants import ALL_ROLES, Role
from ..utils.decorators import api_roles_required
from ..utils.responses import bad_request, forbidden, server_error, success_response

bp = Blueprint("api", __name__, url_prefix="/api")


def _json_body() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


# ---------- Users ----------
@bp.post("/users/update-role")
@api_roles_required(
    Role.MANAGER,
    auth_message="You must be logged in to update user roles",
    role_message="Only managers can update user roles",
)
def update_user_role(user):
    """Change another user's role. Only the backend procedure mutates roles."""
    try:
        body = _json_body()
        user_id = body.get("userId")
        role = body.get("role")
        if not user_id or not isinstance(user_id, str) or not role:
            return bad_request("User ID and role are required")

        try:
            data = UserService.update_role(_backend(), user_id, role, token=access_token())
        except InvalidRoleError as e:
            return bad_request(e.message)
        except BackendError as e:
            logger.error(f"Error updating user role for {user_id}: {e.message}")
            return server_error(e.message)

        return success_response(data, "User role updated successfully")
    except Exception:
        logger.exception("Error in update role API")
        return server_error()


# ---------- Financial ----------
@bp.post("/financial")
@api_roles_required(
    Role.FINANCIAL_INSPECTOR, Role.MANAGER,
    auth_message="You must be logged in to update financial information",
    role_message="You do not have permission to update financial information",
)
def update_financial(user):
    try:
        updates = FinancialService.update(_backend(), _json_body(), token=access_token())
    except RentalValidationError as e:
        return bad_request(e.message)
    except BackendError as e:
        logger.error(f"Error updating financial information: {e.message}")
        return server_error("Failed to update financial information")
    return success_response(updates, "Financial information updated successfully")


@bp.get("/financial")
@api_roles_required(*ALL_ROLES, auth_message="You must be logged in to view financial information")
def get_financial(user):
    try:
        data = FinancialService.fetch(_backend(), request.args.get("rental_request_id"), user,
                                      token=access_token())
    except RentalValidationError as e:
        return bad_request(e.message)
    except AccessDeniedError as e:
        return forbidden(e.message)
    except (BackendError, RentalNotFoundError) as e:
        logger.error(f"Error fetching financial information: {e.message}")
        return server_error("Failed to fetch financial information")
    return success_response(data)


# ---------- Inspections ----------
@bp.post("/inspections")
@api_roles_required(
    Role.EQUIPMENT_INSPECTOR, Role.MANAGER,
    auth_message="You must be logged in to submit an inspection",
    role_message="You do not have permission to submit inspections",
)
def submit_inspection(user):
    try:
        data = InspectionService.submit(_backend(), _json_body(), user, token=access_token())
    except RentalValidationError as e:
        return bad_request(e.message)
    except BackendError as e:
        logger.error(f"Error submitting inspection: {e.message}")
        return server_error("Failed to submit inspection")
    return success_response(data, "Inspection submitted successfully")


@bp.get("/inspections")
@api_roles_required(
    Role.CLIENT, Role.EQUIPMENT_INSPECTOR, Role.MANAGER,
    auth_message="You must be logged in to view inspections",
)
def list_inspections(user):
    try:
        data = InspectionService.list_for(
            _backend(), user,
            rental_request_id=request.args.get("rental_request_id"),
            inspection_type=request.args.get("inspection_type"),
            token=access_token(),
        )
    except BackendError as e:
        logger.error(f"Error fetching inspections: {e.message}")
        return server_error("Failed to fetch inspections")
    return success_response(data)


# ---------- Contracts ----------
@bp.post("/contracts")
@api_roles_required(
    Role.MANAGER,
    auth_message="You must be logged in to generate contracts",
    role_message="Only managers can generate contracts",
)
def generate_contract(user):
    try:
        url = ContractService.generate(_backend(), _json_body().get("rental_request_id"),
                                       current_app.config["CONTRACTS_BASE_URL"], token=access_token())
    except RentalValidationError as e:
        return bad_request(e.message)
    except RentalNotFoundError as e:
        return server_error(e.message)
    except BackendError as e:
        logger.error(f"Error generating contract: {e.message}")
        return server_error("Failed to update rental request with contract URL")
    return success_response({"contractUrl": url}, "Contract generated successfully")


@bp.patch("/contracts")
@api_roles_required(
    Role.MANAGER,
    auth_message="You must be logged in to update contract status",
    role_message="Only managers can update contract status",
)
def update_contract_status(user):
    body = _json_body()
    try:
        ContractService.set_status(_backend(), body.get("rental_request_id"), body.get("contract_status"),
                                   token=access_token())
    except RentalValidationError as e:
        return bad_request(e.message)
    except BackendError as e:
        logger.error(f"Error updating contract status: {e.message}")
        return server_error("Failed to update contract status")
    return success_response(None, "Contract status updated successfully")


# ---------- Documents ----------
@bp.post("/documents")
@api_roles_required(*ALL_ROLES, auth_message="You must be logged in to upload documents")
def upload_documents(user):
    try:
        urls = DocumentService.upload(
            _backend(), user,
            request.form.get("rental_request_id"),
            request.form.get("document_type"),
            request.files.getlist("files"),
            token=access_token(),
        )
    except RentalValidationError as e:
        return bad_request(e.message)
    except AccessDeniedError as e:
        return forbidden(e.message)
    except BackendError as e:
        logger.error(f"Error uploading documents: {e.message}")
        return server_error("Failed to upload file")
    return success_response({"urls": urls}, "Documents uploaded successfully")
