# rental_manager/utils/constants.py

"""
Global constants for roles, statuses, and pricing.
These constants are imported by models, services and controllers.
"""

from enum import Enum


class Role(str, Enum):
    CLIENT = "client"
    EQUIPMENT_INSPECTOR = "equipment_inspector"
    FINANCIAL_INSPECTOR = "financial_inspector"
    MANAGER = "manager"

    @classmethod
    def parse(cls, value):
        """Return the matching Role or None when `value` is not a member."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except (TypeError, ValueError):
            return None


ALL_ROLES = frozenset(Role)


class RentalStatus:
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"

    ALL = (PENDING, APPROVED, REJECTED, COMPLETED)


class ContractStatus:
    PENDING = "pending"
    GENERATED = "generated"
    SIGNED = "signed"

    ALL = (PENDING, GENERATED, SIGNED)


class InspectionType:
    INITIAL = "initial"
    FINAL = "final"

    ALL = (INITIAL, FINAL)


class StageStatus:
    """Badge values shown per workflow stage of a rent order."""
    PENDING = "pending"
    WARNING = "warning"
    SUCCESS = "success"


# --- Rental form ---
DELIVERY_OPTIONS = ("pickup", "delivery")
PAYMENT_METHODS = ("credit", "debit", "invoice")
PAYMENT_STATUSES = ("pending", "paid", "partial", "completed")

# --- Pricing ---
INSURANCE_RATE = 0.10
OPERATOR_DAILY_FEE = 150.0
DELIVERY_FEE = 75.0

# --- Backend names ---
RENTAL_REQUESTS_TABLE = "rental_requests"
EQUIPMENT_TABLE = "equipments"
INSPECTIONS_TABLE = "equipment_inspections"
USERS_VIEW = "users_view"
UPDATE_ROLE_RPC = "update_user_role"
LIST_TABLES_RPC = "list_tables"
ADMIN_GET_USERS_RPC = "admin_get_users"
FILES_BUCKET = "rental-files"

# --- Page locations ---
LOGIN_PATH = "/login"
UNAUTHORIZED_PATH = "/unauthorized"

# --- Document uploads: document type -> (allowed roles, URL column) ---
DOCUMENT_TYPES = {
    "client-documents": ({Role.CLIENT, Role.MANAGER}, "document_urls"),
    "payment-proof": ({Role.CLIENT, Role.FINANCIAL_INSPECTOR, Role.MANAGER}, "payment_proof_urls"),
    "initial-inspection": ({Role.EQUIPMENT_INSPECTOR, Role.MANAGER}, "initial_inspection_image_urls"),
    "final-inspection": ({Role.EQUIPMENT_INSPECTOR, Role.MANAGER}, "final_inspection_image_urls"),
    "contracts": ({Role.MANAGER}, "contract_document_urls"),
}
