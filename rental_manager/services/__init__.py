from .contract_service import ContractService
from .document_service import DocumentService
from .financial_service import FinancialService
from .inspection_service import InspectionService
from .rental_service import RentalService
from .user_service import UserService

__all__ = [
    "ContractService",
    "DocumentService",
    "FinancialService",
    "InspectionService",
    "RentalService",
    "UserService",
]
