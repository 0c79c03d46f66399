from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from rental_manager.utils.constants import ContractStatus, RentalStatus, StageStatus


@dataclass
class EquipmentItem:
    id: str
    name: str
    daily_rate: float
    quantity: int = 1

    @classmethod
    def from_dict(cls, d: dict) -> "EquipmentItem":
        return cls(
            id=str(d.get("id") or ""),
            name=d.get("name") or "",
            daily_rate=float(d.get("daily_rate") or 0.0),
            quantity=int(d.get("quantity") or 1),
        )

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "daily_rate": self.daily_rate, "quantity": self.quantity}


@dataclass
class RentalRequest:
    """
    Shape of a `rental_requests` row. The backend owns these records;
    quantities, dates and costs are trusted to its constraints.
    """
    full_name: str
    email: str
    phone: str
    rental_start: str
    rental_end: str
    estimated_cost: float
    reference_number: str
    equipment_items: list = field(default_factory=list)
    delivery_option: str = "pickup"
    delivery_address: Optional[str] = None
    insurance: bool = False
    operator_needed: bool = False
    payment_method: str = "invoice"
    special_requirements: Optional[str] = None
    status: str = RentalStatus.PENDING
    document_urls: list = field(default_factory=list)
    id: Optional[str] = None
    user_id: Optional[str] = None
    created_at: Optional[str] = None

    # workflow columns
    payment_status: str = "pending"
    payment_amount: Optional[float] = None
    payment_date: Optional[str] = None
    payment_notes: Optional[str] = None
    contract_status: str = ContractStatus.PENDING
    contract_generated_url: Optional[str] = None
    initial_inspection_status: str = "pending"
    final_inspection_status: str = "pending"

    @classmethod
    def from_row(cls, row: dict) -> "RentalRequest":
        known = cls.__dataclass_fields__
        data = {k: v for k, v in row.items() if k in known}
        data["equipment_items"] = [EquipmentItem.from_dict(i) for i in (row.get("equipment_items") or [])]
        data["document_urls"] = row.get("document_urls") or []
        if data.get("id") is not None:
            data["id"] = str(data["id"])
        for key in ("full_name", "email", "phone", "rental_start", "rental_end", "reference_number"):
            data.setdefault(key, "")
        data.setdefault("estimated_cost", 0.0)
        return cls(**data)

    def to_row(self) -> dict:
        """Row payload for insert; unset optional columns are left out."""
        row = {
            "full_name": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "equipment_items": [i.to_dict() for i in self.equipment_items],
            "rental_start": self.rental_start,
            "rental_end": self.rental_end,
            "delivery_option": self.delivery_option,
            "delivery_address": self.delivery_address,
            "insurance": self.insurance,
            "operator_needed": self.operator_needed,
            "payment_method": self.payment_method,
            "special_requirements": self.special_requirements,
            "estimated_cost": self.estimated_cost,
            "status": self.status,
            "reference_number": self.reference_number,
            "user_id": self.user_id,
            "payment_status": self.payment_status,
            "contract_status": self.contract_status,
            "initial_inspection_status": self.initial_inspection_status,
            "final_inspection_status": self.final_inspection_status,
        }
        if self.document_urls:
            row["document_urls"] = list(self.document_urls)
        return {k: v for k, v in row.items() if v is not None}


def _stage(done: bool, started: bool = False) -> str:
    if done:
        return StageStatus.SUCCESS
    return StageStatus.WARNING if started else StageStatus.PENDING


@dataclass
class RentOrder:
    """Read-side projection of a RentalRequest for the orders table."""
    id: str
    reference: str
    customer: str
    date: str
    amount: float
    status: str
    payment_ready: str
    document_emitted: str
    initial_inspection: str
    rented: str
    returned_equipment: str
    final_inspection: str
    original: RentalRequest

    @classmethod
    def from_request(cls, req: RentalRequest, now: Optional[datetime] = None) -> "RentOrder":
        now = now or datetime.now()
        started = _starts_before(req.rental_start, now)
        initial_done = req.initial_inspection_status == "completed"
        final_done = req.final_inspection_status == "completed"
        returned = req.status == RentalStatus.COMPLETED or final_done
        return cls(
            id=req.id or "",
            reference=req.reference_number,
            customer=req.full_name,
            date=req.created_at or req.rental_start,
            amount=float(req.estimated_cost or 0.0),
            status=req.status,
            payment_ready=_stage(req.payment_status in ("paid", "completed"), req.payment_status == "partial"),
            document_emitted=_stage(req.contract_status == ContractStatus.SIGNED,
                                    req.contract_status == ContractStatus.GENERATED),
            initial_inspection=_stage(initial_done),
            rented=_stage(started and initial_done, started),
            returned_equipment=_stage(returned, _starts_before(req.rental_end, now) and not returned),
            final_inspection=_stage(final_done),
            original=req,
        )


def _starts_before(value: Optional[str], now: datetime) -> bool:
    """True if the ISO date/datetime `value` is not after `now` (naive compare on date)."""
    if not value:
        return False
    try:
        d = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return False
    return d.date() <= now.date()
