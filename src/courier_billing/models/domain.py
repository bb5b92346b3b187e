"""Domain models for customers and charge records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4


class ServiceType(str, Enum):
    MARITIME = "maritimo"
    AIR_STANDARD = "aereo_standard"
    AIR_EXPRESS = "aereo_express"
    OTHER = "otro"


class ChargeStatus(str, Enum):
    PENDING = "pendiente"
    PAID = "pagado"
    CANCELLED = "cancelado"


class PaymentMethod(str, Enum):
    CASH = "efectivo"
    TRANSFER = "transferencia"
    CARD = "tarjeta"


def new_id() -> str:
    return uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class Customer:
    """A locker holder. Locker code, email and identity are unique."""

    locker_code: str
    name: str
    email: str
    phone: str
    identity: str
    address: str
    id: str = field(default_factory=new_id)
    registered_at: datetime = field(default_factory=utcnow)
    active: bool = True
    balance: float = 0.0


@dataclass(slots=True)
class ChargeRecord:
    """A billed shipment.

    ``customer_name`` is a snapshot taken at creation so invoices stay stable
    when the customer is later renamed. ``week`` and ``year`` are derived from
    ``charged_at`` on every write and are not set by callers.
    """

    customer_id: str
    customer_name: str
    service_type: ServiceType
    trackings: list[str]
    description: str
    weight: float
    billable_weight: float
    applied_rate: float
    shipping_cost: float
    total: float
    exchange_rate: float
    charged_at: datetime
    week: int
    year: int
    volumetric_weight: Optional[float] = None
    discount: float = 0.0
    status: ChargeStatus = ChargeStatus.PENDING
    payment_method: Optional[PaymentMethod] = None
    paid_at: Optional[datetime] = None
    notes: Optional[str] = None
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def discount_amount(self) -> float:
        return self.shipping_cost * self.discount / 100
