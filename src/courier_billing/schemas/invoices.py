"""Invoice view-model consumed by the document renderer."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel


class InvoiceCompany(BaseModel):
    name: str
    tagline: str
    location: str
    footer: str


class InvoiceCustomer(BaseModel):
    name: str
    locker_code: str
    identity: str
    phone: str
    email: str
    address: str


class InvoiceLine(BaseModel):
    kind: Literal["charge", "discount", "total"]
    concept: str
    details: str
    weight: str
    amount: float
    amount_display: str


class InvoiceView(BaseModel):
    """Pre-formatted, literal fields only."""

    invoice_number: str
    charge_id: str
    issued_on: str
    status_label: str
    company: InvoiceCompany
    customer: InvoiceCustomer
    service_label: str
    billable_weight: str
    description: str
    exchange_rate: str
    rate_description: str
    trackings: List[str]
    lines: List[InvoiceLine]
    total: float
    total_display: str
    notes: Optional[str] = None
    generated_at: str
    filename: str


class InvoiceViewEnvelope(BaseModel):
    success: bool = True
    data: InvoiceView
