"""Customer-facing API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from .charges import ChargeModel


class CustomerCreate(BaseModel):
    locker_code: str
    name: str
    email: str
    phone: str
    identity: str
    address: str


class CustomerUpdate(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    locker_code: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    identity: Optional[str] = None
    address: Optional[str] = None
    balance: Optional[float] = None


class CustomerModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    locker_code: str
    name: str
    email: str
    phone: str
    identity: str
    address: str
    registered_at: datetime
    active: bool
    balance: float


class CustomerSummaryModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    locker_code: str
    email: str
    phone: str


class CustomerEnvelope(BaseModel):
    success: bool = True
    data: CustomerModel
    message: Optional[str] = None


class CustomerListEnvelope(BaseModel):
    success: bool = True
    count: int
    data: List[CustomerModel]


class CustomerSearchEnvelope(BaseModel):
    success: bool = True
    data: List[CustomerSummaryModel]


class CustomerDetailModel(BaseModel):
    customer: CustomerModel
    recent_charges: List[ChargeModel]


class CustomerDetailEnvelope(BaseModel):
    success: bool = True
    data: CustomerDetailModel
