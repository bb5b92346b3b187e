"""Pydantic request/response models for charge endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..models.domain import ChargeStatus, PaymentMethod, ServiceType


class ChargeCreate(BaseModel):
    """Input for a new charge.

    Only shapes are checked here; business rules (discount range, positive
    exchange rate, known service type) are enforced by the charge builder.
    """

    model_config = ConfigDict(allow_inf_nan=False)

    customer_id: str = Field(..., description="Identifier of the customer being charged.")
    service_type: str = Field(..., description="maritimo, aereo_standard, aereo_express or otro.")
    trackings: Union[str, List[str]] = Field(..., description="One tracking code or a list of them.")
    description: str = ""
    weight: float = Field(..., description="Physical weight in pounds.")
    volumetric_weight: Optional[float] = None
    billable_weight: float = Field(..., description="Weight actually charged, in pounds.")
    discount: float = Field(default=0.0, description="Discount percentage between 0 and 100.")
    exchange_rate: Optional[float] = Field(default=None, description="Lempiras per US dollar.")
    custom_cost: Optional[float] = Field(
        default=None,
        description="Pre-negotiated local-currency cost, required when service_type is 'otro'.",
    )
    charged_at: Optional[datetime] = None
    notes: Optional[str] = None


class ChargeUpdate(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    service_type: Optional[str] = None
    trackings: Optional[Union[str, List[str]]] = None
    description: Optional[str] = None
    weight: Optional[float] = None
    volumetric_weight: Optional[float] = None
    billable_weight: Optional[float] = None
    discount: Optional[float] = None
    exchange_rate: Optional[float] = None
    custom_cost: Optional[float] = None
    charged_at: Optional[datetime] = None
    notes: Optional[str] = None


class ChargePayment(BaseModel):
    payment_method: PaymentMethod
    paid_at: Optional[datetime] = None


class ChargeModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    customer_id: str
    customer_name: str
    service_type: ServiceType
    trackings: List[str]
    description: str
    weight: float
    volumetric_weight: Optional[float] = None
    billable_weight: float
    applied_rate: float
    shipping_cost: float
    discount: float
    total: float
    status: ChargeStatus
    payment_method: Optional[PaymentMethod] = None
    charged_at: datetime
    paid_at: Optional[datetime] = None
    notes: Optional[str] = None
    exchange_rate: float
    week: int
    year: int
    created_at: datetime
    updated_at: datetime


class PaginationModel(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class ChargeEnvelope(BaseModel):
    success: bool = True
    data: ChargeModel
    message: Optional[str] = None


class ChargeListEnvelope(BaseModel):
    success: bool = True
    data: List[ChargeModel]
    pagination: PaginationModel


class DashboardSummaryModel(BaseModel):
    total_charges: int
    pending_charges: int
    paid_charges: int
    month_revenue: float


class ServiceBreakdownModel(BaseModel):
    service_type: str
    count: int
    total: float


class DashboardStatsModel(BaseModel):
    summary: DashboardSummaryModel
    services: List[ServiceBreakdownModel]


class DashboardStatsEnvelope(BaseModel):
    success: bool = True
    data: DashboardStatsModel
