"""Assemble and persist new charge records."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Union

from ...errors import NotFoundError, ValidationError
from ...models.domain import ChargeRecord, ChargeStatus, ServiceType, utcnow
from ...persistence import ChargeRepository, CustomerRepository
from ...schemas.charges import ChargeCreate
from ..tariffs import Currency, coerce_service_type, quote_tariff
from .periods import billing_period, localize

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ChargePricing:
    """Local-currency amounts stored on a charge."""

    applied_rate: float
    shipping_cost: float
    total: float


def normalize_trackings(value: Union[str, Iterable[str], None]) -> list[str]:
    """Coerce a scalar into a one-element list and drop blank entries."""

    if value is None:
        items: list[str] = []
    elif isinstance(value, str):
        items = [value]
    else:
        items = list(value)
    trackings = [str(item).strip() for item in items if item is not None and str(item).strip()]
    if not trackings:
        raise ValidationError("At least one tracking code is required")
    return trackings


def validate_discount(discount: Optional[float]) -> float:
    value = 0.0 if discount is None else float(discount)
    if not math.isfinite(value) or not 0 <= value <= 100:
        raise ValidationError("Discount must be between 0 and 100 percent")
    return value


def validate_exchange_rate(exchange_rate: Optional[float]) -> float:
    if exchange_rate is None:
        raise ValidationError("Exchange rate is required")
    if not math.isfinite(exchange_rate) or exchange_rate <= 0:
        raise ValidationError("Exchange rate must be a finite number greater than zero")
    return float(exchange_rate)


def validate_weight(name: str, value: Optional[float], *, required: bool = True) -> Optional[float]:
    if value is None:
        if required:
            raise ValidationError(f"{name} is required")
        return None
    if not math.isfinite(value) or value < 0:
        raise ValidationError(f"{name} must be a finite number, zero or greater")
    return float(value)


def validate_description(value: Optional[str]) -> str:
    description = (value or "").strip()
    if not description:
        raise ValidationError("Description is required")
    return description


def price_charge(
    service_type: ServiceType,
    billable_weight: float,
    discount: float,
    exchange_rate: float,
    custom_cost: Optional[float] = None,
) -> ChargePricing:
    """Quote the tariff, convert dollar tiers to lempiras, then apply the discount."""

    quote = quote_tariff(service_type, billable_weight, custom_cost)
    shipping_cost = quote.cost
    if quote.currency is Currency.FOREIGN:
        shipping_cost = quote.cost * exchange_rate
    total = shipping_cost - shipping_cost * discount / 100
    return ChargePricing(applied_rate=quote.unit_rate, shipping_cost=shipping_cost, total=total)


def create_charge(
    payload: ChargeCreate,
    customers: CustomerRepository,
    charges: ChargeRepository,
    *,
    now: Optional[datetime] = None,
) -> ChargeRecord:
    customer = customers.find_by_id(payload.customer_id)
    if customer is None:
        raise NotFoundError(f"Customer '{payload.customer_id}' not found")

    service_type = coerce_service_type(payload.service_type)
    trackings = normalize_trackings(payload.trackings)
    description = validate_description(payload.description)
    weight = validate_weight("Weight", payload.weight)
    volumetric_weight = validate_weight("Volumetric weight", payload.volumetric_weight, required=False)
    billable_weight = validate_weight("Billable weight", payload.billable_weight)
    discount = validate_discount(payload.discount)
    exchange_rate = validate_exchange_rate(payload.exchange_rate)

    pricing = price_charge(service_type, billable_weight, discount, exchange_rate, payload.custom_cost)

    charged_at = localize(payload.charged_at or now or utcnow())
    week, year = billing_period(charged_at)

    record = ChargeRecord(
        customer_id=customer.id,
        customer_name=customer.name,
        service_type=service_type,
        trackings=trackings,
        description=description,
        weight=weight,
        volumetric_weight=volumetric_weight,
        billable_weight=billable_weight,
        applied_rate=pricing.applied_rate,
        shipping_cost=pricing.shipping_cost,
        discount=discount,
        total=pricing.total,
        status=ChargeStatus.PENDING,
        charged_at=charged_at,
        notes=payload.notes,
        exchange_rate=exchange_rate,
        week=week,
        year=year,
    )
    created = charges.create(record)
    logger.info(
        f"Created charge {created.id} for customer {customer.locker_code}: "
        f"{service_type.value} {billable_weight:.2f} lb, total {created.total:.2f} (week {week}/{year})"
    )
    return created
