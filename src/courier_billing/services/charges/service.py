"""Charge lifecycle: listing, updates, payment, cancellation and deletion."""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Optional

from ...errors import ConflictError, NotFoundError, ValidationError
from ...models.domain import ChargeRecord, ChargeStatus, PaymentMethod, ServiceType, utcnow
from ...persistence import ChargeRepository
from ...schemas.charges import ChargeUpdate
from ..tariffs import coerce_service_type
from .builder import (
    normalize_trackings,
    price_charge,
    validate_description,
    validate_discount,
    validate_exchange_rate,
    validate_weight,
)
from .periods import billing_period, localize

logger = logging.getLogger(__name__)

_PRICING_FIELDS = {"service_type", "billable_weight", "discount", "exchange_rate", "custom_cost"}


def list_charges(
    charges: ChargeRepository,
    *,
    status: Optional[ChargeStatus] = None,
    customer_id: Optional[str] = None,
    page: int = 1,
    limit: int = 50,
) -> tuple[list[ChargeRecord], dict[str, int]]:
    """Newest charges first, with ``{total, page, limit, pages}`` pagination."""

    if page < 1 or limit < 1:
        raise ValidationError("page and limit must be positive")
    filters: dict[str, Any] = {}
    if status is not None:
        filters["status"] = status
    if customer_id:
        filters["customer_id"] = customer_id

    items = charges.find(filters, sort="charged_at", descending=True, limit=limit, skip=(page - 1) * limit)
    total = charges.count_documents(filters)
    pagination = {
        "total": total,
        "page": page,
        "limit": limit,
        "pages": math.ceil(total / limit),
    }
    return items, pagination


def get_charge(charge_id: str, charges: ChargeRepository) -> ChargeRecord:
    charge = charges.find_by_id(charge_id)
    if charge is None:
        raise NotFoundError(f"Charge '{charge_id}' not found")
    return charge


def update_charge(charge_id: str, payload: ChargeUpdate, charges: ChargeRepository) -> ChargeRecord:
    """Apply a partial update, re-pricing and re-deriving the billing period as needed."""

    current = get_charge(charge_id, charges)
    requested = payload.model_dump(exclude_unset=True)
    changes: dict[str, Any] = {}

    if "trackings" in requested:
        changes["trackings"] = normalize_trackings(requested["trackings"])
    if "description" in requested:
        changes["description"] = validate_description(requested["description"])
    if "weight" in requested:
        changes["weight"] = validate_weight("Weight", requested["weight"])
    if "volumetric_weight" in requested:
        changes["volumetric_weight"] = validate_weight(
            "Volumetric weight", requested["volumetric_weight"], required=False
        )
    if "notes" in requested:
        changes["notes"] = requested["notes"]

    if _PRICING_FIELDS & requested.keys():
        service_type = (
            coerce_service_type(requested["service_type"])
            if requested.get("service_type") is not None
            else current.service_type
        )
        billable_weight = validate_weight(
            "Billable weight", requested.get("billable_weight", current.billable_weight)
        )
        discount = validate_discount(requested.get("discount", current.discount))
        exchange_rate = validate_exchange_rate(requested.get("exchange_rate", current.exchange_rate))
        custom_cost = requested.get("custom_cost")
        if custom_cost is None and current.service_type is ServiceType.OTHER:
            # custom-rate charges store their negotiated cost as the applied rate
            custom_cost = current.applied_rate
        pricing = price_charge(service_type, billable_weight, discount, exchange_rate, custom_cost)
        changes.update(
            service_type=service_type,
            billable_weight=billable_weight,
            discount=discount,
            exchange_rate=exchange_rate,
            applied_rate=pricing.applied_rate,
            shipping_cost=pricing.shipping_cost,
            total=pricing.total,
        )

    if "charged_at" in requested:
        if requested["charged_at"] is None:
            raise ValidationError("Charge date cannot be cleared")
        charged_at = localize(requested["charged_at"])
        week, year = billing_period(charged_at)
        changes.update(charged_at=charged_at, week=week, year=year)

    if not changes:
        return current

    changes["updated_at"] = utcnow()
    updated = charges.update_by_id(charge_id, changes)
    if updated is None:
        raise NotFoundError(f"Charge '{charge_id}' not found")
    logger.info(f"Updated charge {charge_id}: {', '.join(sorted(requested))}")
    return updated


def _transition(
    charge_id: str,
    charges: ChargeRepository,
    target: ChargeStatus,
    extra: dict[str, Any],
) -> ChargeRecord:
    current = get_charge(charge_id, charges)
    if current.status is not ChargeStatus.PENDING:
        raise ConflictError(
            f"Charge '{charge_id}' is {current.status.value}; only pending charges can become {target.value}"
        )
    updated = charges.update_by_id(charge_id, {"status": target, "updated_at": utcnow(), **extra})
    if updated is None:
        raise NotFoundError(f"Charge '{charge_id}' not found")
    return updated


def mark_charge_paid(
    charge_id: str,
    charges: ChargeRepository,
    payment_method: PaymentMethod,
    paid_at: Optional[datetime] = None,
) -> ChargeRecord:
    paid = _transition(
        charge_id,
        charges,
        ChargeStatus.PAID,
        {"payment_method": PaymentMethod(payment_method), "paid_at": localize(paid_at or utcnow())},
    )
    logger.info(f"Charge {charge_id} paid by {paid.payment_method.value}")
    return paid


def cancel_charge(charge_id: str, charges: ChargeRepository) -> ChargeRecord:
    cancelled = _transition(charge_id, charges, ChargeStatus.CANCELLED, {})
    logger.info(f"Charge {charge_id} cancelled")
    return cancelled


def delete_charge(charge_id: str, charges: ChargeRepository) -> None:
    if not charges.delete_by_id(charge_id):
        raise NotFoundError(f"Charge '{charge_id}' not found")
    logger.info(f"Deleted charge {charge_id}")
