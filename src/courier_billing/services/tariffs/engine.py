"""Tiered shipping tariffs.

Each priced service has a weight threshold: at or below it a flat price
applies, above it a per-pound rate. The table deliberately mixes currencies
(maritime and air-standard flats are in lempiras, every per-pound rate and the
air-express flat are in dollars). The engine reports each cost in the
currency of its tier and never converts.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ...config import settings
from ...errors import ValidationError
from ...models.domain import ServiceType

CUSTOM_RATE_LABEL = "Tarifa personalizada"


class Currency(str, Enum):
    LOCAL = "HNL"
    FOREIGN = "USD"

    @property
    def symbol(self) -> str:
        if self is Currency.LOCAL:
            return settings.local_currency_symbol
        return settings.foreign_currency_symbol


@dataclass(frozen=True, slots=True)
class FlatPrice:
    amount: float
    currency: Currency


@dataclass(frozen=True, slots=True)
class PerUnitPrice:
    rate: float
    currency: Currency


Price = Union[FlatPrice, PerUnitPrice]


@dataclass(frozen=True, slots=True)
class TariffTier:
    label: str
    threshold: float
    flat: FlatPrice
    per_unit: PerUnitPrice

    def price_for(self, weight: float) -> Price:
        return self.flat if weight <= self.threshold else self.per_unit


@dataclass(frozen=True, slots=True)
class TariffQuote:
    description: str
    unit_rate: float
    cost: float
    currency: Currency


TARIFF_SCHEDULE: dict[ServiceType, TariffTier] = {
    ServiceType.MARITIME: TariffTier(
        label="Marítimo",
        threshold=4,
        flat=FlatPrice(350.00, Currency.LOCAL),
        per_unit=PerUnitPrice(2.70, Currency.FOREIGN),
    ),
    ServiceType.AIR_STANDARD: TariffTier(
        label="Aéreo Standard",
        threshold=2,
        flat=FlatPrice(350.00, Currency.LOCAL),
        per_unit=PerUnitPrice(5.50, Currency.FOREIGN),
    ),
    ServiceType.AIR_EXPRESS: TariffTier(
        label="Aéreo Express",
        threshold=1.5,
        flat=FlatPrice(12.00, Currency.FOREIGN),
        per_unit=PerUnitPrice(10.00, Currency.FOREIGN),
    ),
}


def coerce_service_type(value: Union[ServiceType, str]) -> ServiceType:
    if isinstance(value, ServiceType):
        return value
    try:
        return ServiceType(str(value).strip().lower())
    except ValueError as exc:
        allowed = ", ".join(item.value for item in ServiceType)
        raise ValidationError(f"Unknown service type '{value}'. Expected one of: {allowed}") from exc


def _money(currency: Currency, amount: float) -> str:
    if currency is Currency.LOCAL:
        return f"{currency.symbol} {amount:.2f}"
    return f"{currency.symbol}{amount:.2f}"


def describe_rate(service_type: Union[ServiceType, str], billable_weight: float) -> str:
    """Human-readable rate line, e.g. ``Marítimo 0-4 lb: L. 350.00``."""

    service = coerce_service_type(service_type)
    tier = TARIFF_SCHEDULE.get(service)
    if tier is None:
        return CUSTOM_RATE_LABEL
    price = tier.price_for(billable_weight)
    if isinstance(price, FlatPrice):
        return f"{tier.label} 0-{tier.threshold:g} lb: {_money(price.currency, price.amount)}"
    return f"{tier.label} {billable_weight:.2f} lb × {_money(price.currency, price.rate)}"


def quote_tariff(
    service_type: Union[ServiceType, str],
    billable_weight: float,
    custom_cost: Optional[float] = None,
) -> TariffQuote:
    """Price a shipment.

    ``custom_cost`` is the pre-negotiated local-currency amount for
    ``otro`` shipments and is ignored for every other service.
    """

    service = coerce_service_type(service_type)
    if billable_weight is None or not math.isfinite(billable_weight) or billable_weight < 0:
        raise ValidationError("Billable weight must be zero or greater")

    tier = TARIFF_SCHEDULE.get(service)
    if tier is None:
        if custom_cost is None or not math.isfinite(custom_cost) or custom_cost < 0:
            raise ValidationError("A non-negative custom cost is required for custom-rate shipments")
        return TariffQuote(
            description=CUSTOM_RATE_LABEL,
            unit_rate=float(custom_cost),
            cost=float(custom_cost),
            currency=Currency.LOCAL,
        )

    price = tier.price_for(billable_weight)
    description = describe_rate(service, billable_weight)
    if isinstance(price, FlatPrice):
        return TariffQuote(description, price.amount, price.amount, price.currency)
    return TariffQuote(description, price.rate, billable_weight * price.rate, price.currency)
