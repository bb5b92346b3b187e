"""Tariff engine exports."""

from .engine import (
    TARIFF_SCHEDULE,
    Currency,
    FlatPrice,
    PerUnitPrice,
    TariffQuote,
    TariffTier,
    coerce_service_type,
    describe_rate,
    quote_tariff,
)

__all__ = [
    "TARIFF_SCHEDULE",
    "Currency",
    "FlatPrice",
    "PerUnitPrice",
    "TariffQuote",
    "TariffTier",
    "coerce_service_type",
    "describe_rate",
    "quote_tariff",
]
