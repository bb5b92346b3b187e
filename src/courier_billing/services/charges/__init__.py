"""Charge service helpers."""

from .builder import create_charge, normalize_trackings, price_charge
from .periods import billing_period, month_window
from .service import (
    cancel_charge,
    delete_charge,
    get_charge,
    list_charges,
    mark_charge_paid,
    update_charge,
)
from .stats import compute_dashboard_stats

__all__ = [
    "billing_period",
    "cancel_charge",
    "compute_dashboard_stats",
    "create_charge",
    "delete_charge",
    "get_charge",
    "list_charges",
    "mark_charge_paid",
    "month_window",
    "normalize_trackings",
    "price_charge",
    "update_charge",
]
