"""Customer service helpers."""

from .registry import (
    deactivate_customer,
    get_customer,
    get_customer_detail,
    list_customers,
    register_customer,
    search_active_customers,
    update_customer,
)

__all__ = [
    "deactivate_customer",
    "get_customer",
    "get_customer_detail",
    "list_customers",
    "register_customer",
    "search_active_customers",
    "update_customer",
]
