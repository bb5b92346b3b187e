"""Request-scoped dependencies for the API routers."""

from __future__ import annotations

from ..persistence import (
    ChargeRepository,
    CustomerRepository,
    get_charge_repository,
    get_customer_repository,
)


def customer_repository() -> CustomerRepository:
    return get_customer_repository()


def charge_repository() -> ChargeRepository:
    return get_charge_repository()
