"""Repository contracts and storage adapters."""

from functools import lru_cache
import logging

from ..db.supabase import get_supabase_client
from .base import AggregateBucket, DateRange
from .charges import ChargeRepository, InMemoryChargeRepository, SupabaseChargeRepository
from .customers import CustomerRepository, InMemoryCustomerRepository, SupabaseCustomerRepository

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_customer_repository() -> CustomerRepository:
    """Supabase-backed store when configured, otherwise a process-local one."""
    client = get_supabase_client()
    if client is None:
        logger.warning("Supabase not configured - customers are kept in memory only")
        return InMemoryCustomerRepository()
    return SupabaseCustomerRepository(client)


@lru_cache(maxsize=1)
def get_charge_repository() -> ChargeRepository:
    """Supabase-backed store when configured, otherwise a process-local one."""
    client = get_supabase_client()
    if client is None:
        logger.warning("Supabase not configured - charges are kept in memory only")
        return InMemoryChargeRepository()
    return SupabaseChargeRepository(client)


def storage_backend() -> str:
    return "supabase" if get_supabase_client() is not None else "memory"


__all__ = [
    "AggregateBucket",
    "ChargeRepository",
    "CustomerRepository",
    "DateRange",
    "InMemoryChargeRepository",
    "InMemoryCustomerRepository",
    "SupabaseChargeRepository",
    "SupabaseCustomerRepository",
    "get_charge_repository",
    "get_customer_repository",
    "storage_backend",
]
