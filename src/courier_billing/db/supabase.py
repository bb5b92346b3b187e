"""Supabase client for the billing backend."""

import logging
from functools import lru_cache
from supabase import create_client, Client
from ..config import settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_supabase_client() -> Client | None:
    """Get cached Supabase client instance.

    Returns:
        Supabase Client instance if configured, None otherwise.
        Note: This does not test the connection - actual queries may fail with network errors.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logger.warning("Supabase credentials not configured (missing URL or key)")
        return None

    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logger.error(f"Failed to create Supabase client: {e}")
        return None


# Expected schema (unique indexes close the registration race):
#
# create table customers (
#   id text primary key,
#   locker_code text not null unique,
#   name text not null,
#   email text not null unique,
#   phone text not null,
#   identity text not null unique,
#   address text not null,
#   registered_at timestamptz not null default now(),
#   active boolean not null default true,
#   balance numeric not null default 0 check (balance >= 0)
# );
#
# create table charges (
#   id text primary key,
#   customer_id text not null references customers(id),
#   customer_name text not null,
#   service_type text not null,
#   trackings jsonb not null,
#   description text not null,
#   weight numeric not null,
#   volumetric_weight numeric,
#   billable_weight numeric not null,
#   applied_rate numeric not null,
#   shipping_cost numeric not null,
#   discount numeric not null default 0,
#   total numeric not null,
#   status text not null default 'pendiente',
#   payment_method text,
#   charged_at timestamptz not null,
#   paid_at timestamptz,
#   notes text,
#   exchange_rate numeric not null,
#   week int not null,
#   year int not null,
#   created_at timestamptz not null,
#   updated_at timestamptz not null
# );
