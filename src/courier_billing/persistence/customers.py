"""Customer persistence: repository contract plus Supabase and in-memory stores."""

from __future__ import annotations

import copy
import logging
import threading
from dataclasses import fields, replace
from typing import Any, Optional, Protocol

from ..config import settings
from ..errors import DuplicateValueError
from ..models.domain import Customer
from .base import Filters, apply_filters, fetch_all_rows, matches_filters, parse_timestamp, run_query

logger = logging.getLogger(__name__)

UNIQUE_CUSTOMER_FIELDS = ("locker_code", "email", "identity")
SEARCHABLE_CUSTOMER_FIELDS = ("name", "locker_code", "email", "identity")


class CustomerRepository(Protocol):
    """Storage contract for customers.

    Implementations must enforce uniqueness of locker code, email and identity
    as a hard constraint and raise ``DuplicateValueError`` on violation.
    """

    def find_by_id(self, customer_id: str) -> Optional[Customer]: ...

    def find_one(self, filters: Filters) -> Optional[Customer]: ...

    def find(
        self,
        filters: Optional[Filters] = None,
        *,
        search: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Customer]: ...

    def create(self, customer: Customer) -> Customer: ...

    def update_by_id(self, customer_id: str, changes: dict[str, Any]) -> Optional[Customer]: ...

    def save(self, customer: Customer) -> Customer: ...


def customer_to_row(customer: Customer) -> dict[str, Any]:
    return {
        "id": customer.id,
        "locker_code": customer.locker_code,
        "name": customer.name,
        "email": customer.email,
        "phone": customer.phone,
        "identity": customer.identity,
        "address": customer.address,
        "registered_at": customer.registered_at.isoformat(),
        "active": customer.active,
        "balance": customer.balance,
    }


def customer_from_row(row: dict[str, Any]) -> Customer:
    return Customer(
        id=str(row["id"]),
        locker_code=row["locker_code"],
        name=row["name"],
        email=row["email"],
        phone=row["phone"],
        identity=row["identity"],
        address=row["address"],
        registered_at=parse_timestamp(row["registered_at"]),
        active=bool(row.get("active", True)),
        balance=float(row.get("balance") or 0),
    )


def _matches_search(customer: Customer, search: str) -> bool:
    needle = search.lower()
    return any(needle in str(getattr(customer, name) or "").lower() for name in SEARCHABLE_CUSTOMER_FIELDS)


class InMemoryCustomerRepository:
    """Process-local customer store with the same unique constraints as the database."""

    def __init__(self) -> None:
        self._items: dict[str, Customer] = {}
        self._lock = threading.Lock()

    def find_by_id(self, customer_id: str) -> Optional[Customer]:
        customer = self._items.get(customer_id)
        return copy.deepcopy(customer) if customer else None

    def find_one(self, filters: Filters) -> Optional[Customer]:
        for customer in self._items.values():
            if matches_filters(customer, filters):
                return copy.deepcopy(customer)
        return None

    def find(
        self,
        filters: Optional[Filters] = None,
        *,
        search: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Customer]:
        results = [
            customer
            for customer in self._items.values()
            if matches_filters(customer, filters) and (not search or _matches_search(customer, search))
        ]
        results.sort(key=lambda customer: customer.registered_at, reverse=True)
        if limit is not None:
            results = results[:limit]
        return [copy.deepcopy(customer) for customer in results]

    def create(self, customer: Customer) -> Customer:
        with self._lock:
            self._check_unique(customer)
            self._items[customer.id] = copy.deepcopy(customer)
        return copy.deepcopy(customer)

    def update_by_id(self, customer_id: str, changes: dict[str, Any]) -> Optional[Customer]:
        allowed = {f.name for f in fields(Customer)} - {"id"}
        with self._lock:
            current = self._items.get(customer_id)
            if current is None:
                return None
            updated = replace(current, **{key: value for key, value in changes.items() if key in allowed})
            self._check_unique(updated)
            self._items[customer_id] = updated
        return copy.deepcopy(updated)

    def save(self, customer: Customer) -> Customer:
        with self._lock:
            self._check_unique(customer)
            self._items[customer.id] = copy.deepcopy(customer)
        return copy.deepcopy(customer)

    def _check_unique(self, candidate: Customer) -> None:
        for other in self._items.values():
            if other.id == candidate.id:
                continue
            for name in UNIQUE_CUSTOMER_FIELDS:
                if getattr(other, name) == getattr(candidate, name):
                    raise DuplicateValueError(name, getattr(candidate, name))


class SupabaseCustomerRepository:
    """Customer store backed by a Supabase (PostgREST) table."""

    def __init__(self, client: Any, table: Optional[str] = None) -> None:
        self.client = client
        self.table = table or settings.customers_table

    def _query(self) -> Any:
        return self.client.table(self.table)

    def find_by_id(self, customer_id: str) -> Optional[Customer]:
        return self.find_one({"id": customer_id})

    def find_one(self, filters: Filters) -> Optional[Customer]:
        query = apply_filters(self._query().select("*"), filters).limit(1)
        response = run_query(query, "look up a customer")
        rows = response.data or []
        return customer_from_row(rows[0]) if rows else None

    def find(
        self,
        filters: Optional[Filters] = None,
        *,
        search: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Customer]:
        # PostgREST uses commas and parentheses as or() syntax
        term = "".join(ch for ch in search if ch not in ",()") if search else None

        def build() -> Any:
            query = apply_filters(self._query().select("*"), filters)
            if term:
                query = query.or_(",".join(f"{name}.ilike.%{term}%" for name in SEARCHABLE_CUSTOMER_FIELDS))
            return query.order("registered_at", desc=True).order("id")

        rows = fetch_all_rows(build, "list customers", limit=limit)
        return [customer_from_row(row) for row in rows]

    def create(self, customer: Customer) -> Customer:
        response = run_query(self._query().insert(customer_to_row(customer)), "create a customer")
        rows = response.data or []
        return customer_from_row(rows[0]) if rows else customer

    def update_by_id(self, customer_id: str, changes: dict[str, Any]) -> Optional[Customer]:
        payload = dict(changes)
        if "registered_at" in payload and payload["registered_at"] is not None:
            payload["registered_at"] = payload["registered_at"].isoformat()
        response = run_query(self._query().update(payload).eq("id", customer_id), "update a customer")
        rows = response.data or []
        return customer_from_row(rows[0]) if rows else None

    def save(self, customer: Customer) -> Customer:
        response = run_query(self._query().upsert(customer_to_row(customer)), "save a customer")
        rows = response.data or []
        return customer_from_row(rows[0]) if rows else customer
