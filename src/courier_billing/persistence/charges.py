"""Charge record persistence: repository contract plus Supabase and in-memory stores."""

from __future__ import annotations

import copy
import logging
import threading
from dataclasses import fields, replace
from datetime import datetime
from typing import Any, Optional, Protocol

from ..config import settings
from ..models.domain import ChargeRecord, ChargeStatus, PaymentMethod, ServiceType
from .base import (
    AggregateBucket,
    Filters,
    apply_filters,
    group_rows,
    matches_filters,
    parse_timestamp,
    fetch_all_rows,
    run_query,
)

logger = logging.getLogger(__name__)


class ChargeRepository(Protocol):
    """Storage contract for charge records."""

    def find(
        self,
        filters: Optional[Filters] = None,
        *,
        sort: str = "charged_at",
        descending: bool = True,
        limit: Optional[int] = None,
        skip: int = 0,
    ) -> list[ChargeRecord]: ...

    def find_by_id(self, charge_id: str) -> Optional[ChargeRecord]: ...

    def create(self, charge: ChargeRecord) -> ChargeRecord: ...

    def update_by_id(self, charge_id: str, changes: dict[str, Any]) -> Optional[ChargeRecord]: ...

    def delete_by_id(self, charge_id: str) -> bool: ...

    def count_documents(self, filters: Optional[Filters] = None) -> int: ...

    def aggregate(
        self,
        filters: Optional[Filters] = None,
        *,
        group_by: Optional[str] = None,
    ) -> list[AggregateBucket]: ...


def _serialize(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (ServiceType, ChargeStatus, PaymentMethod)):
        return value.value
    return value


def charge_to_row(charge: ChargeRecord) -> dict[str, Any]:
    return {f.name: _serialize(getattr(charge, f.name)) for f in fields(ChargeRecord)}


def charge_from_row(row: dict[str, Any]) -> ChargeRecord:
    volumetric = row.get("volumetric_weight")
    payment_method = row.get("payment_method")
    return ChargeRecord(
        id=str(row["id"]),
        customer_id=str(row["customer_id"]),
        customer_name=row["customer_name"],
        service_type=ServiceType(row["service_type"]),
        trackings=list(row.get("trackings") or []),
        description=row["description"],
        weight=float(row["weight"]),
        volumetric_weight=float(volumetric) if volumetric is not None else None,
        billable_weight=float(row["billable_weight"]),
        applied_rate=float(row["applied_rate"]),
        shipping_cost=float(row["shipping_cost"]),
        discount=float(row.get("discount") or 0),
        total=float(row["total"]),
        status=ChargeStatus(row.get("status") or ChargeStatus.PENDING.value),
        payment_method=PaymentMethod(payment_method) if payment_method else None,
        charged_at=parse_timestamp(row["charged_at"]),
        paid_at=parse_timestamp(row.get("paid_at")),
        notes=row.get("notes"),
        exchange_rate=float(row["exchange_rate"]),
        week=int(row["week"]),
        year=int(row["year"]),
        created_at=parse_timestamp(row["created_at"]),
        updated_at=parse_timestamp(row["updated_at"]),
    )


class InMemoryChargeRepository:
    """Process-local charge store."""

    def __init__(self) -> None:
        self._items: dict[str, ChargeRecord] = {}
        self._lock = threading.Lock()

    def _select(self, filters: Optional[Filters]) -> list[ChargeRecord]:
        return [charge for charge in self._items.values() if matches_filters(charge, filters)]

    def find(
        self,
        filters: Optional[Filters] = None,
        *,
        sort: str = "charged_at",
        descending: bool = True,
        limit: Optional[int] = None,
        skip: int = 0,
    ) -> list[ChargeRecord]:
        results = sorted(self._select(filters), key=lambda charge: getattr(charge, sort), reverse=descending)
        results = results[skip:]
        if limit is not None:
            results = results[:limit]
        return [copy.deepcopy(charge) for charge in results]

    def find_by_id(self, charge_id: str) -> Optional[ChargeRecord]:
        charge = self._items.get(charge_id)
        return copy.deepcopy(charge) if charge else None

    def create(self, charge: ChargeRecord) -> ChargeRecord:
        with self._lock:
            self._items[charge.id] = copy.deepcopy(charge)
        return copy.deepcopy(charge)

    def update_by_id(self, charge_id: str, changes: dict[str, Any]) -> Optional[ChargeRecord]:
        allowed = {f.name for f in fields(ChargeRecord)} - {"id"}
        with self._lock:
            current = self._items.get(charge_id)
            if current is None:
                return None
            updated = replace(current, **{key: value for key, value in changes.items() if key in allowed})
            self._items[charge_id] = updated
        return copy.deepcopy(updated)

    def delete_by_id(self, charge_id: str) -> bool:
        with self._lock:
            return self._items.pop(charge_id, None) is not None

    def count_documents(self, filters: Optional[Filters] = None) -> int:
        return len(self._select(filters))

    def aggregate(
        self,
        filters: Optional[Filters] = None,
        *,
        group_by: Optional[str] = None,
    ) -> list[AggregateBucket]:
        return group_rows(self._select(filters), group_by)


class SupabaseChargeRepository:
    """Charge store backed by a Supabase (PostgREST) table."""

    def __init__(self, client: Any, table: Optional[str] = None) -> None:
        self.client = client
        self.table = table or settings.charges_table

    def _query(self) -> Any:
        return self.client.table(self.table)

    def find(
        self,
        filters: Optional[Filters] = None,
        *,
        sort: str = "charged_at",
        descending: bool = True,
        limit: Optional[int] = None,
        skip: int = 0,
    ) -> list[ChargeRecord]:
        def build() -> Any:
            query = apply_filters(self._query().select("*"), filters)
            return query.order(sort, desc=descending).order("id")

        rows = fetch_all_rows(build, "list charges", limit=limit, skip=skip)
        return [charge_from_row(row) for row in rows]

    def find_by_id(self, charge_id: str) -> Optional[ChargeRecord]:
        response = run_query(self._query().select("*").eq("id", charge_id).limit(1), "look up a charge")
        rows = response.data or []
        return charge_from_row(rows[0]) if rows else None

    def create(self, charge: ChargeRecord) -> ChargeRecord:
        response = run_query(self._query().insert(charge_to_row(charge)), "create a charge")
        rows = response.data or []
        return charge_from_row(rows[0]) if rows else charge

    def update_by_id(self, charge_id: str, changes: dict[str, Any]) -> Optional[ChargeRecord]:
        payload = {key: _serialize(value) for key, value in changes.items()}
        response = run_query(self._query().update(payload).eq("id", charge_id), "update a charge")
        rows = response.data or []
        return charge_from_row(rows[0]) if rows else None

    def delete_by_id(self, charge_id: str) -> bool:
        response = run_query(self._query().delete().eq("id", charge_id), "delete a charge")
        return bool(response.data)

    def count_documents(self, filters: Optional[Filters] = None) -> int:
        query = apply_filters(self._query().select("id", count="exact"), filters).limit(1)
        response = run_query(query, "count charges")
        return int(response.count or 0)

    def aggregate(
        self,
        filters: Optional[Filters] = None,
        *,
        group_by: Optional[str] = None,
    ) -> list[AggregateBucket]:
        # Grouping happens client-side; PostgREST aggregates are disabled by default.
        columns = "id,total" if group_by is None else f"id,{group_by},total"
        rows = fetch_all_rows(
            lambda: apply_filters(self._query().select(columns), filters).order("id"),
            "aggregate charges",
        )
        return group_rows(rows, group_by)
