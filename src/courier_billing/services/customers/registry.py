"""Customer registration, updates and deactivation.

Uniqueness of locker code, email and identity is checked here with a
read-before-write lookup. That check is advisory only: two concurrent
registrations can both pass it. The repository's unique constraint is what
actually rejects the second write (``DuplicateValueError``).
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from ...errors import ConflictError, DuplicateValueError, NotFoundError, ValidationError
from ...models.domain import ChargeRecord, ChargeStatus, Customer
from ...persistence import ChargeRepository, CustomerRepository
from ...schemas.customers import CustomerCreate, CustomerUpdate

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")
RECENT_CHARGES_LIMIT = 10

_FIELD_LABELS = {
    "locker_code": "locker code",
    "name": "name",
    "email": "email",
    "phone": "phone",
    "identity": "identity",
    "address": "address",
}


def _required(name: str, value: Optional[str]) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(f"Customer {_FIELD_LABELS[name]} is required")
    return cleaned


def normalize_locker_code(value: Optional[str]) -> str:
    return _required("locker_code", value).upper()


def normalize_email(value: Optional[str]) -> str:
    email = _required("email", value).lower()
    if not EMAIL_PATTERN.match(email):
        raise ValidationError(f"Invalid email address '{email}'")
    return email


def _ensure_available(customers: CustomerRepository, field: str, value: str) -> None:
    if customers.find_one({field: value}) is not None:
        raise DuplicateValueError(field, value, f"A customer with that {_FIELD_LABELS[field]} already exists")


def register_customer(payload: CustomerCreate, customers: CustomerRepository) -> Customer:
    customer = Customer(
        locker_code=normalize_locker_code(payload.locker_code),
        name=_required("name", payload.name),
        email=normalize_email(payload.email),
        phone=_required("phone", payload.phone),
        identity=_required("identity", payload.identity),
        address=_required("address", payload.address),
    )
    for field in ("locker_code", "email", "identity"):
        _ensure_available(customers, field, getattr(customer, field))

    created = customers.create(customer)
    logger.info(f"Registered customer {created.locker_code} ({created.id})")
    return created


def get_customer(customer_id: str, customers: CustomerRepository) -> Customer:
    customer = customers.find_by_id(customer_id)
    if customer is None:
        raise NotFoundError(f"Customer '{customer_id}' not found")
    return customer


def get_customer_detail(
    customer_id: str,
    customers: CustomerRepository,
    charges: ChargeRepository,
) -> tuple[Customer, list[ChargeRecord]]:
    customer = get_customer(customer_id, customers)
    recent = charges.find(
        {"customer_id": customer.id},
        sort="charged_at",
        descending=True,
        limit=RECENT_CHARGES_LIMIT,
    )
    return customer, recent


def update_customer(customer_id: str, payload: CustomerUpdate, customers: CustomerRepository) -> Customer:
    """Apply a partial update; uniqueness is re-checked only for fields that change."""

    current = get_customer(customer_id, customers)
    requested = payload.model_dump(exclude_unset=True)
    changes: dict[str, Any] = {}

    if requested.get("locker_code") is not None:
        changes["locker_code"] = normalize_locker_code(requested["locker_code"])
    if requested.get("email") is not None:
        changes["email"] = normalize_email(requested["email"])
    for name in ("name", "phone", "identity", "address"):
        if requested.get(name) is not None:
            changes[name] = _required(name, requested[name])
    if requested.get("balance") is not None:
        if requested["balance"] < 0:
            raise ValidationError("Customer balance cannot be negative")
        changes["balance"] = float(requested["balance"])

    for field in ("locker_code", "email", "identity"):
        if field in changes and changes[field] != getattr(current, field):
            _ensure_available(customers, field, changes[field])

    if not changes:
        return current
    updated = customers.update_by_id(customer_id, changes)
    if updated is None:
        raise NotFoundError(f"Customer '{customer_id}' not found")
    logger.info(f"Updated customer {updated.locker_code}: {', '.join(sorted(changes))}")
    return updated


def deactivate_customer(
    customer_id: str,
    customers: CustomerRepository,
    charges: ChargeRepository,
) -> Customer:
    customer = get_customer(customer_id, customers)
    pending = charges.count_documents({"customer_id": customer.id, "status": ChargeStatus.PENDING})
    if pending > 0:
        raise ConflictError(
            f"Cannot deactivate customer {customer.locker_code}: {pending} pending charge(s)",
            details={"pending_charges": pending},
        )
    customer.active = False
    saved = customers.save(customer)
    logger.info(f"Deactivated customer {saved.locker_code}")
    return saved


def list_customers(
    customers: CustomerRepository,
    *,
    active: Optional[bool] = None,
    search: Optional[str] = None,
) -> list[Customer]:
    filters = {"active": active} if active is not None else None
    term = search.strip() if isinstance(search, str) and search.strip() else None
    return customers.find(filters, search=term)


def search_active_customers(name: str, customers: CustomerRepository, limit: int = 10) -> list[Customer]:
    """Active customers whose name contains ``name`` (case-insensitive)."""

    term = (name or "").strip().lower()
    if not term:
        return []
    # the repository search spans several fields; narrow it to the name here
    matches = customers.find({"active": True}, search=term)
    return [customer for customer in matches if term in customer.name.lower()][:limit]
