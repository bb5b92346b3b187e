"""Project a charge and its customer into an invoice view-model."""

from __future__ import annotations

import re
import unicodedata
from datetime import datetime
from typing import Optional

from ...config import settings
from ...errors import NotFoundError
from ...models.domain import ChargeRecord, Customer, utcnow
from ...persistence import ChargeRepository, CustomerRepository
from ...schemas.invoices import InvoiceCompany, InvoiceCustomer, InvoiceLine, InvoiceView
from ..charges.periods import localize
from ..tariffs import describe_rate

_DATE_FORMAT = "%d/%m/%Y"
_DATETIME_FORMAT = "%d/%m/%Y %H:%M:%S"
_UNSAFE_FILENAME = re.compile(r"[^A-Za-z0-9.-]+")


def _local_money(amount: float) -> str:
    return f"{settings.local_currency_symbol} {amount:.2f}"


def invoice_number(charge_id: str) -> str:
    return charge_id[-8:].upper()


def _ascii_slug(value: str) -> str:
    """Fold accents away and collapse anything outside [A-Za-z0-9.-] into dashes."""

    folded = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    return _UNSAFE_FILENAME.sub("-", folded).strip("-")


def invoice_filename(charge: ChargeRecord, extension: str = "html") -> str:
    """Download name; ASCII only so it fits a latin-1 response header."""

    name = _ascii_slug(charge.customer_name) or "cliente"
    company = _ascii_slug(settings.company_name) or "factura"
    return f"Factura-{company}-{name}-{_ascii_slug(charge.id)}.{extension}"


def build_invoice_lines(charge: ChargeRecord, rate_description: str) -> list[InvoiceLine]:
    weight = f"{charge.billable_weight:.2f} lb"
    lines = [
        InvoiceLine(
            kind="charge",
            concept="Servicio de Courier",
            details=rate_description,
            weight=weight,
            amount=charge.shipping_cost,
            amount_display=_local_money(charge.shipping_cost),
        )
    ]
    if charge.discount > 0:
        discount_amount = charge.shipping_cost * charge.discount / 100
        lines.append(
            InvoiceLine(
                kind="discount",
                concept="Descuento",
                details=f"{charge.discount:g}% aplicado",
                weight="-",
                amount=-discount_amount,
                amount_display=f"- {_local_money(discount_amount)}",
            )
        )
    lines.append(
        InvoiceLine(
            kind="total",
            concept="TOTAL A PAGAR",
            details="",
            weight="",
            amount=charge.total,
            amount_display=_local_money(charge.total),
        )
    )
    return lines


def project_invoice(charge: ChargeRecord, customer: Customer, now: Optional[datetime] = None) -> InvoiceView:
    """Pure projection; customer details come from the live record passed in."""

    rate_description = describe_rate(charge.service_type, charge.billable_weight)
    return InvoiceView(
        invoice_number=invoice_number(charge.id),
        charge_id=charge.id,
        issued_on=localize(charge.charged_at).strftime(_DATE_FORMAT),
        status_label=charge.status.value.upper(),
        company=InvoiceCompany(
            name=settings.company_name,
            tagline=settings.company_tagline,
            location=settings.company_location,
            footer=settings.company_footer,
        ),
        customer=InvoiceCustomer(
            name=customer.name,
            locker_code=customer.locker_code,
            identity=customer.identity,
            phone=customer.phone,
            email=customer.email,
            address=customer.address,
        ),
        service_label=charge.service_type.value.replace("_", " ").upper(),
        billable_weight=f"{charge.billable_weight:.2f} lb",
        description=charge.description,
        exchange_rate=_local_money(charge.exchange_rate),
        rate_description=rate_description,
        trackings=list(charge.trackings),
        lines=build_invoice_lines(charge, rate_description),
        total=charge.total,
        total_display=_local_money(charge.total),
        notes=charge.notes,
        generated_at=localize(now or utcnow()).strftime(_DATETIME_FORMAT),
        filename=invoice_filename(charge),
    )


def build_invoice_view(
    charge_id: str,
    charges: ChargeRepository,
    customers: CustomerRepository,
    now: Optional[datetime] = None,
) -> InvoiceView:
    charge = charges.find_by_id(charge_id)
    if charge is None:
        raise NotFoundError(f"Charge '{charge_id}' not found")
    customer = customers.find_by_id(charge.customer_id)
    if customer is None:
        raise NotFoundError(f"Customer '{charge.customer_id}' for charge '{charge_id}' not found")
    return project_invoice(charge, customer, now)
