"""Charge endpoints: CRUD, status transitions, dashboard stats and invoices."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from ...config import settings
from ...models.domain import ChargeStatus
from ...persistence import ChargeRepository, CustomerRepository
from ...schemas.charges import (
    ChargeCreate,
    ChargeEnvelope,
    ChargeListEnvelope,
    ChargeModel,
    ChargePayment,
    ChargeUpdate,
    DashboardStatsEnvelope,
    DashboardStatsModel,
    PaginationModel,
)
from ...schemas.invoices import InvoiceViewEnvelope
from ...services.charges import (
    cancel_charge,
    compute_dashboard_stats,
    create_charge,
    delete_charge,
    get_charge,
    list_charges,
    mark_charge_paid,
    update_charge,
)
from ...services.invoices import build_invoice_view, normalize_page_format, render_invoice
from ..dependencies import charge_repository, customer_repository

router = APIRouter(prefix="/charges", tags=["charges"])


@router.get("/stats/dashboard", response_model=DashboardStatsEnvelope)
def get_dashboard_stats(charges: ChargeRepository = Depends(charge_repository)) -> DashboardStatsEnvelope:
    return DashboardStatsEnvelope(data=DashboardStatsModel.model_validate(compute_dashboard_stats(charges)))


@router.get("", response_model=ChargeListEnvelope)
def get_charges(
    estado: ChargeStatus | None = Query(default=None, description="Filter by status"),
    cliente: str | None = Query(default=None, description="Filter by customer id"),
    page: int = Query(default=1, ge=1, description="1-based page index"),
    limit: int = Query(default=settings.default_page_size, ge=1, le=500, description="Records per page"),
    charges: ChargeRepository = Depends(charge_repository),
) -> ChargeListEnvelope:
    items, pagination = list_charges(charges, status=estado, customer_id=cliente, page=page, limit=limit)
    return ChargeListEnvelope(
        data=[ChargeModel.model_validate(item) for item in items],
        pagination=PaginationModel(**pagination),
    )


@router.post("", response_model=ChargeEnvelope, status_code=status.HTTP_201_CREATED)
def post_charge(
    payload: ChargeCreate,
    customers: CustomerRepository = Depends(customer_repository),
    charges: ChargeRepository = Depends(charge_repository),
) -> ChargeEnvelope:
    charge = create_charge(payload, customers, charges)
    return ChargeEnvelope(data=ChargeModel.model_validate(charge), message="Charge created")


@router.get("/{charge_id}", response_model=ChargeEnvelope)
def get_charge_by_id(charge_id: str, charges: ChargeRepository = Depends(charge_repository)) -> ChargeEnvelope:
    return ChargeEnvelope(data=ChargeModel.model_validate(get_charge(charge_id, charges)))


@router.put("/{charge_id}", response_model=ChargeEnvelope)
def put_charge(
    charge_id: str,
    payload: ChargeUpdate,
    charges: ChargeRepository = Depends(charge_repository),
) -> ChargeEnvelope:
    charge = update_charge(charge_id, payload, charges)
    return ChargeEnvelope(data=ChargeModel.model_validate(charge), message="Charge updated")


@router.post("/{charge_id}/pay", response_model=ChargeEnvelope)
def pay_charge(
    charge_id: str,
    payload: ChargePayment,
    charges: ChargeRepository = Depends(charge_repository),
) -> ChargeEnvelope:
    charge = mark_charge_paid(charge_id, charges, payload.payment_method, payload.paid_at)
    return ChargeEnvelope(data=ChargeModel.model_validate(charge), message="Charge paid")


@router.post("/{charge_id}/cancel", response_model=ChargeEnvelope)
def cancel_charge_by_id(charge_id: str, charges: ChargeRepository = Depends(charge_repository)) -> ChargeEnvelope:
    charge = cancel_charge(charge_id, charges)
    return ChargeEnvelope(data=ChargeModel.model_validate(charge), message="Charge cancelled")


@router.delete("/{charge_id}")
def delete_charge_by_id(charge_id: str, charges: ChargeRepository = Depends(charge_repository)) -> dict:
    delete_charge(charge_id, charges)
    return {"success": True, "message": "Charge deleted"}


@router.get("/{charge_id}/invoice/view", response_model=InvoiceViewEnvelope)
def get_invoice_view(
    charge_id: str,
    customers: CustomerRepository = Depends(customer_repository),
    charges: ChargeRepository = Depends(charge_repository),
) -> InvoiceViewEnvelope:
    return InvoiceViewEnvelope(data=build_invoice_view(charge_id, charges, customers))


@router.get("/{charge_id}/invoice", response_class=Response)
def download_invoice(
    charge_id: str,
    page_format: str | None = Query(default=None, description="Page size, e.g. A4 or LETTER"),
    customers: CustomerRepository = Depends(customer_repository),
    charges: ChargeRepository = Depends(charge_repository),
) -> Response:
    fmt = normalize_page_format(page_format)
    view = build_invoice_view(charge_id, charges, customers)
    document = render_invoice(view, page_format=fmt)
    return Response(
        content=document,
        media_type="text/html; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{view.filename}"'},
    )
