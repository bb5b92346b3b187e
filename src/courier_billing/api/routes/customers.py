"""Customer endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query, status

from ...persistence import ChargeRepository, CustomerRepository
from ...schemas.charges import ChargeModel
from ...schemas.customers import (
    CustomerCreate,
    CustomerDetailEnvelope,
    CustomerDetailModel,
    CustomerEnvelope,
    CustomerListEnvelope,
    CustomerModel,
    CustomerSearchEnvelope,
    CustomerSummaryModel,
    CustomerUpdate,
)
from ...services.customers import (
    deactivate_customer,
    get_customer_detail,
    list_customers,
    register_customer,
    search_active_customers,
    update_customer,
)
from ..dependencies import charge_repository, customer_repository

router = APIRouter(prefix="/customers", tags=["customers"])


# declared before /{customer_id} so the literal segment wins
@router.get("/search/{name}", response_model=CustomerSearchEnvelope)
def search_customers(
    name: str = Path(..., description="Case-insensitive fragment of the customer name"),
    customers: CustomerRepository = Depends(customer_repository),
) -> CustomerSearchEnvelope:
    matches = search_active_customers(name, customers)
    return CustomerSearchEnvelope(data=[CustomerSummaryModel.model_validate(item) for item in matches])


@router.get("", response_model=CustomerListEnvelope)
def get_customers(
    active: bool | None = Query(default=None, alias="activo", description="Filter by active flag"),
    search: str | None = Query(
        default=None,
        alias="buscar",
        description="Substring match over name, locker code, email and identity",
    ),
    customers: CustomerRepository = Depends(customer_repository),
) -> CustomerListEnvelope:
    items = list_customers(customers, active=active, search=search)
    return CustomerListEnvelope(count=len(items), data=[CustomerModel.model_validate(item) for item in items])


@router.post("", response_model=CustomerEnvelope, status_code=status.HTTP_201_CREATED)
def create_customer(
    payload: CustomerCreate,
    customers: CustomerRepository = Depends(customer_repository),
) -> CustomerEnvelope:
    customer = register_customer(payload, customers)
    return CustomerEnvelope(data=CustomerModel.model_validate(customer), message="Customer created")


@router.get("/{customer_id}", response_model=CustomerDetailEnvelope)
def get_customer(
    customer_id: str,
    customers: CustomerRepository = Depends(customer_repository),
    charges: ChargeRepository = Depends(charge_repository),
) -> CustomerDetailEnvelope:
    customer, recent = get_customer_detail(customer_id, customers, charges)
    return CustomerDetailEnvelope(
        data=CustomerDetailModel(
            customer=CustomerModel.model_validate(customer),
            recent_charges=[ChargeModel.model_validate(item) for item in recent],
        )
    )


@router.put("/{customer_id}", response_model=CustomerEnvelope)
def put_customer(
    customer_id: str,
    payload: CustomerUpdate,
    customers: CustomerRepository = Depends(customer_repository),
) -> CustomerEnvelope:
    customer = update_customer(customer_id, payload, customers)
    return CustomerEnvelope(data=CustomerModel.model_validate(customer), message="Customer updated")


@router.delete("/{customer_id}", response_model=CustomerEnvelope)
def delete_customer(
    customer_id: str,
    customers: CustomerRepository = Depends(customer_repository),
    charges: ChargeRepository = Depends(charge_repository),
) -> CustomerEnvelope:
    customer = deactivate_customer(customer_id, customers, charges)
    return CustomerEnvelope(data=CustomerModel.model_validate(customer), message="Customer deactivated")
