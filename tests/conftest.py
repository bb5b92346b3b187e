from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient

from courier_billing.api.dependencies import charge_repository, customer_repository
from courier_billing.main import create_app
from courier_billing.models.domain import Customer
from courier_billing.persistence import InMemoryChargeRepository, InMemoryCustomerRepository

LOCAL_TZ = ZoneInfo("America/Tegucigalpa")


def local_dt(*args: int) -> datetime:
    return datetime(*args, tzinfo=LOCAL_TZ)


def make_customer(code: str = "A1", **overrides) -> Customer:
    values = dict(
        locker_code=code,
        name=f"Cliente {code}",
        email=f"{code.lower()}@vbox.hn",
        phone="9999-0000",
        identity=f"0501-1990-{code}",
        address="Barrio Guamilito, San Pedro Sula",
    )
    values.update(overrides)
    return Customer(**values)


@pytest.fixture
def customers() -> InMemoryCustomerRepository:
    return InMemoryCustomerRepository()


@pytest.fixture
def charges() -> InMemoryChargeRepository:
    return InMemoryChargeRepository()


@pytest.fixture
def customer(customers: InMemoryCustomerRepository) -> Customer:
    return customers.create(make_customer())


@pytest.fixture
def api_client(customers: InMemoryCustomerRepository, charges: InMemoryChargeRepository) -> TestClient:
    app = create_app()
    app.dependency_overrides[customer_repository] = lambda: customers
    app.dependency_overrides[charge_repository] = lambda: charges
    return TestClient(app)
