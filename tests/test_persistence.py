from datetime import datetime, timezone

import pytest

from courier_billing.errors import DuplicateValueError
from courier_billing.models.domain import ChargeRecord, ChargeStatus, PaymentMethod, ServiceType
from courier_billing.persistence import DateRange
from courier_billing.persistence.base import group_rows
from courier_billing.persistence.charges import charge_from_row, charge_to_row
from courier_billing.persistence.customers import customer_from_row, customer_to_row

from conftest import local_dt, make_customer


def _record(**overrides) -> ChargeRecord:
    values = dict(
        customer_id="c1",
        customer_name="Cliente",
        service_type=ServiceType.AIR_STANDARD,
        trackings=["T-1", "T-2"],
        description="Caja",
        weight=3,
        billable_weight=3,
        applied_rate=5.5,
        shipping_cost=412.5,
        total=412.5,
        exchange_rate=25,
        charged_at=local_dt(2024, 3, 1, 10, 0),
        week=9,
        year=2024,
    )
    values.update(overrides)
    return ChargeRecord(**values)


def test_in_memory_store_returns_copies(charges):
    created = charges.create(_record())
    created.trackings.append("mutated")

    assert charges.find_by_id(created.id).trackings == ["T-1", "T-2"]


def test_date_range_filter_is_inclusive(charges):
    charges.create(_record(charged_at=local_dt(2024, 3, 1, 0, 0)))
    charges.create(_record(charged_at=local_dt(2024, 3, 31, 23, 59)))
    charges.create(_record(charged_at=local_dt(2024, 4, 1, 0, 0)))

    window = DateRange(local_dt(2024, 3, 1, 0, 0), local_dt(2024, 3, 31, 23, 59))

    assert charges.count_documents({"charged_at": window}) == 2


def test_enum_filters_match_plain_values(charges):
    charges.create(_record(status=ChargeStatus.PAID))
    charges.create(_record())

    assert charges.count_documents({"status": "pagado"}) == 1
    assert charges.count_documents({"status": ChargeStatus.PENDING}) == 1


def test_update_ignores_identifier_changes(charges):
    created = charges.create(_record())

    updated = charges.update_by_id(created.id, {"id": "other", "notes": "frágil"})

    assert updated.id == created.id
    assert updated.notes == "frágil"
    assert charges.update_by_id("missing", {"notes": "x"}) is None


def test_group_rows_handles_rows_and_records():
    rows = [
        {"service_type": "maritimo", "total": "10.5"},
        {"service_type": "maritimo", "total": 4.5},
        {"service_type": "otro", "total": None},
    ]

    buckets = {bucket.key: (bucket.count, bucket.total) for bucket in group_rows(rows, "service_type")}

    assert buckets == {"maritimo": (2, 15.0), "otro": (1, 0.0)}
    assert group_rows([_record(total=7)], None)[0].total == 7


def test_charge_row_round_trip():
    record = _record(
        status=ChargeStatus.PAID,
        payment_method=PaymentMethod.CARD,
        paid_at=datetime(2024, 3, 2, 16, 0, tzinfo=timezone.utc),
    )

    row = charge_to_row(record)

    assert row["service_type"] == "aereo_standard"
    assert row["payment_method"] == "tarjeta"
    assert isinstance(row["charged_at"], str)
    assert charge_from_row(row) == record


def test_customer_row_parses_zulu_timestamps():
    row = customer_to_row(make_customer("B7"))
    row["registered_at"] = "2024-01-05T10:00:00Z"

    customer = customer_from_row(row)

    assert customer.registered_at == datetime(2024, 1, 5, 10, 0, tzinfo=timezone.utc)
    assert customer.locker_code == "B7"


def test_in_memory_customers_enforce_unique_identity(customers):
    customers.create(make_customer("A1", identity="0501"))

    with pytest.raises(DuplicateValueError) as excinfo:
        customers.create(make_customer("A2", identity="0501"))

    assert excinfo.value.field == "identity"
