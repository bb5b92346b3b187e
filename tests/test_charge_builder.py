import pytest
from pydantic import ValidationError as PydanticValidationError

from courier_billing.errors import NotFoundError, ValidationError
from courier_billing.models.domain import ChargeStatus, ServiceType
from courier_billing.schemas.charges import ChargeCreate
from courier_billing.services.charges import create_charge
from courier_billing.services.charges.builder import (
    normalize_trackings,
    price_charge,
    validate_discount,
    validate_exchange_rate,
    validate_weight,
)
from courier_billing.services.tariffs import quote_tariff

from conftest import local_dt


def _draft(customer_id: str, **overrides) -> ChargeCreate:
    values = dict(
        customer_id=customer_id,
        service_type="maritimo",
        trackings=["1Z999"],
        description="Ropa",
        weight=3,
        billable_weight=3,
        exchange_rate=24.5,
        charged_at=local_dt(2024, 3, 10, 14, 0),
    )
    values.update(overrides)
    return ChargeCreate(**values)


def test_flat_local_price_is_not_converted(customer, customers, charges):
    charge = create_charge(_draft(customer.id), customers, charges)

    assert charge.shipping_cost == pytest.approx(350.0)
    assert charge.total == pytest.approx(350.0)
    assert charge.applied_rate == pytest.approx(350.0)
    assert charge.status is ChargeStatus.PENDING
    assert charge.customer_name == customer.name
    assert charges.find_by_id(charge.id) is not None


def test_foreign_quote_is_converted_with_exchange_rate(customer, customers, charges):
    charge = create_charge(
        _draft(customer.id, service_type="aereo_express", weight=1, billable_weight=1, exchange_rate=25),
        customers,
        charges,
    )

    assert charge.shipping_cost == pytest.approx(300.0)
    assert charge.applied_rate == pytest.approx(12.0)


def test_discount_is_applied_to_shipping_cost(customer, customers, charges):
    charge = create_charge(_draft(customer.id, discount=10), customers, charges)

    assert charge.total == pytest.approx(315.0)
    assert charge.discount_amount == pytest.approx(35.0)


def test_week_and_year_are_derived_from_charge_date(customer, customers, charges):
    charge = create_charge(_draft(customer.id, charged_at=local_dt(2024, 1, 8, 9, 0)), customers, charges)

    assert (charge.week, charge.year) == (2, 2024)


def test_single_tracking_string_becomes_list(customer, customers, charges):
    charge = create_charge(_draft(customer.id, trackings="TRK-1"), customers, charges)

    assert charge.trackings == ["TRK-1"]


def test_blank_trackings_are_dropped():
    assert normalize_trackings(["A", "  ", "B "]) == ["A", "B"]
    with pytest.raises(ValidationError):
        normalize_trackings(["", " "])


@pytest.mark.parametrize("discount", [-1, 100.5])
def test_discount_outside_range_is_rejected(customer, customers, charges, discount):
    with pytest.raises(ValidationError):
        create_charge(_draft(customer.id, discount=discount), customers, charges)


@pytest.mark.parametrize("exchange_rate", [None, 0, -3])
def test_exchange_rate_must_be_positive(customer, customers, charges, exchange_rate):
    with pytest.raises(ValidationError):
        create_charge(_draft(customer.id, exchange_rate=exchange_rate), customers, charges)


def test_unknown_customer_is_not_found(customers, charges):
    with pytest.raises(NotFoundError):
        create_charge(_draft("missing"), customers, charges)
    assert charges.count_documents() == 0


def test_custom_rate_charge_keeps_negotiated_cost():
    pricing = price_charge(ServiceType.OTHER, 5, discount=20, exchange_rate=24.5, custom_cost=500)

    assert pricing.applied_rate == 500
    assert pricing.shipping_cost == 500
    assert pricing.total == pytest.approx(400.0)


@pytest.mark.parametrize("field", ["weight", "billable_weight", "exchange_rate", "discount"])
@pytest.mark.parametrize("value", [float("nan"), float("inf")])
def test_non_finite_numbers_are_rejected_by_the_schema(customer, field, value):
    with pytest.raises(PydanticValidationError):
        _draft(customer.id, **{field: value})


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_numbers_are_rejected_by_the_builder(value):
    with pytest.raises(ValidationError):
        validate_weight("Weight", value)
    with pytest.raises(ValidationError):
        validate_exchange_rate(value)
    with pytest.raises(ValidationError):
        validate_discount(value)
    with pytest.raises(ValidationError):
        quote_tariff(ServiceType.OTHER, 1, custom_cost=value)
