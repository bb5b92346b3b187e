import pytest

from courier_billing.errors import ConflictError, DuplicateValueError, NotFoundError, ValidationError
from courier_billing.models.domain import ChargeStatus
from courier_billing.schemas.charges import ChargeCreate
from courier_billing.schemas.customers import CustomerCreate, CustomerUpdate
from courier_billing.services.charges import cancel_charge, create_charge
from courier_billing.services.customers import (
    deactivate_customer,
    get_customer_detail,
    list_customers,
    register_customer,
    search_active_customers,
    update_customer,
)


def _payload(**overrides) -> CustomerCreate:
    values = dict(
        locker_code="vb-100",
        name="María López",
        email="  Maria@Example.com ",
        phone="9988-7766",
        identity="0501-1985-00001",
        address="Col. Trejo, San Pedro Sula",
    )
    values.update(overrides)
    return CustomerCreate(**values)


def _charge(customer_id, customers, charges):
    return create_charge(
        ChargeCreate(
            customer_id=customer_id,
            service_type="maritimo",
            trackings="TRK-9",
            description="Libros",
            weight=2,
            billable_weight=2,
            exchange_rate=24.5,
        ),
        customers,
        charges,
    )


def test_register_normalizes_locker_code_and_email(customers):
    customer = register_customer(_payload(), customers)

    assert customer.locker_code == "VB-100"
    assert customer.email == "maria@example.com"
    assert customer.active is True
    assert customer.balance == 0


def test_duplicate_locker_code_differing_in_case_is_rejected(customers):
    register_customer(_payload(), customers)

    with pytest.raises(ValidationError) as excinfo:
        register_customer(
            _payload(locker_code="VB-100", email="otro@example.com", identity="0801-1990-00002"),
            customers,
        )

    assert isinstance(excinfo.value, DuplicateValueError)
    assert excinfo.value.field == "locker_code"
    assert len(customers.find()) == 1


def test_repository_enforces_uniqueness_without_precheck(customers):
    first = register_customer(_payload(), customers)
    clone = register_customer(
        _payload(locker_code="VB-200", email="clone@example.com", identity="0801-1990-00003"),
        customers,
    )

    with pytest.raises(DuplicateValueError):
        customers.update_by_id(clone.id, {"email": first.email})


@pytest.mark.parametrize("field", ["name", "phone", "identity", "address"])
def test_required_fields_must_not_be_blank(customers, field):
    with pytest.raises(ValidationError):
        register_customer(_payload(**{field: "   "}), customers)


def test_invalid_email_is_rejected(customers):
    with pytest.raises(ValidationError):
        register_customer(_payload(email="not-an-email"), customers)


def test_update_rechecks_only_changed_unique_fields(customers):
    customer = register_customer(_payload(), customers)
    other = register_customer(
        _payload(locker_code="VB-300", email="otra@example.com", identity="0801-1990-00004"),
        customers,
    )

    unchanged = update_customer(customer.id, CustomerUpdate(locker_code="vb-100", phone="3344-5566"), customers)
    assert unchanged.phone == "3344-5566"

    with pytest.raises(DuplicateValueError):
        update_customer(customer.id, CustomerUpdate(email=other.email.upper()), customers)


def test_negative_balance_is_rejected(customers):
    customer = register_customer(_payload(), customers)

    with pytest.raises(ValidationError):
        update_customer(customer.id, CustomerUpdate(balance=-10), customers)


def test_deactivation_refused_while_charges_pending(customer, customers, charges):
    charge = _charge(customer.id, customers, charges)

    with pytest.raises(ConflictError) as excinfo:
        deactivate_customer(customer.id, customers, charges)
    assert excinfo.value.details == {"pending_charges": 1}
    assert customers.find_by_id(customer.id).active is True

    cancel_charge(charge.id, charges)
    deactivated = deactivate_customer(customer.id, customers, charges)

    assert deactivated.active is False
    assert charges.find_by_id(charge.id).status is ChargeStatus.CANCELLED


def test_deactivating_customer_without_charges(customer, customers, charges):
    assert deactivate_customer(customer.id, customers, charges).active is False


def test_deactivating_unknown_customer(customers, charges):
    with pytest.raises(NotFoundError):
        deactivate_customer("missing", customers, charges)


def test_detail_includes_recent_charges(customer, customers, charges):
    charge = _charge(customer.id, customers, charges)

    found, recent = get_customer_detail(customer.id, customers, charges)

    assert found.id == customer.id
    assert [item.id for item in recent] == [charge.id]


def test_search_active_customers_by_name(customers, charges):
    maria = register_customer(_payload(), customers)
    register_customer(
        _payload(name="Mario Díaz", locker_code="VB-400", email="mario@example.com", identity="0801-1990-00005"),
        customers,
    )
    deactivate_customer(maria.id, customers, charges)

    names = [item.name for item in search_active_customers("MAR", customers)]

    assert names == ["Mario Díaz"]
    assert search_active_customers("  ", customers) == []


def test_list_customers_filters_active_and_search(customers, charges):
    maria = register_customer(_payload(), customers)
    register_customer(
        _payload(name="Pedro Pérez", locker_code="VB-500", email="pedro@example.com", identity="0801-1990-00006"),
        customers,
    )
    deactivate_customer(maria.id, customers, charges)

    assert [item.locker_code for item in list_customers(customers, active=True)] == ["VB-500"]
    assert [item.locker_code for item in list_customers(customers, search="vb-100")] == ["VB-100"]
