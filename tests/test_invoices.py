import pytest

from courier_billing.errors import NotFoundError, RenderError
from courier_billing.schemas.charges import ChargeCreate
from courier_billing.schemas.customers import CustomerUpdate
from courier_billing.services.charges import create_charge
from courier_billing.services.customers import update_customer
from courier_billing.services.invoices import (
    PageMargins,
    build_invoice_view,
    invoice_number,
    render_invoice,
)

from conftest import local_dt


def _charge(customer, customers, charges, **overrides):
    values = dict(
        customer_id=customer.id,
        service_type="maritimo",
        trackings=["1Z-A", "1Z-B"],
        description="Repuestos",
        weight=6,
        billable_weight=6,
        exchange_rate=25,
        charged_at=local_dt(2024, 4, 9, 15, 30),
        notes="Entregar en recepción",
    )
    values.update(overrides)
    return create_charge(ChargeCreate(**values), customers, charges)


def test_invoice_number_is_last_eight_characters_uppercased():
    assert invoice_number("0123456789abcdef") == "89ABCDEF"


def test_view_without_discount_has_charge_and_total_rows(customer, customers, charges):
    charge = _charge(customer, customers, charges)

    view = build_invoice_view(charge.id, charges, customers, now=local_dt(2024, 4, 10, 8, 0))

    assert view.invoice_number == charge.id[-8:].upper()
    assert view.issued_on == "09/04/2024"
    assert view.status_label == "PENDIENTE"
    assert view.service_label == "MARITIMO"
    assert view.billable_weight == "6.00 lb"
    assert view.rate_description == "Marítimo 6.00 lb × $2.70"
    assert view.trackings == ["1Z-A", "1Z-B"]
    assert [line.kind for line in view.lines] == ["charge", "total"]
    assert view.total_display == "L. 405.00"
    assert view.generated_at == "10/04/2024 08:00:00"


def test_discount_row_is_negative_share_of_shipping_cost(customer, customers, charges):
    charge = _charge(customer, customers, charges, service_type="aereo_express", discount=25)

    view = build_invoice_view(charge.id, charges, customers)
    discount = view.lines[1]

    assert [line.kind for line in view.lines] == ["charge", "discount", "total"]
    assert discount.details == "25% aplicado"
    assert discount.amount == pytest.approx(-(charge.shipping_cost * 0.25))
    assert view.total == pytest.approx(charge.total)


def test_view_uses_live_customer_details(customer, customers, charges):
    charge = _charge(customer, customers, charges)
    update_customer(customer.id, CustomerUpdate(name="Nombre Nuevo", phone="0000-1111"), customers)

    view = build_invoice_view(charge.id, charges, customers)

    assert view.customer.name == "Nombre Nuevo"
    assert view.customer.phone == "0000-1111"
    assert charges.find_by_id(charge.id).customer_name == customer.name


def test_missing_charge_or_customer_is_not_found(customer, customers, charges):
    with pytest.raises(NotFoundError):
        build_invoice_view("missing", charges, customers)

    charge = _charge(customer, customers, charges)
    charges.update_by_id(charge.id, {"customer_id": "gone"})
    with pytest.raises(NotFoundError):
        build_invoice_view(charge.id, charges, customers)


def test_render_invoice_applies_page_format_and_margins(customer, customers, charges):
    charge = _charge(customer, customers, charges, discount=10)
    view = build_invoice_view(charge.id, charges, customers)

    document = render_invoice(view, page_format="letter", margins=PageMargins(top="1in")).decode("utf-8")

    assert "size: LETTER;" in document
    assert "margin: 1in 0.5in 0.5in 0.5in;" in document
    assert view.invoice_number in document
    assert "Descuento" in document
    assert "Entregar en recepción" in document
    assert "1Z-B" in document


def test_render_escapes_customer_text(customer, customers, charges):
    update_customer(customer.id, CustomerUpdate(name="<b>Ana</b>"), customers)
    charge = _charge(customer, customers, charges)

    document = render_invoice(build_invoice_view(charge.id, charges, customers)).decode("utf-8")

    assert "&lt;b&gt;Ana&lt;/b&gt;" in document
    assert "<b>Ana</b>" not in document


def test_unsupported_page_format_raises_render_error(customer, customers, charges):
    view = build_invoice_view(_charge(customer, customers, charges).id, charges, customers)

    with pytest.raises(RenderError):
        render_invoice(view, page_format="B5")


def test_broken_template_raises_render_error(customer, customers, charges):
    view = build_invoice_view(_charge(customer, customers, charges).id, charges, customers)

    with pytest.raises(RenderError):
        render_invoice(view, template="{{ view.missing_field }}")
