import pytest

from courier_billing.errors import ValidationError
from courier_billing.models.domain import ServiceType
from courier_billing.services.tariffs import Currency, describe_rate, quote_tariff


@pytest.mark.parametrize(
    "service, weight, cost, currency",
    [
        (ServiceType.MARITIME, 4, 350.00, Currency.LOCAL),
        (ServiceType.MARITIME, 5, 13.50, Currency.FOREIGN),
        (ServiceType.AIR_STANDARD, 2, 350.00, Currency.LOCAL),
        (ServiceType.AIR_STANDARD, 3, 16.50, Currency.FOREIGN),
        (ServiceType.AIR_EXPRESS, 1.5, 12.00, Currency.FOREIGN),
        (ServiceType.AIR_EXPRESS, 2, 20.00, Currency.FOREIGN),
    ],
)
def test_threshold_is_inclusive_and_per_pound_above(service, weight, cost, currency):
    quote = quote_tariff(service, weight)

    assert quote.cost == pytest.approx(cost)
    assert quote.currency is currency


def test_zero_weight_takes_flat_price():
    quote = quote_tariff(ServiceType.MARITIME, 0)

    assert quote.cost == 350.00
    assert quote.unit_rate == 350.00


def test_per_pound_quote_reports_rate():
    quote = quote_tariff("maritimo", 10)

    assert quote.unit_rate == pytest.approx(2.70)
    assert quote.cost == pytest.approx(27.0)
    assert quote.description == "Marítimo 10.00 lb × $2.70"


def test_custom_rate_passes_cost_through():
    quote = quote_tariff(ServiceType.OTHER, 8, custom_cost=275.0)

    assert quote.cost == 275.0
    assert quote.unit_rate == 275.0
    assert quote.currency is Currency.LOCAL
    assert quote.description == "Tarifa personalizada"


@pytest.mark.parametrize("custom_cost", [None, -1.0])
def test_custom_rate_requires_non_negative_cost(custom_cost):
    with pytest.raises(ValidationError):
        quote_tariff(ServiceType.OTHER, 1, custom_cost=custom_cost)


def test_unknown_service_type_is_rejected():
    with pytest.raises(ValidationError) as excinfo:
        quote_tariff("terrestre", 1)

    assert "terrestre" in excinfo.value.message


def test_negative_weight_is_rejected():
    with pytest.raises(ValidationError):
        quote_tariff(ServiceType.AIR_STANDARD, -0.5)


@pytest.mark.parametrize(
    "service, weight, expected",
    [
        (ServiceType.MARITIME, 3, "Marítimo 0-4 lb: L. 350.00"),
        (ServiceType.AIR_STANDARD, 2, "Aéreo Standard 0-2 lb: L. 350.00"),
        (ServiceType.AIR_STANDARD, 3, "Aéreo Standard 3.00 lb × $5.50"),
        (ServiceType.AIR_EXPRESS, 1, "Aéreo Express 0-1.5 lb: $12.00"),
        (ServiceType.AIR_EXPRESS, 2, "Aéreo Express 2.00 lb × $10.00"),
        (ServiceType.OTHER, 2, "Tarifa personalizada"),
    ],
)
def test_rate_descriptions(service, weight, expected):
    assert describe_rate(service, weight) == expected
