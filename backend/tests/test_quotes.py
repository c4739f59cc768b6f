import pytest
from pydantic import ValidationError

from quote_api.schemas.quotes import QuoteInput
from quote_api.services.pricing import calculate_quote, round_price, surface_area_m2

BASE_INPUT = {
    "length_mm": 1000,
    "width_mm": 500,
    "height_mm": 300,
    "material": "Steel",
    "prep_level": "Clean",
    "color": "9005",
    "turnaround_days": 7,
    "quantity": 1,
    "is_rush": False,
}


def _quote(**overrides):
    return calculate_quote(QuoteInput(**{**BASE_INPUT, **overrides}))


def test_surface_area_of_box():
    assert surface_area_m2(1000, 500, 300) == pytest.approx(1.9)


def test_basic_quote():
    quote = _quote()
    assert quote.base_price == pytest.approx(42.75)
    assert quote.prep_surcharge == 0.0
    assert quote.rush_surcharge == 0.0
    assert quote.total_price == pytest.approx(42.75)
    assert quote.currency == "EUR"


@pytest.mark.parametrize(
    "material, expected", [("Aluminium", 47.5), ("Steel", 42.75), ("Stainless", 57.0)]
)
def test_material_multiplier(material, expected):
    assert _quote(material=material).base_price == pytest.approx(expected)


@pytest.mark.parametrize(
    "prep_level, expected", [("Clean", 0.0), ("BlastClean", 28.5), ("BlastPrime", 47.5)]
)
def test_prep_surcharge(prep_level, expected):
    assert _quote(prep_level=prep_level).prep_surcharge == pytest.approx(expected)


def test_rush_surcharge_under_five_days():
    quote = _quote(material="Aluminium", is_rush=True, turnaround_days=3)
    assert quote.rush_surcharge == pytest.approx(23.75)
    assert quote.total_price == pytest.approx(71.25)


def test_rush_flag_ignored_for_long_turnaround():
    assert _quote(is_rush=True, turnaround_days=5).rush_surcharge == 0.0


def test_quantity_scales_all_components():
    quote = _quote(material="Stainless", prep_level="BlastPrime", quantity=2)
    assert quote.base_price == pytest.approx(114.0)
    assert quote.prep_surcharge == pytest.approx(95.0)
    assert quote.total_price == pytest.approx(209.0)


@pytest.mark.parametrize(
    "value, expected", [(0.125, 0.13), (21.375, 21.38), (64.125, 64.13), (42.75, 42.75)]
)
def test_round_price_rounds_half_cents_up(value, expected):
    assert round_price(value) == expected


def test_prices_rounded_to_cents():
    quote = _quote(length_mm=333, width_mm=111, height_mm=77)
    for value in (quote.base_price, quote.prep_surcharge, quote.total_price):
        assert round(value, 2) == value


@pytest.mark.parametrize(
    "overrides",
    [
        {"length_mm": 9},
        {"width_mm": 5001},
        {"color": "RAL9005"},
        {"color": "905"},
        {"turnaround_days": 0},
        {"turnaround_days": 31},
        {"quantity": 0},
        {"quantity": 1001},
        {"material": "Wood"},
        {"prep_level": "Sanded"},
        {"unexpected": True},
    ],
)
def test_invalid_input_rejected(overrides):
    with pytest.raises(ValidationError):
        QuoteInput(**{**BASE_INPUT, **overrides})


def test_quote_endpoint(client):
    r = client.post("/api/quotes", json={**BASE_INPUT, "material": "Aluminium"})
    assert r.status_code == 200
    assert r.json() == {
        "base_price": 47.5,
        "prep_surcharge": 0.0,
        "rush_surcharge": 0.0,
        "total_price": 47.5,
        "currency": "EUR",
    }


def test_quote_endpoint_validation_error(client):
    r = client.post("/api/quotes", json={**BASE_INPUT, "quantity": 0})
    assert r.status_code == 422
