from decimal import ROUND_HALF_UP, Decimal

from quote_api.schemas.quotes import Material, PrepLevel, QuoteInput, QuoteOutput

BASE_RATE_PER_M2 = 25.0  # EUR
RUSH_SURCHARGE_RATE = 0.5
RUSH_MAX_DAYS = 5

MATERIAL_MULTIPLIERS = {
    Material.aluminium: 1.0,
    Material.steel: 0.9,
    Material.stainless: 1.2,
}

PREP_RATES_PER_M2 = {
    PrepLevel.clean: 0.0,
    PrepLevel.blast_clean: 15.0,
    PrepLevel.blast_prime: 25.0,
}


def round_price(value: float) -> float:
    """Round to cents, halves away from zero like the quote form does."""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def surface_area_m2(length_mm: float, width_mm: float, height_mm: float) -> float:
    """Surface area of the part treated as a closed box."""
    return (
        2
        * (length_mm * width_mm + length_mm * height_mm + width_mm * height_mm)
        / 1_000_000
    )


def calculate_quote(data: QuoteInput) -> QuoteOutput:
    area = surface_area_m2(data.length_mm, data.width_mm, data.height_mm)

    base_price = area * BASE_RATE_PER_M2 * data.quantity
    base_price *= MATERIAL_MULTIPLIERS[data.material]

    prep_surcharge = area * PREP_RATES_PER_M2[data.prep_level] * data.quantity

    # Rush only applies when the turnaround is actually short
    if data.is_rush and data.turnaround_days < RUSH_MAX_DAYS:
        rush_surcharge = base_price * RUSH_SURCHARGE_RATE
    else:
        rush_surcharge = 0.0

    total_price = base_price + prep_surcharge + rush_surcharge

    return QuoteOutput(
        base_price=round_price(base_price),
        prep_surcharge=round_price(prep_surcharge),
        rush_surcharge=round_price(rush_surcharge),
        total_price=round_price(total_price),
        currency="EUR",
    )
