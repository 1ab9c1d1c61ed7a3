"""Conversión de montos entre unidades mayores y centavos de Stripe."""

from decimal import ROUND_HALF_UP, Decimal

from app.domain.errors import InvalidMoneyError

CENT = Decimal("1")
HUNDRED = Decimal("100")
TWO_PLACES = Decimal("0.01")


def to_minor_units(amount: Decimal) -> int:
    """
    Convierte un monto en unidades mayores a centavos enteros.

    Redondea al centavo más cercano (mitades hacia arriba). Stripe no
    acepta montos negativos.
    """
    value = Decimal(str(amount))
    if value < 0:
        raise InvalidMoneyError(f"amount cannot be negative: {value}")
    return int((value * HUNDRED).quantize(CENT, rounding=ROUND_HALF_UP))


def from_minor_units(cents: int) -> Decimal:
    return (Decimal(cents) / HUNDRED).quantize(TWO_PLACES)
