"""Reglas de precio de una reserva y montos del checkout."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from app.domain.entities.listing import Listing, ListingAddOn
from app.domain.value_objects.date_range import DateRange
from app.domain.value_objects.money import to_minor_units

DEFAULT_PLATFORM_FEE_RATE = Decimal("0.10")


@dataclass(frozen=True)
class BookingQuote:
    """Desglose de precio fijado al crear la reserva (unidades mayores)."""

    rental_duration: int
    base_amount: Decimal
    variant_amount: Decimal
    add_ons_amount: Decimal
    subtotal: Decimal
    deposit_amount: Decimal

    @property
    def total_price(self) -> Decimal:
        return self.subtotal + self.deposit_amount


@dataclass(frozen=True)
class CheckoutAmounts:
    """Montos en centavos enviados al procesador de pagos."""

    rental_cents: int
    deposit_cents: int
    platform_fee_cents: int

    @property
    def total_cents(self) -> int:
        return self.rental_cents + self.deposit_cents

    @property
    def lender_net_cents(self) -> int:
        return self.total_cents - self.platform_fee_cents


def quote_booking(
    listing: Listing,
    dates: DateRange,
    quantity: int,
    variant_adjustment: Decimal,
    add_ons: list[ListingAddOn],
) -> BookingQuote:
    """
    Calcula el precio de una reserva.

    subtotal = base*duración*cantidad + ajuste_variante*duración*cantidad
               + Σ(precio_complemento*cantidad)
    total = subtotal + depósito (el primero configurado en el artículo).
    """
    duration = dates.duration(listing.pricing_type.value)
    base_amount = listing.base_price * duration * quantity
    variant_amount = variant_adjustment * duration * quantity
    add_ons_amount = sum((a.price * quantity for a in add_ons), Decimal("0"))
    deposit = listing.deposit
    return BookingQuote(
        rental_duration=duration,
        base_amount=base_amount,
        variant_amount=variant_amount,
        add_ons_amount=add_ons_amount,
        subtotal=base_amount + variant_amount + add_ons_amount,
        deposit_amount=deposit.amount if deposit else Decimal("0"),
    )


def checkout_amounts(
    subtotal: Decimal,
    deposit_amount: Decimal,
    fee_rate: Decimal = DEFAULT_PLATFORM_FEE_RATE,
) -> CheckoutAmounts:
    """
    Convierte el desglose a centavos y calcula la comisión de la plataforma.

    La comisión se aplica sólo sobre el alquiler; el depósito queda excluido.
    """
    rental_cents = to_minor_units(subtotal)
    deposit_cents = to_minor_units(deposit_amount)
    fee = (Decimal(rental_cents) * Decimal(str(fee_rate))).quantize(
        Decimal("1"), rounding=ROUND_HALF_UP
    )
    return CheckoutAmounts(
        rental_cents=rental_cents,
        deposit_cents=deposit_cents,
        platform_fee_cents=int(fee),
    )
