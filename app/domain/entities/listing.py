"""Entidades de catálogo: Listing y LenderProfile (contexto de sólo lectura)."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum


class PricingType(str, Enum):
    """Unidad en la que se cobra un artículo."""

    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"


class VerificationStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"


@dataclass
class ListingVariant:
    """Variante de un artículo con ajuste de precio por unidad de tiempo."""

    id: str
    name: str
    price_adjustment: Decimal = Decimal("0")


@dataclass
class ListingAddOn:
    """Complemento con precio fijo por unidad reservada."""

    id: str
    name: str
    price: Decimal = Decimal("0")
    is_required: bool = False


@dataclass
class ListingDeposit:
    """Depósito de garantía reembolsable."""

    id: str
    amount: Decimal = Decimal("0")


@dataclass
class Listing:
    """
    Artículo publicado por un prestador.

    La lógica de reservas sólo lo lee para precio, stock y límites de duración.
    """

    id: str
    lender_id: str
    title: str
    base_price: Decimal
    pricing_type: PricingType = PricingType.DAILY
    min_rental_duration: int = 1
    max_rental_duration: int | None = None
    quantity_available: int = 1
    cover_image_url: str | None = None
    variants: list[ListingVariant] = field(default_factory=list)
    add_ons: list[ListingAddOn] = field(default_factory=list)
    deposits: list[ListingDeposit] = field(default_factory=list)

    def find_variant(self, variant_id: str) -> ListingVariant | None:
        return next((v for v in self.variants if v.id == variant_id), None)

    def find_add_on(self, add_on_id: str) -> ListingAddOn | None:
        return next((a for a in self.add_ons if a.id == add_on_id), None)

    @property
    def required_add_ons(self) -> list[ListingAddOn]:
        return [a for a in self.add_ons if a.is_required]

    @property
    def deposit(self) -> ListingDeposit | None:
        """El primer depósito configurado es el que se cobra."""
        return self.deposits[0] if self.deposits else None


@dataclass
class LenderProfile:
    """Perfil de prestador con su cuenta conectada de Stripe."""

    id: str
    user_id: str
    stripe_account_id: str | None = None
    charges_enabled: bool = False
    payouts_enabled: bool = False
    onboarding_completed: bool = False
    verification_status: VerificationStatus = VerificationStatus.PENDING

    def sync_account(
        self, charges_enabled: bool, payouts_enabled: bool, details_submitted: bool
    ) -> bool:
        """
        Aplica los flags reportados por Stripe para la cuenta conectada.

        Retorna True si alguno de los flags cambió.
        """
        changed = (self.charges_enabled, self.payouts_enabled, self.onboarding_completed) != (
            charges_enabled,
            payouts_enabled,
            details_submitted,
        )
        self.charges_enabled = charges_enabled
        self.payouts_enabled = payouts_enabled
        self.onboarding_completed = details_submitted
        self.verification_status = (
            VerificationStatus.VERIFIED
            if charges_enabled and payouts_enabled
            else VerificationStatus.PENDING
        )
        return changed
