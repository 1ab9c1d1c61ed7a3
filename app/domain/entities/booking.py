"""Entidad Booking - Agregado raíz del dominio."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from app.domain.errors import InvalidBookingTransitionError
from app.domain.value_objects.date_range import DateRange


class BookingStatus(str, Enum):
    """Estados posibles de una reserva."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class BookingPaymentStatus(str, Enum):
    """Estados de pago de una reserva (independientes del estado)."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"


class BookingActor(str, Enum):
    """Quién dispara una transición."""

    RENTER = "renter"
    LENDER = "lender"
    PAYMENT_WEBHOOK = "payment_webhook"


class DepositStatus(str, Enum):
    """Estados del depósito de garantía de una reserva."""

    PENDING = "pending"
    REFUNDED = "refunded"


TERMINAL_STATUSES = frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED})

# (desde, hacia) -> actores habilitados
ALLOWED_TRANSITIONS: dict[tuple[BookingStatus, BookingStatus], frozenset[BookingActor]] = {
    (BookingStatus.PENDING, BookingStatus.CONFIRMED): frozenset(
        {BookingActor.LENDER, BookingActor.PAYMENT_WEBHOOK}
    ),
    (BookingStatus.PENDING, BookingStatus.CANCELLED): frozenset(
        {BookingActor.RENTER, BookingActor.LENDER}
    ),
    (BookingStatus.CONFIRMED, BookingStatus.CANCELLED): frozenset(
        {BookingActor.RENTER, BookingActor.LENDER}
    ),
    (BookingStatus.CONFIRMED, BookingStatus.ACTIVE): frozenset({BookingActor.LENDER}),
    (BookingStatus.ACTIVE, BookingStatus.COMPLETED): frozenset({BookingActor.LENDER}),
}

# Orden usado para verificar que el estado nunca retrocede
STATUS_RANK = {
    BookingStatus.PENDING: 0,
    BookingStatus.CONFIRMED: 1,
    BookingStatus.ACTIVE: 2,
    BookingStatus.COMPLETED: 3,
    BookingStatus.CANCELLED: 3,
}


@dataclass
class BookingAddOn:
    """Complemento adjunto a la reserva con el precio vigente al reservar."""

    add_on_id: str
    name: str
    quantity: int
    price: Decimal
    booking_id: str | None = None

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


@dataclass
class BookingDeposit:
    """Depósito reembolsable copiado del artículo al momento de reservar."""

    deposit_id: str
    amount: Decimal
    status: DepositStatus = DepositStatus.PENDING
    booking_id: str | None = None


@dataclass
class Booking:
    """
    Entidad principal del dominio - Agregado Raíz.

    Representa la reserva de un artículo (o variante) por parte de un cliente
    a un prestador para un rango de fechas.
    """

    # Identificadores
    id: str
    renter_id: str
    lender_id: str
    listing_id: str
    variant_id: str | None = None

    # Fechas y cantidad
    start_date: date | None = None
    end_date: date | None = None
    quantity: int = 1
    rental_duration: int = 1

    # Financieros (unidades mayores, fijados al crear)
    base_amount: Decimal = Decimal("0")
    variant_amount: Decimal = Decimal("0")
    add_ons_amount: Decimal = Decimal("0")
    subtotal: Decimal = Decimal("0")
    deposit_amount: Decimal = Decimal("0")
    total_price: Decimal = Decimal("0")

    # Estados
    status: BookingStatus = BookingStatus.PENDING
    payment_status: BookingPaymentStatus = BookingPaymentStatus.PENDING

    # Transiciones
    confirmed_at: datetime | None = None
    cancelled_at: datetime | None = None
    completed_at: datetime | None = None
    cancellation_reason: str | None = None

    # Stripe
    renter_email: str | None = None
    stripe_session_id: str | None = None
    payment_intent_id: str | None = None
    payment_error: str | None = None

    # Control de concurrencia
    version: int = 0

    # Timestamps
    created_at: datetime | None = None
    updated_at: datetime | None = None

    # Relaciones (persistidas en sus propias tablas)
    add_ons: list[BookingAddOn] = field(default_factory=list)
    deposits: list[BookingDeposit] = field(default_factory=list)

    # === Propiedades calculadas ===

    @property
    def date_range(self) -> DateRange | None:
        """Retorna el rango de fechas como Value Object."""
        if self.start_date and self.end_date:
            return DateRange(start=self.start_date, end=self.end_date)
        return None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_paid(self) -> bool:
        return self.payment_status == BookingPaymentStatus.PAID

    def actor_for(self, user_id: str) -> BookingActor | None:
        """Resuelve el rol del usuario dentro de esta reserva."""
        if user_id == self.lender_id:
            return BookingActor.LENDER
        if user_id == self.renter_id:
            return BookingActor.RENTER
        return None

    def can_transition(self, target: BookingStatus, actor: BookingActor) -> bool:
        allowed = ALLOWED_TRANSITIONS.get((self.status, target))
        return allowed is not None and actor in allowed

    # === Métodos de negocio ===

    def transition_to(
        self,
        target: BookingStatus,
        actor: BookingActor,
        now: datetime,
        reason: str | None = None,
    ) -> None:
        """
        Aplica una transición validando el grafo de estados y el actor.

        Raises:
            InvalidBookingTransitionError: si (estado, destino, actor) no está
                en ALLOWED_TRANSITIONS.
        """
        if not self.can_transition(target, actor):
            raise InvalidBookingTransitionError(
                current_status=self.status.value,
                target_status=target.value,
                actor=actor.value,
            )

        self.status = target
        if target == BookingStatus.CONFIRMED:
            self.confirmed_at = now
        elif target == BookingStatus.CANCELLED:
            self.cancelled_at = now
            if reason:
                self.cancellation_reason = reason
        elif target == BookingStatus.COMPLETED:
            self.completed_at = now
            for deposit in self.deposits:
                deposit.status = DepositStatus.REFUNDED
        self.updated_at = now

    def record_payment(self, now: datetime) -> bool:
        """
        Registra un checkout completado.

        El estado de pago pasa a PAID. Sólo una reserva PENDING se confirma;
        cualquier otro estado se conserva para no retroceder en el grafo.

        Returns:
            True si el estado de la reserva cambió a CONFIRMED.
        """
        self.payment_status = BookingPaymentStatus.PAID
        self.payment_error = None
        self.updated_at = now
        if self.status == BookingStatus.PENDING:
            self.transition_to(BookingStatus.CONFIRMED, BookingActor.PAYMENT_WEBHOOK, now)
            return True
        return False

    def mark_payment_failed(self, message: str, now: datetime) -> bool:
        """
        Marca el pago como fallido salvo que ya se haya cobrado.

        Returns:
            True si el estado de pago cambió.
        """
        if self.payment_status in (
            BookingPaymentStatus.PAID,
            BookingPaymentStatus.REFUNDED,
            BookingPaymentStatus.PARTIALLY_REFUNDED,
        ):
            return False
        self.payment_status = BookingPaymentStatus.FAILED
        self.payment_error = message
        self.updated_at = now
        return True

    def apply_refund(self, fully_refunded: bool, now: datetime) -> None:
        """Actualiza el estado de pago tras un reembolso total o parcial."""
        self.payment_status = (
            BookingPaymentStatus.REFUNDED
            if fully_refunded
            else BookingPaymentStatus.PARTIALLY_REFUNDED
        )
        self.updated_at = now
