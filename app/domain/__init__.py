"""
Capa de Dominio - Reservas de alquiler para eventos.

Esta capa contiene la lógica de negocio pura, sin dependencias de frameworks.
Incluye entidades, value objects, reglas de precio y excepciones de dominio.

Estructura:
- entities/: Entidades del dominio (Booking, Listing, Refund, etc.)
- value_objects/: Objetos de valor inmutables (DateRange, centavos)
- pricing.py: Desglose de precio y comisión de la plataforma
- cancellation.py: Política informativa de reembolso
- errors.py: Excepciones específicas del dominio
"""

from app.domain.cancellation import RefundAdvisory, RefundEligibility, refund_advisory
from app.domain.entities import (
    AuditLogEntry,
    Booking,
    BookingActor,
    BookingPaymentStatus,
    BookingStatus,
    LenderProfile,
    Listing,
    Payout,
    Refund,
    WebhookEvent,
)
from app.domain.errors import (
    BookingNotFoundError,
    DomainError,
    IdempotencyConflictError,
    InvalidBookingTransitionError,
    OptimisticLockError,
    ValidationError,
)
from app.domain.pricing import BookingQuote, CheckoutAmounts, checkout_amounts, quote_booking
from app.domain.value_objects import DateRange

__all__ = [
    # Entities
    "AuditLogEntry",
    "Booking",
    "BookingActor",
    "BookingPaymentStatus",
    "BookingStatus",
    "LenderProfile",
    "Listing",
    "Payout",
    "Refund",
    "WebhookEvent",
    # Policies
    "BookingQuote",
    "CheckoutAmounts",
    "RefundAdvisory",
    "RefundEligibility",
    "checkout_amounts",
    "quote_booking",
    "refund_advisory",
    # Value Objects
    "DateRange",
    # Errors
    "DomainError",
    "BookingNotFoundError",
    "IdempotencyConflictError",
    "InvalidBookingTransitionError",
    "OptimisticLockError",
    "ValidationError",
]
