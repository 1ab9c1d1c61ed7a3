"""Entidades del dominio de reservas."""

from app.domain.entities.booking import (
    ALLOWED_TRANSITIONS,
    Booking,
    BookingActor,
    BookingAddOn,
    BookingDeposit,
    BookingPaymentStatus,
    BookingStatus,
    DepositStatus,
)
from app.domain.entities.listing import (
    LenderProfile,
    Listing,
    ListingAddOn,
    ListingDeposit,
    ListingVariant,
    PricingType,
    VerificationStatus,
)
from app.domain.entities.payment import (
    Dispute,
    DisputeStatus,
    Payout,
    PayoutStatus,
    Refund,
    RefundStatus,
)
from app.domain.entities.webhook_event import AuditLogEntry, WebhookEvent

__all__ = [
    # Booking
    "ALLOWED_TRANSITIONS",
    "Booking",
    "BookingActor",
    "BookingAddOn",
    "BookingDeposit",
    "BookingPaymentStatus",
    "BookingStatus",
    "DepositStatus",
    # Listing
    "LenderProfile",
    "Listing",
    "ListingAddOn",
    "ListingDeposit",
    "ListingVariant",
    "PricingType",
    "VerificationStatus",
    # Payments
    "Dispute",
    "DisputeStatus",
    "Payout",
    "PayoutStatus",
    "Refund",
    "RefundStatus",
    # Logs
    "AuditLogEntry",
    "WebhookEvent",
]
