"""Interfaces (Puertos) de la capa de aplicación."""

from app.application.interfaces.audit_log_repo import AuditLogRepo
from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock, FakeClock, SystemClock
from app.application.interfaces.idempotency_repo import IdempotencyRecord, IdempotencyRepo
from app.application.interfaces.listing_repo import LenderRepo, ListingRepo
from app.application.interfaces.payment_repo import DisputeRepo, PayoutRepo, RefundRepo
from app.application.interfaces.stripe_gateway import (
    ChargeInfo,
    CheckoutLineItem,
    CheckoutSessionRequest,
    CheckoutSessionResult,
    RefundResult,
    StripeGateway,
)
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.interfaces.uuid_generator import (
    FakeUUIDGenerator,
    RealUUIDGenerator,
    UUIDGenerator,
)
from app.application.interfaces.webhook_event_repo import WebhookEventRepo

__all__ = [
    # Repositories
    "AuditLogRepo",
    "BookingRepo",
    "DisputeRepo",
    "IdempotencyRecord",
    "IdempotencyRepo",
    "LenderRepo",
    "ListingRepo",
    "PayoutRepo",
    "RefundRepo",
    "WebhookEventRepo",
    # Gateways
    "ChargeInfo",
    "CheckoutLineItem",
    "CheckoutSessionRequest",
    "CheckoutSessionResult",
    "RefundResult",
    "StripeGateway",
    # Infrastructure
    "TransactionManager",
    # Utilities
    "Clock",
    "SystemClock",
    "FakeClock",
    "UUIDGenerator",
    "RealUUIDGenerator",
    "FakeUUIDGenerator",
]
