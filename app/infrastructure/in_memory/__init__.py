"""Implementaciones in-memory para desarrollo y testing."""

from app.infrastructure.in_memory.booking_repo import InMemoryBookingRepo
from app.infrastructure.in_memory.idempotency_repo import InMemoryIdempotencyRepo
from app.infrastructure.in_memory.listing_repo import InMemoryLenderRepo, InMemoryListingRepo
from app.infrastructure.in_memory.payment_repo import (
    InMemoryDisputeRepo,
    InMemoryPayoutRepo,
    InMemoryRefundRepo,
)
from app.infrastructure.in_memory.stripe_gateway import StubStripeGateway
from app.infrastructure.in_memory.transaction_manager import NoopTransactionManager
from app.infrastructure.in_memory.webhook_event_repo import (
    InMemoryAuditLogRepo,
    InMemoryWebhookEventRepo,
)

__all__ = [
    # Repositories
    "InMemoryAuditLogRepo",
    "InMemoryBookingRepo",
    "InMemoryDisputeRepo",
    "InMemoryIdempotencyRepo",
    "InMemoryLenderRepo",
    "InMemoryListingRepo",
    "InMemoryPayoutRepo",
    "InMemoryRefundRepo",
    "InMemoryWebhookEventRepo",
    # Gateways
    "StubStripeGateway",
    # Infrastructure
    "NoopTransactionManager",
]
