"""
Capa de Infraestructura - Reservas de alquiler para eventos.

Esta capa contiene las implementaciones concretas de los puertos (interfaces).

Estructura:
- db/: Tablas SQLAlchemy, repositorios SQL y transacciones
- gateways/: Adaptador real de Stripe y verificación de webhooks
- in_memory/: Implementaciones in-memory para desarrollo y testing
- circuit_breaker.py: Circuit breaker para llamadas a Stripe
"""

from app.infrastructure.db.repositories.booking_repo_sql import BookingRepoSQL
from app.infrastructure.db.repositories.idempotency_repo_sql import IdempotencyRepoSQL
from app.infrastructure.db.repositories.listing_repo_sql import LenderRepoSQL, ListingRepoSQL
from app.infrastructure.db.repositories.payment_repo_sql import (
    DisputeRepoSQL,
    PayoutRepoSQL,
    RefundRepoSQL,
)
from app.infrastructure.db.repositories.webhook_event_repo_sql import (
    AuditLogRepoSQL,
    WebhookEventRepoSQL,
)
from app.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager
from app.infrastructure.gateways.stripe_gateway_real import StripeGatewayReal

__all__ = [
    # Database - Repositories SQL
    "AuditLogRepoSQL",
    "BookingRepoSQL",
    "DisputeRepoSQL",
    "IdempotencyRepoSQL",
    "LenderRepoSQL",
    "ListingRepoSQL",
    "PayoutRepoSQL",
    "RefundRepoSQL",
    "WebhookEventRepoSQL",
    "SQLAlchemyTransactionManager",
    # Gateways
    "StripeGatewayReal",
]
