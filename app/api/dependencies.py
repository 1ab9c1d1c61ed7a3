from functools import lru_cache

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import AsyncSessionLocal
from app.application.interfaces.clock import SystemClock
from app.application.interfaces.uuid_generator import RealUUIDGenerator
from app.application.use_cases.create_booking import CreateBookingUseCase
from app.application.use_cases.create_checkout_session import CreateCheckoutSessionUseCase
from app.application.use_cases.get_booking import GetBookingUseCase, ListBookingsUseCase
from app.application.use_cases.handle_stripe_webhook import HandleStripeWebhookUseCase
from app.application.use_cases.request_refund import RequestRefundUseCase
from app.application.use_cases.sync_lender_account import SyncLenderAccountUseCase
from app.application.use_cases.transition_booking import TransitionBookingUseCase
from app.config import Settings, get_settings
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
from app.infrastructure.in_memory import (
    InMemoryAuditLogRepo,
    InMemoryBookingRepo,
    InMemoryDisputeRepo,
    InMemoryIdempotencyRepo,
    InMemoryLenderRepo,
    InMemoryListingRepo,
    InMemoryPayoutRepo,
    InMemoryRefundRepo,
    InMemoryWebhookEventRepo,
    NoopTransactionManager,
    StubStripeGateway,
)


async def get_session(settings: Settings = Depends(get_settings)) -> AsyncSession | None:
    if settings.use_in_memory:
        yield None
        return
    async with AsyncSessionLocal() as session:
        yield session


def get_current_user_id(
    user_id: str | None = Header(default=None, convert_underscores=False, alias="X-User-Id"),
) -> str:
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user_id


@lru_cache(maxsize=1)
def _in_memory_bundle():
    return {
        "booking_repo": InMemoryBookingRepo(),
        "listing_repo": InMemoryListingRepo(),
        "lender_repo": InMemoryLenderRepo(),
        "refund_repo": InMemoryRefundRepo(),
        "payout_repo": InMemoryPayoutRepo(),
        "dispute_repo": InMemoryDisputeRepo(),
        "webhook_event_repo": InMemoryWebhookEventRepo(),
        "audit_log_repo": InMemoryAuditLogRepo(),
        "idempotency_repo": InMemoryIdempotencyRepo(),
        "stripe_gateway": StubStripeGateway(),
        "tx_manager": NoopTransactionManager(),
    }


def _sql_bundle(session: AsyncSession, settings: Settings):
    return {
        "booking_repo": BookingRepoSQL(session),
        "listing_repo": ListingRepoSQL(session),
        "lender_repo": LenderRepoSQL(session),
        "refund_repo": RefundRepoSQL(session),
        "payout_repo": PayoutRepoSQL(session),
        "dispute_repo": DisputeRepoSQL(session),
        "webhook_event_repo": WebhookEventRepoSQL(session),
        "audit_log_repo": AuditLogRepoSQL(session),
        "idempotency_repo": IdempotencyRepoSQL(session),
        "stripe_gateway": StripeGatewayReal(api_key=settings.stripe_secret_key),
        "tx_manager": SQLAlchemyTransactionManager(session),
    }


def build_use_cases(bundle: dict, settings: Settings) -> dict:
    clock = SystemClock()
    return {
        "create_booking": CreateBookingUseCase(
            booking_repo=bundle["booking_repo"],
            listing_repo=bundle["listing_repo"],
            idempotency_repo=bundle["idempotency_repo"],
            transaction_manager=bundle["tx_manager"],
            uuid_generator=RealUUIDGenerator(),
            clock=clock,
        ),
        "transition_booking": TransitionBookingUseCase(
            booking_repo=bundle["booking_repo"],
            audit_log_repo=bundle["audit_log_repo"],
            transaction_manager=bundle["tx_manager"],
            clock=clock,
            full_refund_min_days=settings.full_refund_min_days,
        ),
        "get_booking": GetBookingUseCase(
            booking_repo=bundle["booking_repo"],
            clock=clock,
            full_refund_min_days=settings.full_refund_min_days,
        ),
        "list_bookings": ListBookingsUseCase(booking_repo=bundle["booking_repo"]),
        "create_checkout_session": CreateCheckoutSessionUseCase(
            booking_repo=bundle["booking_repo"],
            listing_repo=bundle["listing_repo"],
            lender_repo=bundle["lender_repo"],
            stripe_gateway=bundle["stripe_gateway"],
            transaction_manager=bundle["tx_manager"],
            stripe_secret_key=settings.stripe_secret_key,
            app_url=settings.app_url,
            currency=settings.currency,
            platform_fee_rate=settings.platform_fee_rate,
        ),
        "request_refund": RequestRefundUseCase(
            booking_repo=bundle["booking_repo"],
            refund_repo=bundle["refund_repo"],
            audit_log_repo=bundle["audit_log_repo"],
            stripe_gateway=bundle["stripe_gateway"],
            transaction_manager=bundle["tx_manager"],
            clock=clock,
            stripe_secret_key=settings.stripe_secret_key,
        ),
        "sync_lender_account": SyncLenderAccountUseCase(
            lender_repo=bundle["lender_repo"],
            audit_log_repo=bundle["audit_log_repo"],
            stripe_gateway=bundle["stripe_gateway"],
            transaction_manager=bundle["tx_manager"],
            clock=clock,
        ),
        "handle_webhook": HandleStripeWebhookUseCase(
            booking_repo=bundle["booking_repo"],
            lender_repo=bundle["lender_repo"],
            refund_repo=bundle["refund_repo"],
            payout_repo=bundle["payout_repo"],
            dispute_repo=bundle["dispute_repo"],
            webhook_event_repo=bundle["webhook_event_repo"],
            audit_log_repo=bundle["audit_log_repo"],
            stripe_gateway=bundle["stripe_gateway"],
            transaction_manager=bundle["tx_manager"],
            clock=clock,
            stripe_webhook_secret=settings.stripe_webhook_secret,
        ),
    }


def get_use_cases(
    settings: Settings = Depends(get_settings),
    session: AsyncSession | None = Depends(get_session),
):
    if settings.use_in_memory:
        return build_use_cases(_in_memory_bundle(), settings)

    if not session:
        raise RuntimeError("DB session not available")
    return build_use_cases(_sql_bundle(session, settings), settings)
