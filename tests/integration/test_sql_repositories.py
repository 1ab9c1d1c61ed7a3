"""
Integration tests de los adaptadores SQL sobre SQLite.

Verifica:
- Rollback completo de la unidad de trabajo ante un error
- Bloqueo optimista por columna version
- Unicidad del event_id de webhooks y reproceso idempotente
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, insert, select
from sqlalchemy.exc import IntegrityError

from app.api.schemas.bookings import CreateBookingRequest
from app.application.interfaces.clock import FakeClock
from app.application.interfaces.uuid_generator import FakeUUIDGenerator
from app.application.use_cases.create_booking import CreateBookingUseCase
from app.application.use_cases.handle_stripe_webhook import HandleStripeWebhookUseCase
from app.domain.entities.booking import BookingActor, BookingPaymentStatus, BookingStatus, DepositStatus
from app.domain.entities.webhook_event import WebhookEvent
from app.domain.errors import OptimisticLockError, WebhookProcessingError
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
from app.infrastructure.db.tables import (
    lender_profiles,
    listing_add_ons,
    listing_deposits,
    listings,
    refunds,
    webhook_events,
)
from app.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager
from app.infrastructure.in_memory import StubStripeGateway
from conftest import (
    FIXED_NOW,
    LENDER_ID,
    LISTING_ID,
    RENTER_ID,
    WEBHOOK_SECRET,
    make_booking,
    sign_payload,
    stripe_event,
)

pytestmark = pytest.mark.integration


async def _seed_catalog(session) -> None:
    async with session.begin():
        await session.execute(
            insert(lender_profiles).values(
                id="profile-1",
                user_id=LENDER_ID,
                stripe_account_id="acct_lender_1",
                charges_enabled=True,
                payouts_enabled=True,
            )
        )
        await session.execute(
            insert(listings).values(
                id=LISTING_ID,
                lender_id=LENDER_ID,
                title="Party Tent 6x12",
                base_price=Decimal("100.00"),
                pricing_type="daily",
                quantity_available=2,
            )
        )
        await session.execute(
            insert(listing_add_ons).values(
                id="addon-setup", listing_id=LISTING_ID, name="Setup", price=Decimal("30.00"), is_required=True
            )
        )
        await session.execute(
            insert(listing_deposits).values(id="dep-1", listing_id=LISTING_ID, amount=Decimal("50.00"))
        )


def _webhook_use_case(session, gateway=None):
    return HandleStripeWebhookUseCase(
        booking_repo=BookingRepoSQL(session),
        lender_repo=LenderRepoSQL(session),
        refund_repo=RefundRepoSQL(session),
        payout_repo=PayoutRepoSQL(session),
        dispute_repo=DisputeRepoSQL(session),
        webhook_event_repo=WebhookEventRepoSQL(session),
        audit_log_repo=AuditLogRepoSQL(session),
        stripe_gateway=gateway or StubStripeGateway(),
        transaction_manager=SQLAlchemyTransactionManager(session),
        clock=FakeClock(FIXED_NOW),
        stripe_webhook_secret=WEBHOOK_SECRET,
    )


async def _deliver(use_case, event_id, event_type, data_object):
    payload = stripe_event(event_id, event_type, data_object)
    await use_case.execute(payload, sign_payload(payload))


class TestUnitOfWork:
    async def test_error_rolls_back_booking_and_child_rows(self, db_session):
        repo = BookingRepoSQL(db_session)
        tx = SQLAlchemyTransactionManager(db_session)

        with pytest.raises(RuntimeError):
            async with tx.start():
                await repo.create(make_booking())
                raise RuntimeError("boom")

        assert await repo.get("booking-1") is None

    async def test_nested_start_joins_outer_transaction(self, db_session, other_session):
        tx = SQLAlchemyTransactionManager(db_session)
        repo = BookingRepoSQL(db_session)

        async with tx.start():
            async with tx.start():
                await repo.create(make_booking())

        stored = await BookingRepoSQL(other_session).get("booking-1")
        assert stored is not None
        assert [d.amount for d in stored.deposits] == [Decimal("50.00")]

    async def test_create_booking_persists_and_replays(self, db_session, other_session):
        await _seed_catalog(db_session)
        use_case = CreateBookingUseCase(
            booking_repo=BookingRepoSQL(db_session),
            listing_repo=ListingRepoSQL(db_session),
            idempotency_repo=IdempotencyRepoSQL(db_session),
            transaction_manager=SQLAlchemyTransactionManager(db_session),
            uuid_generator=FakeUUIDGenerator(),
            clock=FakeClock(FIXED_NOW),
        )
        request = CreateBookingRequest(
            listing_id=LISTING_ID, start_date=date(2026, 3, 10), end_date=date(2026, 3, 11)
        )

        first = await use_case.execute(RENTER_ID, request, "idem-sql")
        second = await use_case.execute(RENTER_ID, request, "idem-sql")

        assert first.id == second.id
        assert first.total_price == Decimal("280.00")
        stored = await BookingRepoSQL(other_session).get(first.id)
        assert stored.total_price == Decimal("280.00")
        assert [a.add_on_id for a in stored.add_ons] == ["addon-setup"]
        assert stored.deposits[0].status == DepositStatus.PENDING


class TestOptimisticLock:
    async def test_concurrent_writer_loses(self, db_session, other_session):
        async with db_session.begin():
            await BookingRepoSQL(db_session).create(make_booking())

        repo_a = BookingRepoSQL(db_session)
        repo_b = BookingRepoSQL(other_session)
        booking_a = await repo_a.get("booking-1")
        booking_b = await repo_b.get("booking-1")
        await db_session.rollback()
        await other_session.rollback()

        async with SQLAlchemyTransactionManager(db_session).start():
            booking_a.record_payment(FIXED_NOW)
            await repo_a.save(booking_a)
        assert booking_a.version == 1

        with pytest.raises(OptimisticLockError):
            async with SQLAlchemyTransactionManager(other_session).start():
                booking_b.transition_to(BookingStatus.CANCELLED, BookingActor.RENTER, FIXED_NOW)
                await repo_b.save(booking_b)

        stored = await BookingRepoSQL(other_session).get("booking-1")
        assert stored.status == BookingStatus.CONFIRMED
        assert stored.payment_status == BookingPaymentStatus.PAID
        assert stored.version == 1

    async def test_deposit_release_is_persisted(self, db_session):
        repo = BookingRepoSQL(db_session)
        async with db_session.begin():
            await repo.create(make_booking(status=BookingStatus.ACTIVE))

        async with SQLAlchemyTransactionManager(db_session).start():
            booking = await repo.get("booking-1")
            booking.transition_to(BookingStatus.COMPLETED, BookingActor.LENDER, FIXED_NOW)
            await repo.save(booking)
            await repo.update_deposits(booking.deposits)

        stored = await repo.get("booking-1")
        assert [d.status for d in stored.deposits] == [DepositStatus.REFUNDED]


class TestWebhookEvents:
    async def test_event_id_is_unique(self, db_session):
        async with db_session.begin():
            await WebhookEventRepoSQL(db_session).record(
                WebhookEvent(event_id="evt_1", event_type="payout.paid", payload={})
            )

        with pytest.raises(IntegrityError):
            async with db_session.begin():
                await db_session.execute(
                    insert(webhook_events).values(event_id="evt_1", event_type="payout.paid", payload={})
                )

    async def test_record_returns_existing_event(self, db_session):
        repo = WebhookEventRepoSQL(db_session)
        async with db_session.begin():
            first = await repo.record(WebhookEvent(event_id="evt_2", event_type="x", payload={"a": 1}))
            await repo.mark_processed("evt_2", FIXED_NOW)

        again = await repo.record(WebhookEvent(event_id="evt_2", event_type="x", payload={}))

        assert again.id == first.id
        assert again.processed is True
        assert again.payload == {"a": 1}

    async def test_replayed_refund_event_is_applied_once(self, db_session):
        async with db_session.begin():
            await BookingRepoSQL(db_session).create(
                make_booking(
                    status=BookingStatus.CONFIRMED,
                    payment_status=BookingPaymentStatus.PAID,
                    payment_intent_id="pi_1",
                )
            )
        use_case = _webhook_use_case(db_session)
        charge = {
            "id": "ch_1",
            "payment_intent": "pi_1",
            "amount": 25000,
            "amount_refunded": 25000,
            "refunds": {"data": [{"id": "re_1", "amount": 25000, "status": "succeeded"}]},
        }

        await _deliver(use_case, "evt_refund", "charge.refunded", charge)
        await _deliver(use_case, "evt_refund", "charge.refunded", charge)

        count = await db_session.scalar(select(func.count()).select_from(refunds))
        assert count == 1
        booking = await BookingRepoSQL(db_session).get("booking-1")
        assert booking.payment_status == BookingPaymentStatus.REFUNDED

    async def test_failed_handler_rolls_back_and_keeps_error(self, db_session, other_session):
        async with db_session.begin():
            await BookingRepoSQL(db_session).create(
                make_booking(payment_intent_id="pi_1", status=BookingStatus.CONFIRMED)
            )
        use_case = _webhook_use_case(db_session)

        with pytest.raises(WebhookProcessingError):
            await _deliver(
                use_case,
                "evt_dispute",
                "charge.dispute.created",
                {"id": "dp_1", "charge": "ch_missing"},
            )

        event = await WebhookEventRepoSQL(other_session).get("evt_dispute")
        assert event.processed is False
        assert "ch_missing" in event.processing_error
        audit = await AuditLogRepoSQL(other_session).list_for_entity("booking", "booking-1")
        assert audit == []
