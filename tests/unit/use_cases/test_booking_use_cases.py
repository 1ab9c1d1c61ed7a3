import unittest
from datetime import date
from decimal import Decimal

from app.api.schemas.bookings import CreateBookingRequest
from app.application.interfaces.clock import FakeClock
from app.application.interfaces.uuid_generator import FakeUUIDGenerator
from app.application.use_cases.create_booking import CreateBookingUseCase
from app.application.use_cases.get_booking import GetBookingUseCase, ListBookingsUseCase
from app.application.use_cases.transition_booking import TransitionBookingUseCase
from app.domain.cancellation import RefundEligibility
from app.domain.entities.booking import BookingStatus, DepositStatus
from app.domain.errors import (
    BookingForbiddenError,
    BookingNotFoundError,
    IdempotencyConflictError,
    InvalidBookingTransitionError,
    ListingNotFoundError,
    OptimisticLockError,
    OwnListingBookingError,
    ValidationError,
)
from app.infrastructure.in_memory import (
    InMemoryAuditLogRepo,
    InMemoryBookingRepo,
    InMemoryIdempotencyRepo,
    InMemoryListingRepo,
    NoopTransactionManager,
)
from conftest import FIXED_NOW, LENDER_ID, LISTING_ID, RENTER_ID, make_booking, make_listing


class TestCreateBookingUseCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.booking_repo = InMemoryBookingRepo()
        self.listing_repo = InMemoryListingRepo()
        self.listing_repo.add(make_listing(max_rental_duration=14, quantity_available=3))
        self.idempotency_repo = InMemoryIdempotencyRepo()
        self.use_case = CreateBookingUseCase(
            booking_repo=self.booking_repo,
            listing_repo=self.listing_repo,
            idempotency_repo=self.idempotency_repo,
            transaction_manager=NoopTransactionManager(),
            uuid_generator=FakeUUIDGenerator(),
            clock=FakeClock(FIXED_NOW),
        )

    def _request(self, **overrides) -> CreateBookingRequest:
        values = {
            "listing_id": LISTING_ID,
            "start_date": date(2026, 3, 10),
            "end_date": date(2026, 3, 11),
            "quantity": 1,
        }
        values.update(overrides)
        return CreateBookingRequest(**values)

    async def test_creates_pending_booking_with_price_breakdown(self):
        response = await self.use_case.execute(
            RENTER_ID, self._request(variant_id="var-large", add_on_ids=["addon-lights"]), "k1"
        )

        # 2 days * (100 + 20) + lights 15 + required setup 30; deposit 50
        self.assertEqual(response.status, "pending")
        self.assertEqual(response.payment_status, "pending")
        self.assertEqual(response.lender_id, LENDER_ID)
        self.assertEqual(response.rental_duration, 2)
        self.assertEqual(response.base_amount, Decimal("200.00"))
        self.assertEqual(response.variant_amount, Decimal("40.00"))
        self.assertEqual(response.add_ons_amount, Decimal("45.00"))
        self.assertEqual(response.subtotal, Decimal("285.00"))
        self.assertEqual(response.total_price, Decimal("335.00"))
        self.assertEqual(
            sorted(a.add_on_id for a in response.add_ons), ["addon-lights", "addon-setup"]
        )
        self.assertEqual(len(response.deposits), 1)

        stored = await self.booking_repo.get(response.id)
        self.assertEqual(stored.total_price, Decimal("335.00"))
        self.assertEqual(stored.deposits[0].status, DepositStatus.PENDING)

    async def test_replay_returns_same_booking(self):
        first = await self.use_case.execute(RENTER_ID, self._request(), "k-replay")
        second = await self.use_case.execute(RENTER_ID, self._request(), "k-replay")

        self.assertEqual(first.id, second.id)
        self.assertEqual(len(self.booking_repo.bookings), 1)

    async def test_same_key_different_payload_conflicts(self):
        await self.use_case.execute(RENTER_ID, self._request(), "k-conflict")

        with self.assertRaises(IdempotencyConflictError):
            await self.use_case.execute(RENTER_ID, self._request(quantity=2), "k-conflict")

    async def test_unknown_listing(self):
        with self.assertRaises(ListingNotFoundError):
            await self.use_case.execute(RENTER_ID, self._request(listing_id="nope"), "k2")

    async def test_lender_cannot_book_own_listing(self):
        with self.assertRaises(OwnListingBookingError):
            await self.use_case.execute(LENDER_ID, self._request(), "k3")

    async def test_quantity_over_stock(self):
        with self.assertRaises(ValidationError) as ctx:
            await self.use_case.execute(RENTER_ID, self._request(quantity=4), "k4")
        self.assertEqual(ctx.exception.field, "quantity")

    async def test_duration_over_maximum(self):
        with self.assertRaises(ValidationError):
            await self.use_case.execute(
                RENTER_ID, self._request(end_date=date(2026, 3, 30)), "k5"
            )

    async def test_unknown_variant_and_add_on(self):
        with self.assertRaises(ValidationError):
            await self.use_case.execute(RENTER_ID, self._request(variant_id="other"), "k6")
        with self.assertRaises(ValidationError):
            await self.use_case.execute(RENTER_ID, self._request(add_on_ids=["other"]), "k7")

    async def test_zero_deposit_is_not_attached(self):
        self.listing_repo.add(make_listing(listing_id="listing-free", deposit="0"))

        response = await self.use_case.execute(
            RENTER_ID, self._request(listing_id="listing-free"), "k8"
        )

        self.assertEqual(response.deposits, [])
        self.assertEqual(response.deposit_amount, Decimal("0"))


class TestTransitionBookingUseCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.booking_repo = InMemoryBookingRepo()
        self.audit_log_repo = InMemoryAuditLogRepo()
        self.clock = FakeClock(FIXED_NOW)
        self.use_case = TransitionBookingUseCase(
            booking_repo=self.booking_repo,
            audit_log_repo=self.audit_log_repo,
            transaction_manager=NoopTransactionManager(),
            clock=self.clock,
        )

    async def _seed(self, **overrides):
        booking = make_booking(**overrides)
        await self.booking_repo.create(booking)
        return booking

    async def test_lender_confirms_and_audits(self):
        await self._seed()

        booking, advisory = await self.use_case.execute(
            "booking-1", LENDER_ID, BookingStatus.CONFIRMED
        )

        self.assertEqual(booking.status, BookingStatus.CONFIRMED)
        self.assertIsNone(advisory)
        self.assertEqual(self.audit_log_repo.actions(), ["booking_confirmed"])
        self.assertEqual(self.audit_log_repo.entries[0].user_id, LENDER_ID)
        stored = await self.booking_repo.get("booking-1")
        self.assertEqual(stored.version, 1)

    async def test_cancel_returns_refund_advisory(self):
        # start 2026-03-10, one day away
        await self._seed()
        self.clock.set_time(FIXED_NOW.replace(day=9))

        booking, advisory = await self.use_case.execute(
            "booking-1", RENTER_ID, BookingStatus.CANCELLED, cancellation_reason="Rain"
        )

        self.assertEqual(booking.status, BookingStatus.CANCELLED)
        self.assertEqual(booking.cancellation_reason, "Rain")
        self.assertEqual(advisory.eligibility, RefundEligibility.PARTIAL)

    async def test_cancel_with_notice_is_full_refund(self):
        await self._seed()
        self.clock.set_time(FIXED_NOW.replace(day=7))

        _, advisory = await self.use_case.execute("booking-1", RENTER_ID, BookingStatus.CANCELLED)

        self.assertEqual(advisory.eligibility, RefundEligibility.FULL)

    async def test_complete_releases_stored_deposits(self):
        await self._seed(status=BookingStatus.ACTIVE)

        await self.use_case.execute("booking-1", LENDER_ID, BookingStatus.COMPLETED)

        stored = await self.booking_repo.get("booking-1")
        self.assertEqual(stored.status, BookingStatus.COMPLETED)
        self.assertEqual([d.status for d in stored.deposits], [DepositStatus.REFUNDED])

    async def test_non_party_is_forbidden(self):
        await self._seed()

        with self.assertRaises(BookingForbiddenError):
            await self.use_case.execute("booking-1", "stranger", BookingStatus.CANCELLED)

    async def test_renter_cannot_activate(self):
        await self._seed(status=BookingStatus.CONFIRMED)

        with self.assertRaises(InvalidBookingTransitionError):
            await self.use_case.execute("booking-1", RENTER_ID, BookingStatus.ACTIVE)
        self.assertEqual(self.audit_log_repo.entries, [])

    async def test_missing_booking(self):
        with self.assertRaises(BookingNotFoundError):
            await self.use_case.execute("missing", RENTER_ID, BookingStatus.CANCELLED)

    async def test_stale_write_is_rejected(self):
        await self._seed()
        stale = await self.booking_repo.get("booking-1")
        await self.use_case.execute("booking-1", LENDER_ID, BookingStatus.CONFIRMED)

        with self.assertRaises(OptimisticLockError):
            await self.booking_repo.save(stale)


class TestReadBookings(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.booking_repo = InMemoryBookingRepo()
        await self.booking_repo.create(make_booking("b-old"))
        await self.booking_repo.create(
            make_booking("b-new", created_at=FIXED_NOW.replace(day=2), status=BookingStatus.CONFIRMED)
        )
        await self.booking_repo.create(make_booking("b-other", renter_id="renter-2", lender_id="lender-2"))
        self.get_use_case = GetBookingUseCase(self.booking_repo, FakeClock(FIXED_NOW))
        self.list_use_case = ListBookingsUseCase(self.booking_repo)

    async def test_party_gets_booking_with_advisory(self):
        booking, advisory = await self.get_use_case.execute("b-old", RENTER_ID)

        self.assertEqual(booking.id, "b-old")
        self.assertEqual(advisory.days_until_start, 9)

    async def test_non_party_gets_not_found(self):
        with self.assertRaises(BookingNotFoundError):
            await self.get_use_case.execute("b-old", "renter-2")

    async def test_terminal_booking_has_no_advisory(self):
        await self.booking_repo.create(make_booking("b-done", status=BookingStatus.COMPLETED))

        _, advisory = await self.get_use_case.execute("b-done", LENDER_ID)

        self.assertIsNone(advisory)

    async def test_list_newest_first(self):
        found = await self.list_use_case.execute(RENTER_ID)

        self.assertEqual([b.id for b in found], ["b-new", "b-old"])

    async def test_list_filters_by_role_and_status(self):
        as_lender = await self.list_use_case.execute(LENDER_ID, role="lender", status="confirmed")
        as_renter = await self.list_use_case.execute(LENDER_ID, role="renter")

        self.assertEqual([b.id for b in as_lender], ["b-new"])
        self.assertEqual(as_renter, [])

    async def test_list_rejects_unknown_role(self):
        with self.assertRaises(ValidationError):
            await self.list_use_case.execute(RENTER_ID, role="admin")
