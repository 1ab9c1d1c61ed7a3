from copy import deepcopy
from typing import Sequence

from app.application.interfaces.booking_repo import BookingRepo
from app.domain.entities.booking import Booking, BookingDeposit
from app.domain.errors import OptimisticLockError


class InMemoryBookingRepo(BookingRepo):
    """Stores copies so callers only see their changes after ``save``."""

    def __init__(self) -> None:
        self.bookings: dict[str, Booking] = {}

    async def get(self, booking_id: str) -> Booking | None:
        booking = self.bookings.get(booking_id)
        return deepcopy(booking) if booking else None

    async def create(self, booking: Booking) -> None:
        if booking.id in self.bookings:
            raise ValueError("Booking already exists")
        self.bookings[booking.id] = deepcopy(booking)

    async def save(self, booking: Booking) -> None:
        stored = self.bookings.get(booking.id)
        if stored is None or stored.version != booking.version:
            raise OptimisticLockError(booking.id, booking.version)
        booking.version += 1
        updated = deepcopy(booking)
        # Deposit rows are only written through update_deposits().
        updated.deposits = stored.deposits
        self.bookings[booking.id] = updated

    async def update_deposits(self, deposits: Sequence[BookingDeposit]) -> None:
        for deposit in deposits:
            stored = self.bookings.get(deposit.booking_id or "")
            if not stored:
                continue
            for row in stored.deposits:
                if row.deposit_id == deposit.deposit_id:
                    row.status = deposit.status

    async def find_by_payment_intent(self, payment_intent_id: str) -> Booking | None:
        for booking in self.bookings.values():
            if booking.payment_intent_id == payment_intent_id:
                return deepcopy(booking)
        return None

    async def list_for_user(
        self,
        user_id: str,
        role: str | None = None,
        status: str | None = None,
    ) -> Sequence[Booking]:
        def matches(booking: Booking) -> bool:
            if role == "renter" and booking.renter_id != user_id:
                return False
            if role == "lender" and booking.lender_id != user_id:
                return False
            if role is None and user_id not in (booking.renter_id, booking.lender_id):
                return False
            return status is None or booking.status.value == status

        found = [deepcopy(b) for b in self.bookings.values() if matches(b)]
        return sorted(
            found, key=lambda b: (b.created_at is not None, b.created_at or 0), reverse=True
        )
