from typing import Sequence

from app.domain.entities.booking import Booking, BookingDeposit


class BookingRepo:
    async def get(self, booking_id: str) -> Booking | None:
        raise NotImplementedError

    async def create(self, booking: Booking) -> None:
        """Persists the booking together with its add-on and deposit rows."""
        raise NotImplementedError

    async def save(self, booking: Booking) -> None:
        """
        Conditional update on ``booking.version``.

        Bumps the version on success; raises OptimisticLockError when no row
        matched.
        """
        raise NotImplementedError

    async def update_deposits(self, deposits: Sequence[BookingDeposit]) -> None:
        raise NotImplementedError

    async def find_by_payment_intent(self, payment_intent_id: str) -> Booking | None:
        raise NotImplementedError

    async def list_for_user(
        self,
        user_id: str,
        role: str | None = None,
        status: str | None = None,
    ) -> Sequence[Booking]:
        raise NotImplementedError
