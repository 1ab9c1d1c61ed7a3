from typing import Sequence

from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock
from app.domain.cancellation import (
    DEFAULT_FULL_REFUND_MIN_DAYS,
    RefundAdvisory,
    refund_advisory,
)
from app.domain.entities.booking import Booking
from app.domain.errors import BookingNotFoundError, ValidationError


class GetBookingUseCase:
    def __init__(
        self,
        booking_repo: BookingRepo,
        clock: Clock,
        full_refund_min_days: int = DEFAULT_FULL_REFUND_MIN_DAYS,
    ) -> None:
        self._booking_repo = booking_repo
        self._clock = clock
        self._full_refund_min_days = full_refund_min_days

    async def execute(
        self, booking_id: str, actor_id: str
    ) -> tuple[Booking, RefundAdvisory | None]:
        booking = await self._booking_repo.get(booking_id)
        # Non-parties get the same answer as a missing booking.
        if not booking or booking.actor_for(actor_id) is None:
            raise BookingNotFoundError(booking_id)

        advisory = None
        if not booking.is_terminal and booking.start_date:
            advisory = refund_advisory(
                booking.start_date, self._clock.today(), self._full_refund_min_days
            )
        return booking, advisory


class ListBookingsUseCase:
    ROLES = ("renter", "lender")

    def __init__(self, booking_repo: BookingRepo) -> None:
        self._booking_repo = booking_repo

    async def execute(
        self,
        actor_id: str,
        role: str | None = None,
        status: str | None = None,
    ) -> Sequence[Booking]:
        if role is not None and role not in self.ROLES:
            raise ValidationError("role", "role must be 'renter' or 'lender'")
        return await self._booking_repo.list_for_user(actor_id, role=role, status=status)
