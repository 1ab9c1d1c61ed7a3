import logging

from app.application.interfaces.audit_log_repo import AuditLogRepo
from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.transaction_manager import TransactionManager
from app.domain.cancellation import (
    DEFAULT_FULL_REFUND_MIN_DAYS,
    RefundAdvisory,
    refund_advisory,
)
from app.domain.entities.booking import Booking, BookingStatus
from app.domain.entities.webhook_event import AuditLogEntry
from app.domain.errors import BookingForbiddenError, BookingNotFoundError


class TransitionBookingUseCase:
    def __init__(
        self,
        booking_repo: BookingRepo,
        audit_log_repo: AuditLogRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
        full_refund_min_days: int = DEFAULT_FULL_REFUND_MIN_DAYS,
    ) -> None:
        self._booking_repo = booking_repo
        self._audit_log_repo = audit_log_repo
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._full_refund_min_days = full_refund_min_days
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        booking_id: str,
        actor_id: str,
        target_status: BookingStatus,
        cancellation_reason: str | None = None,
    ) -> tuple[Booking, RefundAdvisory | None]:
        async with self._transaction_manager.start():
            booking = await self._booking_repo.get(booking_id)
            if not booking:
                raise BookingNotFoundError(booking_id)
            actor = booking.actor_for(actor_id)
            if actor is None:
                raise BookingForbiddenError(booking_id, actor_id)

            previous = booking.status
            now = self._clock.now()
            booking.transition_to(target_status, actor, now, reason=cancellation_reason)
            await self._booking_repo.save(booking)
            if target_status == BookingStatus.COMPLETED and booking.deposits:
                await self._booking_repo.update_deposits(booking.deposits)
            await self._audit_log_repo.add(
                AuditLogEntry(
                    entity_type="booking",
                    entity_id=booking.id,
                    action=f"booking_{target_status.value}",
                    changes={"from": previous.value, "to": target_status.value},
                    user_id=actor_id,
                    created_at=now,
                )
            )

        advisory = None
        if target_status == BookingStatus.CANCELLED and booking.start_date:
            advisory = refund_advisory(
                booking.start_date, self._clock.today(), self._full_refund_min_days
            )

        self._logger.info(
            "Booking status changed",
            extra={
                "booking_id": booking.id,
                "from_status": previous.value,
                "to_status": target_status.value,
                "actor": actor.value,
            },
        )
        return booking, advisory
