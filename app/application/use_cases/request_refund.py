import logging
from decimal import Decimal

from app.api.schemas.stripe import RefundResponse, RefundSummary
from app.application.interfaces.audit_log_repo import AuditLogRepo
from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.payment_repo import RefundRepo
from app.application.interfaces.stripe_gateway import StripeGateway
from app.application.interfaces.transaction_manager import TransactionManager
from app.domain.entities.booking import BookingPaymentStatus
from app.domain.entities.payment import Refund, RefundStatus
from app.domain.entities.webhook_event import AuditLogEntry
from app.domain.errors import (
    BookingNotFoundError,
    PaymentConfigurationError,
    RefundNotAllowedError,
)
from app.domain.value_objects.money import from_minor_units, to_minor_units

REFUNDABLE_STATUSES = (BookingPaymentStatus.PAID, BookingPaymentStatus.PARTIALLY_REFUNDED)


class RequestRefundUseCase:
    def __init__(
        self,
        booking_repo: BookingRepo,
        refund_repo: RefundRepo,
        audit_log_repo: AuditLogRepo,
        stripe_gateway: StripeGateway,
        transaction_manager: TransactionManager,
        clock: Clock,
        stripe_secret_key: str | None,
    ) -> None:
        self._booking_repo = booking_repo
        self._refund_repo = refund_repo
        self._audit_log_repo = audit_log_repo
        self._stripe_gateway = stripe_gateway
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._stripe_secret_key = stripe_secret_key
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        booking_id: str,
        amount: Decimal | None = None,
        reason: str | None = None,
    ) -> RefundResponse:
        if not self._stripe_secret_key or not self._stripe_secret_key.startswith("sk_"):
            raise PaymentConfigurationError()

        # Read-only transaction, closed before the Stripe call.
        async with self._transaction_manager.start():
            booking = await self._booking_repo.get(booking_id)
            if not booking:
                raise BookingNotFoundError(booking_id)
            already_refunded = await self._refund_repo.total_for_booking(booking.id)

        if booking.payment_status == BookingPaymentStatus.REFUNDED:
            raise RefundNotAllowedError("Booking already fully refunded")
        # A checkout session sets payment_intent_id before anything is paid.
        if not booking.payment_intent_id or booking.payment_status not in REFUNDABLE_STATUSES:
            raise RefundNotAllowedError("No payment found for this booking")

        remaining = booking.total_price - already_refunded
        if remaining <= 0:
            raise RefundNotAllowedError("Booking already fully refunded")
        if amount is not None and amount > remaining:
            raise RefundNotAllowedError("Refund amount exceeds the remaining paid amount")

        # Without an amount the remaining paid balance is refunded.
        result = await self._stripe_gateway.create_refund(
            payment_intent_id=booking.payment_intent_id,
            amount=to_minor_units(amount if amount is not None else remaining),
            reason="requested_by_customer" if reason == "requested_by_customer" else "duplicate",
            metadata={"bookingId": booking.id, "refund_reason": reason or "Cancellation"},
        )

        refunded = from_minor_units(result.amount)
        succeeded = result.status == "succeeded"
        now = self._clock.now()
        async with self._transaction_manager.start():
            # A webhook may have updated the row or recorded this refund since the read.
            booking = await self._booking_repo.get(booking_id)
            if not booking:
                raise BookingNotFoundError(booking_id)
            if not await self._refund_repo.find_by_stripe_refund_id(result.refund_id):
                await self._refund_repo.add(
                    Refund(
                        booking_id=booking.id,
                        amount=refunded,
                        reason=reason or "Booking cancelled",
                        status=RefundStatus.COMPLETED if succeeded else RefundStatus.PENDING,
                        stripe_refund_id=result.refund_id,
                        processed_at=now if succeeded else None,
                        created_at=now,
                    )
                )
            total_refunded = await self._refund_repo.total_for_booking(booking.id)
            booking.apply_refund(fully_refunded=total_refunded >= booking.total_price, now=now)
            await self._booking_repo.save(booking)
            await self._audit_log_repo.add(
                AuditLogEntry(
                    entity_type="booking",
                    entity_id=booking.id,
                    action="refund_initiated",
                    changes={
                        "refund_id": result.refund_id,
                        "amount": str(refunded),
                        "status": result.status,
                    },
                    created_at=now,
                )
            )

        self._logger.info(
            "Refund created",
            extra={"booking_id": booking.id, "refund_id": result.refund_id, "amount": str(refunded)},
        )
        return RefundResponse(
            success=True,
            refund=RefundSummary(id=result.refund_id, amount=refunded, status=result.status),
        )
