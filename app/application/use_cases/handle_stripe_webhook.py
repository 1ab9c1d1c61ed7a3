import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from app.application.interfaces.audit_log_repo import AuditLogRepo
from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.listing_repo import LenderRepo
from app.application.interfaces.payment_repo import DisputeRepo, PayoutRepo, RefundRepo
from app.application.interfaces.stripe_gateway import StripeGateway
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.interfaces.webhook_event_repo import WebhookEventRepo
from app.domain.entities.booking import Booking, BookingStatus
from app.domain.entities.payment import Dispute, Refund, RefundStatus
from app.domain.entities.webhook_event import AuditLogEntry, WebhookEvent
from app.domain.errors import (
    ValidationError,
    WebhookProcessingError,
    WebhookSignatureError,
)
from app.domain.value_objects.money import from_minor_units


class HandleStripeWebhookUseCase:
    def __init__(
        self,
        booking_repo: BookingRepo,
        lender_repo: LenderRepo,
        refund_repo: RefundRepo,
        payout_repo: PayoutRepo,
        dispute_repo: DisputeRepo,
        webhook_event_repo: WebhookEventRepo,
        audit_log_repo: AuditLogRepo,
        stripe_gateway: StripeGateway,
        transaction_manager: TransactionManager,
        clock: Clock,
        stripe_webhook_secret: str | None,
    ) -> None:
        self._booking_repo = booking_repo
        self._lender_repo = lender_repo
        self._refund_repo = refund_repo
        self._payout_repo = payout_repo
        self._dispute_repo = dispute_repo
        self._webhook_event_repo = webhook_event_repo
        self._audit_log_repo = audit_log_repo
        self._stripe_gateway = stripe_gateway
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._stripe_webhook_secret = stripe_webhook_secret
        self._logger = logging.getLogger(__name__)
        self._handlers = {
            "checkout.session.completed": self._on_checkout_completed,
            "payment_intent.succeeded": self._on_payment_succeeded,
            "payment_intent.payment_failed": self._on_payment_failed,
            "charge.refunded": self._on_charge_refunded,
            "account.updated": self._on_account_updated,
            "payout.paid": self._on_payout_paid,
            "payout.failed": self._on_payout_failed,
            "charge.dispute.created": self._on_dispute_created,
        }

    async def execute(self, raw_body: bytes, signature: str | None) -> None:
        if not self._stripe_webhook_secret:
            raise WebhookSignatureError("Webhook secret not configured")
        if not signature:
            raise WebhookSignatureError("Missing stripe-signature header")

        event = await self._stripe_gateway.parse_webhook_event(
            payload=raw_body,
            signature_header=signature,
            webhook_secret=self._stripe_webhook_secret,
        )
        event_id = event.get("id")
        event_type = event.get("type")
        if not event_id or not event_type:
            raise ValidationError("event", "Invalid event payload")

        async with self._transaction_manager.start():
            logged = await self._webhook_event_repo.record(
                WebhookEvent(
                    event_id=event_id,
                    event_type=event_type,
                    payload=event,
                    created_at=self._clock.now(),
                )
            )

        log_extra = {"stripe_event_id": event_id, "event_type": event_type}
        if logged.processed:
            self._logger.info("Stripe event already processed, skipping", extra=log_extra)
            return

        handler = self._handlers.get(event_type)
        data_object = (event.get("data") or {}).get("object") or {}
        try:
            async with self._transaction_manager.start():
                if handler:
                    await handler(data_object)
                else:
                    self._logger.info("Unhandled Stripe event type", extra=log_extra)
                await self._webhook_event_repo.mark_processed(event_id, self._clock.now())
        except Exception as exc:
            self._logger.error("Stripe webhook processing failed", exc_info=exc, extra=log_extra)
            async with self._transaction_manager.start():
                await self._webhook_event_repo.mark_failed(event_id, str(exc))
            raise WebhookProcessingError(event_id, str(exc)) from exc

        self._logger.info("Stripe event processed", extra=log_extra)

    # === Handlers ===

    async def _on_checkout_completed(self, session: dict[str, Any]) -> None:
        booking = await self._booking_from_metadata(session)
        if not booking:
            return

        now = self._clock.now()
        if booking.status == BookingStatus.CANCELLED:
            self._logger.warning(
                "Payment completed for a cancelled booking; manual refund required",
                extra={"booking_id": booking.id},
            )
        booking.record_payment(now)
        booking.stripe_session_id = session.get("id") or booking.stripe_session_id
        if session.get("payment_intent"):
            booking.payment_intent_id = session["payment_intent"]
        await self._booking_repo.save(booking)
        await self._audit(
            "booking",
            booking.id,
            "payment_completed",
            {
                "payment_status": booking.payment_status.value,
                "status": booking.status.value,
                "session_id": booking.stripe_session_id,
                "amount_total": session.get("amount_total"),
            },
        )

    async def _on_payment_succeeded(self, intent: dict[str, Any]) -> None:
        booking = await self._booking_for_intent(intent)
        if not booking:
            return
        if booking.payment_intent_id != intent.get("id"):
            booking.payment_intent_id = intent.get("id")
            booking.updated_at = self._clock.now()
            await self._booking_repo.save(booking)
        await self._audit(
            "booking",
            booking.id,
            "payment_succeeded",
            {"payment_intent_id": intent.get("id"), "amount": intent.get("amount")},
        )

    async def _on_payment_failed(self, intent: dict[str, Any]) -> None:
        booking = await self._booking_for_intent(intent)
        if not booking:
            return
        error = (intent.get("last_payment_error") or {}).get("message") or "Payment failed"
        if booking.mark_payment_failed(error, self._clock.now()):
            await self._booking_repo.save(booking)
        await self._audit(
            "booking",
            booking.id,
            "payment_failed",
            {"payment_intent_id": intent.get("id"), "error": error},
        )

    async def _on_charge_refunded(self, charge: dict[str, Any]) -> None:
        booking = None
        if charge.get("payment_intent"):
            booking = await self._booking_repo.find_by_payment_intent(charge["payment_intent"])
        if not booking:
            booking = await self._booking_from_metadata(charge)
        if not booking:
            return

        now = self._clock.now()
        refunds = (charge.get("refunds") or {}).get("data") or []
        if refunds:
            for item in refunds:
                await self._upsert_refund(booking, item, now)
        else:
            await self._record_refund_delta(booking, charge.get("amount_refunded") or 0, now)

        amount = charge.get("amount") or 0
        amount_refunded = charge.get("amount_refunded") or 0
        booking.apply_refund(fully_refunded=amount_refunded >= amount, now=now)
        await self._booking_repo.save(booking)
        await self._audit(
            "booking",
            booking.id,
            "refund_processed",
            {
                "amount_refunded": amount_refunded,
                "payment_status": booking.payment_status.value,
            },
        )

    async def _on_account_updated(self, account: dict[str, Any]) -> None:
        profile = await self._lender_repo.find_by_stripe_account(account.get("id", ""))
        if not profile:
            self._logger.warning(
                "No lender profile for Stripe account", extra={"stripe_account_id": account.get("id")}
            )
            return
        profile.sync_account(
            charges_enabled=bool(account.get("charges_enabled")),
            payouts_enabled=bool(account.get("payouts_enabled")),
            details_submitted=bool(account.get("details_submitted")),
        )
        await self._lender_repo.save(profile)
        await self._audit(
            "lender_profile",
            profile.id,
            "stripe_account_updated",
            {
                "charges_enabled": profile.charges_enabled,
                "payouts_enabled": profile.payouts_enabled,
                "verification_status": profile.verification_status.value,
            },
        )

    async def _on_payout_paid(self, data: dict[str, Any]) -> None:
        payout = await self._payout_repo.find_by_stripe_payout_id(data.get("id", ""))
        if not payout:
            self._logger.warning("Unknown payout", extra={"stripe_payout_id": data.get("id")})
            return
        arrival = data.get("arrival_date")
        paid_at = (
            datetime.fromtimestamp(arrival, tz=timezone.utc) if arrival else self._clock.now()
        )
        payout.mark_paid(paid_at)
        await self._payout_repo.save(payout)
        await self._audit("payout", payout.stripe_payout_id, "payout_paid", {"paid_at": paid_at.isoformat()})

    async def _on_payout_failed(self, data: dict[str, Any]) -> None:
        payout = await self._payout_repo.find_by_stripe_payout_id(data.get("id", ""))
        if not payout:
            self._logger.warning("Unknown payout", extra={"stripe_payout_id": data.get("id")})
            return
        payout.mark_failed(data.get("failure_message") or "Payout failed")
        await self._payout_repo.save(payout)
        await self._audit(
            "payout",
            payout.stripe_payout_id,
            "payout_failed",
            {"failure_message": payout.failure_message},
        )

    async def _on_dispute_created(self, dispute: dict[str, Any]) -> None:
        booking = None
        if dispute.get("payment_intent"):
            booking = await self._booking_repo.find_by_payment_intent(dispute["payment_intent"])
        if not booking and dispute.get("charge"):
            charge = await self._stripe_gateway.retrieve_charge(dispute["charge"])
            if charge.payment_intent_id:
                booking = await self._booking_repo.find_by_payment_intent(charge.payment_intent_id)
            if not booking and charge.metadata.get("bookingId"):
                booking = await self._booking_repo.get(charge.metadata["bookingId"])
        if not booking:
            self._logger.warning("Dispute without a matching booking", extra={"dispute_id": dispute.get("id")})
            return

        if await self._dispute_repo.find_by_stripe_dispute_id(dispute["id"]):
            return
        reason = dispute.get("reason") or "other"
        await self._dispute_repo.add(
            Dispute(
                booking_id=booking.id,
                raised_by_id=booking.renter_id,
                description=f"Stripe dispute: {reason}",
                stripe_dispute_id=dispute["id"],
                reason=reason,
                created_at=self._clock.now(),
            )
        )
        await self._audit(
            "booking",
            booking.id,
            "dispute_created",
            {"dispute_id": dispute["id"], "amount": dispute.get("amount"), "reason": reason},
        )

    # === Helpers ===

    async def _booking_from_metadata(self, obj: dict[str, Any]) -> Booking | None:
        booking_id = (obj.get("metadata") or {}).get("bookingId")
        if not booking_id:
            self._logger.warning("Event without bookingId metadata", extra={"object_id": obj.get("id")})
            return None
        booking = await self._booking_repo.get(booking_id)
        if not booking:
            self._logger.warning("Booking referenced by event not found", extra={"booking_id": booking_id})
        return booking

    async def _booking_for_intent(self, intent: dict[str, Any]) -> Booking | None:
        if (intent.get("metadata") or {}).get("bookingId"):
            return await self._booking_from_metadata(intent)
        booking = await self._booking_repo.find_by_payment_intent(intent.get("id", ""))
        if not booking:
            self._logger.warning(
                "No booking for payment intent", extra={"payment_intent_id": intent.get("id")}
            )
        return booking

    async def _upsert_refund(self, booking: Booking, item: dict[str, Any], now: datetime) -> None:
        amount = from_minor_units(item.get("amount") or 0)
        succeeded = item.get("status") == "succeeded"
        existing = await self._refund_repo.find_by_stripe_refund_id(item["id"])
        if existing:
            if succeeded:
                existing.complete(amount, now)
            else:
                existing.amount = amount
            await self._refund_repo.update(existing)
            return
        await self._refund_repo.add(
            Refund(
                booking_id=booking.id,
                amount=amount,
                reason=(item.get("metadata") or {}).get("refund_reason")
                or item.get("reason")
                or "Refund processed",
                status=RefundStatus.COMPLETED if succeeded else RefundStatus.PENDING,
                stripe_refund_id=item["id"],
                processed_at=now if succeeded else None,
                created_at=now,
            )
        )

    async def _record_refund_delta(self, booking: Booking, amount_refunded: int, now: datetime) -> None:
        # Charges without an expanded refund list only report the running total.
        recorded = await self._refund_repo.total_for_booking(booking.id)
        delta = from_minor_units(amount_refunded) - recorded
        if delta <= Decimal("0"):
            return
        await self._refund_repo.add(
            Refund(
                booking_id=booking.id,
                amount=delta,
                reason="Refund processed",
                status=RefundStatus.COMPLETED,
                processed_at=now,
                created_at=now,
            )
        )

    async def _audit(self, entity_type: str, entity_id: str, action: str, changes: dict[str, Any]) -> None:
        await self._audit_log_repo.add(
            AuditLogEntry(
                entity_type=entity_type,
                entity_id=entity_id,
                action=action,
                changes=changes,
                created_at=self._clock.now(),
            )
        )
