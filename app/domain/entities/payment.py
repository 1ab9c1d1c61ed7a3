"""Entidades de dinero: Refund, Payout y Dispute."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum


class RefundStatus(str, Enum):
    """Estados posibles de un reembolso."""

    PENDING = "pending"
    COMPLETED = "completed"


class PayoutStatus(str, Enum):
    """Estados de una transferencia al prestador (sólo los cambia Stripe)."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class DisputeStatus(str, Enum):
    UNDER_REVIEW = "under_review"


@dataclass
class Refund:
    """
    Reembolso asociado a una reserva.

    Una reserva puede acumular varios reembolsos parciales.
    """

    booking_id: str
    amount: Decimal
    reason: str
    status: RefundStatus = RefundStatus.PENDING
    stripe_refund_id: str | None = None
    processed_at: datetime | None = None
    id: int | None = None
    created_at: datetime | None = None

    def complete(self, amount: Decimal, processed_at: datetime) -> None:
        self.amount = amount
        self.status = RefundStatus.COMPLETED
        self.processed_at = processed_at


@dataclass
class Payout:
    """Transferencia de fondos a la cuenta conectada de un prestador."""

    lender_id: str
    amount: Decimal
    stripe_payout_id: str
    status: PayoutStatus = PayoutStatus.PENDING
    paid_at: datetime | None = None
    failure_message: str | None = None
    id: int | None = None

    def mark_paid(self, paid_at: datetime) -> None:
        self.status = PayoutStatus.PAID
        self.paid_at = paid_at
        self.failure_message = None

    def mark_failed(self, message: str) -> None:
        self.status = PayoutStatus.FAILED
        self.failure_message = message


@dataclass
class Dispute:
    """Disputa (contracargo) abierta por el cliente contra un cobro."""

    booking_id: str
    raised_by_id: str
    description: str
    stripe_dispute_id: str
    reason: str = "other"
    status: DisputeStatus = DisputeStatus.UNDER_REVIEW
    id: int | None = None
    created_at: datetime | None = None
