from decimal import Decimal

from app.domain.entities.payment import Dispute, Payout, Refund


class RefundRepo:
    async def add(self, refund: Refund) -> Refund:
        raise NotImplementedError

    async def update(self, refund: Refund) -> None:
        raise NotImplementedError

    async def find_by_stripe_refund_id(self, stripe_refund_id: str) -> Refund | None:
        raise NotImplementedError

    async def total_for_booking(self, booking_id: str) -> Decimal:
        raise NotImplementedError


class PayoutRepo:
    async def find_by_stripe_payout_id(self, stripe_payout_id: str) -> Payout | None:
        raise NotImplementedError

    async def save(self, payout: Payout) -> None:
        raise NotImplementedError


class DisputeRepo:
    async def find_by_stripe_dispute_id(self, stripe_dispute_id: str) -> Dispute | None:
        raise NotImplementedError

    async def add(self, dispute: Dispute) -> Dispute:
        raise NotImplementedError
